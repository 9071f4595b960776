"""Application configuration. Load from environment."""

import os
from datetime import date

from dotenv import load_dotenv

load_dotenv()

DEFAULT_IP_HASH_SALT = "referee-rating-salt-2024"
DEFAULT_AGGREGATION_WORKERS = 4


def get_database_url() -> str:
    """Return DATABASE_URL from environment. Raises if missing."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is required")
    return url


def get_cron_secret() -> str | None:
    """Secret atteso nell'header Authorization del job schedulato. None se non configurato."""
    secret = os.environ.get("CRON_SECRET", "").strip()
    return secret or None


def get_ip_hash_salt() -> str:
    return os.environ.get("IP_HASH_SALT") or DEFAULT_IP_HASH_SALT


def get_aggregation_workers() -> int:
    """Numero massimo di worker per il ricalcolo arbitri (minimo 1)."""
    raw = os.environ.get("AGGREGATION_WORKERS")
    if not raw:
        return DEFAULT_AGGREGATION_WORKERS
    try:
        return max(1, int(raw))
    except ValueError:
        raise RuntimeError(f"AGGREGATION_WORKERS must be an integer, got {raw!r}")


def get_current_season(today: date | None = None) -> int:
    """
    Stagione corrente come anno di chiusura: 2025/26 -> 2026.
    Da agosto in poi si è già nella stagione successiva.
    """
    today = today or date.today()
    if today.month < 8:
        return today.year
    return today.year + 1
