"""Verifica token scheduler e hashing anonimo dell'identità di chi vota."""

import hashlib
import hmac

from app.core.config import get_cron_secret, get_ip_hash_salt
from app.core.errors import Unauthorized


def verify_bearer_token(authorization: str | None, secret: str | None = None) -> None:
    """
    Confronta l'header Authorization con "Bearer <CRON_SECRET>".
    Senza secret configurato l'endpoint resta chiuso.
    """
    secret = secret if secret is not None else get_cron_secret()
    if not secret:
        raise Unauthorized("Scheduler secret not configured")
    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        raise Unauthorized("Invalid scheduler token")


def hash_identity(address: str, salt: str | None = None) -> str:
    """SHA-256 salato dell'indirizzo di rete. One-way: usato solo come chiave di dedup."""
    salt = salt if salt is not None else get_ip_hash_salt()
    return hashlib.sha256((address + salt).encode("utf-8")).hexdigest()


def client_address(headers, fallback: str | None = None) -> str:
    """Primo hop di x-forwarded-for, poi x-real-ip, poi il client TCP."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return fallback or "anonymous"
