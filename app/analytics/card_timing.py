"""
Distribuzione temporale dei cartellini per arbitro (da CardEvent).
Periodi: 0-15, 16-30, 31-45, 45+, 46-60, 61-75, 76-90, 90+.
"""

from dataclasses import dataclass, field

from app.analytics.records import CardEventRecord, InsufficientData
from app.repositories.base import StatsRepository

PERIODS = ("0-15", "16-30", "31-45", "45+", "46-60", "61-75", "76-90", "90+")
EARLY_CARD_MINUTE = 30
LATE_CARD_MINUTE = 75


def period_for(minute: int, extra_minute: int | None) -> str:
    if minute <= 15:
        return "0-15"
    if minute <= 30:
        return "16-30"
    if minute <= 45:
        return "45+" if extra_minute else "31-45"
    if minute <= 60:
        return "46-60"
    if minute <= 75:
        return "61-75"
    if minute <= 90:
        return "90+" if extra_minute else "76-90"
    return "90+"


@dataclass
class PeriodCount:
    yellow: int = 0
    red: int = 0

    @property
    def total(self) -> int:
        return self.yellow + self.red


@dataclass
class CardTimingProfile:
    referee_id: int
    total: int = 0
    matches: int = 0
    first_half: int = 0
    second_half: int = 0
    injury_time: int = 0
    early_cards: int = 0
    late_cards: int = 0
    periods: dict[str, PeriodCount] = field(default_factory=lambda: {p: PeriodCount() for p in PERIODS})


def build_timing_profile(referee_id: int, events: list[CardEventRecord]) -> CardTimingProfile | InsufficientData:
    if not events:
        return InsufficientData(entity_id=referee_id, matches=0, required=1)

    profile = CardTimingProfile(referee_id=referee_id)
    profile.matches = len({e.match_id for e in events})
    for e in events:
        profile.total += 1
        bucket = profile.periods[period_for(e.minute, e.extra_minute)]
        if e.is_yellow:
            bucket.yellow += 1
        else:
            bucket.red += 1

        if e.minute <= 45:
            profile.first_half += 1
        else:
            profile.second_half += 1
        if e.extra_minute:
            profile.injury_time += 1
        if e.minute <= EARLY_CARD_MINUTE:
            profile.early_cards += 1
        if e.minute >= LATE_CARD_MINUTE:
            profile.late_cards += 1
    return profile


def card_timing_profile(repository: StatsRepository, referee_id: int) -> CardTimingProfile | InsufficientData:
    return build_timing_profile(referee_id, repository.card_events(referee_id=referee_id))
