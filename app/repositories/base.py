"""
Interfacce dello Stats Store.
I componenti ricevono un repository nel costruttore; nessun client DB globale.
"""

from typing import Protocol

from app.analytics.records import (
    CardEventRecord,
    DataCoverage,
    MatchRecord,
    RatingRecord,
    RefereeSeasonRow,
)


class StatsRepository(Protocol):
    def referee_ids_for_season(self, season: int) -> list[int]:
        """Arbitri con partite concluse nella stagione o con righe derivate già salvate."""
        ...

    def finished_matches(
        self,
        *,
        referee_id: int | None = None,
        season: int | None = None,
        league_api_id: int | None = None,
        team_id: int | None = None,
        require_referee: bool = False,
    ) -> list[MatchRecord]:
        """Partite concluse con stats e lega joinate, ordinate per id."""
        ...

    def upsert_referee_season_stats(self, row: RefereeSeasonRow) -> None:
        """Upsert atomico sulla chiave (referee_id, season, league_api_id)."""
        ...

    def delete_stale_referee_season_stats(
        self,
        referee_id: int,
        season: int,
        keep_league_ids: list[int],
    ) -> int:
        """Cancella le righe della stagione con lega fuori da keep_league_ids. Ritorna quante."""
        ...

    def referee_season_rows(
        self,
        referee_id: int,
        season: int | None = None,
        league_api_id: int | None = None,
    ) -> list[RefereeSeasonRow]:
        ...

    def card_events(self, referee_id: int | None = None) -> list[CardEventRecord]:
        ...

    def data_coverage(self, season: int, limit: int = 10) -> DataCoverage:
        """Conteggi di copertura stats della stagione e partite concluse senza stats (le più recenti)."""
        ...

    def referee_exists(self, referee_id: int) -> bool:
        ...

    def team_exists(self, team_id: int) -> bool:
        ...

    def league_exists(self, league_api_id: int) -> bool:
        ...


class RatingRepository(Protocol):
    def referee_exists(self, referee_id: int) -> bool:
        ...

    def upsert_rating(
        self,
        referee_id: int,
        identity_hash: str,
        rating: int,
        comment: str | None,
    ) -> RatingRecord:
        """Crea o sovrascrive il voto di (arbitro, identità). Mai duplicati."""
        ...

    def list_ratings(self, referee_id: int) -> list[RatingRecord]:
        """Tutti i voti dell'arbitro, dal più recente."""
        ...

    def get_rating(self, referee_id: int, identity_hash: str) -> RatingRecord | None:
        ...
