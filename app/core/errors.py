"""
Tassonomia errori del motore statistiche.
I router traducono ciascuna classe nel relativo status HTTP.
"""


class CardEngineError(Exception):
    """Base per tutti gli errori di dominio."""


class ValidationError(CardEngineError):
    """Input malformato o fuori range (rating, soglia, quote). -> 400"""


class NotFoundError(CardEngineError):
    """Arbitro, squadra o lega sconosciuti. -> 404"""


class Unauthorized(CardEngineError):
    """Token dello scheduler mancante o non valido. -> 401"""


class InternalComputationError(CardEngineError):
    """Store non raggiungibile o join corrotto. -> 500 con messaggio generico."""


class InsufficientDataError(CardEngineError):
    """
    Nessuno storico e nessun prior di lega: il modello di probabilità
    non può stimare lambda. Non è un fallimento, è assenza di segnale.
    """
