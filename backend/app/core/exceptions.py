"""
Eccezioni Custom per l'applicazione.
Progetto: ERP Manager (Gestionale ERP)

Gerarchia unica di errori di dominio. Ogni eccezione porta con sé lo
status HTTP e un codice errore: gli handler in `app.main` la convertono
nella risposta uniforme `{"success": false, "message": ..., "error_code": ...}`.

NOTA: BusinessValidationError è distinta da pydantic.ValidationError.
- pydantic.ValidationError: formato/tipo dei dati in input (gestiti da FastAPI → 422)
- BusinessValidationError: regole di business violate (gestiti dal nostro handler → 422)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "DuplicateError",
    "BusinessValidationError",
    "ValidationError",       # alias di BusinessValidationError
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
]


class AppException(Exception):
    """
    Base exception per l'applicazione.

    Attributes:
        status_code: HTTP status code da restituire al client
        error_code: Identificativo dell'errore per il frontend
        detail: Messaggio leggibile, mostrato all'utente così com'è
        extra: Dati aggiuntivi opzionali
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"
    default_detail: str = "Errore interno del server"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.detail = detail if detail is not None else self.default_detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(self.detail)


class NotFoundError(AppException):
    """Entità referenziata inesistente."""

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"
    default_detail: str = "Risorsa non trovata"


class DuplicateError(AppException):
    """
    Violazione di un vincolo di unicità.

    Esempi: username già registrato, numero contratto o numero
    documento già in uso.
    """

    status_code: int = 409
    error_code: str = "DUPLICATE_RESOURCE"
    default_detail: str = "Risorsa già esistente"


class BusinessValidationError(ValueError, AppException):
    """
    Eccezione sollevata per violazioni delle regole di business logic.

    Eredita da ValueError per essere catturata dai validatori Pydantic.

    Esempi di utilizzo:
        - "Il contratto non appartiene al partner selezionato"
        - "La ragione sociale non può essere vuota"
        - "Permessi non validi: foo.bar"
    """

    status_code: int = 422
    error_code: str = "BUSINESS_VALIDATION_ERROR"
    default_detail: str = "Validazione dati fallita"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


# Alias per compatibilità
ValidationError = BusinessValidationError


class ConflictError(AppException):
    """
    Operazione incompatibile con lo stato corrente.

    Esempi: eliminare l'ultimo utente, ripetere l'inizializzazione
    dell'amministratore, eliminare un partner ancora referenziato.
    """

    status_code: int = 409
    error_code: str = "CONFLICT_STATE"
    default_detail: str = "Conflitto di stato"


class AuthenticationError(AppException):
    """
    Credenziale mancante, malformata, scaduta o con firma non valida.

    Il client deve ripetere l'autenticazione.
    """

    status_code: int = 401
    error_code: str = "UNAUTHORIZED"
    default_detail: str = "Autenticazione richiesta"


class AuthorizationError(AppException):
    """
    Utente autenticato ma privo del permesso richiesto.

    Esempi di utilizzo:
        - "Permesso richiesto: contracts.sales"
        - "Operazione riservata agli amministratori"
    """

    status_code: int = 403
    error_code: str = "FORBIDDEN"
    default_detail: str = "Accesso non autorizzato"
