"""
Schemas Pydantic per l'autenticazione JWT
Progetto: ERP Manager (Gestionale ERP)

Schemas per le credenziali di sessione e i relativi claim.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.user import UserResponse


class UserClaims(BaseModel):
    """
    Identità contenuta nel token di sessione.

    È l'oggetto su cui lavorano i controlli di autorizzazione:
    l'admin supera ogni verifica, gli altri utenti solo quelle
    per cui possiedono almeno uno dei permessi richiesti.

    Attributes:
        sub: ID dell'utente come stringa
        username: Username dell'utente
        permissions: Permessi posseduti (stringhe con namespace a punti)
        is_admin: True se l'utente è amministratore
    """

    sub: str = Field(..., description="ID utente")
    username: str = Field(..., description="Username")
    permissions: list[str] = Field(default_factory=list, description="Permessi dell'utente")
    is_admin: bool = Field(default=False, description="Flag amministratore")


class TokenPayload(UserClaims):
    """
    Payload completo di un token decodificato.

    Attributes:
        exp: Expiration - Data/ora di scadenza
        type: Tipo di token (sempre "access")
    """

    exp: datetime = Field(..., description="Data/ora di scadenza")
    type: str = Field(default="access", description="Tipo di token")


class LoginResponse(BaseModel):
    """
    Risposta del login.

    Il token viene impostato nel cookie HTTP-only e restituito anche
    nel body per i client che non usano i cookie.
    """

    user: UserResponse = Field(..., description="Utente autenticato")
    token: str = Field(..., description="Token di sessione JWT")
    token_type: str = Field(default="bearer", description="Tipo di token")


class BootstrapStatus(BaseModel):
    """Stato dell'inizializzazione del sistema."""

    has_users: bool = Field(..., description="True se esiste almeno un utente")
    bootstrap_open: bool = Field(
        ...,
        description="True se è ancora possibile creare l'amministratore iniziale",
    )


# Export degli schemas
__all__ = [
    "UserClaims",
    "TokenPayload",
    "LoginResponse",
    "BootstrapStatus",
]
