"""
Servizio per l'autenticazione
Progetto: ERP Manager (Gestionale ERP)

Business logic per login, inizializzazione del primo amministratore
e lettura dell'utente corrente.
"""

import datetime
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from app.core.permissions import ALL_PERMISSIONS
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User
from app.schemas.token import BootstrapStatus, LoginResponse, UserClaims
from app.schemas.user import InitAdminRequest, UserLogin, UserResponse
from app.services.system_settings_service import SystemSettingsService
from app.services.user_service import UserService, check_password_length

logger = logging.getLogger(__name__)

# Stesso messaggio per utente inesistente e password errata
INVALID_CREDENTIALS = "Username o password non corretti"


def build_claims(user: User) -> UserClaims:
    """Identità da incorporare nel token di sessione."""
    return UserClaims(
        sub=str(user.id),
        username=user.username,
        permissions=list(user.permissions or []),
        is_admin=bool(user.is_admin),
    )


class AuthService:
    """Servizio per la gestione dell'autenticazione."""

    def __init__(
        self,
        users: Optional[UserService] = None,
        system_settings: Optional[SystemSettingsService] = None,
    ) -> None:
        self.users = users or UserService()
        self.system_settings = system_settings or SystemSettingsService()

    async def check(self, db: AsyncSession) -> BootstrapStatus:
        """
        Stato dell'inizializzazione.

        `bootstrap_open` è True solo finché non esiste alcun utente e
        l'amministratore iniziale non è mai stato creato.
        """
        user_count = await self.users.count(db)
        system_settings = await self.system_settings.get(db)
        return BootstrapStatus(
            has_users=user_count > 0,
            bootstrap_open=user_count == 0 and system_settings.bootstrap_completed_at is None,
        )

    async def init_admin(self, db: AsyncSession, data: InitAdminRequest) -> User:
        """
        Crea l'amministratore iniziale (NO_USERS → ADMIN_CREATED).

        Il passaggio è a senso unico: una volta creato l'amministratore
        la procedura resta chiusa anche se in seguito gli utenti
        venissero eliminati.

        Raises:
            ConflictError: il sistema è già stato inizializzato
            BusinessValidationError: password troppo corta
        """
        # La riga delle impostazioni (creata se manca) resta bloccata fino al
        # commit: due inizializzazioni concorrenti si serializzano su di essa
        system_settings = await self.system_settings.get(db, for_update=True)
        user_count = await self.users.count(db)

        if user_count > 0 or system_settings.bootstrap_completed_at is not None:
            logger.warning("Tentativo di inizializzazione su sistema già inizializzato")
            raise ConflictError(
                "Il sistema è già stato inizializzato, impossibile creare l'amministratore",
                error_code="ALREADY_INITIALIZED",
            )

        check_password_length(data.password)

        user = User(
            username=data.username,
            hashed_password=hash_password(data.password),
            permissions=list(ALL_PERMISSIONS),
            is_admin=True,
        )
        db.add(user)
        system_settings.bootstrap_completed_at = datetime.datetime.now(datetime.timezone.utc)
        await db.flush()
        await db.refresh(user)

        logger.info("Creato amministratore iniziale: %s", user.username)
        return user

    async def login(self, db: AsyncSession, data: UserLogin) -> LoginResponse:
        """
        Autentica un utente e restituisce il token di sessione.

        Raises:
            AuthenticationError: credenziali non valide
        """
        user = await self.users.get_by_username(db, data.username)

        if not user or not verify_password(data.password, user.hashed_password):
            logger.warning("Login fallito per username: %s", data.username)
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = create_access_token(build_claims(user))
        logger.info("Login effettuato: %s", user.username)

        return LoginResponse(
            user=UserResponse.model_validate(user),
            token=token,
            token_type="bearer",
        )

    async def get_me(self, db: AsyncSession, claims: UserClaims) -> User:
        """
        Ricarica dal database l'utente del token.

        Raises:
            AuthenticationError: subject del token non valido
            NotFoundError: l'utente è stato eliminato
        """
        try:
            user_id = UUID(claims.sub)
        except ValueError as e:
            raise AuthenticationError("ID utente invalido nel token") from e

        try:
            return await self.users.get_by_id(db, user_id)
        except NotFoundError:
            raise NotFoundError("Utente non trovato") from None


def get_auth_service() -> AuthService:
    """
    Factory per ottenere un'istanza del servizio di autenticazione.

    Returns:
        Istanza di AuthService
    """
    return AuthService()


# Export
__all__ = [
    "AuthService",
    "build_claims",
    "get_auth_service",
]
