"""
Service Layer per l'entità User
Progetto: ERP Manager (Gestionale ERP)

Amministrazione degli utenti: creazione, modifica parziale,
eliminazione con protezione dell'ultimo utente.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BusinessValidationError, ConflictError, DuplicateError, NotFoundError
from app.core.permissions import validate_permissions
from app.core.security import hash_password
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def check_password_length(password: str) -> None:
    """
    Raises:
        BusinessValidationError: se la password è più corta del minimo configurato
    """
    if len(password) < settings.min_password_length:
        raise BusinessValidationError(
            f"La password deve contenere almeno {settings.min_password_length} caratteri"
        )


class UserService:
    """
    Service per la gestione degli utenti.

    La verifica dei permessi del chiamante (admin o `users`) è fatta
    dalle dipendenze del router, non qui.
    """

    async def get_all(
        self,
        db: AsyncSession,
        page: int = 1,
        per_page: int = 20,
        search: Optional[str] = None,
    ) -> tuple[list[User], int]:
        """Lista paginata degli utenti, ordinata per username."""
        conditions = []
        if search:
            conditions.append(or_(User.username.ilike(f"%{search}%")))

        query = select(User).order_by(User.username.asc())
        count_query = select(func.count()).select_from(User)
        if conditions:
            query = query.where(*conditions)
            count_query = count_query.where(*conditions)

        result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        users = list(result.scalars().all())

        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0
        return users, total

    async def get_by_id(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        """
        Raises:
            NotFoundError: se l'utente non esiste
        """
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError(f"Utente {user_id} non trovato")
        return user

    async def get_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(User.id)))
        return result.scalar() or 0

    async def create(self, db: AsyncSession, data: UserCreate) -> User:
        """
        Crea un nuovo utente.

        Raises:
            DuplicateError: username già in uso
            BusinessValidationError: password troppo corta o permessi sconosciuti
        """
        check_password_length(data.password)
        permissions = validate_permissions(data.permissions)

        if await self.get_by_username(db, data.username):
            logger.warning("Tentativo di creare utente con username duplicato: %s", data.username)
            raise DuplicateError(f"Lo username '{data.username}' è già in uso")

        user = User(
            username=data.username,
            hashed_password=hash_password(data.password),
            permissions=permissions,
            is_admin=data.is_admin,
        )
        return await self._save(db, user, "creazione")

    async def update(self, db: AsyncSession, user_id: uuid.UUID, data: UserUpdate) -> User:
        """
        Aggiorna un utente applicando solo i campi forniti.

        Una password fornita viene ri-hashata.

        Raises:
            NotFoundError: utente inesistente
            DuplicateError: nuovo username già in uso
        """
        user = await self.get_by_id(db, user_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        new_username = update_data.get("username")
        if new_username and new_username != user.username:
            if await self.get_by_username(db, new_username):
                raise DuplicateError(f"Lo username '{new_username}' è già in uso")
            user.username = new_username

        if "password" in update_data:
            check_password_length(update_data["password"])
            user.hashed_password = hash_password(update_data["password"])

        if "permissions" in update_data:
            user.permissions = validate_permissions(update_data["permissions"])

        if "is_admin" in update_data:
            user.is_admin = update_data["is_admin"]

        return await self._save(db, user, "aggiornamento")

    async def delete(self, db: AsyncSession, user_id: uuid.UUID) -> None:
        """
        Elimina un utente.

        Le righe utente vengono bloccate prima del conteggio, così due
        eliminazioni concorrenti non possono lasciare il sistema vuoto.

        Raises:
            NotFoundError: utente inesistente
            ConflictError: è l'ultimo utente rimasto
        """
        user = await self.get_by_id(db, user_id)

        result = await db.execute(select(User.id).with_for_update())
        remaining = len(result.scalars().all())
        if remaining <= 1:
            logger.warning("Tentativo di eliminare l'ultimo utente: %s", user.username)
            raise ConflictError(
                "Impossibile eliminare l'ultimo utente del sistema",
                error_code="LAST_USER",
            )

        await db.delete(user)
        await db.flush()
        logger.info("Eliminato utente: %s (%s)", user.username, user.id)

    async def _save(self, db: AsyncSession, user: User, action: str) -> User:
        try:
            db.add(user)
            await db.flush()
            await db.refresh(user)
        except IntegrityError as e:
            logger.warning("IntegrityError in %s utente: %s", action, e.orig)
            await db.rollback()
            raise DuplicateError(f"Lo username '{user.username}' è già in uso") from e

        logger.info("Utente salvato (%s): %s", action, user.username)
        return user


def get_user_service() -> UserService:
    """Factory per ottenere un'istanza del servizio utenti."""
    return UserService()


__all__ = ["UserService", "get_user_service", "check_password_length"]
