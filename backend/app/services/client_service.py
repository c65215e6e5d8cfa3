"""
Service Layer per l'entità Client
Progetto: ERP Manager (Gestionale ERP)

Definisce la logica di business per l'anagrafica partner
(clienti e fornitori). Ogni operazione verifica che l'utente
possa accedere al tipo di partner coinvolto.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.permissions import (
    CLIENT_TYPE_PERMISSIONS,
    HasPermissions,
    allowed_types,
    ensure_type_allowed,
)
from app.models import Client, Contract, Invoice, Payment
from app.models.client import ClientType
from app.schemas.client import ClientCreate, ClientUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)


class ClientService:
    """
    Service per la gestione delle operazioni CRUD sui partner.

    Fornisce metodi asincroni per interagire con il database
    in modo centralizzato, senza dipendenze da FastAPI.

    Implementa:
    - Filtro per tipo: l'utente vede solo i tipi di partner per cui ha il permesso
    - Eliminazione fisica, bloccata se il partner è ancora referenziato
    """

    async def get_all(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        client_type: Optional[ClientType] = None,
    ) -> tuple[list[Client], int]:
        """
        Recupera la lista paginata dei partner.

        Senza filtro di tipo restituisce solo i tipi visibili all'utente.

        Args:
            db: Sessione database
            claims: Identità dell'utente
            page: Numero pagina (default 1)
            per_page: Elementi per pagina (default 10)
            search: Ricerca su nome, referente, telefono ed email
            client_type: Filtro opzionale per tipo

        Returns:
            Tuple di (lista partner, totale count)

        Raises:
            AuthorizationError: se l'utente non può vedere il tipo richiesto
        """
        conditions = []

        if client_type is not None:
            ensure_type_allowed(claims, CLIENT_TYPE_PERMISSIONS, client_type)
            conditions.append(Client.client_type == ClientType(client_type).value)
        else:
            conditions.append(Client.client_type.in_(allowed_types(claims, CLIENT_TYPE_PERMISSIONS)))

        if search:
            search_term = f"%{search}%"
            conditions.append(
                or_(
                    Client.name.ilike(search_term),
                    Client.contact_name.ilike(search_term),
                    Client.phone.ilike(search_term),
                    Client.email.ilike(search_term),
                )
            )

        query = (
            select(Client)
            .where(*conditions)
            .order_by(Client.name.asc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await db.execute(query)
        clients = list(result.scalars().all())

        count_query = select(func.count()).select_from(Client).where(*conditions)
        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        logger.debug("Recuperati %s partner su %s totali (pagina %s)", len(clients), total, page)
        return clients, total

    async def get_by_id(
        self,
        db: AsyncSession,
        client_id: uuid.UUID,
        claims: Optional[HasPermissions] = None,
    ) -> Client:
        """
        Recupera un partner tramite ID.

        Se `claims` è fornito verifica anche il permesso sul tipo.

        Raises:
            NotFoundError: Se il partner non esiste
            AuthorizationError: Se l'utente non può vedere quel tipo di partner
        """
        result = await db.execute(select(Client).where(Client.id == client_id))
        client = result.scalar_one_or_none()

        if not client:
            logger.warning("Partner non trovato: %s", client_id)
            raise NotFoundError(f"Partner {client_id} non trovato")

        if claims is not None:
            ensure_type_allowed(claims, CLIENT_TYPE_PERMISSIONS, client.client_type)
        return client

    async def create(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        client_data: ClientCreate,
    ) -> Client:
        """Crea un nuovo partner."""
        ensure_type_allowed(claims, CLIENT_TYPE_PERMISSIONS, client_data.client_type)

        client = Client(**client_data.model_dump())
        try:
            db.add(client)
            await db.flush()
            await db.refresh(client)
        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy creazione partner: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante la creazione del partner") from e

        logger.info("Creato partner: %s - %s (%s)", client.id, client.name, client.client_type)
        return client

    async def update(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        client_id: uuid.UUID,
        client_data: ClientUpdate,
    ) -> Client:
        """
        Aggiorna un partner (sostituzione completa dei campi).

        L'utente deve poter accedere sia al tipo attuale sia al nuovo tipo.
        """
        client = await self.get_by_id(db, client_id, claims)
        ensure_type_allowed(claims, CLIENT_TYPE_PERMISSIONS, client_data.client_type)

        for key, value in client_data.model_dump().items():
            setattr(client, key, value)

        try:
            await db.flush()
            await db.refresh(client)
        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy aggiornamento partner: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise ConflictError("Errore del database durante l'aggiornamento del partner") from e

        logger.info("Aggiornato partner: %s - %s", client.id, client.name)
        return client

    async def delete(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        client_id: uuid.UUID,
    ) -> None:
        """
        Elimina fisicamente un partner.

        Raises:
            NotFoundError: Se il partner non esiste
            ConflictError: Se contratti, fatture o pagamenti lo referenziano
        """
        client = await self.get_by_id(db, client_id, claims)

        references = await self._count_references(db, client_id)
        if references:
            logger.warning("Eliminazione partner %s bloccata: %s", client_id, references)
            details = ", ".join(f"{count} {label}" for label, count in references.items())
            raise ConflictError(
                f"Impossibile eliminare il partner: è ancora collegato a {details}",
                extra=references,
            )

        await db.delete(client)
        await db.flush()
        logger.info("Eliminato partner: %s - %s", client.id, client.name)

    async def _count_references(self, db: AsyncSession, client_id: uuid.UUID) -> dict[str, int]:
        """Numero di record che referenziano il partner, per tipo (solo i non nulli)."""
        references: dict[str, int] = {}
        for label, model in (("contratti", Contract), ("fatture", Invoice), ("pagamenti", Payment)):
            result = await db.execute(
                select(func.count(model.id)).where(model.client_id == client_id)
            )
            count = result.scalar() or 0
            if count:
                references[label] = count
        return references


def get_client_service() -> ClientService:
    """Factory per ottenere un'istanza del ClientService."""
    return ClientService()


__all__ = ["ClientService", "get_client_service"]
