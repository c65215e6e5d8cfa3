"""
Service Layer per l'entità Contract
Progetto: ERP Manager (Gestionale ERP)

Oltre al CRUD, allega a ogni contratto l'avanzamento di fatturazione
e di incasso calcolato da `app.services.settlement`. Fatture e
pagamenti collegati sono caricati in blocco (selectin) insieme ai
contratti, con una query per relazione e non una per contratto.
"""

import datetime
import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateError, NotFoundError
from app.core.permissions import (
    CONTRACT_TYPE_PERMISSIONS,
    CONTRACT_TYPE_PERMISSIONS_FOR_INVOICES,
    CONTRACT_TYPE_PERMISSIONS_FOR_PAYMENTS,
    HasPermissions,
    allowed_types,
    ensure_type_allowed,
)
from app.models import Client, Contract, Invoice, Payment, Project
from app.models.contract import ContractStatus, ContractType
from app.schemas.contract import ContractCreate, ContractDetail, ContractRead, ContractUpdate
from app.schemas.settlement import ContractSettlement
from app.services.settlement import settle_contract

logger = logging.getLogger(__name__)


def compute_settlement(contract: Contract, include_drafts: bool = False) -> Optional[ContractSettlement]:
    """
    Avanzamento del contratto, oppure None se non calcolabile.

    Un contratto con dati non validi non fa fallire l'intera lista:
    l'interfaccia mostra "-" al posto dei valori.
    """
    try:
        return settle_contract(contract, include_drafts=include_drafts)
    except (ArithmeticError, TypeError, ValueError) as e:
        logger.warning("Avanzamento non calcolabile per il contratto %s: %s", contract.id, e)
        return None


def build_contract_read(
    contract: Contract,
    include_drafts: bool = False,
    detail: bool = False,
) -> ContractRead:
    """Schema di risposta del contratto con l'avanzamento allegato."""
    schema = ContractDetail if detail else ContractRead
    data = schema.model_validate(contract)
    return data.model_copy(update={"settlement": compute_settlement(contract, include_drafts)})


def filter_open_contracts(
    contracts: Iterable[ContractRead],
    for_invoices: bool = False,
    for_payments: bool = False,
) -> list[ContractRead]:
    """
    Contratti ancora da fatturare e/o da incassare.

    I contratti senza avanzamento calcolabile restano in lista.
    """
    selected = []
    for contract in contracts:
        s = contract.settlement
        if s is not None:
            if for_invoices and s.invoice_completed:
                continue
            if for_payments and s.payment_completed:
                continue
        selected.append(contract)
    return selected


class ContractService:
    """Service per la gestione dei contratti."""

    async def get_all(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        status: Optional[ContractStatus] = None,
        client_id: Optional[uuid.UUID] = None,
        project_id: Optional[uuid.UUID] = None,
        contract_type: Optional[ContractType] = None,
        start_from: Optional[datetime.date] = None,
        start_to: Optional[datetime.date] = None,
        for_invoices: bool = False,
        for_payments: bool = False,
        include_drafts: Optional[bool] = None,
    ) -> tuple[list[ContractRead], int]:
        """
        Lista paginata dei contratti con avanzamento.

        Con `for_invoices` / `for_payments` restituisce solo i contratti
        non ancora completamente fatturati / pagati (usati nei form di
        fattura e pagamento). In quel caso il calcolo conta anche le
        fatture non emesse e i pagamenti non pagati, perché anche i
        documenti pre-registrati impegnano l'importo del contratto.

        Args:
            include_drafts: Forza l'inclusione (o esclusione) dei documenti
                non definitivi; di default solo per i filtri dei form.

        Raises:
            AuthorizationError: se l'utente non può vedere il tipo richiesto
        """
        if for_invoices:
            mapping = CONTRACT_TYPE_PERMISSIONS_FOR_INVOICES
        elif for_payments:
            mapping = CONTRACT_TYPE_PERMISSIONS_FOR_PAYMENTS
        else:
            mapping = CONTRACT_TYPE_PERMISSIONS

        if include_drafts is None:
            include_drafts = for_invoices or for_payments

        conditions = []
        if contract_type is not None:
            ensure_type_allowed(claims, mapping, contract_type)
            conditions.append(Contract.contract_type == ContractType(contract_type).value)
        else:
            conditions.append(Contract.contract_type.in_(allowed_types(claims, mapping)))

        if status is not None:
            conditions.append(Contract.status == ContractStatus(status).value)
        if client_id is not None:
            conditions.append(Contract.client_id == client_id)
        if project_id is not None:
            conditions.append(Contract.project_id == project_id)
        if start_from is not None:
            conditions.append(Contract.start_date >= start_from)
        if start_to is not None:
            conditions.append(Contract.start_date <= start_to)

        if search:
            term = f"%{search}%"
            conditions.append(
                or_(
                    Contract.contract_number.ilike(term),
                    Contract.title.ilike(term),
                    Contract.client.has(Client.name.ilike(term)),
                    Contract.project.has(Project.name.ilike(term)),
                )
            )

        query = select(Contract).where(*conditions).order_by(Contract.created_at.desc())

        if for_invoices or for_payments:
            # Il filtro dipende da valori calcolati: si pagina dopo il calcolo
            result = await db.execute(query)
            items = [build_contract_read(c, include_drafts) for c in result.scalars().all()]
            items = filter_open_contracts(items, for_invoices, for_payments)
            offset = (page - 1) * per_page
            return items[offset:offset + per_page], len(items)

        result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        items = [build_contract_read(c, include_drafts) for c in result.scalars().all()]

        count_result = await db.execute(select(func.count()).select_from(Contract).where(*conditions))
        total = count_result.scalar() or 0
        return items, total

    async def get_by_id(
        self,
        db: AsyncSession,
        contract_id: uuid.UUID,
        claims: Optional[HasPermissions] = None,
    ) -> Contract:
        """
        Raises:
            NotFoundError: Se il contratto non esiste
            AuthorizationError: Se l'utente non può vedere quel tipo di contratto
        """
        result = await db.execute(
            select(Contract)
            .where(Contract.id == contract_id)
            .execution_options(populate_existing=True)
        )
        contract = result.scalar_one_or_none()
        if not contract:
            raise NotFoundError(f"Contratto {contract_id} non trovato")
        if claims is not None:
            ensure_type_allowed(claims, CONTRACT_TYPE_PERMISSIONS, contract.contract_type)
        return contract

    async def get_detail(
        self,
        db: AsyncSession,
        contract_id: uuid.UUID,
        claims: HasPermissions,
        include_drafts: bool = False,
    ) -> ContractDetail:
        """Contratto con fatture, pagamenti e avanzamento."""
        contract = await self.get_by_id(db, contract_id, claims)
        return build_contract_read(contract, include_drafts, detail=True)

    async def create(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        data: ContractCreate,
    ) -> Contract:
        """
        Crea un contratto.

        Raises:
            DuplicateError: numero contratto già in uso
            NotFoundError: partner o progetto inesistente
        """
        ensure_type_allowed(claims, CONTRACT_TYPE_PERMISSIONS, data.contract_type)
        await self._check_number_available(db, data.contract_number)
        await self._check_references(db, data)

        contract = Contract(**data.model_dump())
        await self._flush(db, contract)
        logger.info("Creato contratto %s (%s, %s)", contract.contract_number, contract.contract_type, contract.amount)
        return await self.get_by_id(db, contract.id)

    async def update(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        contract_id: uuid.UUID,
        data: ContractUpdate,
    ) -> Contract:
        """Sostituisce i campi del contratto."""
        contract = await self.get_by_id(db, contract_id, claims)
        ensure_type_allowed(claims, CONTRACT_TYPE_PERMISSIONS, data.contract_type)

        if data.contract_number != contract.contract_number:
            await self._check_number_available(db, data.contract_number, exclude_id=contract.id)
        await self._check_references(db, data)

        for key, value in data.model_dump().items():
            setattr(contract, key, value)
        await self._flush(db, contract)
        logger.info("Aggiornato contratto %s", contract.contract_number)
        return await self.get_by_id(db, contract.id)

    async def delete(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        contract_id: uuid.UUID,
    ) -> None:
        """
        Elimina un contratto.

        Fatture e pagamenti collegati restano, senza contratto.
        """
        contract = await self.get_by_id(db, contract_id, claims)
        await db.execute(update(Invoice).where(Invoice.contract_id == contract_id).values(contract_id=None))
        await db.execute(update(Payment).where(Payment.contract_id == contract_id).values(contract_id=None))
        await db.delete(contract)
        await db.flush()
        logger.info("Eliminato contratto %s", contract.contract_number)

    async def _check_number_available(
        self,
        db: AsyncSession,
        contract_number: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Contract.id).where(Contract.contract_number == contract_number)
        if exclude_id is not None:
            query = query.where(Contract.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            logger.warning("Numero contratto duplicato: %s", contract_number)
            raise DuplicateError(f"Il numero contratto '{contract_number}' è già in uso")

    async def _check_references(self, db: AsyncSession, data: ContractCreate) -> None:
        client = await db.get(Client, data.client_id)
        if client is None:
            raise NotFoundError(f"Partner {data.client_id} non trovato")
        if data.project_id is not None:
            project = await db.get(Project, data.project_id)
            if project is None:
                raise NotFoundError(f"Progetto {data.project_id} non trovato")

    async def _flush(self, db: AsyncSession, contract: Contract) -> None:
        try:
            db.add(contract)
            await db.flush()
        except IntegrityError as e:
            logger.warning("IntegrityError salvataggio contratto: %s", e.orig)
            await db.rollback()
            raise DuplicateError(f"Il numero contratto '{contract.contract_number}' è già in uso") from e


def get_contract_service() -> ContractService:
    """Factory per ottenere un'istanza del ContractService."""
    return ContractService()


__all__ = [
    "ContractService",
    "get_contract_service",
    "compute_settlement",
    "build_contract_read",
    "filter_open_contracts",
]
