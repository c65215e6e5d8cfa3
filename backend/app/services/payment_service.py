"""
Service Layer per incassi e pagamenti
Progetto: ERP Manager (Gestionale ERP)
"""

import datetime
import logging
import uuid
from typing import Optional, Union

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessValidationError, ConflictError, DuplicateError, NotFoundError
from app.core.permissions import (
    PAYMENT_TYPE_PERMISSIONS,
    HasPermissions,
    allowed_types,
    ensure_type_allowed,
)
from app.models import Client, Contract, Invoice, Payment, Project
from app.models.contract import ContractType
from app.models.document_sequence import SequenceType
from app.models.invoice import InvoiceType
from app.models.payment import PaymentStatus, PaymentType
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services.numbering_service import NumberingService

logger = logging.getLogger(__name__)

# Un incasso si collega a vendite e fatture emesse, un pagamento ad acquisti e fatture ricevute
_CONTRACT_TYPE_FOR_PAYMENT = {
    PaymentType.RECEIPT.value: ContractType.SALES.value,
    PaymentType.EXPENSE.value: ContractType.PURCHASE.value,
}
_INVOICE_TYPE_FOR_PAYMENT = {
    PaymentType.RECEIPT.value: InvoiceType.ISSUED.value,
    PaymentType.EXPENSE.value: InvoiceType.RECEIVED.value,
}


class PaymentService:
    """Service per la gestione di incassi e pagamenti."""

    def __init__(self, numbering: Optional[NumberingService] = None) -> None:
        self.numbering = numbering or NumberingService()

    async def get_all(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        payment_type: Optional[PaymentType] = None,
        status: Optional[PaymentStatus] = None,
        client_id: Optional[uuid.UUID] = None,
        contract_id: Optional[uuid.UUID] = None,
        invoice_id: Optional[uuid.UUID] = None,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
    ) -> tuple[list[Payment], int]:
        """
        Lista paginata dei movimenti, ordinata per data pagamento decrescente.

        Senza filtro di tipo restituisce solo i tipi visibili all'utente.
        """
        conditions = []
        if payment_type is not None:
            ensure_type_allowed(claims, PAYMENT_TYPE_PERMISSIONS, payment_type)
            conditions.append(Payment.payment_type == PaymentType(payment_type).value)
        else:
            conditions.append(Payment.payment_type.in_(allowed_types(claims, PAYMENT_TYPE_PERMISSIONS)))

        if status is not None:
            conditions.append(Payment.status == PaymentStatus(status).value)
        if client_id is not None:
            conditions.append(Payment.client_id == client_id)
        if contract_id is not None:
            conditions.append(Payment.contract_id == contract_id)
        if invoice_id is not None:
            conditions.append(Payment.invoice_id == invoice_id)
        if date_from is not None:
            conditions.append(Payment.payment_date >= date_from)
        if date_to is not None:
            conditions.append(Payment.payment_date <= date_to)

        if search:
            term = f"%{search}%"
            conditions.append(
                or_(
                    Payment.payment_number.ilike(term),
                    Payment.reference_number.ilike(term),
                    Payment.client.has(Client.name.ilike(term)),
                    Payment.contract.has(
                        or_(
                            Contract.contract_number.ilike(term),
                            Contract.title.ilike(term),
                            Contract.project.has(Project.name.ilike(term)),
                        )
                    ),
                    Payment.invoice.has(Invoice.invoice_number.ilike(term)),
                )
            )

        query = (
            select(Payment)
            .where(*conditions)
            .order_by(Payment.payment_date.desc(), Payment.payment_number.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await db.execute(query)
        payments = list(result.scalars().all())

        count_result = await db.execute(select(func.count()).select_from(Payment).where(*conditions))
        total = count_result.scalar() or 0
        return payments, total

    async def get_by_id(
        self,
        db: AsyncSession,
        payment_id: uuid.UUID,
        claims: Optional[HasPermissions] = None,
    ) -> Payment:
        """
        Raises:
            NotFoundError: Se il movimento non esiste
            AuthorizationError: Se l'utente non può vedere quel tipo di movimento
        """
        result = await db.execute(
            select(Payment).where(Payment.id == payment_id).execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        if not payment:
            raise NotFoundError(f"Movimento {payment_id} non trovato")
        if claims is not None:
            ensure_type_allowed(claims, PAYMENT_TYPE_PERMISSIONS, payment.payment_type)
        return payment

    async def peek_next_number(self, db: AsyncSession) -> str:
        """Anteprima del prossimo numero movimento del mese corrente."""
        return await self.numbering.peek_next_number(db, SequenceType.PAYMENT)

    async def create(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        data: PaymentCreate,
    ) -> Payment:
        """
        Registra un incasso o un pagamento.

        Raises:
            DuplicateError: numero già in uso
            NotFoundError: partner, contratto o fattura inesistente
            BusinessValidationError: riferimenti incoerenti tra loro
        """
        ensure_type_allowed(claims, PAYMENT_TYPE_PERMISSIONS, data.payment_type)
        await self._check_references(db, data)

        if data.payment_number:
            await self._check_number_available(db, data.payment_number)
            number = data.payment_number
        else:
            number = await self.numbering.next_number(db, SequenceType.PAYMENT)

        payment = Payment(**data.model_dump(exclude={"payment_number"}), payment_number=number)
        await self._flush(db, payment)
        logger.info("Registrato movimento %s (%s, %s)", number, payment.payment_type, payment.amount)
        return await self.get_by_id(db, payment.id)

    async def update(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        payment_id: uuid.UUID,
        data: PaymentUpdate,
    ) -> Payment:
        """Sostituisce i campi del movimento."""
        payment = await self.get_by_id(db, payment_id, claims)
        ensure_type_allowed(claims, PAYMENT_TYPE_PERMISSIONS, data.payment_type)
        await self._check_references(db, data)

        if data.payment_number and data.payment_number != payment.payment_number:
            await self._check_number_available(db, data.payment_number, exclude_id=payment.id)
            payment.payment_number = data.payment_number

        for key, value in data.model_dump(exclude={"payment_number"}).items():
            setattr(payment, key, value)
        await self._flush(db, payment)
        logger.info("Aggiornato movimento %s", payment.payment_number)
        return await self.get_by_id(db, payment.id)

    async def mark_paid(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        payment_id: uuid.UUID,
    ) -> Payment:
        """
        Segna come pagato un movimento pre-registrato (UNPAID → PAID).

        Raises:
            ConflictError: il movimento è già pagato
        """
        payment = await self.get_by_id(db, payment_id, claims)
        if payment.status == PaymentStatus.PAID.value:
            raise ConflictError(f"Il movimento {payment.payment_number} risulta già pagato")

        payment.status = PaymentStatus.PAID.value
        await db.flush()
        logger.info("Movimento %s segnato come pagato", payment.payment_number)
        return await self.get_by_id(db, payment.id)

    async def delete(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        payment_id: uuid.UUID,
    ) -> None:
        payment = await self.get_by_id(db, payment_id, claims)
        await db.delete(payment)
        await db.flush()
        logger.info("Eliminato movimento %s", payment.payment_number)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    async def _check_number_available(
        self,
        db: AsyncSession,
        payment_number: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Payment.id).where(Payment.payment_number == payment_number)
        if exclude_id is not None:
            query = query.where(Payment.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            logger.warning("Numero movimento duplicato: %s", payment_number)
            raise DuplicateError(f"Il numero '{payment_number}' è già in uso")

    async def _check_references(self, db: AsyncSession, data: Union[PaymentCreate, PaymentUpdate]) -> None:
        payment_type = PaymentType(data.payment_type).value

        client = await db.get(Client, data.client_id)
        if client is None:
            raise NotFoundError(f"Partner {data.client_id} non trovato")

        if data.contract_id is not None:
            contract = await db.get(Contract, data.contract_id)
            if contract is None:
                raise NotFoundError(f"Contratto {data.contract_id} non trovato")
            if contract.client_id != data.client_id:
                raise BusinessValidationError("Il contratto non appartiene al partner selezionato")
            if contract.contract_type != _CONTRACT_TYPE_FOR_PAYMENT[payment_type]:
                raise BusinessValidationError(
                    "Gli incassi vanno collegati a contratti di vendita, i pagamenti a contratti di acquisto"
                )

        if data.invoice_id is not None:
            invoice = await db.get(Invoice, data.invoice_id)
            if invoice is None:
                raise NotFoundError(f"Fattura {data.invoice_id} non trovata")
            if invoice.client_id != data.client_id:
                raise BusinessValidationError("La fattura non appartiene al partner selezionato")
            if invoice.invoice_type != _INVOICE_TYPE_FOR_PAYMENT[payment_type]:
                raise BusinessValidationError(
                    "Gli incassi vanno collegati a fatture emesse, i pagamenti a fatture ricevute"
                )
            if data.contract_id is not None and invoice.contract_id not in (None, data.contract_id):
                raise BusinessValidationError("La fattura è collegata a un contratto diverso")

    async def _flush(self, db: AsyncSession, payment: Payment) -> None:
        try:
            db.add(payment)
            await db.flush()
        except IntegrityError as e:
            logger.warning("IntegrityError salvataggio movimento: %s", e.orig)
            await db.rollback()
            raise DuplicateError(f"Il numero '{payment.payment_number}' è già in uso") from e


def get_payment_service() -> PaymentService:
    """Factory per ottenere un'istanza del PaymentService."""
    return PaymentService()


__all__ = ["PaymentService", "get_payment_service"]
