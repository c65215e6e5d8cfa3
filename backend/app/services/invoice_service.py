"""
Service Layer per la Fatturazione
Progetto: ERP Manager (Gestionale ERP)

Gestisce:
- CRUD fatture emesse e ricevute
- Calcolo degli importi (imponibile, imposta, totale)
- Numerazione automatica YYYYMM-NN
- Emissione delle fatture pre-registrate
"""

import datetime
import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BusinessValidationError, ConflictError, DuplicateError, NotFoundError
from app.core.permissions import (
    INVOICE_TYPE_PERMISSIONS,
    HasPermissions,
    allowed_types,
    ensure_type_allowed,
)
from app.models import Client, Contract, Invoice, Payment, Project
from app.models.contract import ContractType
from app.models.document_sequence import SequenceType
from app.models.invoice import InvoiceStatus, InvoiceType
from app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from app.services.numbering_service import NumberingService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Direzione del contratto compatibile con ciascun tipo di fattura
_CONTRACT_TYPE_FOR_INVOICE = {
    InvoiceType.ISSUED.value: ContractType.SALES.value,
    InvoiceType.RECEIVED.value: ContractType.PURCHASE.value,
}


def compute_amounts(
    amount: Decimal,
    tax_amount: Optional[Decimal] = None,
    tax_rate: Optional[Decimal] = None,
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Calcola (imponibile, imposta, totale).

    `amount` è sempre al netto d'imposta. Se `tax_amount` è fornito
    viene usato così com'è; altrimenti è ricavato da `tax_rate`
    (amount * rate / 100, arrotondato al centesimo). Senza nessuno
    dei due l'imposta è zero.

    Example:
        compute_amounts(Decimal("1000"), tax_rate=Decimal("22"))
        -> (Decimal("1000.00"), Decimal("220.00"), Decimal("1220.00"))
    """
    net = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    if tax_amount is not None:
        tax = Decimal(tax_amount).quantize(CENT, rounding=ROUND_HALF_UP)
    elif tax_rate is not None:
        tax = (net * Decimal(tax_rate) / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)
    else:
        tax = Decimal("0.00")

    if tax < 0:
        raise BusinessValidationError("L'imposta non può essere negativa")
    return net, tax, net + tax


class InvoiceService:
    """
    Service per la gestione delle fatture.

    Usage:
        service = InvoiceService()
        invoice = await service.create(db, claims, data)
    """

    def __init__(self, numbering: Optional[NumberingService] = None) -> None:
        self.numbering = numbering or NumberingService()

    async def get_all(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
        client_id: Optional[uuid.UUID] = None,
        contract_id: Optional[uuid.UUID] = None,
        invoice_type: Optional[InvoiceType] = None,
        date_from: Optional[datetime.date] = None,
        date_to: Optional[datetime.date] = None,
    ) -> tuple[list[Invoice], int]:
        """
        Lista paginata delle fatture, più recenti prima.

        Senza filtro di tipo restituisce solo i tipi visibili all'utente.
        La ricerca copre numero fattura, partner, contratto e progetto.
        """
        conditions = []
        if invoice_type is not None:
            ensure_type_allowed(claims, INVOICE_TYPE_PERMISSIONS, invoice_type)
            conditions.append(Invoice.invoice_type == InvoiceType(invoice_type).value)
        else:
            conditions.append(Invoice.invoice_type.in_(allowed_types(claims, INVOICE_TYPE_PERMISSIONS)))

        if status is not None:
            conditions.append(Invoice.status == InvoiceStatus(status).value)
        if client_id is not None:
            conditions.append(Invoice.client_id == client_id)
        if contract_id is not None:
            conditions.append(Invoice.contract_id == contract_id)
        if date_from is not None:
            conditions.append(Invoice.invoice_date >= date_from)
        if date_to is not None:
            conditions.append(Invoice.invoice_date <= date_to)

        if search:
            term = f"%{search}%"
            conditions.append(
                or_(
                    Invoice.invoice_number.ilike(term),
                    Invoice.client.has(Client.name.ilike(term)),
                    Invoice.contract.has(
                        or_(
                            Contract.contract_number.ilike(term),
                            Contract.title.ilike(term),
                            Contract.project.has(Project.name.ilike(term)),
                        )
                    ),
                )
            )

        query = (
            select(Invoice)
            .where(*conditions)
            .order_by(Invoice.invoice_date.desc(), Invoice.invoice_number.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await db.execute(query)
        invoices = list(result.scalars().all())

        count_result = await db.execute(select(func.count()).select_from(Invoice).where(*conditions))
        total = count_result.scalar() or 0
        return invoices, total

    async def get_by_id(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        claims: Optional[HasPermissions] = None,
        with_payments: bool = False,
    ) -> Invoice:
        """
        Raises:
            NotFoundError: Se la fattura non esiste
            AuthorizationError: Se l'utente non può vedere quel tipo di fattura
        """
        query = select(Invoice).where(Invoice.id == invoice_id).execution_options(populate_existing=True)
        if with_payments:
            query = query.options(selectinload(Invoice.payments))
        result = await db.execute(query)
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise NotFoundError(f"Fattura {invoice_id} non trovata")
        if claims is not None:
            ensure_type_allowed(claims, INVOICE_TYPE_PERMISSIONS, invoice.invoice_type)
        return invoice

    async def peek_next_number(self, db: AsyncSession) -> str:
        """Anteprima del prossimo numero fattura del mese corrente."""
        return await self.numbering.peek_next_number(db, SequenceType.INVOICE)

    async def create(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        data: InvoiceCreate,
    ) -> Invoice:
        """
        Crea una fattura.

        Se il numero non è indicato viene assegnato dal contatore del
        mese; un numero indicato a mano deve essere libero.

        Raises:
            DuplicateError: numero fattura già in uso
            NotFoundError: partner o contratto inesistente
            BusinessValidationError: contratto incoerente con partner o tipo
        """
        ensure_type_allowed(claims, INVOICE_TYPE_PERMISSIONS, data.invoice_type)
        await self._check_references(db, data)

        if data.invoice_number:
            await self._check_number_available(db, data.invoice_number)
            number = data.invoice_number
        else:
            number = await self.numbering.next_number(db, SequenceType.INVOICE)

        amount, tax_amount, total_amount = compute_amounts(data.amount, data.tax_amount, data.tax_rate)
        invoice = Invoice(
            **data.model_dump(exclude={"invoice_number", "amount", "tax_amount", "tax_rate"}),
            invoice_number=number,
            amount=amount,
            tax_amount=tax_amount,
            total_amount=total_amount,
        )
        await self._flush(db, invoice)
        logger.info("Creata fattura %s (%s, totale %s)", number, invoice.invoice_type, total_amount)
        return await self.get_by_id(db, invoice.id)

    async def update(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        invoice_id: uuid.UUID,
        data: InvoiceUpdate,
    ) -> Invoice:
        """Sostituisce i campi della fattura e ricalcola i totali."""
        invoice = await self.get_by_id(db, invoice_id, claims)
        ensure_type_allowed(claims, INVOICE_TYPE_PERMISSIONS, data.invoice_type)
        await self._check_references(db, data)

        if data.invoice_number and data.invoice_number != invoice.invoice_number:
            await self._check_number_available(db, data.invoice_number, exclude_id=invoice.id)
            invoice.invoice_number = data.invoice_number

        amount, tax_amount, total_amount = compute_amounts(data.amount, data.tax_amount, data.tax_rate)
        for key, value in data.model_dump(exclude={"invoice_number", "amount", "tax_amount", "tax_rate"}).items():
            setattr(invoice, key, value)
        invoice.amount = amount
        invoice.tax_amount = tax_amount
        invoice.total_amount = total_amount

        await self._flush(db, invoice)
        logger.info("Aggiornata fattura %s", invoice.invoice_number)
        return await self.get_by_id(db, invoice.id)

    async def issue(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        invoice_id: uuid.UUID,
    ) -> Invoice:
        """
        Emette una fattura pre-registrata (UNISSUED → ISSUED).

        La data fattura diventa la data odierna.

        Raises:
            ConflictError: la fattura è già emessa
        """
        invoice = await self.get_by_id(db, invoice_id, claims)
        if invoice.status == InvoiceStatus.ISSUED.value:
            raise ConflictError(f"La fattura {invoice.invoice_number} è già stata emessa")

        invoice.status = InvoiceStatus.ISSUED.value
        invoice.invoice_date = datetime.date.today()
        if invoice.due_date is not None and invoice.due_date < invoice.invoice_date:
            invoice.due_date = invoice.invoice_date
        await db.flush()
        logger.info("Emessa fattura %s", invoice.invoice_number)
        return await self.get_by_id(db, invoice.id)

    async def delete(
        self,
        db: AsyncSession,
        claims: HasPermissions,
        invoice_id: uuid.UUID,
    ) -> None:
        """
        Elimina una fattura.

        I pagamenti collegati restano, senza fattura.
        """
        invoice = await self.get_by_id(db, invoice_id, claims)
        await db.execute(update(Payment).where(Payment.invoice_id == invoice_id).values(invoice_id=None))
        await db.delete(invoice)
        await db.flush()
        logger.info("Eliminata fattura %s", invoice.invoice_number)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    async def _check_number_available(
        self,
        db: AsyncSession,
        invoice_number: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Invoice.id).where(Invoice.invoice_number == invoice_number)
        if exclude_id is not None:
            query = query.where(Invoice.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            logger.warning("Numero fattura duplicato: %s", invoice_number)
            raise DuplicateError(f"Il numero fattura '{invoice_number}' è già in uso")

    async def _check_references(self, db: AsyncSession, data: Union[InvoiceCreate, InvoiceUpdate]) -> None:
        client = await db.get(Client, data.client_id)
        if client is None:
            raise NotFoundError(f"Partner {data.client_id} non trovato")

        if data.contract_id is None:
            return
        contract = await db.get(Contract, data.contract_id)
        if contract is None:
            raise NotFoundError(f"Contratto {data.contract_id} non trovato")
        if contract.client_id != data.client_id:
            raise BusinessValidationError("Il contratto non appartiene al partner selezionato")
        invoice_type = InvoiceType(data.invoice_type).value
        if contract.contract_type != _CONTRACT_TYPE_FOR_INVOICE[invoice_type]:
            raise BusinessValidationError(
                "Le fatture emesse vanno collegate a contratti di vendita, "
                "quelle ricevute a contratti di acquisto"
            )

    async def _flush(self, db: AsyncSession, invoice: Invoice) -> None:
        try:
            db.add(invoice)
            await db.flush()
        except IntegrityError as e:
            logger.warning("IntegrityError salvataggio fattura: %s", e.orig)
            await db.rollback()
            raise DuplicateError(f"Il numero fattura '{invoice.invoice_number}' è già in uso") from e


def get_invoice_service() -> InvoiceService:
    """Factory per ottenere un'istanza del InvoiceService."""
    return InvoiceService()


__all__ = ["InvoiceService", "get_invoice_service", "compute_amounts"]
