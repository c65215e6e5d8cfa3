"""
Servizio di numerazione documenti
Progetto: ERP Manager (Gestionale ERP)

Numeri nel formato YYYYMM-NN, progressivo a due cifre che riparte
ogni mese. Fatture e incassi/pagamenti hanno spazi di numerazione
indipendenti.

Il progressivo è tenuto in una riga contatore per (tipo, mese)
bloccata con SELECT ... FOR UPDATE: due transazioni concorrenti
si serializzano sulla riga e non ottengono mai lo stesso numero.
"""

import logging
import re
from datetime import date
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.document_sequence import DocumentSequence, SequenceType
from app.models.invoice import Invoice
from app.models.payment import Payment

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^(\d{6})-(\d+)$")

_NUMBER_COLUMNS = {
    SequenceType.INVOICE: Invoice.invoice_number,
    SequenceType.PAYMENT: Payment.payment_number,
}


def period_key(day: date) -> str:
    """Periodo di numerazione di una data: 'YYYYMM'."""
    return day.strftime("%Y%m")


def format_document_number(period: str, sequence: int) -> str:
    """
    Formatta un numero documento.

    Il progressivo ha almeno due cifre (202602-01) e cresce oltre
    il 99 senza troncamenti (202602-100).
    """
    return f"{period}-{sequence:02d}"


def parse_sequence(number: str, period: Optional[str] = None) -> Optional[int]:
    """
    Estrae il progressivo da un numero documento.

    Returns:
        Il progressivo, oppure None se il numero non è nel formato
        YYYYMM-NN o appartiene a un periodo diverso da `period`.
    """
    match = _NUMBER_RE.match(number or "")
    if not match:
        return None
    if period is not None and match.group(1) != period:
        return None
    return int(match.group(2))


class NumberingService:
    """Assegnazione dei numeri documento."""

    async def next_number(
        self,
        db: AsyncSession,
        kind: Union[SequenceType, str],
        day: Optional[date] = None,
    ) -> str:
        """
        Assegna il prossimo numero del mese.

        Il contatore resta bloccato fino al commit della transazione
        chiamante. I numeri già usati da documenti numerati a mano
        vengono saltati.

        Args:
            db: Sessione database
            kind: 'invoice' o 'payment'
            day: Data di riferimento (default: oggi)

        Returns:
            Numero documento nel formato YYYYMM-NN
        """
        kind = SequenceType(kind)
        period = period_key(day or date.today())

        counter = await self._lock_counter(db, kind, period)
        taken = await self._taken_sequences(db, kind, period)

        value = counter.last_value + 1
        while value in taken:
            value += 1

        counter.last_value = value
        await db.flush()

        number = format_document_number(period, value)
        logger.debug("Assegnato numero %s (%s)", number, kind.value)
        return number

    async def peek_next_number(
        self,
        db: AsyncSession,
        kind: Union[SequenceType, str],
        day: Optional[date] = None,
    ) -> str:
        """
        Anteprima del prossimo numero, senza consumarlo.

        Usata per precompilare i form: il numero definitivo è
        assegnato solo al salvataggio.
        """
        kind = SequenceType(kind)
        period = period_key(day or date.today())

        result = await db.execute(
            select(DocumentSequence.last_value).where(
                DocumentSequence.sequence_type == kind.value,
                DocumentSequence.period == period,
            )
        )
        last_value = result.scalar_one_or_none() or 0
        taken = await self._taken_sequences(db, kind, period)

        value = last_value + 1
        while value in taken:
            value += 1
        return format_document_number(period, value)

    async def _lock_counter(
        self,
        db: AsyncSession,
        kind: SequenceType,
        period: str,
    ) -> DocumentSequence:
        """Blocca la riga contatore del periodo, creandola se manca."""
        stmt = (
            select(DocumentSequence)
            .where(
                DocumentSequence.sequence_type == kind.value,
                DocumentSequence.period == period,
            )
            .with_for_update()
        )
        result = await db.execute(stmt)
        counter = result.scalar_one_or_none()
        if counter is not None:
            return counter

        try:
            async with db.begin_nested():
                counter = DocumentSequence(sequence_type=kind.value, period=period, last_value=0)
                db.add(counter)
                await db.flush()
        except IntegrityError:
            # Un'altra transazione ha creato il contatore nel frattempo
            logger.info("Contatore %s/%s creato da una richiesta concorrente", kind.value, period)
            result = await db.execute(stmt)
            counter = result.scalar_one()
        return counter

    async def _taken_sequences(
        self,
        db: AsyncSession,
        kind: SequenceType,
        period: str,
    ) -> set[int]:
        column = _NUMBER_COLUMNS[kind]
        result = await db.execute(select(column).where(column.like(f"{period}-%")))
        taken = set()
        for number in result.scalars().all():
            sequence = parse_sequence(number, period)
            if sequence is not None:
                taken.add(sequence)
        return taken


numbering_service = NumberingService()


def get_numbering_service() -> NumberingService:
    """Factory per ottenere il servizio di numerazione."""
    return numbering_service


__all__ = [
    "period_key",
    "format_document_number",
    "parse_sequence",
    "NumberingService",
    "numbering_service",
    "get_numbering_service",
]
