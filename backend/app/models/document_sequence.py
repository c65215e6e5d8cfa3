"""
Modello SQLAlchemy per i contatori di numerazione documenti
Progetto: ERP Manager (Gestionale ERP)

Ogni riga è il contatore di un tipo di documento per un mese (YYYYMM).
La riga viene bloccata con SELECT ... FOR UPDATE durante l'assegnazione
del numero, così due richieste concorrenti non ottengono lo stesso valore.
"""

from __future__ import annotations
from enum import Enum

from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin


class SequenceType(str, Enum):
    """Spazi di numerazione indipendenti."""
    INVOICE = "invoice"
    PAYMENT = "payment"


class DocumentSequence(Base, UUIDMixin, TimestampMixin):
    """Contatore mensile per tipo di documento."""

    __tablename__ = "document_sequences"

    sequence_type: Mapped[str] = mapped_column(String(20), nullable=False)

    period: Mapped[str] = mapped_column(
        String(6),
        nullable=False,
        doc="Periodo nel formato YYYYMM",
    )

    last_value: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Ultimo progressivo assegnato nel periodo",
    )

    __table_args__ = (
        UniqueConstraint("sequence_type", "period", name="uq_document_sequences_type_period"),
        CheckConstraint("sequence_type IN ('invoice', 'payment')", name="ck_document_sequences_type"),
        CheckConstraint("last_value >= 0", name="ck_document_sequences_last_value"),
    )

    def __repr__(self) -> str:
        return f"<DocumentSequence(type={self.sequence_type}, period={self.period}, last={self.last_value})>"
