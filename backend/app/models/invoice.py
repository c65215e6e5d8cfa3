"""
Modello SQLAlchemy per l'entità Invoice
Progetto: ERP Manager (Gestionale ERP)

Fatture emesse (ai clienti) e ricevute (dai fornitori).
"""

from __future__ import annotations
import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional, TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.contract import Contract
    from app.models.payment import Payment


class InvoiceType(str, Enum):
    """Direzione della fattura."""
    ISSUED = "ISSUED"
    RECEIVED = "RECEIVED"


class InvoiceStatus(str, Enum):
    """
    Stato della fattura.

    UNISSUED = pre-registrata (bozza), ISSUED = emessa/definitiva.
    Solo le fatture ISSUED concorrono al fatturato del contratto.
    """
    UNISSUED = "UNISSUED"
    ISSUED = "ISSUED"


class Invoice(Base, UUIDMixin, TimestampMixin):
    """
    Modello per le fatture.

    Gli importi sono al netto d'imposta: total_amount = amount + tax_amount,
    sempre calcolato dal servizio e mai accettato dal client.
    """

    __tablename__ = "invoices"

    invoice_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        doc="Numero fattura nel formato YYYYMM-NN",
    )

    invoice_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=InvoiceType.RECEIVED.value,
    )

    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=InvoiceStatus.ISSUED.value,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        doc="Imponibile",
    )

    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Imposta",
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        doc="Totale documento (imponibile + imposta)",
    )

    invoice_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    contract_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("contracts.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    client: Mapped["Client"] = relationship(
        "Client",
        back_populates="invoices",
        lazy="selectin",
    )

    contract: Mapped[Optional["Contract"]] = relationship(
        "Contract",
        back_populates="invoices",
        lazy="selectin",
    )

    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="invoice",
        lazy="noload",
        doc="Pagamenti che saldano la fattura",
    )

    __table_args__ = (
        Index("ix_invoices_type_status", "invoice_type", "status"),
        Index("ix_invoices_invoice_date", "invoice_date"),
        CheckConstraint("invoice_type IN ('ISSUED', 'RECEIVED')", name="ck_invoices_type"),
        CheckConstraint("status IN ('UNISSUED', 'ISSUED')", name="ck_invoices_status"),
        CheckConstraint("total_amount = amount + tax_amount", name="ck_invoices_total"),
    )

    @property
    def is_finalized(self) -> bool:
        return self.status == InvoiceStatus.ISSUED.value

    def __repr__(self) -> str:
        return f"<Invoice(number={self.invoice_number}, type={self.invoice_type}, total={self.total_amount})>"
