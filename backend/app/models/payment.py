"""
Modello SQLAlchemy per l'entità Payment
Progetto: ERP Manager (Gestionale ERP)

Incassi (RECEIPT) e pagamenti (EXPENSE).
"""

from __future__ import annotations
import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional, TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.contract import Contract
    from app.models.invoice import Invoice


class PaymentType(str, Enum):
    RECEIPT = "RECEIPT"
    EXPENSE = "EXPENSE"


class PaymentStatus(str, Enum):
    """UNPAID = pre-registrato, PAID = effettivamente pagato."""
    UNPAID = "UNPAID"
    PAID = "PAID"


class PaymentMethod(str, Enum):
    """Metodi di pagamento accettati."""
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHECK = "CHECK"
    ALIPAY = "ALIPAY"
    WECHAT_PAY = "WECHAT_PAY"
    OTHER = "OTHER"


class Payment(Base, UUIDMixin, TimestampMixin):
    """
    Modello per incassi e pagamenti.

    Solo i movimenti PAID concorrono al saldo del contratto.
    """

    __tablename__ = "payments"

    payment_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        doc="Numero movimento nel formato YYYYMM-NN",
    )

    payment_type: Mapped[str] = mapped_column(String(10), nullable=False)

    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=PaymentStatus.PAID.value,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    payment_method: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentMethod.BANK_TRANSFER.value,
    )

    payment_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    bank_account: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    reference_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
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

    invoice_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    client: Mapped["Client"] = relationship("Client", back_populates="payments", lazy="selectin")
    contract: Mapped[Optional["Contract"]] = relationship("Contract", back_populates="payments", lazy="selectin")
    invoice: Mapped[Optional["Invoice"]] = relationship("Invoice", back_populates="payments", lazy="selectin")

    __table_args__ = (
        Index("ix_payments_type_date", "payment_type", "payment_date"),
        CheckConstraint("payment_type IN ('RECEIPT', 'EXPENSE')", name="ck_payments_type"),
        CheckConstraint("status IN ('UNPAID', 'PAID')", name="ck_payments_status"),
        CheckConstraint(
            "payment_method IN ('CASH', 'BANK_TRANSFER', 'CHECK', 'ALIPAY', 'WECHAT_PAY', 'OTHER')",
            name="ck_payments_method",
        ),
    )

    @property
    def is_finalized(self) -> bool:
        return self.status == PaymentStatus.PAID.value

    def __repr__(self) -> str:
        return f"<Payment(number={self.payment_number}, type={self.payment_type}, amount={self.amount})>"
