"""
Modello SQLAlchemy per l'entità Contract
Progetto: ERP Manager (Gestionale ERP)

Contratti di vendita (verso clienti) e di acquisto (verso fornitori).
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
    from app.models.invoice import Invoice
    from app.models.payment import Payment
    from app.models.project import Project


class ContractType(str, Enum):
    """Direzione del contratto."""
    SALES = "SALES"
    PURCHASE = "PURCHASE"


class ContractStatus(str, Enum):
    """Stato di firma del contratto."""
    UNSIGNED = "UNSIGNED"
    SIGNED = "SIGNED"


class Contract(Base, UUIDMixin, TimestampMixin):
    """
    Modello per i contratti.

    L'avanzamento di fatturazione e di incasso NON è memorizzato:
    viene ricalcolato a ogni lettura da `app.services.settlement`
    a partire dalle fatture e dai pagamenti collegati.

    Attributes:
        contract_number: Numero contratto (chiave di business univoca)
        title: Oggetto del contratto
        contract_type: 'SALES' o 'PURCHASE'
        status: 'UNSIGNED' o 'SIGNED'
        amount: Importo contrattuale complessivo
        start_date / end_date: Durata del contratto
        client_id: Partner controparte
        project_id: Progetto di appartenenza (opzionale)
    """

    __tablename__ = "contracts"

    contract_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        doc="Numero contratto univoco",
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    contract_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=ContractType.PURCHASE.value,
    )

    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=ContractStatus.SIGNED.value,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        doc="Importo contrattuale",
    )

    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ------------------------------------------------------------
    # Foreign Keys
    # ------------------------------------------------------------
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    project_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    client: Mapped["Client"] = relationship(
        "Client",
        back_populates="contracts",
        lazy="selectin",
    )

    project: Mapped[Optional["Project"]] = relationship(
        "Project",
        back_populates="contracts",
        lazy="selectin",
    )

    invoices: Mapped[List["Invoice"]] = relationship(
        "Invoice",
        back_populates="contract",
        lazy="selectin",
        doc="Fatture collegate al contratto",
    )

    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="contract",
        lazy="selectin",
        doc="Incassi/pagamenti collegati al contratto",
    )

    __table_args__ = (
        Index("ix_contracts_type_status", "contract_type", "status"),
        Index("ix_contracts_start_date", "start_date"),
        CheckConstraint("contract_type IN ('SALES', 'PURCHASE')", name="ck_contracts_type"),
        CheckConstraint("status IN ('UNSIGNED', 'SIGNED')", name="ck_contracts_status"),
    )

    def __repr__(self) -> str:
        return f"<Contract(number={self.contract_number}, type={self.contract_type}, amount={self.amount})>"
