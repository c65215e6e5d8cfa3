"""
Modello SQLAlchemy per l'entità Client
Progetto: ERP Manager (Gestionale ERP)

Anagrafica dei partner commerciali: clienti e fornitori.
"""


from __future__ import annotations
from enum import Enum
from typing import Optional, TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

# Import per type hinting relazioni (evita circular import)
if TYPE_CHECKING:
    from app.models.contract import Contract
    from app.models.invoice import Invoice
    from app.models.payment import Payment


class ClientType(str, Enum):
    """Tipo di partner."""
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"


class Client(Base, UUIDMixin, TimestampMixin):
    """
    Modello per l'anagrafica partner.

    Un partner è referenziato (senza esserne proprietario) da contratti,
    fatture e incassi/pagamenti.

    Attributes:
        id: UUID primary key, generato automaticamente
        name: Ragione sociale o nome (obbligatorio)
        contact_name: Referente
        phone: Numero di telefono
        email: Indirizzo email
        address: Indirizzo completo
        client_type: 'CUSTOMER' (cliente) o 'SUPPLIER' (fornitore)
        notes: Note aggiuntive
    """

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Ragione sociale o nome",
    )

    contact_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        doc="Referente",
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        doc="Numero di telefono",
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Indirizzo email",
    )

    address: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Indirizzo completo",
    )

    client_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=ClientType.CUSTOMER.value,
        doc="Tipo partner: 'CUSTOMER' o 'SUPPLIER'",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note aggiuntive",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    contracts: Mapped[List["Contract"]] = relationship(
        "Contract",
        back_populates="client",
        lazy="noload",
        doc="Contratti stipulati con il partner",
    )

    invoices: Mapped[List["Invoice"]] = relationship(
        "Invoice",
        back_populates="client",
        lazy="noload",
        doc="Fatture intestate al partner",
    )

    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="client",
        lazy="noload",
        doc="Incassi e pagamenti del partner",
    )

    __table_args__ = (
        Index("ix_clients_name", "name"),
        Index("ix_clients_client_type", "client_type"),
        CheckConstraint(
            "client_type IN ('CUSTOMER', 'SUPPLIER')",
            name="ck_clients_client_type",
        ),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, type={self.client_type}, name={self.name})>"
