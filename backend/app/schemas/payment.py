"""
Schemas Pydantic per incassi e pagamenti
Progetto: ERP Manager (Gestionale ERP)
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.models.payment import PaymentMethod, PaymentStatus, PaymentType
from app.schemas.common import ClientRef, ContractRef, InvoiceRef, total_pages


class PaymentBase(BaseModel):
    """Schema base per incassi/pagamenti."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    payment_type: PaymentType = Field(..., description="RECEIPT (incasso) o EXPENSE (pagamento)")
    status: PaymentStatus = Field(default=PaymentStatus.PAID, description="UNPAID o PAID")
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=14,
        decimal_places=2,
        description="Importo",
    )
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.BANK_TRANSFER,
        description="Metodo di pagamento",
    )
    payment_date: date = Field(..., description="Data del movimento")
    bank_account: Optional[str] = Field(None, max_length=100, description="Conto bancario")
    reference_number: Optional[str] = Field(
        None,
        max_length=100,
        description="Riferimento (numero assegno, CRO bonifico, etc.)",
    )
    notes: Optional[str] = Field(None, description="Note aggiuntive")
    client_id: uuid.UUID = Field(..., description="Partner")
    contract_id: Optional[uuid.UUID] = Field(None, description="Contratto collegato")
    invoice_id: Optional[uuid.UUID] = Field(None, description="Fattura saldata")


class _PaymentInput(PaymentBase):
    payment_number: Optional[str] = Field(
        None,
        max_length=30,
        description="Numero movimento; se omesso viene assegnato automaticamente",
    )

    @field_validator("payment_number")
    @classmethod
    def blank_number_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class PaymentCreate(_PaymentInput):
    """Schema per la registrazione di un incasso/pagamento."""


class PaymentUpdate(_PaymentInput):
    """
    Schema per l'aggiornamento (sostituzione completa).

    Se `payment_number` è omesso si mantiene il numero esistente.
    """


class PaymentRead(PaymentBase):
    """Movimento con partner, contratto e fattura collegati."""

    id: uuid.UUID
    payment_number: str
    created_at: datetime
    updated_at: datetime
    client: Optional[ClientRef] = None
    contract: Optional[ContractRef] = None
    invoice: Optional[InvoiceRef] = None


class PaymentList(BaseModel):
    """Lista paginata di movimenti."""

    items: list[PaymentRead] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)

    @computed_field
    def total_pages(self) -> int:
        return total_pages(self.total, self.per_page)


__all__ = [
    "PaymentBase",
    "PaymentCreate",
    "PaymentUpdate",
    "PaymentRead",
    "PaymentList",
]
