"""
Schemas Pydantic per la Fatturazione
Progetto: ERP Manager (Gestionale ERP)

Contiene:
- Schemas per Invoice (creazione, aggiornamento, lettura, lista)

Gli importi seguono una sola convenzione: `amount` è l'imponibile,
`total_amount = amount + tax_amount` è calcolato dal servizio.
L'imposta può essere indicata direttamente (`tax_amount`) oppure
ricavata dall'aliquota (`tax_rate`).
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from app.core.exceptions import BusinessValidationError
from app.models.invoice import InvoiceStatus, InvoiceType
from app.schemas.common import ClientRef, ContractRef, PaymentRef, total_pages


class InvoiceBase(BaseModel):
    """Schema base per le fatture."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    invoice_type: InvoiceType = Field(default=InvoiceType.RECEIVED, description="ISSUED o RECEIVED")
    status: InvoiceStatus = Field(default=InvoiceStatus.ISSUED, description="UNISSUED o ISSUED")
    amount: Decimal = Field(
        ...,
        ge=0,
        max_digits=14,
        decimal_places=2,
        description="Imponibile",
    )
    invoice_date: date = Field(..., description="Data fattura")
    due_date: Optional[date] = Field(None, description="Data scadenza")
    description: Optional[str] = Field(None, description="Descrizione")
    notes: Optional[str] = Field(None, description="Note interne")
    client_id: uuid.UUID = Field(..., description="Partner intestatario")
    contract_id: Optional[uuid.UUID] = Field(None, description="Contratto collegato")

    @model_validator(mode="after")
    def validate_dates(self) -> "InvoiceBase":
        """Valida che due_date >= invoice_date."""
        if self.due_date is not None and self.due_date < self.invoice_date:
            raise BusinessValidationError(
                "La data di scadenza non può essere precedente alla data fattura"
            )
        return self


class _InvoiceInput(InvoiceBase):
    """Campi d'ingresso comuni a creazione e aggiornamento."""

    invoice_number: Optional[str] = Field(
        None,
        max_length=30,
        description="Numero fattura; se omesso viene assegnato automaticamente",
    )
    tax_amount: Optional[Decimal] = Field(
        None,
        ge=0,
        max_digits=14,
        decimal_places=2,
        description="Imposta; se omessa è calcolata da tax_rate",
    )
    tax_rate: Optional[Decimal] = Field(
        None,
        ge=Decimal("0"),
        le=Decimal("100"),
        description="Aliquota percentuale usata se tax_amount è omesso",
    )

    @field_validator("invoice_number")
    @classmethod
    def blank_number_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class InvoiceCreate(_InvoiceInput):
    """
    Schema per la creazione di una fattura.

    NON include total_amount: è calcolato dal servizio.
    """


class InvoiceUpdate(_InvoiceInput):
    """
    Schema per l'aggiornamento (sostituzione completa) di una fattura.

    Se `invoice_number` è omesso si mantiene il numero esistente.
    """


class InvoiceRead(InvoiceBase):
    """Fattura con partner e contratto collegati."""

    id: uuid.UUID
    invoice_number: str
    tax_amount: Decimal
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    client: Optional[ClientRef] = None
    contract: Optional[ContractRef] = None


class InvoiceDetail(InvoiceRead):
    """Fattura con i pagamenti che la saldano."""

    payments: list[PaymentRef] = Field(default_factory=list)


class InvoiceList(BaseModel):
    """Lista paginata di fatture."""

    items: list[InvoiceRead] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)

    @computed_field
    def total_pages(self) -> int:
        return total_pages(self.total, self.per_page)


__all__ = [
    "InvoiceBase",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceRead",
    "InvoiceDetail",
    "InvoiceList",
]
