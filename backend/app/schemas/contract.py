"""
Schemas Pydantic per l'entità Contract
Progetto: ERP Manager (Gestionale ERP)

Il campo `settlement` delle risposte è calcolato a ogni lettura e non
esiste sul modello ORM: viene impostato dal servizio.
"""

import datetime
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from app.models.contract import ContractStatus, ContractType
from app.schemas.common import ClientRef, InvoiceRef, PaymentRef, ProjectRef, total_pages
from app.schemas.settlement import ContractSettlement


class ContractBase(BaseModel):
    """
    Schema base del contratto.

    Configurazione:
    - from_attributes=True: supporta conversione ORM → Pydantic
    - use_enum_values=True: l'ORM riceve stringhe invece di oggetti Enum
    """

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    contract_number: str = Field(..., min_length=1, max_length=50, description="Numero contratto")
    title: str = Field(..., min_length=1, max_length=200, description="Oggetto del contratto")
    contract_type: ContractType = Field(default=ContractType.PURCHASE, description="SALES o PURCHASE")
    status: ContractStatus = Field(default=ContractStatus.SIGNED, description="UNSIGNED o SIGNED")
    amount: Decimal = Field(
        ...,
        ge=0,
        max_digits=14,
        decimal_places=2,
        description="Importo contrattuale",
    )
    start_date: datetime.date = Field(..., description="Data di inizio")
    end_date: datetime.date = Field(..., description="Data di fine")
    description: Optional[str] = Field(None, description="Descrizione")
    client_id: uuid.UUID = Field(..., description="Partner controparte")
    project_id: Optional[uuid.UUID] = Field(None, description="Progetto di appartenenza")

    @field_validator("contract_number", "title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Campo obbligatorio")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "ContractBase":
        if self.end_date < self.start_date:
            raise ValueError("La data di fine non può precedere la data di inizio")
        return self


class ContractCreate(ContractBase):
    """Schema per la creazione di un contratto."""


class ContractUpdate(ContractBase):
    """Schema per l'aggiornamento (sostituzione completa) di un contratto."""


class ContractRead(ContractBase):
    """
    Contratto con partner, progetto e avanzamento.

    `settlement` è None quando i dati per il calcolo non sono
    disponibili (l'interfaccia mostra "-").
    """

    id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime
    client: Optional[ClientRef] = None
    project: Optional[ProjectRef] = None
    settlement: Optional[ContractSettlement] = None


class ContractDetail(ContractRead):
    """Contratto con fatture e pagamenti collegati."""

    invoices: list[InvoiceRef] = Field(default_factory=list)
    payments: list[PaymentRef] = Field(default_factory=list)


class ContractList(BaseModel):
    """Lista paginata di contratti."""

    items: list[ContractRead] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)

    @computed_field
    def total_pages(self) -> int:
        return total_pages(self.total, self.per_page)


__all__ = [
    "ContractBase",
    "ContractCreate",
    "ContractUpdate",
    "ContractRead",
    "ContractDetail",
    "ContractList",
]
