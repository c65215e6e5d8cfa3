"""
Schemas Pydantic di riferimento
Progetto: ERP Manager (Gestionale ERP)

Versioni ridotte delle entità, usate per incorporare un record
collegato dentro la risposta di un altro (es. il partner di una fattura)
senza creare import circolari tra i moduli degli schemi.
"""

import datetime
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClientRef(BaseModel):
    """Riferimento a un partner."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    client_type: str


class ProjectRef(BaseModel):
    """Riferimento a un progetto."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    status: str


class ContractRef(BaseModel):
    """Riferimento a un contratto."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    contract_number: str
    title: str
    contract_type: str
    status: str
    amount: Decimal


class InvoiceRef(BaseModel):
    """Riferimento a una fattura."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    invoice_number: str
    invoice_type: str
    status: str
    total_amount: Decimal
    invoice_date: datetime.date


class PaymentRef(BaseModel):
    """Riferimento a un incasso/pagamento."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    payment_number: str
    payment_type: str
    status: str
    amount: Decimal
    payment_date: datetime.date


class NextNumberResponse(BaseModel):
    """Anteprima del prossimo numero documento disponibile."""

    number: str = Field(..., description="Numero nel formato YYYYMM-NN")


def total_pages(total: int, per_page: int) -> int:
    """ceil(total / per_page), 0 se per_page non è positivo."""
    if per_page > 0:
        return (total + per_page - 1) // per_page
    return 0


__all__ = [
    "ClientRef",
    "ProjectRef",
    "ContractRef",
    "InvoiceRef",
    "PaymentRef",
    "NextNumberResponse",
    "total_pages",
]
