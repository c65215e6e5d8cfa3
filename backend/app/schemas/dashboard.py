"""
Schemas Pydantic per la dashboard
Progetto: ERP Manager (Gestionale ERP)

Ogni sezione è presente solo se l'utente ha almeno uno dei permessi
che la riguardano; i valori di un tipo non visibile restano None.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ClientStats(BaseModel):
    customers: Optional[int] = None
    suppliers: Optional[int] = None


class ContractStats(BaseModel):
    sales_count: Optional[int] = None
    sales_amount: Optional[Decimal] = None
    purchase_count: Optional[int] = None
    purchase_amount: Optional[Decimal] = None


class InvoiceStats(BaseModel):
    issued_count: Optional[int] = None
    issued_amount: Optional[Decimal] = None
    received_count: Optional[int] = None
    received_amount: Optional[Decimal] = None


class PaymentStats(BaseModel):
    receipt_count: Optional[int] = None
    receipt_amount: Optional[Decimal] = None
    expense_count: Optional[int] = None
    expense_amount: Optional[Decimal] = None


class ProjectStats(BaseModel):
    total: int = 0
    in_progress: int = 0


class DashboardStats(BaseModel):
    """Contatori della dashboard per l'utente corrente."""

    clients: Optional[ClientStats] = None
    contracts: Optional[ContractStats] = None
    invoices: Optional[InvoiceStats] = None
    payments: Optional[PaymentStats] = None
    projects: Optional[ProjectStats] = None
    users: Optional[int] = None


__all__ = [
    "ClientStats",
    "ContractStats",
    "InvoiceStats",
    "PaymentStats",
    "ProjectStats",
    "DashboardStats",
]
