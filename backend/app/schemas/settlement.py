"""
Schemas Pydantic per i dati di avanzamento calcolati
Progetto: ERP Manager (Gestionale ERP)

Valori derivati, mai salvati su database: vengono ricalcolati a ogni
lettura da `app.services.settlement`.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class SettlementSummary(BaseModel):
    """
    Avanzamento di un contratto su un solo versante (fatture o pagamenti).

    `remaining` conserva il segno: è negativo se il contratto è stato
    fatturato/pagato oltre l'importo pattuito.
    """

    contract_amount: Decimal
    settled_amount: Decimal
    remaining: Decimal
    is_completed: bool
    record_count: int = Field(..., ge=0)


class ContractSettlement(BaseModel):
    """Avanzamento completo di un contratto."""

    invoiced_amount: Decimal = Field(..., description="Totale fatturato")
    remaining_invoice: Decimal = Field(..., description="Importo ancora da fatturare")
    invoice_completed: bool
    invoice_count: int = Field(..., ge=0)

    paid_amount: Decimal = Field(..., description="Totale incassato/pagato")
    remaining_payment: Decimal = Field(..., description="Importo ancora da incassare/pagare")
    payment_completed: bool
    payment_count: int = Field(..., ge=0)

    include_drafts: bool = Field(
        default=False,
        description="True se il calcolo include fatture non emesse e pagamenti non pagati",
    )


class ProjectMargin(BaseModel):
    """Margine lordo di un progetto."""

    sales_count: int = Field(..., ge=0)
    purchase_count: int = Field(..., ge=0)
    sales_amount: Decimal
    purchase_amount: Decimal
    gross_profit: Decimal
    profit_rate: Decimal = Field(..., description="Margine percentuale (2 decimali)")


__all__ = [
    "SettlementSummary",
    "ContractSettlement",
    "ProjectMargin",
]
