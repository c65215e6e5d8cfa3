"""
Calcolo dell'avanzamento di contratti e progetti
Progetto: ERP Manager (Gestionale ERP)

Funzioni pure: lavorano su record già caricati, non accedono al
database, non modificano gli input e non salvano nulla. I valori
sono ricalcolati a ogni lettura.

Tutta l'aritmetica è in Decimal. Il residuo conserva il segno: un
contratto fatturato oltre l'importo pattuito ha residuo negativo.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from app.models.contract import ContractType
from app.models.invoice import InvoiceStatus
from app.models.payment import PaymentStatus
from app.schemas.settlement import ContractSettlement, ProjectMargin, SettlementSummary

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def _value(v: Any) -> Any:
    return getattr(v, "value", v)


def to_money(value: Any) -> Decimal:
    """
    Converte un importo in Decimal.

    Raises:
        TypeError: importo mancante
        decimal.InvalidOperation: importo non numerico
    """
    if value is None:
        raise TypeError("Importo mancante")
    if isinstance(value, Decimal):
        return value
    # Passando da str() il float 0.1 resta 0.1 e non 0.1000000000000000055...
    return Decimal(str(value))


def _summarize(
    contract_amount: Any,
    amounts: list[Decimal],
) -> SettlementSummary:
    total = to_money(contract_amount)
    settled = sum(amounts, ZERO)
    remaining = total - settled
    return SettlementSummary(
        contract_amount=total,
        settled_amount=settled,
        remaining=remaining,
        is_completed=remaining <= ZERO,
        record_count=len(amounts),
    )


def summarize_invoices(
    contract_amount: Any,
    invoices: Iterable[Any],
    include_drafts: bool = False,
) -> SettlementSummary:
    """
    Avanzamento di fatturazione.

    Somma `total_amount` delle fatture emesse; con `include_drafts`
    conta anche quelle non ancora emesse.
    """
    amounts = [
        to_money(inv.total_amount)
        for inv in invoices
        if include_drafts or _value(inv.status) == InvoiceStatus.ISSUED.value
    ]
    return _summarize(contract_amount, amounts)


def summarize_payments(
    contract_amount: Any,
    payments: Iterable[Any],
    include_drafts: bool = False,
) -> SettlementSummary:
    """
    Avanzamento di incasso/pagamento.

    Somma `amount` dei movimenti pagati; con `include_drafts`
    conta anche quelli non ancora pagati.
    """
    amounts = [
        to_money(p.amount)
        for p in payments
        if include_drafts or _value(p.status) == PaymentStatus.PAID.value
    ]
    return _summarize(contract_amount, amounts)


def settle_contract(contract: Any, include_drafts: bool = False) -> ContractSettlement:
    """Avanzamento di un contratto su entrambi i versanti."""
    invoiced = summarize_invoices(contract.amount, contract.invoices or (), include_drafts)
    paid = summarize_payments(contract.amount, contract.payments or (), include_drafts)
    return ContractSettlement(
        invoiced_amount=invoiced.settled_amount,
        remaining_invoice=invoiced.remaining,
        invoice_completed=invoiced.is_completed,
        invoice_count=invoiced.record_count,
        paid_amount=paid.settled_amount,
        remaining_payment=paid.remaining,
        payment_completed=paid.is_completed,
        payment_count=paid.record_count,
        include_drafts=include_drafts,
    )


def project_margin(contracts: Iterable[Any]) -> ProjectMargin:
    """
    Margine lordo di un progetto.

    profit_rate = gross_profit / sales_amount * 100, arrotondato a due
    decimali; vale 0 se non ci sono vendite.
    """
    sales_count = purchase_count = 0
    sales_amount = purchase_amount = ZERO

    for contract in contracts:
        contract_type = _value(contract.contract_type)
        if contract_type == ContractType.SALES.value:
            sales_count += 1
            sales_amount += to_money(contract.amount)
        elif contract_type == ContractType.PURCHASE.value:
            purchase_count += 1
            purchase_amount += to_money(contract.amount)

    gross_profit = sales_amount - purchase_amount
    if sales_amount > ZERO:
        profit_rate = (gross_profit / sales_amount * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
    else:
        profit_rate = ZERO

    return ProjectMargin(
        sales_count=sales_count,
        purchase_count=purchase_count,
        sales_amount=sales_amount,
        purchase_amount=purchase_amount,
        gross_profit=gross_profit,
        profit_rate=profit_rate,
    )


__all__ = [
    "to_money",
    "summarize_invoices",
    "summarize_payments",
    "settle_contract",
    "project_margin",
]
