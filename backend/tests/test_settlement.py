"""
Unit tests per il calcolo dell'avanzamento di contratti e progetti.
"""

from decimal import Decimal, InvalidOperation

import pytest

from app.services.contract_service import build_contract_read, compute_settlement, filter_open_contracts
from app.services.settlement import (
    project_margin,
    settle_contract,
    summarize_invoices,
    summarize_payments,
    to_money,
)
from conftest import MockContract, MockInvoice, MockPayment


# ============================================================
# Tests for to_money
# ============================================================


class TestToMoney:

    def test_decimal_is_returned_as_is(self):
        value = Decimal("12.34")
        assert to_money(value) is value

    def test_float_goes_through_str(self):
        assert to_money(0.1) == Decimal("0.1")

    def test_none_is_rejected(self):
        with pytest.raises(TypeError):
            to_money(None)

    def test_non_numeric_is_rejected(self):
        with pytest.raises(InvalidOperation):
            to_money("abc")


# ============================================================
# Tests for invoice / payment summaries
# ============================================================


class TestSummaries:

    def test_only_issued_invoices_count_by_default(self, sales_contract):
        summary = summarize_invoices(sales_contract.amount, sales_contract.invoices)

        assert summary.settled_amount == Decimal("30000.00")
        assert summary.remaining == Decimal("70000.00")
        assert summary.is_completed is False
        assert summary.record_count == 1

    def test_drafts_are_included_on_request(self, sales_contract):
        summary = summarize_invoices(sales_contract.amount, sales_contract.invoices, include_drafts=True)

        assert summary.settled_amount == Decimal("50000.00")
        assert summary.remaining == Decimal("50000.00")
        assert summary.record_count == 2

    def test_only_paid_payments_count_by_default(self, sales_contract):
        summary = summarize_payments(sales_contract.amount, sales_contract.payments)

        assert summary.settled_amount == Decimal("25000.00")
        assert summary.remaining == Decimal("75000.00")

    def test_no_records(self):
        summary = summarize_payments(Decimal("500.00"), [])

        assert summary.settled_amount == Decimal("0")
        assert summary.remaining == Decimal("500.00")
        assert summary.is_completed is False
        assert summary.record_count == 0

    def test_exact_amount_completes(self):
        invoices = [
            MockInvoice(total_amount=Decimal("600.00")),
            MockInvoice(total_amount=Decimal("400.00")),
        ]
        summary = summarize_invoices(Decimal("1000.00"), invoices)

        assert summary.remaining == Decimal("0")
        assert summary.is_completed is True

    def test_over_invoicing_keeps_negative_remaining(self):
        invoices = [MockInvoice(total_amount=Decimal("1200.00"))]
        summary = summarize_invoices(Decimal("1000.00"), invoices)

        assert summary.remaining == Decimal("-200.00")
        assert summary.is_completed is True

    def test_zero_amount_contract_is_completed(self):
        summary = summarize_invoices(Decimal("0"), [])
        assert summary.is_completed is True

    def test_settled_plus_remaining_equals_contract_amount(self, sales_contract):
        for include_drafts in (False, True):
            inv = summarize_invoices(sales_contract.amount, sales_contract.invoices, include_drafts)
            pay = summarize_payments(sales_contract.amount, sales_contract.payments, include_drafts)
            assert inv.settled_amount + inv.remaining == sales_contract.amount
            assert pay.settled_amount + pay.remaining == sales_contract.amount

    def test_inputs_are_not_modified(self, sales_contract):
        before = [(i.status, i.total_amount) for i in sales_contract.invoices]
        summarize_invoices(sales_contract.amount, sales_contract.invoices, include_drafts=True)
        assert [(i.status, i.total_amount) for i in sales_contract.invoices] == before


# ============================================================
# Tests for settle_contract
# ============================================================


class TestSettleContract:

    def test_both_sides(self, sales_contract):
        result = settle_contract(sales_contract)

        assert result.invoiced_amount == Decimal("30000.00")
        assert result.remaining_invoice == Decimal("70000.00")
        assert result.invoice_count == 1
        assert result.paid_amount == Decimal("25000.00")
        assert result.remaining_payment == Decimal("75000.00")
        assert result.payment_count == 1
        assert result.include_drafts is False

    def test_with_drafts(self, sales_contract):
        result = settle_contract(sales_contract, include_drafts=True)

        assert result.invoiced_amount == Decimal("50000.00")
        assert result.paid_amount == Decimal("35000.00")
        assert result.include_drafts is True

    def test_recomputed_on_every_call(self, sales_contract):
        first = settle_contract(sales_contract)
        sales_contract.invoices.append(MockInvoice(total_amount=Decimal("70000.00")))
        second = settle_contract(sales_contract)

        assert first.invoice_completed is False
        assert second.invoice_completed is True
        assert second.remaining_invoice == Decimal("0")

    def test_invalid_amount_degrades_to_none(self):
        contract = MockContract(amount=None)
        assert compute_settlement(contract) is None


# ============================================================
# Tests for contract list helpers
# ============================================================


class TestContractRead:

    def test_settlement_is_attached(self, sales_contract):
        data = build_contract_read(sales_contract)

        assert data.contract_number == sales_contract.contract_number
        assert data.settlement is not None
        assert data.settlement.invoiced_amount == Decimal("30000.00")

    def test_detail_includes_documents(self, sales_contract):
        data = build_contract_read(sales_contract, detail=True)

        assert len(data.invoices) == 2
        assert len(data.payments) == 2

    def test_open_contracts_filter(self):
        done = MockContract(
            amount=Decimal("1000.00"),
            invoices=[MockInvoice(total_amount=Decimal("1000.00"))],
        )
        pending = MockContract(
            amount=Decimal("1000.00"),
            contract_number="C-2026-002",
            invoices=[MockInvoice(total_amount=Decimal("400.00"))],
        )
        items = [build_contract_read(c) for c in (done, pending)]

        for_invoices = filter_open_contracts(items, for_invoices=True)
        for_payments = filter_open_contracts(items, for_payments=True)

        assert [c.contract_number for c in for_invoices] == ["C-2026-002"]
        assert len(for_payments) == 2

    def test_drafts_count_for_form_filter(self):
        contract = MockContract(
            amount=Decimal("1000.00"),
            invoices=[MockInvoice(status="UNISSUED", total_amount=Decimal("1000.00"))],
        )
        finalized_only = build_contract_read(contract)
        with_drafts = build_contract_read(contract, include_drafts=True)

        assert filter_open_contracts([finalized_only], for_invoices=True) == [finalized_only]
        assert filter_open_contracts([with_drafts], for_invoices=True) == []


# ============================================================
# Tests for project margin
# ============================================================


class TestProjectMargin:

    def test_margin(self):
        contracts = [
            MockContract(contract_type="SALES", amount=Decimal("100000.00")),
            MockContract(contract_type="SALES", amount=Decimal("50000.00")),
            MockContract(contract_type="PURCHASE", amount=Decimal("60000.00")),
        ]
        margin = project_margin(contracts)

        assert margin.sales_count == 2
        assert margin.purchase_count == 1
        assert margin.sales_amount == Decimal("150000.00")
        assert margin.purchase_amount == Decimal("60000.00")
        assert margin.gross_profit == Decimal("90000.00")
        assert margin.profit_rate == Decimal("60.00")

    def test_rate_is_rounded_half_up(self):
        contracts = [
            MockContract(contract_type="SALES", amount=Decimal("3")),
            MockContract(contract_type="PURCHASE", amount=Decimal("1")),
        ]
        assert project_margin(contracts).profit_rate == Decimal("66.67")

    def test_loss(self):
        contracts = [
            MockContract(contract_type="SALES", amount=Decimal("1000")),
            MockContract(contract_type="PURCHASE", amount=Decimal("1500")),
        ]
        margin = project_margin(contracts)

        assert margin.gross_profit == Decimal("-500")
        assert margin.profit_rate == Decimal("-50.00")

    def test_no_sales_gives_zero_rate(self):
        contracts = [MockContract(contract_type="PURCHASE", amount=Decimal("800"))]
        margin = project_margin(contracts)

        assert margin.gross_profit == Decimal("-800")
        assert margin.profit_rate == Decimal("0")

    def test_empty_project(self):
        margin = project_margin([])
        assert margin.sales_count == 0
        assert margin.gross_profit == Decimal("0")
