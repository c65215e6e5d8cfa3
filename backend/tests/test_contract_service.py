"""
Unit tests per ContractService.get_all: filtri dei form di fattura e
pagamento, inclusione dei documenti non definitivi e paginazione.
"""

from decimal import Decimal

import pytest

from app.core.exceptions import AuthorizationError
from app.services.contract_service import ContractService
from conftest import MockContract, MockInvoice, MockPayment, make_claims, scalar_result, scalars_result


def _fully_invoiced_with_drafts():
    """60.000 fatturati + 40.000 pre-registrati su 100.000."""
    return MockContract(
        contract_number="C-2026-010",
        invoices=[
            MockInvoice(status="ISSUED", total_amount=Decimal("60000.00")),
            MockInvoice(status="UNISSUED", total_amount=Decimal("40000.00"), invoice_number="202602-02"),
        ],
    )


def _open(number):
    return MockContract(contract_number=number)


def _params(mock_db, index=0):
    return mock_db.execute.await_args_list[index][0][0].compile().params.values()


class TestFormFilters:

    @pytest.mark.asyncio
    async def test_invoice_permission_sees_sales_contracts(self, mock_db):
        mock_db.execute.return_value = scalars_result([])

        await ContractService().get_all(mock_db, make_claims(["invoices.issued"]), for_invoices=True)

        assert ["SALES"] in _params(mock_db)

    @pytest.mark.asyncio
    async def test_payment_permission_sees_purchase_contracts(self, mock_db):
        mock_db.execute.return_value = scalars_result([])

        await ContractService().get_all(mock_db, make_claims(["payments.expenses"]), for_payments=True)

        assert ["PURCHASE"] in _params(mock_db)

    @pytest.mark.asyncio
    async def test_payment_permission_does_not_open_other_direction(self, mock_db):
        with pytest.raises(AuthorizationError):
            await ContractService().get_all(
                mock_db, make_claims(["payments.expenses"]), contract_type="SALES", for_payments=True,
            )
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_drafts_count_by_default_in_form_filter(self, mock_db, sales_claims):
        pending = _open("C-2026-011")
        mock_db.execute.return_value = scalars_result([_fully_invoiced_with_drafts(), pending])

        items, total = await ContractService().get_all(mock_db, sales_claims, for_invoices=True)

        assert [c.contract_number for c in items] == ["C-2026-011"]
        assert total == 1
        assert items[0].settlement.include_drafts is True
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_drafts_can_be_excluded_in_form_filter(self, mock_db, sales_claims):
        mock_db.execute.return_value = scalars_result([_fully_invoiced_with_drafts()])

        items, total = await ContractService().get_all(
            mock_db, sales_claims, for_invoices=True, include_drafts=False,
        )

        assert total == 1
        assert items[0].settlement.invoiced_amount == Decimal("60000.00")
        assert items[0].settlement.include_drafts is False

    @pytest.mark.asyncio
    async def test_payment_filter_uses_payment_side(self, mock_db, sales_claims):
        paid = MockContract(
            contract_number="C-2026-020",
            payments=[MockPayment(status="PAID", amount=Decimal("100000.00"))],
        )
        mock_db.execute.return_value = scalars_result([paid, _fully_invoiced_with_drafts()])

        items, _ = await ContractService().get_all(mock_db, sales_claims, for_payments=True)

        assert [c.contract_number for c in items] == ["C-2026-010"]

    @pytest.mark.asyncio
    async def test_paging_after_filter(self, mock_db, sales_claims):
        contracts = [_open("C-1"), _fully_invoiced_with_drafts(), _open("C-2"), _open("C-3")]
        mock_db.execute.return_value = scalars_result(contracts)

        items, total = await ContractService().get_all(
            mock_db, sales_claims, page=2, per_page=2, for_invoices=True,
        )

        assert total == 3
        assert [c.contract_number for c in items] == ["C-3"]


class TestPlainList:

    @pytest.mark.asyncio
    async def test_finalized_only_by_default(self, mock_db, sales_claims):
        mock_db.execute.side_effect = [scalars_result([_fully_invoiced_with_drafts()]), scalar_result(12)]

        items, total = await ContractService().get_all(mock_db, sales_claims)

        assert total == 12
        assert mock_db.execute.await_count == 2
        settlement = items[0].settlement
        assert settlement.include_drafts is False
        assert settlement.invoiced_amount == Decimal("60000.00")
        assert settlement.invoice_completed is False

    @pytest.mark.asyncio
    async def test_include_drafts_on_plain_list(self, mock_db, sales_claims):
        mock_db.execute.side_effect = [scalars_result([_fully_invoiced_with_drafts()]), scalar_result(1)]

        items, _ = await ContractService().get_all(mock_db, sales_claims, include_drafts=True)

        assert items[0].settlement.invoice_completed is True

    @pytest.mark.asyncio
    async def test_type_filter_requires_permission(self, mock_db, sales_claims):
        with pytest.raises(AuthorizationError):
            await ContractService().get_all(mock_db, sales_claims, contract_type="PURCHASE")
