"""
Unit tests per InvoiceService e PaymentService.

Verificano il calcolo degli importi, l'assegnazione del numero e la
coerenza tra partner, contratto e fattura collegati.
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from app.core.exceptions import (
    AuthorizationError,
    BusinessValidationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
)
from app.models.invoice import Invoice
from app.models.payment import Payment
from app.schemas.invoice import InvoiceCreate
from app.schemas.payment import PaymentCreate
from app.services.invoice_service import InvoiceService, compute_amounts
from app.services.numbering_service import NumberingService
from app.services.payment_service import PaymentService
from conftest import MockInvoice, MockPayment, scalar_result


CLIENT_ID = uuid.uuid4()
OTHER_CLIENT_ID = uuid.uuid4()


def _numbering(number="202602-03"):
    numbering = MagicMock(spec=NumberingService)
    numbering.next_number = AsyncMock(return_value=number)
    numbering.peek_next_number = AsyncMock(return_value=number)
    return numbering


def _invoice_data(**overrides):
    data = {
        "invoice_type": "ISSUED",
        "amount": Decimal("1000.00"),
        "tax_rate": Decimal("22"),
        "invoice_date": date(2026, 2, 10),
        "client_id": CLIENT_ID,
    }
    data.update(overrides)
    return InvoiceCreate(**data)


def _payment_data(**overrides):
    data = {
        "payment_type": "RECEIPT",
        "amount": Decimal("500.00"),
        "payment_date": date(2026, 2, 12),
        "client_id": CLIENT_ID,
    }
    data.update(overrides)
    return PaymentCreate(**data)


# ============================================================
# Tests for compute_amounts
# ============================================================


class TestComputeAmounts:

    def test_tax_from_rate(self):
        assert compute_amounts(Decimal("1000"), tax_rate=Decimal("22")) == (
            Decimal("1000.00"), Decimal("220.00"), Decimal("1220.00"),
        )

    def test_explicit_tax_wins_over_rate(self):
        net, tax, total = compute_amounts(Decimal("1000"), tax_amount=Decimal("50"), tax_rate=Decimal("22"))
        assert tax == Decimal("50.00")
        assert total == Decimal("1050.00")

    def test_no_tax(self):
        assert compute_amounts(Decimal("99.90")) == (Decimal("99.90"), Decimal("0.00"), Decimal("99.90"))

    def test_rounding_half_up(self):
        net, tax, total = compute_amounts(Decimal("123.45"), tax_rate=Decimal("22"))
        assert tax == Decimal("27.16")
        assert total == net + tax

    def test_negative_tax_rejected(self):
        with pytest.raises(BusinessValidationError):
            compute_amounts(Decimal("100"), tax_amount=Decimal("-1"))


# ============================================================
# Tests for invoice schema validation
# ============================================================


class TestInvoiceSchema:

    def test_due_date_before_invoice_date(self):
        with pytest.raises(ValidationError):
            _invoice_data(due_date=date(2026, 2, 1))

    def test_blank_number_means_automatic(self):
        assert _invoice_data(invoice_number="  ").invoice_number is None

    def test_defaults(self):
        data = InvoiceCreate(amount=Decimal("10"), invoice_date=date(2026, 2, 10), client_id=CLIENT_ID)
        assert data.invoice_type == "RECEIVED"
        assert data.status == "ISSUED"


# ============================================================
# Tests for InvoiceService.create
# ============================================================


class TestCreateInvoice:

    @pytest.mark.asyncio
    async def test_number_is_assigned_automatically(self, mock_db, admin_claims):
        numbering = _numbering("202602-03")
        mock_db.get.return_value = SimpleNamespace(id=CLIENT_ID)
        mock_db.execute.return_value = scalar_result(MockInvoice())

        await InvoiceService(numbering=numbering).create(mock_db, admin_claims, _invoice_data())

        created = mock_db.add.call_args[0][0]
        assert isinstance(created, Invoice)
        assert created.invoice_number == "202602-03"
        assert created.amount == Decimal("1000.00")
        assert created.tax_amount == Decimal("220.00")
        assert created.total_amount == Decimal("1220.00")
        numbering.next_number.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_manual_number_must_be_free(self, mock_db, admin_claims):
        numbering = _numbering()
        mock_db.get.return_value = SimpleNamespace(id=CLIENT_ID)
        mock_db.execute.return_value = scalar_result(uuid.uuid4())

        with pytest.raises(DuplicateError):
            await InvoiceService(numbering=numbering).create(
                mock_db, admin_claims, _invoice_data(invoice_number="202602-01"),
            )
        numbering.next_number.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_client(self, mock_db, admin_claims):
        mock_db.get.return_value = None
        with pytest.raises(NotFoundError):
            await InvoiceService(numbering=_numbering()).create(mock_db, admin_claims, _invoice_data())

    @pytest.mark.asyncio
    async def test_contract_of_another_client(self, mock_db, admin_claims):
        contract = SimpleNamespace(client_id=OTHER_CLIENT_ID, contract_type="SALES")
        mock_db.get.side_effect = [SimpleNamespace(id=CLIENT_ID), contract]

        with pytest.raises(BusinessValidationError):
            await InvoiceService(numbering=_numbering()).create(
                mock_db, admin_claims, _invoice_data(contract_id=uuid.uuid4()),
            )

    @pytest.mark.asyncio
    async def test_issued_invoice_requires_sales_contract(self, mock_db, admin_claims):
        contract = SimpleNamespace(client_id=CLIENT_ID, contract_type="PURCHASE")
        mock_db.get.side_effect = [SimpleNamespace(id=CLIENT_ID), contract]

        with pytest.raises(BusinessValidationError):
            await InvoiceService(numbering=_numbering()).create(
                mock_db, admin_claims, _invoice_data(contract_id=uuid.uuid4()),
            )

    @pytest.mark.asyncio
    async def test_type_permission_is_checked(self, mock_db, sales_claims):
        with pytest.raises(AuthorizationError):
            await InvoiceService(numbering=_numbering()).create(
                mock_db, sales_claims, _invoice_data(invoice_type="RECEIVED"),
            )
        mock_db.get.assert_not_awaited()


# ============================================================
# Tests for InvoiceService.issue
# ============================================================


class TestIssueInvoice:

    @pytest.mark.asyncio
    async def test_issue_draft(self, mock_db, admin_claims):
        invoice = MockInvoice(status="UNISSUED", invoice_date=date.today() - timedelta(days=20))
        invoice.due_date = date.today() - timedelta(days=5)
        mock_db.execute.return_value = scalar_result(invoice)

        await InvoiceService(numbering=_numbering()).issue(mock_db, admin_claims, invoice.id)

        assert invoice.status == "ISSUED"
        assert invoice.invoice_date == date.today()
        assert invoice.due_date == date.today()

    @pytest.mark.asyncio
    async def test_already_issued(self, mock_db, admin_claims):
        invoice = MockInvoice(status="ISSUED")
        mock_db.execute.return_value = scalar_result(invoice)

        with pytest.raises(ConflictError):
            await InvoiceService(numbering=_numbering()).issue(mock_db, admin_claims, invoice.id)


# ============================================================
# Tests for PaymentService
# ============================================================


class TestCreatePayment:

    @pytest.mark.asyncio
    async def test_number_is_assigned_automatically(self, mock_db, admin_claims):
        numbering = _numbering("202602-09")
        mock_db.get.return_value = SimpleNamespace(id=CLIENT_ID)
        mock_db.execute.return_value = scalar_result(MockPayment())

        await PaymentService(numbering=numbering).create(mock_db, admin_claims, _payment_data())

        created = mock_db.add.call_args[0][0]
        assert isinstance(created, Payment)
        assert created.payment_number == "202602-09"
        assert created.status == "PAID"

    @pytest.mark.asyncio
    async def test_receipt_requires_issued_invoice(self, mock_db, admin_claims):
        invoice = SimpleNamespace(client_id=CLIENT_ID, invoice_type="RECEIVED", contract_id=None)
        mock_db.get.side_effect = [SimpleNamespace(id=CLIENT_ID), invoice]

        with pytest.raises(BusinessValidationError):
            await PaymentService(numbering=_numbering()).create(
                mock_db, admin_claims, _payment_data(invoice_id=uuid.uuid4()),
            )

    @pytest.mark.asyncio
    async def test_expense_requires_purchase_contract(self, mock_db, admin_claims):
        contract = SimpleNamespace(client_id=CLIENT_ID, contract_type="SALES")
        mock_db.get.side_effect = [SimpleNamespace(id=CLIENT_ID), contract]

        with pytest.raises(BusinessValidationError):
            await PaymentService(numbering=_numbering()).create(
                mock_db, admin_claims, _payment_data(payment_type="EXPENSE", contract_id=uuid.uuid4()),
            )

    @pytest.mark.asyncio
    async def test_invoice_linked_to_other_contract(self, mock_db, admin_claims):
        contract_id = uuid.uuid4()
        contract = SimpleNamespace(client_id=CLIENT_ID, contract_type="SALES")
        invoice = SimpleNamespace(client_id=CLIENT_ID, invoice_type="ISSUED", contract_id=uuid.uuid4())
        mock_db.get.side_effect = [SimpleNamespace(id=CLIENT_ID), contract, invoice]

        with pytest.raises(BusinessValidationError):
            await PaymentService(numbering=_numbering()).create(
                mock_db, admin_claims,
                _payment_data(contract_id=contract_id, invoice_id=uuid.uuid4()),
            )

    def test_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            _payment_data(amount=Decimal("0"))


class TestMarkPaid:

    @pytest.mark.asyncio
    async def test_mark_paid(self, mock_db, admin_claims):
        payment = MockPayment(status="UNPAID")
        mock_db.execute.return_value = scalar_result(payment)

        await PaymentService(numbering=_numbering()).mark_paid(mock_db, admin_claims, payment.id)

        assert payment.status == "PAID"

    @pytest.mark.asyncio
    async def test_already_paid(self, mock_db, admin_claims):
        payment = MockPayment(status="PAID")
        mock_db.execute.return_value = scalar_result(payment)

        with pytest.raises(ConflictError):
            await PaymentService(numbering=_numbering()).mark_paid(mock_db, admin_claims, payment.id)
