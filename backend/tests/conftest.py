"""
Pytest configuration and fixtures.

I test lavorano senza database: la sessione è un AsyncMock e i record
sono oggetti mock con gli stessi attributi dei modelli.
"""

import datetime
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import ALL_PERMISSIONS
from app.schemas.token import UserClaims


# ============================================================
# Fixtures per AsyncSession Mock
# ============================================================


@pytest.fixture
def mock_db():
    """Crea un mock di AsyncSession."""
    db = AsyncMock(spec=AsyncSession)
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.delete = AsyncMock()
    db.get = AsyncMock()
    return db


def scalar_result(value):
    """Risultato di db.execute per scalar_one_or_none() / scalar()."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    result.scalar.return_value = value
    return result


def scalars_result(values):
    """Risultato di db.execute per scalars().all()."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(values)
    return result


def savepoint(db):
    """Configura db.begin_nested() come context manager asincrono."""
    nested = MagicMock()
    nested.__aenter__ = AsyncMock(return_value=None)
    nested.__aexit__ = AsyncMock(return_value=False)
    db.begin_nested = MagicMock(return_value=nested)
    return nested


def integrity_error():
    """IntegrityError come quello sollevato da una violazione di chiave unica."""
    return IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))


# ============================================================
# Claims
# ============================================================


def make_claims(permissions=(), is_admin=False, username="mario"):
    return UserClaims(
        sub=str(uuid.uuid4()),
        username=username,
        permissions=list(permissions),
        is_admin=is_admin,
    )


@pytest.fixture
def admin_claims():
    return make_claims(ALL_PERMISSIONS, is_admin=True, username="admin")


@pytest.fixture
def sales_claims():
    """Utente che gestisce solo il ciclo attivo."""
    return make_claims(["contracts.sales", "invoices.issued", "payments.receipts"])


# ============================================================
# Record mock
# ============================================================


class MockUser:
    """Mock del modello User."""
    def __init__(self, **kwargs):
        now = datetime.datetime.now(datetime.timezone.utc)
        self.id = kwargs.get("id", uuid.uuid4())
        self.username = kwargs.get("username", "mario")
        self.hashed_password = kwargs.get("hashed_password", "")
        self.permissions = kwargs.get("permissions", [])
        self.is_admin = kwargs.get("is_admin", False)
        self.created_at = kwargs.get("created_at", now)
        self.updated_at = kwargs.get("updated_at", now)


class MockInvoice:
    """Mock del modello Invoice (solo i campi usati dall'avanzamento)."""
    def __init__(self, **kwargs):
        self.id = kwargs.get("id", uuid.uuid4())
        self.invoice_number = kwargs.get("invoice_number", "202602-01")
        self.invoice_type = kwargs.get("invoice_type", "ISSUED")
        self.status = kwargs.get("status", "ISSUED")
        self.total_amount = kwargs.get("total_amount", Decimal("0"))
        self.invoice_date = kwargs.get("invoice_date", datetime.date(2026, 2, 10))


class MockPayment:
    """Mock del modello Payment."""
    def __init__(self, **kwargs):
        self.id = kwargs.get("id", uuid.uuid4())
        self.payment_number = kwargs.get("payment_number", "202602-01")
        self.payment_type = kwargs.get("payment_type", "RECEIPT")
        self.status = kwargs.get("status", "PAID")
        self.amount = kwargs.get("amount", Decimal("0"))
        self.payment_date = kwargs.get("payment_date", datetime.date(2026, 2, 10))


class MockContract:
    """Mock del modello Contract con fatture e pagamenti già caricati."""
    def __init__(self, **kwargs):
        now = datetime.datetime.now(datetime.timezone.utc)
        self.id = kwargs.get("id", uuid.uuid4())
        self.contract_number = kwargs.get("contract_number", "C-2026-001")
        self.title = kwargs.get("title", "Fornitura impianto")
        self.contract_type = kwargs.get("contract_type", "SALES")
        self.status = kwargs.get("status", "SIGNED")
        self.amount = kwargs.get("amount", Decimal("100000.00"))
        self.start_date = kwargs.get("start_date", datetime.date(2026, 1, 1))
        self.end_date = kwargs.get("end_date", datetime.date(2026, 12, 31))
        self.description = kwargs.get("description", None)
        self.client_id = kwargs.get("client_id", uuid.uuid4())
        self.project_id = kwargs.get("project_id", None)
        self.client = kwargs.get("client", None)
        self.project = kwargs.get("project", None)
        self.invoices = kwargs.get("invoices", [])
        self.payments = kwargs.get("payments", [])
        self.created_at = kwargs.get("created_at", now)
        self.updated_at = kwargs.get("updated_at", now)


class MockProject:
    """Mock del modello Project con i contratti già caricati."""
    def __init__(self, **kwargs):
        now = datetime.datetime.now(datetime.timezone.utc)
        self.id = kwargs.get("id", uuid.uuid4())
        self.name = kwargs.get("name", "Nuova sede")
        self.description = kwargs.get("description", None)
        self.status = kwargs.get("status", "IN_PROGRESS")
        self.start_date = kwargs.get("start_date", datetime.date(2026, 1, 1))
        self.end_date = kwargs.get("end_date", None)
        self.contracts = kwargs.get("contracts", [])
        self.created_at = kwargs.get("created_at", now)
        self.updated_at = kwargs.get("updated_at", now)


@pytest.fixture
def sales_contract():
    """
    Contratto di vendita da 100.000 con:
    - 30.000 fatturati (emessa) + 20.000 pre-registrati
    - 25.000 incassati + 10.000 non ancora pagati
    """
    return MockContract(
        amount=Decimal("100000.00"),
        invoices=[
            MockInvoice(status="ISSUED", total_amount=Decimal("30000.00")),
            MockInvoice(status="UNISSUED", total_amount=Decimal("20000.00"), invoice_number="202602-02"),
        ],
        payments=[
            MockPayment(status="PAID", amount=Decimal("25000.00")),
            MockPayment(status="UNPAID", amount=Decimal("10000.00"), payment_number="202602-02"),
        ],
    )
