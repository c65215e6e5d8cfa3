"""
Unit tests per ClientService e per la validazione dei dati del partner.
"""

import uuid
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from app.core.exceptions import AuthorizationError, ConflictError
from app.schemas.client import ClientCreate, normalize_phone
from app.services.client_service import ClientService
from conftest import make_claims, scalar_result, scalars_result


def _client(**kwargs):
    defaults = {"id": uuid.uuid4(), "name": "Rossi Srl", "client_type": "SUPPLIER"}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


class TestClientSchema:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("+39 333-123.4567", "+393331234567"),
            ("  ", None),
            (None, None),
        ],
    )
    def test_normalize_phone(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_invalid_phone(self):
        with pytest.raises(ValueError):
            normalize_phone("333-abc")

    def test_blank_email_becomes_none(self):
        data = ClientCreate(name="Rossi Srl", email="  ")
        assert data.email is None

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            ClientCreate(name="Rossi Srl", email="non-una-email")

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            ClientCreate(name="   ")


class TestClientVisibility:

    @pytest.mark.asyncio
    async def test_supplier_hidden_from_customer_manager(self, mock_db):
        mock_db.execute.return_value = scalar_result(_client(client_type="SUPPLIER"))
        claims = make_claims(["clients.customers"])

        with pytest.raises(AuthorizationError):
            await ClientService().get_by_id(mock_db, uuid.uuid4(), claims)

    @pytest.mark.asyncio
    async def test_create_requires_type_permission(self, mock_db):
        claims = make_claims(["clients.customers"])

        with pytest.raises(AuthorizationError):
            await ClientService().create(mock_db, claims, ClientCreate(name="Bianchi Spa", client_type="SUPPLIER"))
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_without_type_filter(self, mock_db):
        mock_db.execute.side_effect = [scalars_result([_client()]), scalar_result(1)]
        claims = make_claims(["clients.suppliers"])

        clients, total = await ClientService().get_all(mock_db, claims)

        assert total == 1
        assert len(clients) == 1


class TestDeleteClient:

    @pytest.mark.asyncio
    async def test_blocked_while_referenced(self, mock_db, admin_claims):
        client = _client()
        mock_db.execute.side_effect = [
            scalar_result(client),
            scalar_result(2),
            scalar_result(0),
            scalar_result(1),
        ]

        with pytest.raises(ConflictError) as exc_info:
            await ClientService().delete(mock_db, admin_claims, client.id)

        assert exc_info.value.extra == {"contratti": 2, "pagamenti": 1}
        mock_db.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_unreferenced(self, mock_db, admin_claims):
        client = _client()
        mock_db.execute.side_effect = [
            scalar_result(client),
            scalar_result(0),
            scalar_result(0),
            scalar_result(0),
        ]

        await ClientService().delete(mock_db, admin_claims, client.id)

        mock_db.delete.assert_awaited_once_with(client)
