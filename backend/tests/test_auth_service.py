"""
Unit tests per AuthService: inizializzazione e login.
"""

import datetime
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.exceptions import AuthenticationError, BusinessValidationError, ConflictError, NotFoundError
from app.core.permissions import ALL_PERMISSIONS
from app.core.security import decode_token, hash_password
from app.schemas.user import InitAdminRequest, UserLogin
from app.services.auth_service import INVALID_CREDENTIALS, AuthService, build_claims
from app.services.system_settings_service import SystemSettingsService
from app.services.user_service import UserService
from conftest import MockUser, make_claims


def _service(user_count=0, bootstrap_completed_at=None, user=None):
    users = MagicMock(spec=UserService)
    users.count = AsyncMock(return_value=user_count)
    users.get_by_username = AsyncMock(return_value=user)
    users.get_by_id = AsyncMock(return_value=user)
    system_settings = MagicMock(spec=SystemSettingsService)
    record = SimpleNamespace(bootstrap_completed_at=bootstrap_completed_at)
    system_settings.get = AsyncMock(return_value=record)
    return AuthService(users=users, system_settings=system_settings), record


class TestCheck:

    @pytest.mark.asyncio
    async def test_fresh_system(self, mock_db):
        service, _ = _service(user_count=0)
        status = await service.check(mock_db)

        assert status.has_users is False
        assert status.bootstrap_open is True

    @pytest.mark.asyncio
    async def test_initialized_system(self, mock_db):
        service, _ = _service(user_count=2)
        status = await service.check(mock_db)

        assert status.has_users is True
        assert status.bootstrap_open is False

    @pytest.mark.asyncio
    async def test_gate_stays_closed_after_all_users_removed(self, mock_db):
        service, _ = _service(user_count=0, bootstrap_completed_at=datetime.datetime(2026, 1, 5))
        status = await service.check(mock_db)

        assert status.has_users is False
        assert status.bootstrap_open is False


class TestInitAdmin:

    @pytest.mark.asyncio
    async def test_creates_admin_with_all_permissions(self, mock_db):
        service, record = _service(user_count=0)

        user = await service.init_admin(mock_db, InitAdminRequest(username="admin", password="segreta1"))

        assert user.is_admin is True
        assert set(user.permissions) == set(ALL_PERMISSIONS)
        assert record.bootstrap_completed_at is not None
        service.system_settings.get.assert_awaited_once_with(mock_db, for_update=True)
        mock_db.add.assert_called_once_with(user)

    @pytest.mark.asyncio
    async def test_rejected_when_users_exist(self, mock_db):
        service, _ = _service(user_count=1)

        with pytest.raises(ConflictError) as exc_info:
            await service.init_admin(mock_db, InitAdminRequest(username="admin", password="segreta1"))

        assert exc_info.value.error_code == "ALREADY_INITIALIZED"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejected_after_bootstrap_even_without_users(self, mock_db):
        service, _ = _service(user_count=0, bootstrap_completed_at=datetime.datetime(2026, 1, 5))

        with pytest.raises(ConflictError):
            await service.init_admin(mock_db, InitAdminRequest(username="admin", password="segreta1"))

    @pytest.mark.asyncio
    async def test_short_password(self, mock_db):
        service, record = _service(user_count=0)

        with pytest.raises(BusinessValidationError):
            await service.init_admin(mock_db, InitAdminRequest(username="admin", password="123"))
        assert record.bootstrap_completed_at is None


class TestLogin:

    @pytest.mark.asyncio
    async def test_successful_login(self, mock_db):
        user = MockUser(
            username="lucia",
            hashed_password=hash_password("segreta1"),
            permissions=["invoices.issued"],
        )
        service, _ = _service(user=user)

        response = await service.login(mock_db, UserLogin(username="lucia", password="segreta1"))

        assert response.user.username == "lucia"
        assert response.token_type == "bearer"
        payload = decode_token(response.token)
        assert payload.sub == str(user.id)
        assert payload.permissions == ["invoices.issued"]
        assert payload.is_admin is False

    @pytest.mark.asyncio
    async def test_wrong_password(self, mock_db):
        user = MockUser(username="lucia", hashed_password=hash_password("segreta1"))
        service, _ = _service(user=user)

        with pytest.raises(AuthenticationError) as exc_info:
            await service.login(mock_db, UserLogin(username="lucia", password="sbagliata"))
        assert exc_info.value.detail == INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_unknown_user_gets_same_message(self, mock_db):
        service, _ = _service(user=None)

        with pytest.raises(AuthenticationError) as exc_info:
            await service.login(mock_db, UserLogin(username="nessuno", password="segreta1"))
        assert exc_info.value.detail == INVALID_CREDENTIALS


class TestGetMe:

    @pytest.mark.asyncio
    async def test_reloads_user(self, mock_db):
        user = MockUser(username="lucia")
        service, _ = _service(user=user)

        result = await service.get_me(mock_db, build_claims(user))

        assert result is user
        service.users.get_by_id.assert_awaited_once_with(mock_db, user.id)

    @pytest.mark.asyncio
    async def test_invalid_subject(self, mock_db):
        service, _ = _service()
        claims = make_claims()
        claims.sub = "non-un-uuid"

        with pytest.raises(AuthenticationError):
            await service.get_me(mock_db, claims)

    @pytest.mark.asyncio
    async def test_deleted_user(self, mock_db):
        service, _ = _service()
        service.users.get_by_id = AsyncMock(side_effect=NotFoundError("Utente x non trovato"))

        with pytest.raises(NotFoundError):
            await service.get_me(mock_db, make_claims())
