"""
Unit tests per il modello dei permessi.
"""

import pytest

from app.core.exceptions import AuthorizationError, BusinessValidationError
from app.core.permissions import (
    ALL_PERMISSIONS,
    CLIENT_TYPE_PERMISSIONS,
    CONTRACT_TYPE_PERMISSIONS,
    CONTRACT_TYPE_PERMISSIONS_FOR_INVOICES,
    PERMISSION_GROUPS,
    Permission,
    allowed_types,
    ensure_permission,
    ensure_type_allowed,
    has_permission,
    validate_permissions,
)
from conftest import make_claims


class TestHasPermission:

    def test_admin_passes_every_check(self, admin_claims):
        bare_admin = make_claims([], is_admin=True)
        for perm in ALL_PERMISSIONS:
            assert has_permission(admin_claims, perm)
            assert has_permission(bare_admin, perm)
        assert has_permission(bare_admin, "admin")

    def test_any_of_semantics(self):
        claims = make_claims(["invoices.received"])

        assert has_permission(claims, ["invoices.issued", "invoices.received"])
        assert not has_permission(claims, ["invoices.issued"])
        assert not has_permission(claims, "contracts.sales")

    def test_no_inheritance_between_namespaces(self):
        claims = make_claims(["contracts"])
        assert not has_permission(claims, "contracts.sales")

    def test_unauthenticated_never_passes(self):
        assert not has_permission(None, "projects")
        assert not has_permission(None, [])

    def test_empty_requirement_fails_for_regular_user(self):
        assert not has_permission(make_claims(["projects"]), [])

    def test_admin_sentinel_requires_flag(self):
        claims = make_claims(list(ALL_PERMISSIONS))
        assert not has_permission(claims, "admin")

    def test_enum_values_accepted(self):
        claims = make_claims(["projects"])
        assert has_permission(claims, Permission.PROJECTS)
        assert has_permission(claims, [Permission.USERS, Permission.PROJECTS])


class TestEnsurePermission:

    def test_raises_authorization_error(self):
        with pytest.raises(AuthorizationError) as exc_info:
            ensure_permission(make_claims(["projects"]), "users")

        assert exc_info.value.status_code == 403
        assert "users" in exc_info.value.detail

    def test_passes_silently(self, sales_claims):
        ensure_permission(sales_claims, ["contracts.sales", "contracts.purchase"])


class TestTypeVisibility:

    def test_allowed_types_follow_permissions(self, sales_claims, admin_claims):
        assert allowed_types(sales_claims, CONTRACT_TYPE_PERMISSIONS) == ["SALES"]
        assert allowed_types(admin_claims, CONTRACT_TYPE_PERMISSIONS) == ["SALES", "PURCHASE"]
        assert allowed_types(sales_claims, CLIENT_TYPE_PERMISSIONS) == []

    def test_invoice_form_sees_same_direction_contracts(self):
        claims = make_claims(["invoices.issued"])
        assert allowed_types(claims, CONTRACT_TYPE_PERMISSIONS_FOR_INVOICES) == ["SALES"]

    def test_ensure_type_allowed(self, sales_claims):
        ensure_type_allowed(sales_claims, CONTRACT_TYPE_PERMISSIONS, "SALES")
        with pytest.raises(AuthorizationError):
            ensure_type_allowed(sales_claims, CONTRACT_TYPE_PERMISSIONS, "PURCHASE")

    def test_unknown_type_is_rejected(self, admin_claims):
        with pytest.raises(AuthorizationError):
            ensure_type_allowed(admin_claims, CONTRACT_TYPE_PERMISSIONS, "LEASING")


class TestValidatePermissions:

    def test_deduplicates_keeping_order(self):
        result = validate_permissions(["users", "projects", "users"])
        assert result == ["users", "projects"]

    def test_unknown_permission(self):
        with pytest.raises(BusinessValidationError) as exc_info:
            validate_permissions(["projects", "contracts.all"])
        assert "contracts.all" in exc_info.value.detail

    def test_admin_group_contains_everything(self):
        assert set(PERMISSION_GROUPS["ADMIN"]) == set(ALL_PERMISSIONS)
