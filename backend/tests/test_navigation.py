"""
Unit tests per il menu di navigazione filtrato.
"""

import itertools

from app.core.navigation import DASHBOARD_SECTIONS, MENU, filter_menu, menu_paths, visible_sections
from app.core.permissions import ALL_PERMISSIONS
from conftest import make_claims


def _keys(items):
    return [item.key for item in items]


class TestFilterMenu:

    def test_unauthenticated_sees_only_home(self):
        assert _keys(filter_menu(MENU, None)) == ["home"]

    def test_admin_sees_everything(self, admin_claims):
        visible = filter_menu(MENU, admin_claims)
        assert _keys(visible) == _keys(MENU)
        assert menu_paths(visible) == menu_paths(MENU)

    def test_user_without_permissions(self):
        assert _keys(filter_menu(MENU, make_claims([]))) == ["home"]

    def test_group_keeps_only_allowed_children(self):
        visible = filter_menu(MENU, make_claims(["invoices.received"]))

        assert _keys(visible) == ["home", "invoices"]
        invoices = visible[1]
        assert [c.path for c in invoices.children] == ["/invoices/received"]

    def test_settings_is_admin_only(self):
        claims = make_claims(list(ALL_PERMISSIONS))
        visible = filter_menu(MENU, claims)

        assert "settings" not in _keys(visible)
        assert "users" in _keys(visible)

    def test_static_menu_is_not_modified(self, sales_claims):
        before = [(item.key, len(item.children)) for item in MENU]
        filter_menu(MENU, sales_claims)
        assert [(item.key, len(item.children)) for item in MENU] == before

    def test_visible_paths_are_subset_for_every_combination(self):
        """Nessuna combinazione di permessi fa comparire voci fuori dal menu."""
        all_paths = menu_paths(MENU)
        for size in (0, 1, 2):
            for combo in itertools.combinations(ALL_PERMISSIONS, size):
                visible = filter_menu(MENU, make_claims(combo))
                assert menu_paths(visible) <= all_paths
                for item in visible:
                    if item.path is None:
                        assert item.children

    def test_same_output_for_repeated_calls(self, sales_claims):
        """Sidebar e drawer mobile ricevono lo stesso menu."""
        assert filter_menu(MENU, sales_claims) == filter_menu(MENU, sales_claims)

    def test_order_is_preserved(self, sales_claims):
        visible = _keys(filter_menu(MENU, sales_claims))
        original = _keys(MENU)
        assert visible == [k for k in original if k in visible]


class TestVisibleSections:

    def test_sections_follow_any_of_permissions(self, sales_claims):
        assert visible_sections(sales_claims) == ["contracts", "invoices", "payments"]

    def test_admin_sees_all_sections(self, admin_claims):
        assert visible_sections(admin_claims) == list(DASHBOARD_SECTIONS)

    def test_unauthenticated(self):
        assert visible_sections(None) == []
