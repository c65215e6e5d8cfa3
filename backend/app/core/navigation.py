"""
Menu di navigazione filtrato per permessi
Progetto: ERP Manager (Gestionale ERP)

Il menu è statico. `filter_menu` produce il sottoinsieme visibile
all'utente mantenendo gruppi e ordine originali; non aggiunge mai voci.
Sidebar desktop e drawer mobile usano lo stesso endpoint e quindi
la stessa funzione.
"""

from typing import Iterable, Optional, Sequence

from app.core.permissions import ADMIN_SENTINEL, HasPermissions, Permission, has_permission, is_admin
from app.schemas.navigation import NavChild, NavItem

MENU: tuple[NavItem, ...] = (
    NavItem(key="home", label="Home", path="/"),
    NavItem(
        key="contracts",
        label="Contratti",
        children=(
            NavChild(label="Contratti di vendita", path="/contracts/sales",
                     permission=Permission.CONTRACTS_SALES.value),
            NavChild(label="Contratti di acquisto", path="/contracts/purchase",
                     permission=Permission.CONTRACTS_PURCHASE.value),
        ),
    ),
    NavItem(
        key="invoices",
        label="Fatture",
        children=(
            NavChild(label="Fatture emesse", path="/invoices/issued",
                     permission=Permission.INVOICES_ISSUED.value),
            NavChild(label="Fatture ricevute", path="/invoices/received",
                     permission=Permission.INVOICES_RECEIVED.value),
        ),
    ),
    NavItem(
        key="payments",
        label="Incassi e pagamenti",
        children=(
            NavChild(label="Incassi", path="/payments/receipts",
                     permission=Permission.PAYMENTS_RECEIPTS.value),
            NavChild(label="Pagamenti", path="/payments/expenses",
                     permission=Permission.PAYMENTS_EXPENSES.value),
        ),
    ),
    NavItem(
        key="clients",
        label="Partner",
        children=(
            NavChild(label="Clienti", path="/clients/customers",
                     permission=Permission.CLIENTS_CUSTOMERS.value),
            NavChild(label="Fornitori", path="/clients/suppliers",
                     permission=Permission.CLIENTS_SUPPLIERS.value),
        ),
    ),
    NavItem(key="projects", label="Progetti", path="/projects", permission=Permission.PROJECTS.value),
    NavItem(key="users", label="Utenti", path="/users", permission=Permission.USERS.value),
    NavItem(key="settings", label="Impostazioni", path="/settings", permission=ADMIN_SENTINEL),
)

# Sezioni della dashboard e permessi "any-of" che le rendono visibili
DASHBOARD_SECTIONS: dict[str, list[str]] = {
    "contracts": [Permission.CONTRACTS_SALES.value, Permission.CONTRACTS_PURCHASE.value],
    "invoices": [Permission.INVOICES_ISSUED.value, Permission.INVOICES_RECEIVED.value],
    "payments": [Permission.PAYMENTS_RECEIPTS.value, Permission.PAYMENTS_EXPENSES.value],
    "clients": [Permission.CLIENTS_CUSTOMERS.value, Permission.CLIENTS_SUPPLIERS.value],
    "projects": [Permission.PROJECTS.value],
    "users": [Permission.USERS.value],
}


def _leaf_visible(item: NavItem, claims: Optional[HasPermissions]) -> bool:
    if item.permission is None:
        return True
    if item.permission == ADMIN_SENTINEL:
        return is_admin(claims)
    return has_permission(claims, item.permission)


def filter_menu(
    menu: Sequence[NavItem],
    claims: Optional[HasPermissions],
) -> list[NavItem]:
    """
    Filtra il menu per l'utente.

    - voce senza figli e senza requisito: sempre visibile
    - voce senza figli con requisito 'admin': solo per gli admin
    - voce senza figli con permesso (o lista any-of): se la verifica passa
    - gruppo: i figli sono filtrati uno per uno; il gruppo compare solo
      se almeno un figlio resta, con la lista dei figli filtrata
    """
    visible: list[NavItem] = []
    for item in menu:
        if not item.children:
            if _leaf_visible(item, claims):
                visible.append(item)
            continue

        children = tuple(
            child for child in item.children
            if has_permission(claims, child.permission)
        )
        if children:
            visible.append(item.model_copy(update={"children": children}))
    return visible


def menu_paths(menu: Iterable[NavItem]) -> set[str]:
    """Percorsi raggiungibili da un menu (voci dirette e figli)."""
    paths: set[str] = set()
    for item in menu:
        if item.path:
            paths.add(item.path)
        paths.update(child.path for child in item.children)
    return paths


def visible_sections(claims: Optional[HasPermissions]) -> list[str]:
    """Sezioni della dashboard che l'utente può vedere."""
    return [
        section for section, perms in DASHBOARD_SECTIONS.items()
        if has_permission(claims, perms)
    ]


__all__ = [
    "MENU",
    "DASHBOARD_SECTIONS",
    "filter_menu",
    "menu_paths",
    "visible_sections",
]
