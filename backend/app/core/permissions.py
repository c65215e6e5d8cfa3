"""
Modello dei permessi
Progetto: ERP Manager (Gestionale ERP)

Vocabolario dei permessi e predicato di autorizzazione centralizzato.

I permessi sono stringhe piatte con namespace a punti, senza ereditarietà.
Un utente admin supera qualunque verifica; gli altri utenti superano una
verifica se possiedono almeno uno dei permessi richiesti.

Tutti i punti dell'applicazione (dipendenze FastAPI, filtri di visibilità
dei servizi, menu di navigazione) usano `has_permission`, così la regola
admin-oppure-intersezione esiste in un solo posto.
"""

from enum import Enum
from typing import Iterable, Mapping, Optional, Protocol, Union

from app.core.exceptions import AuthorizationError, BusinessValidationError


class Permission(str, Enum):
    """Permessi assegnabili agli utenti."""

    # Contratti
    CONTRACTS_SALES = "contracts.sales"
    CONTRACTS_PURCHASE = "contracts.purchase"

    # Fatture
    INVOICES_ISSUED = "invoices.issued"
    INVOICES_RECEIVED = "invoices.received"

    # Incassi e pagamenti
    PAYMENTS_RECEIPTS = "payments.receipts"
    PAYMENTS_EXPENSES = "payments.expenses"

    # Progetti
    PROJECTS = "projects"

    # Partner
    CLIENTS_CUSTOMERS = "clients.customers"
    CLIENTS_SUPPLIERS = "clients.suppliers"

    # Utenti
    USERS = "users"


# Requisito speciale del menu: visibile solo agli amministratori
ADMIN_SENTINEL = "admin"

ALL_PERMISSIONS: tuple[str, ...] = tuple(p.value for p in Permission)

# Gruppi per l'assegnazione in blocco
PERMISSION_GROUPS: dict[str, list[str]] = {
    "CONTRACTS_ADMIN": [Permission.CONTRACTS_SALES.value, Permission.CONTRACTS_PURCHASE.value],
    "INVOICES_ADMIN": [Permission.INVOICES_ISSUED.value, Permission.INVOICES_RECEIVED.value],
    "PAYMENTS_ADMIN": [Permission.PAYMENTS_RECEIPTS.value, Permission.PAYMENTS_EXPENSES.value],
    "CLIENTS_ADMIN": [Permission.CLIENTS_CUSTOMERS.value, Permission.CLIENTS_SUPPLIERS.value],
    "ADMIN": list(ALL_PERMISSIONS),
}


class HasPermissions(Protocol):
    """Qualunque oggetto con `is_admin` e `permissions` (claim del token o modello User)."""

    is_admin: bool
    permissions: Iterable[str]


RequiredPermission = Union[str, Permission, Iterable[Union[str, Permission]]]


def _normalize(required: RequiredPermission) -> set[str]:
    if isinstance(required, Permission):
        return {required.value}
    if isinstance(required, str):
        return {required}
    return {p.value if isinstance(p, Permission) else p for p in required}


def is_admin(claims: Optional[HasPermissions]) -> bool:
    """True solo per un utente autenticato con flag amministratore."""
    return bool(claims is not None and claims.is_admin)


def has_permission(claims: Optional[HasPermissions], required: RequiredPermission) -> bool:
    """
    Predicato di autorizzazione.

    Args:
        claims: Identità dell'utente (None se non autenticato)
        required: Permesso singolo oppure insieme "any-of"

    Returns:
        True se l'utente è admin oppure possiede almeno uno dei permessi.
        Sempre False per un chiamante non autenticato.
    """
    if claims is None:
        return False
    if claims.is_admin:
        return True
    required_set = _normalize(required)
    if ADMIN_SENTINEL in required_set:
        # "admin" non è un permesso assegnabile: solo il flag lo soddisfa
        required_set.discard(ADMIN_SENTINEL)
    return not required_set.isdisjoint(claims.permissions or ())


def ensure_permission(claims: Optional[HasPermissions], required: RequiredPermission) -> None:
    """Come `has_permission`, ma solleva AuthorizationError in caso negativo."""
    if not has_permission(claims, required):
        wanted = ", ".join(sorted(_normalize(required)))
        raise AuthorizationError(f"Permesso richiesto: {wanted}")


def validate_permissions(values: Iterable[str]) -> list[str]:
    """
    Verifica che ogni permesso appartenga al vocabolario.

    Restituisce la lista senza duplicati, nell'ordine di arrivo.

    Raises:
        BusinessValidationError: se compaiono permessi sconosciuti
    """
    cleaned = list(dict.fromkeys(values))
    invalid = [p for p in cleaned if p not in ALL_PERMISSIONS]
    if invalid:
        raise BusinessValidationError(f"Permessi non validi: {', '.join(invalid)}")
    return cleaned


# ------------------------------------------------------------
# Visibilità dei dati per tipo di record
# ------------------------------------------------------------

CONTRACT_TYPE_PERMISSIONS: dict[str, str] = {
    "SALES": Permission.CONTRACTS_SALES.value,
    "PURCHASE": Permission.CONTRACTS_PURCHASE.value,
}

INVOICE_TYPE_PERMISSIONS: dict[str, str] = {
    "ISSUED": Permission.INVOICES_ISSUED.value,
    "RECEIVED": Permission.INVOICES_RECEIVED.value,
}

PAYMENT_TYPE_PERMISSIONS: dict[str, str] = {
    "RECEIPT": Permission.PAYMENTS_RECEIPTS.value,
    "EXPENSE": Permission.PAYMENTS_EXPENSES.value,
}

CLIENT_TYPE_PERMISSIONS: dict[str, str] = {
    "CUSTOMER": Permission.CLIENTS_CUSTOMERS.value,
    "SUPPLIER": Permission.CLIENTS_SUPPLIERS.value,
}

# I form di fattura/pagamento elencano i contratti della stessa direzione:
# chi gestisce le fatture emesse deve poter scegliere tra i contratti di vendita.
CONTRACT_TYPE_PERMISSIONS_FOR_INVOICES: dict[str, list[str]] = {
    "SALES": [Permission.CONTRACTS_SALES.value, Permission.INVOICES_ISSUED.value],
    "PURCHASE": [Permission.CONTRACTS_PURCHASE.value, Permission.INVOICES_RECEIVED.value],
}

CONTRACT_TYPE_PERMISSIONS_FOR_PAYMENTS: dict[str, list[str]] = {
    "SALES": [Permission.CONTRACTS_SALES.value, Permission.PAYMENTS_RECEIPTS.value],
    "PURCHASE": [Permission.CONTRACTS_PURCHASE.value, Permission.PAYMENTS_EXPENSES.value],
}


def _key(value) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def allowed_types(
    claims: Optional[HasPermissions],
    mapping: Mapping[str, RequiredPermission],
) -> list[str]:
    """Tipi di record (chiavi di `mapping`) che l'utente può vedere."""
    return [record_type for record_type, perm in mapping.items() if has_permission(claims, perm)]


def ensure_type_allowed(
    claims: Optional[HasPermissions],
    mapping: Mapping[str, RequiredPermission],
    record_type,
) -> None:
    """
    Verifica il permesso legato al tipo di un record.

    Raises:
        AuthorizationError: se l'utente non può accedere a quel tipo
    """
    required = mapping.get(_key(record_type))
    if required is None:
        raise AuthorizationError(f"Tipo non gestito: {_key(record_type)}")
    ensure_permission(claims, required)


__all__ = [
    "Permission",
    "ADMIN_SENTINEL",
    "ALL_PERMISSIONS",
    "PERMISSION_GROUPS",
    "has_permission",
    "is_admin",
    "ensure_permission",
    "validate_permissions",
    "allowed_types",
    "ensure_type_allowed",
    "CONTRACT_TYPE_PERMISSIONS",
    "CONTRACT_TYPE_PERMISSIONS_FOR_INVOICES",
    "CONTRACT_TYPE_PERMISSIONS_FOR_PAYMENTS",
    "INVOICE_TYPE_PERMISSIONS",
    "PAYMENT_TYPE_PERMISSIONS",
    "CLIENT_TYPE_PERMISSIONS",
]
