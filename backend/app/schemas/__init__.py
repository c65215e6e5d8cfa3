"""
Schemas Pydantic per il progetto ERP Manager

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e delle risposte API.
"""

# Import degli schemi per renderli disponibili tramite import diretto
# es: from app.schemas import ContractRead, ClientRead, etc.

from app.schemas.common import (
    ClientRef,
    ContractRef,
    InvoiceRef,
    NextNumberResponse,
    PaymentRef,
    ProjectRef,
)
from app.schemas.client import ClientCreate, ClientList, ClientRead, ClientUpdate
from app.schemas.user import (
    InitAdminRequest,
    UserCreate,
    UserList,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from app.schemas.token import BootstrapStatus, LoginResponse, TokenPayload, UserClaims
from app.schemas.settlement import ContractSettlement, ProjectMargin, SettlementSummary
from app.schemas.project import (
    ProjectCreate,
    ProjectDetail,
    ProjectList,
    ProjectRead,
    ProjectUpdate,
)
from app.schemas.contract import (
    ContractCreate,
    ContractDetail,
    ContractList,
    ContractRead,
    ContractUpdate,
)
from app.schemas.invoice import (
    InvoiceCreate,
    InvoiceDetail,
    InvoiceList,
    InvoiceRead,
    InvoiceUpdate,
)
from app.schemas.payment import PaymentCreate, PaymentList, PaymentRead, PaymentUpdate
from app.schemas.system_settings import SystemSettingsRead, SystemSettingsUpdate
from app.schemas.navigation import NavChild, NavItem, NavigationResponse
from app.schemas.dashboard import DashboardStats

__all__ = [
    # Riferimenti
    "ClientRef",
    "ContractRef",
    "InvoiceRef",
    "NextNumberResponse",
    "PaymentRef",
    "ProjectRef",
    # Client schemas
    "ClientCreate",
    "ClientList",
    "ClientRead",
    "ClientUpdate",
    # User schemas
    "InitAdminRequest",
    "UserCreate",
    "UserList",
    "UserLogin",
    "UserResponse",
    "UserUpdate",
    # Token schemas
    "BootstrapStatus",
    "LoginResponse",
    "TokenPayload",
    "UserClaims",
    # Dati calcolati
    "ContractSettlement",
    "ProjectMargin",
    "SettlementSummary",
    # Project schemas
    "ProjectCreate",
    "ProjectDetail",
    "ProjectList",
    "ProjectRead",
    "ProjectUpdate",
    # Contract schemas
    "ContractCreate",
    "ContractDetail",
    "ContractList",
    "ContractRead",
    "ContractUpdate",
    # Invoice schemas
    "InvoiceCreate",
    "InvoiceDetail",
    "InvoiceList",
    "InvoiceRead",
    "InvoiceUpdate",
    # Payment schemas
    "PaymentCreate",
    "PaymentList",
    "PaymentRead",
    "PaymentUpdate",
    # Impostazioni, navigazione, dashboard
    "SystemSettingsRead",
    "SystemSettingsUpdate",
    "NavChild",
    "NavItem",
    "NavigationResponse",
    "DashboardStats",
]
