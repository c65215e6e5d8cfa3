"""
API v1 Routes
Progetto: ERP Manager (Gestionale ERP)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from app.api.v1 import (
    auth,
    clients,
    contracts,
    dashboard,
    invoices,
    navigation,
    payments,
    projects,
    system_settings,
    users,
)

# Router aggregato per v1
api_v1_router = APIRouter(prefix="/api/v1")

# Includi i router dei moduli
api_v1_router.include_router(auth.router)
api_v1_router.include_router(users.router)
api_v1_router.include_router(system_settings.router)
api_v1_router.include_router(navigation.router)
api_v1_router.include_router(dashboard.router)
api_v1_router.include_router(clients.router)
api_v1_router.include_router(projects.router)
api_v1_router.include_router(contracts.router)
api_v1_router.include_router(invoices.router)
api_v1_router.include_router(payments.router)

# Esportazione
__all__ = ["api_v1_router"]
