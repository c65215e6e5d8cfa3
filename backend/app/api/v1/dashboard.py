"""
Router per la dashboard
Progetto: ERP Manager (Gestionale ERP)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentClaims
from app.schemas.dashboard import DashboardStats
from app.services.dashboard_service import DashboardService, get_dashboard_service

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.get(
    "/stats",
    name="dashboard_statistiche",
    summary="Statistiche dashboard",
    description="Le sezioni per cui l'utente non ha permessi sono restituite vuote (null).",
    response_model=DashboardStats,
)
async def get_dashboard_stats(
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardStats:
    return await service.get_stats(db, claims)
