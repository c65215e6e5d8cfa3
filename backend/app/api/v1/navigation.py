"""
Router per il menu di navigazione
Progetto: ERP Manager (Gestionale ERP)

Sidebar desktop e drawer mobile leggono entrambi questo endpoint.
"""

from fastapi import APIRouter

from app.core.deps import OptionalClaims
from app.core.navigation import MENU, filter_menu, visible_sections
from app.schemas.navigation import NavigationResponse

router = APIRouter(
    prefix="/navigation",
    tags=["Navigazione"],
)


@router.get(
    "/",
    name="menu_navigazione",
    summary="Menu filtrato per l'utente",
    description="Senza sessione valida restituisce solo le voci pubbliche.",
    response_model=NavigationResponse,
)
async def get_navigation(claims: OptionalClaims) -> NavigationResponse:
    return NavigationResponse(
        items=filter_menu(MENU, claims),
        visible_sections=visible_sections(claims),
    )
