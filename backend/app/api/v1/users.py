"""
Router FastAPI per l'amministrazione utenti
Progetto: ERP Manager (Gestionale ERP)

Lettura con permesso `users`, modifica riservata agli amministratori.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminClaims, require_permission
from app.core.permissions import Permission
from app.schemas.token import UserClaims
from app.schemas.user import UserCreate, UserList, UserResponse, UserUpdate
from app.services.user_service import UserService, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Utenti"],
)


@router.get(
    "/",
    name="utenti_lista",
    summary="Lista utenti",
    response_model=UserList,
)
async def get_users(
    page: int = Query(1, ge=1, description="Numero pagina"),
    per_page: int = Query(20, ge=1, le=100, description="Elementi per pagina"),
    search: Optional[str] = Query(None, description="Ricerca per username"),
    claims: UserClaims = Depends(require_permission(Permission.USERS.value)),
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserList:
    users, total = await service.get_all(db, page=page, per_page=per_page, search=search)
    return UserList(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/{user_id}",
    name="utente_dettaglio",
    summary="Dettaglio utente",
    response_model=UserResponse,
)
async def get_user(
    user_id: uuid.UUID,
    claims: UserClaims = Depends(require_permission(Permission.USERS.value)),
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.get_by_id(db, user_id)
    return UserResponse.model_validate(user)


@router.post(
    "/",
    name="utente_crea",
    summary="Crea utente",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    data: UserCreate,
    admin: AdminClaims,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Crea un nuovo utente (solo admin)."""
    user = await service.create(db, data)
    await db.commit()
    logger.info("Utente %s creato da %s", user.username, admin.username)
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    name="utente_aggiorna",
    summary="Aggiorna utente",
    response_model=UserResponse,
)
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    admin: AdminClaims,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Aggiorna solo i campi forniti (solo admin)."""
    user = await service.update(db, user_id, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    name="utente_elimina",
    summary="Elimina utente",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_user(
    user_id: uuid.UUID,
    admin: AdminClaims,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> None:
    """
    Elimina un utente (solo admin).

    Raises:
        ConflictError: se è l'ultimo utente rimasto
    """
    await service.delete(db, user_id)
    await db.commit()
    logger.info("Utente %s eliminato da %s", user_id, admin.username)
