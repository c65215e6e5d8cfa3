"""
Router per l'autenticazione
Progetto: ERP Manager (Gestionale ERP)

Endpoints per stato di inizializzazione, creazione del primo
amministratore, login/logout e profilo utente.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import CurrentClaims
from app.schemas.token import BootstrapStatus, LoginResponse
from app.schemas.user import InitAdminRequest, UserLogin, UserResponse
from app.services.auth_service import AuthService, get_auth_service

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )


@router.get(
    "/check",
    response_model=BootstrapStatus,
    summary="Stato di inizializzazione",
)
async def check(
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> BootstrapStatus:
    """
    Indica se esistono utenti e se è ancora possibile creare
    l'amministratore iniziale.
    """
    result = await service.check(db)
    # La prima lettura può creare il record delle impostazioni
    await db.commit()
    return result


@router.post(
    "/init-admin",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crea l'amministratore iniziale",
)
async def init_admin(
    data: InitAdminRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """
    Crea il primo amministratore, con tutti i permessi.

    Disponibile solo finché il sistema non è stato inizializzato;
    dopo, i nuovi utenti si creano da /users (solo admin).
    """
    user = await service.init_admin(db, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Effettua il login",
)
async def login(
    data: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Effettua il login.

    Il token è impostato in un cookie HTTP-only (SameSite=strict,
    durata 7 giorni) e restituito anche nel body.
    """
    result = await service.login(db, data)
    _set_session_cookie(response, result.token)
    return result


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Effettua il logout",
)
async def logout(response: Response) -> None:
    """Cancella il cookie di sessione."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Ottieni il profilo utente corrente",
)
async def get_me(
    claims: CurrentClaims,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """
    Restituisce l'utente corrente, ricaricato dal database.

    Permessi e flag admin riflettono lo stato attuale e non
    quello al momento del login.
    """
    user = await service.get_me(db, claims)
    return UserResponse.model_validate(user)
