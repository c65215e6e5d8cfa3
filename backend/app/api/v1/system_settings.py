"""
Router per le impostazioni di sistema
Progetto: ERP Manager (Gestionale ERP)

La lettura è pubblica (nome azienda e logo servono anche alla pagina
di login); le modifiche sono riservate agli amministratori.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminClaims
from app.schemas.system_settings import SystemSettingsRead, SystemSettingsUpdate
from app.services.system_settings_service import SystemSettingsService, get_system_settings_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/system-settings",
    tags=["Impostazioni"],
)


@router.get(
    "/",
    name="impostazioni_lettura",
    summary="Impostazioni di sistema",
    description="Nome azienda e logo. Accessibile senza autenticazione.",
    response_model=SystemSettingsRead,
)
async def get_system_settings(
    db: AsyncSession = Depends(get_db),
    service: SystemSettingsService = Depends(get_system_settings_service),
) -> SystemSettingsRead:
    system_settings = await service.get(db)
    # La prima lettura crea il record con i valori predefiniti
    await db.commit()
    return SystemSettingsRead.model_validate(system_settings)


@router.put(
    "/",
    name="impostazioni_aggiorna",
    summary="Aggiorna impostazioni",
    response_model=SystemSettingsRead,
)
async def update_system_settings(
    data: SystemSettingsUpdate,
    admin: AdminClaims,
    db: AsyncSession = Depends(get_db),
    service: SystemSettingsService = Depends(get_system_settings_service),
) -> SystemSettingsRead:
    system_settings = await service.update(db, data)
    await db.commit()
    logger.info("Impostazioni aggiornate da %s", admin.username)
    return SystemSettingsRead.model_validate(system_settings)


@router.post(
    "/logo",
    name="impostazioni_carica_logo",
    summary="Carica logo aziendale",
    description="Accetta immagini JPEG, PNG, GIF o WebP. Sostituisce il logo precedente.",
    response_model=SystemSettingsRead,
)
async def upload_logo(
    admin: AdminClaims,
    file: UploadFile = File(..., description="Immagine del logo"),
    db: AsyncSession = Depends(get_db),
    service: SystemSettingsService = Depends(get_system_settings_service),
) -> SystemSettingsRead:
    """
    Carica il logo aziendale.

    Il file precedente viene eliminato solo a commit avvenuto; se il
    commit fallisce si elimina invece il file appena scritto.
    """
    system_settings, previous = await service.upload_logo(db, file)
    new_logo_url = system_settings.logo_url
    try:
        await db.commit()
    except Exception:
        service.remove_logo_file(new_logo_url)
        raise

    service.remove_logo_file(previous)
    logger.info("Logo aggiornato da %s", admin.username)
    return SystemSettingsRead.model_validate(system_settings)


@router.delete(
    "/logo",
    name="impostazioni_rimuovi_logo",
    summary="Rimuovi logo aziendale",
    response_model=SystemSettingsRead,
)
async def delete_logo(
    admin: AdminClaims,
    db: AsyncSession = Depends(get_db),
    service: SystemSettingsService = Depends(get_system_settings_service),
) -> SystemSettingsRead:
    system_settings, previous = await service.delete_logo(db)
    await db.commit()

    if previous:
        service.remove_logo_file(previous)
        logger.info("Logo rimosso da %s: %s", admin.username, previous)
    return SystemSettingsRead.model_validate(system_settings)
