"""
Servizio per le impostazioni di sistema
Progetto: ERP Manager (Gestionale ERP)

Gestisce il record singleton delle impostazioni e il logo aziendale.
"""

import datetime
import logging
import secrets
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BusinessValidationError
from app.models.system_settings import SINGLETON_KEY, SystemSettings
from app.schemas.system_settings import SystemSettingsUpdate

logger = logging.getLogger(__name__)

_IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class SystemSettingsService:
    """Lettura e modifica delle impostazioni globali."""

    async def get(self, db: AsyncSession, for_update: bool = False) -> SystemSettings:
        """
        Restituisce il record delle impostazioni.

        Se non esiste viene creato con la ragione sociale di default.
        La creazione avviene in un savepoint: se una richiesta concorrente
        inserisce il record per prima, il vincolo unico su `singleton_key`
        fa fallire l'inserimento e si rilegge la riga esistente.

        Args:
            db: Sessione database
            for_update: Blocca la riga fino al termine della transazione
        """
        stmt = select(SystemSettings).where(SystemSettings.singleton_key == SINGLETON_KEY)
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        system_settings = result.scalar_one_or_none()
        if system_settings is not None:
            return system_settings

        try:
            async with db.begin_nested():
                system_settings = SystemSettings(
                    singleton_key=SINGLETON_KEY,
                    company_name=settings.default_company_name,
                )
                db.add(system_settings)
                await db.flush()
        except IntegrityError:
            logger.info("Impostazioni di sistema create da una richiesta concorrente")
            result = await db.execute(stmt)
            return result.scalar_one()

        await db.refresh(system_settings)
        logger.info("Create impostazioni di sistema con valori di default")
        return system_settings

    async def update(self, db: AsyncSession, data: SystemSettingsUpdate) -> SystemSettings:
        """Aggiorna la ragione sociale."""
        system_settings = await self.get(db)
        system_settings.company_name = data.company_name
        await db.flush()
        await db.refresh(system_settings)
        logger.info("Ragione sociale aggiornata: %s", data.company_name)
        return system_settings

    async def upload_logo(self, db: AsyncSession, file: UploadFile) -> tuple[SystemSettings, Optional[str]]:
        """
        Salva un nuovo logo e ne registra l'URL.

        Il file del logo precedente non viene toccato: il chiamante lo
        rimuove con `remove_logo_file` solo dopo il commit. Se il
        salvataggio del record fallisce, il nuovo file viene eliminato.

        Returns:
            (impostazioni aggiornate, URL del logo sostituito o None)

        Raises:
            BusinessValidationError: tipo non ammesso, file vuoto o troppo grande
        """
        content_type = (file.content_type or "").lower()
        if content_type not in settings.allowed_image_types:
            raise BusinessValidationError(
                "Tipo di file non supportato. Formati ammessi: JPEG, PNG, GIF, WebP"
            )

        content = await file.read(settings.max_upload_size + 1)
        if not content:
            raise BusinessValidationError("Il file caricato è vuoto")
        if len(content) > settings.max_upload_size:
            max_mb = settings.max_upload_size // (1024 * 1024)
            raise BusinessValidationError(f"Il file supera la dimensione massima di {max_mb} MB")

        extension = _IMAGE_EXTENSIONS.get(content_type, Path(file.filename or "").suffix.lower())
        timestamp = datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d%H%M%S")
        filename = f"logo-{timestamp}-{secrets.token_hex(4)}{extension}"
        logo_url = f"{settings.upload_url_prefix}/{filename}"

        upload_dir = Path(settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / filename).write_bytes(content)

        try:
            system_settings = await self.get(db)
            previous = system_settings.logo_url
            system_settings.logo_url = logo_url
            await db.flush()
            await db.refresh(system_settings)
        except Exception:
            self.remove_logo_file(logo_url)
            raise

        logger.info("Logo caricato: %s (%s byte)", filename, len(content))
        return system_settings, previous

    async def delete_logo(self, db: AsyncSession) -> tuple[SystemSettings, Optional[str]]:
        """
        Scollega il logo corrente.

        Il file resta su disco finché il chiamante non conferma la
        transazione e chiama `remove_logo_file`.

        Returns:
            (impostazioni aggiornate, URL del logo rimosso o None)
        """
        system_settings = await self.get(db)
        previous = system_settings.logo_url
        system_settings.logo_url = None
        await db.flush()
        await db.refresh(system_settings)
        return system_settings, previous

    def remove_logo_file(self, logo_url: Optional[str]) -> None:
        """Elimina il file locale di un logo; gli URL esterni vengono ignorati."""
        if not logo_url:
            return
        path = self._path_for(logo_url)
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
            logger.info("File logo eliminato: %s", path)
        except OSError as e:
            logger.warning("Impossibile eliminare il file %s: %s", path, e)

    def _path_for(self, logo_url: str) -> Optional[Path]:
        """File locale di un URL di upload; None se l'URL è esterno."""
        prefix = settings.upload_url_prefix + "/"
        if not logo_url.startswith(prefix):
            return None
        name = Path(logo_url[len(prefix):]).name
        return Path(settings.upload_dir) / name if name else None


def get_system_settings_service() -> SystemSettingsService:
    """Factory per ottenere il servizio delle impostazioni."""
    return SystemSettingsService()


__all__ = ["SystemSettingsService", "get_system_settings_service"]
