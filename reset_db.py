"""
Reset del database di sviluppo
Progetto: ERP Manager (Gestionale ERP)

Elimina e ricrea tutte le tabelle. Dopo il reset non esistono utenti:
la creazione dell'amministratore iniziale torna disponibile.

Uso:
    python reset_db.py [--yes]
"""

import argparse
import asyncio
import os
import sys

# Aggiungi backend/ alla PYTHONPATH per importare app.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from app.core.config import settings
from app.core.database import engine
from app.models import Base


async def reset() -> None:
    print(f"Connessione a {settings.database_url.rsplit('@', 1)[-1]}, eliminazione tabelle...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        print("Tabelle eliminate. Creazione nuove tabelle...")
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print(f"Database resettato con successo ({len(Base.metadata.tables)} tabelle).")


def main() -> None:
    parser = argparse.ArgumentParser(description="Elimina e ricrea le tabelle dell'ERP")
    parser.add_argument("--yes", action="store_true", help="Non chiedere conferma")
    args = parser.parse_args()

    if settings.is_production:
        sys.exit("Reset non consentito con APP_ENV=production")

    if not args.yes:
        answer = input("Tutti i dati verranno eliminati. Continuare? [s/N] ")
        if answer.strip().lower() not in ("s", "si", "sì", "y", "yes"):
            print("Operazione annullata.")
            return

    asyncio.run(reset())


if __name__ == "__main__":
    main()
