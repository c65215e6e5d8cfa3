"""
Main Entry Point - FastAPI Application
Progetto: ERP Manager (Gestionale ERP)

Configura l'applicazione FastAPI con middleware, router e lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import api_v1_router
from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import AppException

# ------------------------------------------------------------
# Configurazione Logging
# ------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Codici errore per gli HTTPException sollevati da FastAPI/Starlette
_HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "RESOURCE_NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT_STATE",
    413: "PAYLOAD_TOO_LARGE",
}


def error_response(
    status_code: int,
    message: str,
    error_code: str,
    extra: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    """Risposta di errore uniforme: {success, message, error_code}."""
    content: dict[str, Any] = {
        "success": False,
        "message": message,
        "error_code": error_code,
    }
    if extra:
        content["details"] = extra
    return JSONResponse(status_code=status_code, content=content)


# ------------------------------------------------------------
# Lifespan Handler
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestisce il ciclo di vita dell'applicazione.

    - Startup: inizializza la connessione al database
    - Shutdown: chiude le connessioni database
    """
    logger.info("Avvio %s v%s", settings.app_name, settings.app_version)
    await init_db()
    logger.info("Applicazione avviata con successo")

    yield

    logger.info("Arresto applicazione in corso...")
    await close_db()
    logger.info("Applicazione arrestata")


# ------------------------------------------------------------
# FastAPI Application
# ------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    description="Gestionale ERP per contratti, fatture, pagamenti e progetti - Backend API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Gestore per tutte le eccezioni di dominio.

    Lo status HTTP e il codice errore sono definiti dalla classe
    dell'eccezione; il messaggio è mostrato all'utente così com'è.
    """
    if exc.status_code >= 500:
        logger.error("Errore applicativo su %s: %s", request.url.path, exc.detail)
    return error_response(exc.status_code, exc.detail, exc.error_code, exc.extra)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Converte gli HTTPException (rotte inesistenti, metodi non ammessi) nel formato uniforme."""
    error_code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(exc.status_code, str(exc.detail), error_code)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Gestore per errori di validazione dell'input.

    Il primo errore diventa il messaggio; l'elenco completo è in `details`.
    """
    errors = exc.errors()
    message = "Dati non validi"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        text = str(first.get("msg", "")).removeprefix("Value error, ")
        message = f"{field}: {text}" if field else text
    return error_response(
        422,
        message,
        "VALIDATION_ERROR",
        {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Gestore generico per tutte le eccezioni non catturate.

    Converte l'eccezione in risposta HTTP 500 e logga l'errore.
    """
    logger.error("Unhandled exception su %s: %s", request.url.path, exc, exc_info=True)
    return error_response(500, "Errore interno del server", "INTERNAL_SERVER_ERROR")


# ------------------------------------------------------------
# Middleware CORS
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------
@app.get(
    "/health",
    name="Health Check",
    summary="Controlla lo stato dell'applicazione",
    tags=["System"],
)
async def health_check() -> dict[str, str]:
    """
    Endpoint per il controllo dello stato di salute.

    Returns:
        dict: Stato dell'applicazione
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
    }


# ------------------------------------------------------------
# Router e file statici
# ------------------------------------------------------------
app.include_router(api_v1_router)

# I loghi caricati sono serviti come file statici
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)
