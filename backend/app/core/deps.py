"""
Dependency Injection per autenticazione
Progetto: ERP Manager (Gestionale ERP)

Funzioni di dependency injection per autenticazione e autorizzazione.

Il token di sessione viene letto dal cookie HTTP-only (browser) oppure
dall'header `Authorization: Bearer` (client senza cookie). Le verifiche
di permesso usano i claim del token, senza accesso al database.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from app.core.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.permissions import ADMIN_SENTINEL, ensure_permission, is_admin
from app.core.security import decode_token
from app.schemas.token import UserClaims

logger = logging.getLogger(__name__)

# OAuth2 scheme - estrae il token dall'header Authorization
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False,
)


def extract_token(request: Request, bearer_token: Optional[str] = None) -> Optional[str]:
    """
    Restituisce il token della richiesta.

    Il cookie ha la precedenza sull'header Authorization.
    """
    cookie_token = request.cookies.get(settings.auth_cookie_name)
    if cookie_token:
        return cookie_token
    return bearer_token or None


async def get_current_claims(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
) -> UserClaims:
    """
    Dependency per ottenere l'identità corrente dal token JWT.

    Returns:
        I claim dell'utente autenticato

    Raises:
        AuthenticationError: token assente, invalido o scaduto
    """
    token_data = decode_token(extract_token(request, bearer_token))
    return UserClaims(
        sub=token_data.sub,
        username=token_data.username,
        permissions=token_data.permissions,
        is_admin=token_data.is_admin,
    )


async def get_optional_claims(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[UserClaims]:
    """
    Come `get_current_claims`, ma restituisce None per un chiamante
    non autenticato invece di sollevare un errore.
    """
    token = extract_token(request, bearer_token)
    if not token:
        return None
    try:
        return await get_current_claims(request, token)
    except AuthenticationError as e:
        logger.debug("Token ignorato su endpoint ad accesso libero: %s", e.detail)
        return None


def require_permission(*required: str):
    """
    Factory function per creare una dependency che verifica i permessi.

    Passa se l'utente è admin oppure possiede almeno uno dei permessi
    indicati (semantica "any-of").

    Example:
        @router.get("/projects")
        async def list_projects(claims: UserClaims = Depends(require_permission("projects"))):
            ...
    """
    async def permission_checker(
        claims: Annotated[UserClaims, Depends(get_current_claims)],
    ) -> UserClaims:
        try:
            ensure_permission(claims, required)
        except AuthorizationError:
            logger.warning(
                "Accesso negato a %s: permessi richiesti %s",
                claims.username, ", ".join(required),
            )
            raise
        return claims

    return permission_checker


async def require_admin(
    claims: Annotated[UserClaims, Depends(get_current_claims)],
) -> UserClaims:
    """
    Verifica che l'utente sia amministratore.

    Raises:
        AuthorizationError: se l'utente non è admin
    """
    if not is_admin(claims):
        logger.warning("Operazione %s negata a %s", ADMIN_SENTINEL, claims.username)
        raise AuthorizationError("Operazione riservata agli amministratori")
    return claims


# Type aliases per uso comune
CurrentClaims = Annotated[UserClaims, Depends(get_current_claims)]
OptionalClaims = Annotated[Optional[UserClaims], Depends(get_optional_claims)]
AdminClaims = Annotated[UserClaims, Depends(require_admin)]


# Export
__all__ = [
    "oauth2_scheme",
    "extract_token",
    "get_current_claims",
    "get_optional_claims",
    "require_permission",
    "require_admin",
    "CurrentClaims",
    "OptionalClaims",
    "AdminClaims",
]
