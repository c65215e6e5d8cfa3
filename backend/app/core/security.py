"""
Modulo di sicurezza per autenticazione JWT
Progetto: ERP Manager (Gestionale ERP)

Funzioni per hashing password e gestione del token di sessione.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.schemas.token import TokenPayload, UserClaims

# Context per hashing password (salt per-hash, confronto a tempo costante)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hasha una password in chiaro.

    Args:
        password: Password in chiaro

    Returns:
        Password hashata
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifica una password in chiaro contro una hashata.

    Un hash malformato o di uno schema sconosciuto equivale
    a una password errata.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(
    claims: UserClaims,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Crea il token di sessione firmato.

    Il token contiene {sub, username, permissions, is_admin} e
    scade dopo `access_token_expire_days` giorni.

    Args:
        claims: Identità da incorporare nel token
        expires_delta: Durata alternativa (usata nei test)

    Returns:
        Token JWT codificato
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.access_token_expire_days)
    expire = datetime.now(timezone.utc) + expires_delta

    payload = {
        "sub": claims.sub,
        "username": claims.username,
        "permissions": list(claims.permissions),
        "is_admin": claims.is_admin,
        "exp": expire,
        "type": "access",
    }

    return jwt.encode(
        payload,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: Optional[str]) -> TokenPayload:
    """
    Decodifica e valida un token JWT.

    Args:
        token: Token JWT da decodificare

    Returns:
        TokenPayload con i claim del token

    Raises:
        AuthenticationError: token assente, malformato, scaduto o con firma non valida
    """
    if not token:
        raise AuthenticationError("Token di autenticazione non fornito")

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Token invalido o scaduto: {e}") from e

    if payload.get("type") != "access":
        raise AuthenticationError("Tipo di token non valido")

    try:
        token_data = TokenPayload(
            sub=payload.get("sub"),
            username=payload.get("username"),
            permissions=payload.get("permissions") or [],
            is_admin=bool(payload.get("is_admin", False)),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            type=payload["type"],
        )
    except (KeyError, TypeError, PydanticValidationError) as e:
        raise AuthenticationError("Token invalido: claim mancanti") from e

    if not token_data.sub:
        raise AuthenticationError("Token invalido: missing subject")

    return token_data


# Export delle funzioni
__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
]
