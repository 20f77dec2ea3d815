# src/infrastructure/auth/admin_tokens.py

from datetime import datetime, timedelta, timezone
import os

from dotenv import load_dotenv
from jose import JWTError, jwt

from src.domain.exceptions import ConfigurationError, UnauthorizedError

load_dotenv()

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(days=7)


def _secret_key() -> str:
    secret = os.getenv("SECRET_KEY")
    if not secret:
        raise ConfigurationError("Token signing key not configured. Set SECRET_KEY.")
    return secret


def create_admin_token(admin_id: str, expires_in: timedelta = DEFAULT_TOKEN_TTL) -> str:
    expire = datetime.now(timezone.utc) + expires_in
    return jwt.encode({"id": admin_id, "exp": expire}, _secret_key(), algorithm=ALGORITHM)


def resolve_admin_id(authorization: str | None) -> str:
    """Extract the admin id from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise UnauthorizedError("Token Not Found")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Token Not Found")

    try:
        payload = jwt.decode(token.strip(), _secret_key(), algorithms=[ALGORITHM])
    except JWTError as exc:
        raise UnauthorizedError(str(exc)) from exc

    admin_id = payload.get("id")
    if not admin_id:
        raise UnauthorizedError("Token carries no admin id")
    return admin_id
