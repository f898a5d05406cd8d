"""Single-user authentication with JWT bearer tokens."""

from __future__ import annotations

import hmac
from datetime import UTC, datetime, timedelta

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from opentelemetry import trace

from .config import Settings, get_settings

# Initialize logger
logger = structlog.get_logger(__name__)

SUBJECT = "owner"

security = HTTPBearer()


def verify_password(password: str, settings: Settings) -> bool:
    """Compare a login password with the configured one in constant time."""
    return hmac.compare_digest(password.encode(), settings.app_password.encode())


def create_access_token(settings: Settings) -> str:
    """
    Create a JWT access token for the owner.

    Args:
        settings: Settings carrying the signing key and expiry

    Returns:
        Encoded JWT token
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("create_access_token"):
        logger.debug("jwt_token_creating")

        expire = datetime.now(UTC) + timedelta(days=settings.jwt_expiration_days)
        to_encode = {"sub": SUBJECT, "exp": expire}
        encoded_jwt = jwt.encode(
            to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
        )

        logger.debug("jwt_token_created")

        return encoded_jwt


def decode_access_token(token: str, settings: Settings) -> dict | None:
    """
    Decode and verify a JWT token.

    Returns:
        Decoded token payload or None if invalid
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("decode_access_token") as span:
        try:
            payload = jwt.decode(
                token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
            )
            logger.debug("jwt_token_decoded")
            return payload
        except JWTError as e:
            logger.warning("jwt_token_decode_failed", error=str(e), error_type=type(e).__name__)
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            return None


async def require_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Dependency guarding every folder and note route.

    Raises 401 if the token is missing its subject, expired or forged.
    """
    payload = decode_access_token(credentials.credentials, settings)
    if payload is None or payload.get("sub") != SUBJECT:
        logger.warning("auth_failed_invalid_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload
