"""Authentication endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..auth import create_access_token, verify_password
from ..config import Settings, get_settings
from ..models import AuthResponse, LoginRequest
from ..observability import get_app_metrics, get_tracer

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=AuthResponse)
async def login(login: LoginRequest, settings: Settings = Depends(get_settings)):
    """
    Exchange the owner password for a JWT token.

    This is a single-user application: there is no registration and the
    password comes from configuration.
    """
    with tracer.start_as_current_span("login"):
        logger.info("login_attempt")

        if not verify_password(login.password, settings):
            logger.warning("login_failed_invalid_password")
            metrics.auth_failures.add(1, {"reason": "invalid_password"})
            raise HTTPException(status_code=401, detail="Invalid credentials")

        access_token = create_access_token(settings)

        logger.info("login_succeeded")
        return AuthResponse(access_token=access_token, token_type="bearer")
