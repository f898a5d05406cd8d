"""Authentication-related Pydantic models."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Request model for login."""

    password: str


class AuthResponse(BaseModel):
    """Response model for authentication endpoints."""

    access_token: str
    token_type: str
