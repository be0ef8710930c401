# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict


class TokenPayload(BaseModel):
    """
    Decoded session JWT.

    Issued by AuthService.create_session_token after a magic-link sign-in.
    """
    sub: str  # User ID
    email: str | None = None
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp


class AuthUser(BaseModel):
    """
    The signed-in user, loaded from the users table on every request.

    is_admin is never taken from the token, so a revoked admin loses
    access on their next request.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str | None = None
    image: str | None = None
    is_admin: bool = False
