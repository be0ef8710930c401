# =============================================================================
# core/models/auth.py - Sign-In Schemas
# =============================================================================
# Request/response models for the magic-link flow:
# 1. MagicLinkRequest  -> POST /auth/magic-link
# 2. VerifyRequest     -> POST /auth/verify
# 3. SessionToken      <- returned by /auth/verify
# =============================================================================

from pydantic import BaseModel, Field

from .user import UserResponse


class MagicLinkRequest(BaseModel):
    """Ask for a sign-in link to be emailed."""

    email: str = Field(
        default="",
        description="Address to send the link to",
        examples=["ada@acme.com"],
    )

    callback_url: str | None = Field(
        default=None,
        description="Where the frontend should go after signing in"
    )


class MagicLinkSent(BaseModel):
    """Response once a link has been issued."""

    email: str
    message: str = "Check your email for a sign-in link"


class VerifyRequest(BaseModel):
    """Exchange an emailed token for a session."""

    email: str
    token: str = Field(..., min_length=1)


class SessionToken(BaseModel):
    """A bearer session token and the signed-in user."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Seconds until the token expires")
    user: UserResponse
