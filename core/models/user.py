# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# These models define the API contract for user operations:
# - UserResponse: A user as returned to clients
# - AdminStatusUpdate: Input for granting/revoking admin rights
# - AccountUpdate: Input for a user editing their own profile
#
# A user row is created on the first successful magic-link verification.
# is_admin is decided at that moment from the email domain.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field, StrictBool


class UserResponse(BaseModel):
    """
    Schema for returning user data to clients.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "name": "Ada",
            "email": "ada@acme.com",
            "image": null,
            "is_admin": true,
            "email_verified": "2024-01-15T10:30:00Z"
        }
    """

    id: str = Field(
        ...,
        description="Unique user identifier"
    )

    name: str | None = Field(
        default=None,
        description="Display name"
    )

    email: str = Field(
        ...,
        description="Sign-in email address"
    )

    image: str | None = Field(
        default=None,
        description="Avatar URL"
    )

    is_admin: bool = Field(
        default=False,
        description="Whether the user can manage users and the whitelist"
    )

    email_verified: datetime | None = Field(
        default=None,
        description="When the email was last confirmed via magic link"
    )

    model_config = {"from_attributes": True}


class AdminStatusUpdate(BaseModel):
    """
    Schema for changing a user's admin flag.

    StrictBool rejects "true"/1 so only a real JSON boolean is accepted.
    """

    is_admin: StrictBool = Field(
        ...,
        description="New admin status"
    )


class AccountUpdate(BaseModel):
    """
    Schema for a user updating their own account.

    Only fields that are present in the request are written.
    """

    name: str | None = Field(
        default=None,
        max_length=255,
        description="New display name"
    )

    image: str | None = Field(
        default=None,
        description="New avatar URL (usually from POST /uploads)"
    )
