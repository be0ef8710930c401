# =============================================================================
# core/models/whitelist.py - Email Whitelist Schemas
# =============================================================================
# A whitelist entry lets one specific address sign in even though its domain
# is not in ALLOWED_EMAIL_DOMAINS. Whitelisted users never become admins
# automatically.
#
# Entries are created and deleted by admins; only notes can be edited.
# Emails are stored trimmed and lowercased and are unique.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class WhitelistEntry(BaseModel):
    """
    A whitelisted email as stored and returned to clients.

    Example:
        {
            "id": "2b1f...",
            "email": "guest@partner.org",
            "created_at": "2024-01-15T10:30:00Z",
            "created_by": "550e8400-...",
            "notes": "Contractor, Q1 only"
        }
    """

    id: str
    email: str
    created_at: datetime
    # Nulled by the database if the creating user is deleted
    created_by: str | None = None
    notes: str | None = None


class WhitelistCreate(BaseModel):
    """Input for adding an email to the whitelist."""

    email: str = Field(
        default="",
        description="Address to allow (normalized to lowercase)",
        examples=["guest@partner.org"],
    )

    notes: str | None = Field(
        default=None,
        description="Free-form reason or context"
    )


class WhitelistNotesUpdate(BaseModel):
    """Input for editing an entry's notes. Empty string clears them."""

    notes: str | None = None
