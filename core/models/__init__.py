# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: User responses and admin/account update inputs
# - whitelist.py: Email whitelist entries and inputs
# - auth.py: Magic-link sign-in requests and session tokens
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# User Models
# -----------------------------------------------------------------------------
from .user import (
    AccountUpdate,
    AdminStatusUpdate,
    UserResponse,
)

# -----------------------------------------------------------------------------
# Whitelist Models
# -----------------------------------------------------------------------------
from .whitelist import (
    WhitelistCreate,
    WhitelistEntry,
    WhitelistNotesUpdate,
)

# -----------------------------------------------------------------------------
# Auth Models - Magic-link flow
# -----------------------------------------------------------------------------
from .auth import (
    MagicLinkRequest,
    MagicLinkSent,
    SessionToken,
    VerifyRequest,
)

__all__ = [
    # User
    "AccountUpdate",
    "AdminStatusUpdate",
    "UserResponse",
    # Whitelist
    "WhitelistCreate",
    "WhitelistEntry",
    "WhitelistNotesUpdate",
    # Auth
    "MagicLinkRequest",
    "MagicLinkSent",
    "SessionToken",
    "VerifyRequest",
]
