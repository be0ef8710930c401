# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - admin_users.py: User listing and admin flag management (admin only)
# - whitelist.py: Email whitelist CRUD (admin only)
# - account.py: The signed-in user's own profile
# - uploads.py: File uploads to object storage
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import account
from . import admin_users
from . import health
from . import uploads
from . import whitelist

__all__ = [
    "account",
    "admin_users",
    "health",
    "uploads",
    "whitelist",
]
