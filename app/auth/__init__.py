# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Magic-link sign-in with bearer session tokens.
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import get_current_user, require_admin
from app.auth.models import AuthUser, TokenPayload

__all__ = [
    "get_current_user",
    "require_admin",
    "AuthUser",
    "TokenPayload",
]
