# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# - get_current_user: valid session JWT + existing user, else 401
# - require_admin:     get_current_user + is_admin, else 403
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.auth.models import AuthUser, TokenPayload
from app.dependencies import get_auth_service, get_user_service
from app.exceptions import AdminRequiredError, NotAuthenticatedError, UserNotFoundError
from core.services.auth_service import AuthService
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; missing headers are reported as our own 401
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth: AuthService = Depends(get_auth_service),
    users: UserService = Depends(get_user_service),
) -> AuthUser:
    """
    Resolve the signed-in user from the Authorization header.

    This dependency:
    1. Extracts the Bearer token
    2. Verifies the session JWT signature and expiry
    3. Re-reads the user so admin changes take effect immediately

    Raises:
        NotAuthenticatedError: Missing/invalid token, or user deleted
    """
    if credentials is None:
        raise NotAuthenticatedError()

    payload = TokenPayload(**auth.decode_session_token(credentials.credentials))

    try:
        user = users.get_user(payload.sub)
    except UserNotFoundError:
        logger.warning(f"Session token for unknown user {payload.sub}")
        raise NotAuthenticatedError("User no longer exists")

    return AuthUser(**user)


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """
    Like get_current_user, but the user must be an admin.

    Raises:
        AdminRequiredError: Signed in but not an admin (403)
    """
    if not user.is_admin:
        logger.info(f"Non-admin {user.email} denied admin route")
        raise AdminRequiredError()
    return user
