# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Passwordless sign-in:
#   POST /magic-link  email a single-use sign-in link
#   POST /verify      exchange the emailed token for a session JWT
#   GET  /me          the signed-in user
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser
from app.dependencies import AuthServiceDep, UserServiceDep
from core.models.auth import MagicLinkRequest, MagicLinkSent, SessionToken, VerifyRequest
from core.models.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/magic-link", response_model=MagicLinkSent)
async def request_magic_link(request: MagicLinkRequest, auth: AuthServiceDep) -> MagicLinkSent:
    """
    Send a sign-in link to an allowed email address.

    Raises:
        403: If the email is neither on an allowed domain nor whitelisted
    """
    email = auth.request_magic_link(request.email, callback_url=request.callback_url)
    return MagicLinkSent(email=email)


@router.post("/verify", response_model=SessionToken)
async def verify_magic_link(request: VerifyRequest, auth: AuthServiceDep) -> SessionToken:
    """
    Complete sign-in. The user is created on first sign-in.

    Raises:
        400: Unknown, used or expired link
        403: Email no longer allowed
    """
    user, token = auth.verify_magic_link(request.email, request.token)
    return SessionToken(
        access_token=token,
        expires_in=int(auth.config.session_max_age.total_seconds()),
        user=UserResponse(**user),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    users: UserServiceDep,
    user: AuthUser = Depends(get_current_user),
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
    """
    return UserResponse(**users.get_user(user.id))
