# =============================================================================
# app/routers/admin_users.py - User Administration Endpoints
# =============================================================================
# Admin-only: list users and grant/revoke admin rights.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, require_admin
from app.dependencies import UserServiceDep
from core.models.user import AdminStatusUpdate, UserResponse

router = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(
    users: UserServiceDep,
    admin: AuthUser = Depends(require_admin),
):
    """List all users ordered by email."""
    return [UserResponse(**user) for user in users.list_users()]


@router.patch("/{user_id}", response_model=UserResponse)
async def update_admin_status(
    user_id: Annotated[str, Path(description="User ID")],
    request: AdminStatusUpdate,
    users: UserServiceDep,
    admin: AuthUser = Depends(require_admin),
):
    """
    Grant or revoke admin rights.

    An admin cannot remove their own admin flag (400).
    """
    user = users.set_admin_status(
        actor_id=admin.id,
        target_id=user_id,
        is_admin=request.is_admin,
    )
    return UserResponse(**user)
