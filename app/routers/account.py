# =============================================================================
# app/routers/account.py - Own Account Endpoints
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from app.dependencies import UserServiceDep
from core.models.user import AccountUpdate, UserResponse

router = APIRouter()


@router.patch("", response_model=UserResponse)
async def update_account(
    request: AccountUpdate,
    users: UserServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update the signed-in user's name and/or avatar.

    Fields left out of the request body are not changed.
    """
    changes = request.model_dump(exclude_unset=True)
    return UserResponse(**users.update_account(user.id, changes))
