# =============================================================================
# app/routers/whitelist.py - Email Whitelist Endpoints
# =============================================================================
# Admin-only CRUD for individually allowed email addresses.
# Addresses on an allowed domain never need an entry here.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.auth import AuthUser, require_admin
from app.dependencies import WhitelistServiceDep
from core.models.whitelist import WhitelistCreate, WhitelistEntry, WhitelistNotesUpdate

router = APIRouter()


@router.get("", response_model=list[WhitelistEntry])
async def list_whitelist(
    whitelist: WhitelistServiceDep,
    admin: AuthUser = Depends(require_admin),
):
    """List whitelist entries, newest first."""
    return whitelist.list_entries()


@router.post("", response_model=WhitelistEntry, status_code=status.HTTP_201_CREATED)
async def add_to_whitelist(
    request: WhitelistCreate,
    whitelist: WhitelistServiceDep,
    admin: AuthUser = Depends(require_admin),
):
    """
    Whitelist an email address.

    Raises:
        400: Missing or malformed email
        409: Email already whitelisted
    """
    return whitelist.add_entry(request.email, notes=request.notes, created_by=admin.id)


@router.patch("/{entry_id}", response_model=WhitelistEntry)
async def update_whitelist_notes(
    entry_id: Annotated[str, Path(description="Whitelist entry ID")],
    request: WhitelistNotesUpdate,
    whitelist: WhitelistServiceDep,
    admin: AuthUser = Depends(require_admin),
):
    """Replace an entry's notes."""
    return whitelist.update_notes(entry_id, request.notes)


@router.delete("/{entry_id}")
async def remove_from_whitelist(
    entry_id: Annotated[str, Path(description="Whitelist entry ID")],
    whitelist: WhitelistServiceDep,
    admin: AuthUser = Depends(require_admin),
):
    """Remove an email from the whitelist."""
    whitelist.delete_entry(entry_id)
    return {"success": True}
