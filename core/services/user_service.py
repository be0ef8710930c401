# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Handles user lookups, account creation and admin-status changes.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from supabase import Client

from app.exceptions import SelfDemotionError, UserNotFoundError
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_email, normalize_uuid

logger = logging.getLogger(__name__)

TABLE = "users"
PUBLIC_COLUMNS = "id, name, email, image, is_admin, email_verified"


class UserService:
    """
    Service for user management operations.

    Provides a clean interface between API routes and database.
    """

    def __init__(self, client: Client | None = None):
        self.client = client if client is not None else SupabaseClient.get_client()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_user(self, user_id: str) -> dict[str, Any]:
        """
        Get a user by ID.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        user_id_str = normalize_uuid(user_id)
        response = (
            self.client.table(TABLE)
            .select(PUBLIC_COLUMNS)
            .eq("id", user_id_str)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        if not rows:
            raise UserNotFoundError(user_id_str)
        return rows[0]

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        response = (
            self.client.table(TABLE)
            .select(PUBLIC_COLUMNS)
            .eq("email", normalize_email(email))
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    def list_users(self) -> list[dict[str, Any]]:
        """Return every user ordered by email."""
        response = (
            self.client.table(TABLE)
            .select(PUBLIC_COLUMNS)
            .order("email")
            .execute()
        )
        return response.data or []

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_user(
        self,
        email: str,
        is_admin: bool,
        name: str | None = None,
        image: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a user. Only called after the sign-in gate has passed.

        Args:
            email: Verified email (stored normalized)
            is_admin: Decided by the access policy at creation time
            name: Optional display name
            image: Optional avatar URL

        Returns:
            Created user dict
        """
        data = {
            "id": str(uuid4()),
            "email": normalize_email(email),
            "name": name,
            "image": image,
            "is_admin": is_admin,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        response = self.client.table(TABLE).insert(data).execute()
        if not response.data:
            raise Exception("Insert returned no data")

        user = response.data[0]
        logger.info(f"Created user {user['id']} ({user['email']}), is_admin={is_admin}")
        return user

    def mark_email_verified(self, user_id: str) -> dict[str, Any]:
        return self._update(user_id, {"email_verified": datetime.now(timezone.utc).isoformat()})

    def set_admin_status(
        self,
        actor_id: str,
        target_id: str,
        is_admin: bool,
    ) -> dict[str, Any]:
        """
        Grant or revoke admin rights.

        An admin may not revoke their own flag. This is a courtesy guard,
        not a security boundary: any admin can still demote any other admin.

        Raises:
            SelfDemotionError: If actor == target and is_admin is False
            UserNotFoundError: If the target doesn't exist
        """
        if normalize_uuid(actor_id) == normalize_uuid(target_id) and not is_admin:
            raise SelfDemotionError()

        user = self._update(target_id, {"is_admin": is_admin})
        logger.info(f"User {actor_id} set is_admin={is_admin} on {target_id}")
        return user

    def update_account(self, user_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Update a user's own name/image.

        Only keys present in `changes` are written; an empty dict is a no-op.
        """
        allowed = {k: v for k, v in changes.items() if k in ("name", "image")}
        if not allowed:
            return self.get_user(user_id)
        return self._update(user_id, allowed)

    def _update(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        user_id_str = normalize_uuid(user_id)
        response = (
            self.client.table(TABLE)
            .update(data)
            .eq("id", user_id_str)
            .execute()
        )
        if not response.data:
            raise UserNotFoundError(user_id_str)
        return response.data[0]
