# =============================================================================
# core/services/whitelist_service.py - Email Whitelist Business Logic
# =============================================================================
# CRUD over the email_whitelist table.
#
# Emails are always stored trimmed and lowercased, and the table has a
# unique constraint on email. That constraint is the only guard against
# two admins adding the same address at once; a violation surfaces as
# WhitelistEmailExistsError (HTTP 409).
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from postgrest.exceptions import APIError
from supabase import Client

from app.exceptions import (
    InvalidEmailError,
    WhitelistEmailExistsError,
    WhitelistEntryNotFoundError,
)
from lib.supabase_client import SupabaseClient, is_unique_violation
from lib.utils import is_valid_email, normalize_email, normalize_uuid

logger = logging.getLogger(__name__)

TABLE = "email_whitelist"


class WhitelistService:
    """
    Service for email whitelist operations.

    Provides a clean interface between API routes and the database.
    """

    def __init__(self, client: Client | None = None):
        self.client = client if client is not None else SupabaseClient.get_client()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_entries(self) -> list[dict[str, Any]]:
        """Return all entries, newest first."""
        response = (
            self.client.table(TABLE)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        """
        Look up an entry by exact (normalized) email.

        Database errors propagate; callers treat them as fatal.
        """
        response = (
            self.client.table(TABLE)
            .select("id, email")
            .eq("email", normalize_email(email))
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    def is_whitelisted(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add_entry(
        self,
        email: str | None,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> dict[str, Any]:
        """
        Add an email to the whitelist.

        Args:
            email: Address to allow; validated then normalized
            notes: Optional notes (empty string stored as NULL)
            created_by: ID of the admin adding the entry

        Returns:
            The inserted row

        Raises:
            InvalidEmailError: If email is missing or malformed
            WhitelistEmailExistsError: If the address is already whitelisted
        """
        if not email or not is_valid_email(email.strip()):
            raise InvalidEmailError(email)

        data = {
            "id": str(uuid4()),
            "email": normalize_email(email),
            "notes": notes or None,
            "created_by": normalize_uuid(created_by) if created_by else None,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            response = self.client.table(TABLE).insert(data).execute()
        except APIError as e:
            if is_unique_violation(e):
                raise WhitelistEmailExistsError(data["email"])
            raise

        if not response.data:
            raise Exception("Insert returned no data")

        entry = response.data[0]
        logger.info(f"Whitelisted {entry['email']} (by {created_by})")
        return entry

    def update_notes(self, entry_id: str, notes: str | None) -> dict[str, Any]:
        """
        Replace an entry's notes. Notes are the only mutable field.

        Raises:
            WhitelistEntryNotFoundError: If no entry has this ID
        """
        response = (
            self.client.table(TABLE)
            .update({"notes": notes or None})
            .eq("id", entry_id)
            .execute()
        )
        if not response.data:
            raise WhitelistEntryNotFoundError(entry_id)
        return response.data[0]

    def delete_entry(self, entry_id: str) -> None:
        """
        Remove an entry.

        Existing users keep their accounts, but the next sign-in attempt
        is re-checked and will be denied unless their domain is allowed.

        Raises:
            WhitelistEntryNotFoundError: If no entry has this ID
        """
        response = (
            self.client.table(TABLE)
            .delete()
            .eq("id", entry_id)
            .execute()
        )
        if not response.data:
            raise WhitelistEntryNotFoundError(entry_id)
        logger.info(f"Removed whitelist entry {entry_id}")
