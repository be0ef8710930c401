# =============================================================================
# lib/mailer.py - Outbound Email (Postmark)
# =============================================================================
# Thin wrapper around Postmark's REST API, called with httpx.
#
# In development (or whenever log_only is set) emails are written to the
# log instead of being sent, so magic links can be copied from the console.
#
# Usage:
#   from lib.mailer import EmailClient
#   mailer = EmailClient.from_settings()
#   mailer.send_email(from_="HQ <noreply@acme.com>", to="ada@acme.com",
#                     subject="Hi", text_body="Hello")
# =============================================================================

from __future__ import annotations

import logging
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

POSTMARK_API_URL = "https://api.postmarkapp.com"
MAX_BATCH_SIZE = 500


class EmailError(ApplicationError):
    """Raised for invalid email input or a failed send."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=kwargs.pop("code", "EMAIL_ERROR"), **kwargs)


def format_email_address(email: str, name: str | None = None) -> str:
    """
    Format an address with an optional display name.

    Names containing special characters are quoted.

    Example:
        format_email_address("a@acme.com", "Ada")       # "Ada <a@acme.com>"
        format_email_address("a@acme.com", "Doe, Jane") # '"Doe, Jane" <a@acme.com>'
    """
    if not name:
        return email
    if re.search(r'[,;:<>@"\\]', name):
        escaped = name.replace('"', '\\"')
        name = f'"{escaped}"'
    return f"{name} <{email}>"


def _join(value: str | list[str] | None) -> str | None:
    if value is None:
        return None
    return ",".join(value) if isinstance(value, list) else value


class EmailClient:
    """
    Postmark client.

    Attributes:
        api_key: Postmark server token
        log_only: Log messages instead of sending them
    """

    def __init__(
        self,
        api_key: str | None,
        log_only: bool = False,
        http_client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.log_only = log_only
        self.http = http_client or httpx.Client(base_url=POSTMARK_API_URL, timeout=30)

    @classmethod
    def from_settings(cls) -> EmailClient:
        return cls(
            api_key=settings.POSTMARK_API_KEY,
            log_only=settings.is_development,
        )

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def send_email(
        self,
        from_: str,
        to: str | list[str],
        subject: str,
        html_body: str | None = None,
        text_body: str | None = None,
        cc: str | list[str] | None = None,
        bcc: str | list[str] | None = None,
        attachments: list[dict[str, str]] | None = None,
        tag: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Send one email.

        Returns:
            Postmark's response body (or a mock response in log-only mode)

        Raises:
            EmailError: On missing fields, missing credentials or provider failure
        """
        if not from_ or not to or not subject:
            raise EmailError("Missing required fields: from, to, and subject are required")
        if not html_body and not text_body:
            raise EmailError("Either html_body or text_body must be provided")

        message = self._build_message(
            from_, to, subject, html_body, text_body, cc, bcc, attachments, tag, metadata
        )

        if self.log_only:
            return self._log_message(message)

        return self._post("/email", message)

    def send_bulk_emails(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Send up to 500 emails in one batch.

        Each item takes the keyword arguments of send_email.
        """
        if not messages:
            raise EmailError("No emails provided")
        if len(messages) > MAX_BATCH_SIZE:
            raise EmailError(f"Maximum {MAX_BATCH_SIZE} emails per batch")

        batch = [
            self._build_message(
                m["from_"], m["to"], m["subject"],
                m.get("html_body"), m.get("text_body"),
                m.get("cc"), m.get("bcc"), m.get("attachments"),
                m.get("tag"), m.get("metadata"),
            )
            for m in messages
        ]

        if self.log_only:
            return [self._log_message(m) for m in batch]

        return self._post("/email/batch", batch)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _build_message(from_, to, subject, html_body, text_body, cc, bcc, attachments, tag, metadata):
        message: dict[str, Any] = {
            "From": from_,
            "To": _join(to),
            "Subject": subject,
        }
        if html_body:
            message["HtmlBody"] = html_body
        if text_body:
            message["TextBody"] = text_body
        if cc:
            message["Cc"] = _join(cc)
        if bcc:
            message["Bcc"] = _join(bcc)
        if attachments:
            message["Attachments"] = attachments
        if tag:
            message["Tag"] = tag
        if metadata:
            message["Metadata"] = metadata
        return message

    def _post(self, path: str, payload: Any) -> Any:
        if not self.api_key:
            raise EmailError(
                "Postmark is not configured",
                code="EMAIL_NOT_CONFIGURED",
                suggestion="Set POSTMARK_API_KEY in your .env file",
            )

        try:
            response = self.http.post(
                path,
                json=payload,
                headers={
                    "Accept": "application/json",
                    "X-Postmark-Server-Token": self.api_key,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Postmark request failed: {e}")
            raise EmailError(f"Postmark request failed: {e}", code="EMAIL_SEND_FAILED")

        return response.json()

    @staticmethod
    def _log_message(message: dict[str, Any]) -> dict[str, Any]:
        body = message.get("TextBody") or message.get("HtmlBody", "")[:500]
        logger.info(
            "EMAIL (development mode)\n"
            f"From: {message['From']}\n"
            f"To: {message['To']}\n"
            f"Subject: {message['Subject']}\n"
            f"Tag: {message.get('Tag')}\n"
            f"{body}"
        )
        return {
            "To": message["To"],
            "SubmittedAt": datetime.now(timezone.utc).isoformat(),
            "MessageID": f"dev-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}",
            "ErrorCode": 0,
            "Message": "Development mode - email logged",
        }
