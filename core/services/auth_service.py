# =============================================================================
# core/services/auth_service.py - Magic-Link Sign-In
# =============================================================================
# Passwordless sign-in in two steps:
#
# 1. request_magic_link(email)
#    - sign-in gate (AccessPolicy.check_sign_in)
#    - random token emailed to the user; only its SHA-256 is stored
# 2. verify_magic_link(email, token)
#    - token consumed (deleted) whether or not it is still valid
#    - sign-in gate again (whitelist may have changed since step 1)
#    - user created on first sign-in, with is_admin from the access policy
#    - session JWT issued
#
# A denied gate never creates a token, user or session.
# =============================================================================

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from jose import ExpiredSignatureError, JWTError, jwt
from supabase import Client

from app.exceptions import (
    AccessDeniedError,
    EmailDeliveryError,
    InvalidMagicLinkError,
    NotAuthenticatedError,
)
from core.services.access_control import AccessPolicy
from core.services.user_service import UserService
from lib.email_templates import magic_link_email
from lib.mailer import EmailClient, EmailError
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_email

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger(__name__)

TOKENS_TABLE = "verification_tokens"


@dataclass(frozen=True)
class AuthConfig:
    """Settings the sign-in flow needs, fixed at startup."""

    secret_key: str
    app_url: str
    app_name: str
    app_description: str | None
    email_from: str
    magic_link_max_age: timedelta = timedelta(hours=24)
    session_max_age: timedelta = timedelta(days=30)
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthConfig:
        return cls(
            secret_key=settings.SECRET_KEY,
            app_url=settings.APP_URL.rstrip("/"),
            app_name=settings.APP_NAME,
            app_description=settings.APP_DESCRIPTION,
            email_from=settings.EMAIL_FROM,
            magic_link_max_age=timedelta(hours=settings.MAGIC_LINK_MAX_AGE_HOURS),
            session_max_age=timedelta(days=settings.SESSION_MAX_AGE_DAYS),
        )


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """
    Magic-link sign-in and session tokens.

    Attributes:
        config: AuthConfig
        policy: AccessPolicy deciding admission and admin bootstrap
        users: UserService
        mailer: EmailClient used to deliver links
    """

    def __init__(
        self,
        config: AuthConfig,
        policy: AccessPolicy,
        users: UserService,
        mailer: EmailClient,
        client: Client | None = None,
    ):
        self.config = config
        self.policy = policy
        self.users = users
        self.mailer = mailer
        self.client = client if client is not None else SupabaseClient.get_client()

    # -------------------------------------------------------------------------
    # Step 1: Request
    # -------------------------------------------------------------------------

    def request_magic_link(self, email: str | None, callback_url: str | None = None) -> str:
        """
        Email a sign-in link.

        Args:
            email: Address entered by the user
            callback_url: Optional post-sign-in destination carried in the link

        Returns:
            The normalized email the link was sent to

        Raises:
            AccessDeniedError: If the email may not sign in
            EmailDeliveryError: If the email provider fails
        """
        # Same normalized identifier that verify_magic_link gates on
        identifier = normalize_email(email) if email else ""
        if not self.policy.check_sign_in(identifier):
            raise AccessDeniedError()

        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + self.config.magic_link_max_age

        self.client.table(TOKENS_TABLE).insert({
            "identifier": identifier,
            "token_hash": hash_token(token),
            "expires_at": expires_at.isoformat(),
        }).execute()

        url = self.build_magic_link_url(identifier, token, callback_url)
        rendered = magic_link_email(
            email=identifier,
            url=url,
            app_name=self.config.app_name,
            app_description=self.config.app_description,
            max_age_hours=int(self.config.magic_link_max_age.total_seconds() // 3600),
        )

        try:
            self.mailer.send_email(
                from_=self.config.email_from,
                to=identifier,
                subject=rendered.subject,
                html_body=rendered.html_body,
                text_body=rendered.text_body,
                tag="magic-link",
                metadata={
                    "type": "authentication",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )
        except EmailError as e:
            raise EmailDeliveryError(e.message)

        logger.info(f"Magic link sent to {identifier}")
        return identifier

    def build_magic_link_url(self, email: str, token: str, callback_url: str | None = None) -> str:
        params = {"token": token, "email": email}
        if callback_url:
            params["callbackUrl"] = callback_url
        return f"{self.config.app_url}/auth/verify?{urlencode(params)}"

    # -------------------------------------------------------------------------
    # Step 2: Verify
    # -------------------------------------------------------------------------

    def verify_magic_link(self, email: str, token: str) -> tuple[dict[str, Any], str]:
        """
        Exchange an emailed token for a session.

        Returns:
            (user dict, session JWT)

        Raises:
            InvalidMagicLinkError: Unknown, used or expired token
            AccessDeniedError: Email no longer allowed to sign in
        """
        identifier = normalize_email(email)
        record = self._consume_token(identifier, token)
        if record is None:
            raise InvalidMagicLinkError()

        expires_at = datetime.fromisoformat(record["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            raise InvalidMagicLinkError("Sign-in link has expired")

        if not self.policy.check_sign_in(identifier):
            raise AccessDeniedError()

        user = self.users.find_by_email(identifier)
        if user is None:
            user = self.users.create_user(
                email=identifier,
                is_admin=self.policy.should_be_admin(identifier),
            )
        user = self.users.mark_email_verified(user["id"])

        return user, self.create_session_token(user)

    def _consume_token(self, identifier: str, token: str) -> dict[str, Any] | None:
        """Delete and return the matching token row, if any. Single use."""
        response = (
            self.client.table(TOKENS_TABLE)
            .delete()
            .eq("identifier", identifier)
            .eq("token_hash", hash_token(token))
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Session Tokens
    # -------------------------------------------------------------------------

    def create_session_token(self, user: dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user["id"]),
            "email": user["email"],
            "iat": int(now.timestamp()),
            "exp": int((now + self.config.session_max_age).timestamp()),
        }
        return jwt.encode(claims, self.config.secret_key, algorithm=self.config.algorithm)

    def decode_session_token(self, token: str) -> dict[str, Any]:
        """
        Verify a session JWT and return its claims.

        Raises:
            NotAuthenticatedError: If the token is invalid or expired
        """
        try:
            payload = jwt.decode(token, self.config.secret_key, algorithms=[self.config.algorithm])
        except ExpiredSignatureError:
            raise NotAuthenticatedError("Session has expired")
        except JWTError as e:
            logger.warning(f"Session token validation failed: {e}")
            raise NotAuthenticatedError("Invalid session token")

        if not payload.get("sub"):
            raise NotAuthenticatedError("Invalid session token")
        return payload
