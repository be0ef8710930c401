# =============================================================================
# core/services/access_control.py - Sign-In Authorization Decision
# =============================================================================
# Decides who may sign in and who becomes an admin on account creation.
#
# Two sources grant access:
# 1. AccessConfig.allowed_domains - any address at one of these domains
#    may sign in AND is made admin when its account is created
# 2. email_whitelist table - individually approved addresses may sign in
#    but are never made admin by this
#
# Nothing else grants access and there is no blocklist.
#
# Usage:
#   policy = AccessPolicy(AccessConfig.from_settings(settings), WhitelistService())
#   if policy.check_sign_in(email): ...
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lib.utils import email_domain, normalize_email

if TYPE_CHECKING:
    from app.config import Settings
    from core.services.whitelist_service import WhitelistService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessConfig:
    """
    Immutable access-control configuration.

    Built once at startup and passed to AccessPolicy. Domains are compared
    exactly as stored (case-sensitive).
    """

    allowed_domains: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: Settings) -> AccessConfig:
        return cls(allowed_domains=tuple(settings.allowed_email_domains_list))

    def is_allowed_domain(self, email: str) -> bool:
        """True if the allowlist is non-empty and contains the email's domain."""
        if not self.allowed_domains:
            return False
        return email_domain(email) in self.allowed_domains


class AccessPolicy:
    """
    The admission and admin-bootstrap rules.

    Attributes:
        config: Allowed domains
        whitelist: Lookup for individually whitelisted emails
    """

    def __init__(self, config: AccessConfig, whitelist: WhitelistService):
        self.config = config
        self.whitelist = whitelist

    def is_email_allowed(self, email: str) -> bool:
        """
        Decide whether an email may sign in.

        The domain check runs first and short-circuits, so allowed-domain
        users never touch the database. Otherwise the lowercased email must
        exactly match a whitelist row. Database errors propagate.
        """
        if self.config.is_allowed_domain(email):
            return True

        return self.whitelist.is_whitelisted(normalize_email(email))

    def should_be_admin(self, email: str) -> bool:
        """
        Admin flag for a brand-new account.

        Only domain membership grants admin; whitelisting alone never does.
        """
        return self.config.is_allowed_domain(email)

    def check_sign_in(self, email: str | None) -> bool:
        """
        The sign-in gate, run on every authentication attempt.

        Returns False (never raises for a denial) so callers can show one
        generic access-denied outcome. A missing email is always denied.
        """
        if not email or not email.strip():
            logger.warning("Sign-in rejected: no email provided")
            return False

        if not self.is_email_allowed(email):
            logger.info(f"Sign-in rejected: {email} is not allowed")
            return False

        logger.info(f"Sign-in allowed: {email}")
        return True
