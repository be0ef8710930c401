# =============================================================================
# tests/test_access_control.py - Sign-In Gate Tests
# =============================================================================
# Tests for AccessConfig / AccessPolicy:
# - Allowed-domain emails are admitted without touching the whitelist
# - Everything else is admitted iff an exact lowercase whitelist row exists
# - Only domain membership grants admin on account creation
#
# Run with: pytest tests/test_access_control.py -v
# =============================================================================

from dataclasses import FrozenInstanceError

import pytest

from app.config import Settings
from core.services.access_control import AccessConfig, AccessPolicy
from core.services.whitelist_service import WhitelistService
from tests.conftest import make_whitelist_entry


# =============================================================================
# AccessConfig Tests
# =============================================================================

class TestAccessConfig:
    """Tests for the immutable allowed-domain configuration."""

    def test_from_settings_parses_comma_list(self):
        """Domains are split on commas and trimmed."""
        settings = Settings(
            SUPABASE_URL="https://x.supabase.co",
            SUPABASE_SERVICE_KEY="key",
            ALLOWED_EMAIL_DOMAINS=" acme.com, acme.io ,",
        )

        config = AccessConfig.from_settings(settings)

        assert config.allowed_domains == ("acme.com", "acme.io")

    def test_empty_config_allows_no_domain(self):
        config = AccessConfig()

        assert config.is_allowed_domain("a@acme.com") is False

    def test_domain_match_is_exact(self):
        """Subdomains and suffixes are different domains."""
        config = AccessConfig(allowed_domains=("acme.com",))

        assert config.is_allowed_domain("a@acme.com") is True
        assert config.is_allowed_domain("a@eu.acme.com") is False
        assert config.is_allowed_domain("a@notacme.com") is False

    def test_domain_match_is_case_sensitive(self):
        """Domains are compared exactly as configured."""
        config = AccessConfig(allowed_domains=("acme.com",))

        assert config.is_allowed_domain("a@ACME.com") is False

    def test_config_is_frozen(self):
        config = AccessConfig(allowed_domains=("acme.com",))

        with pytest.raises(FrozenInstanceError):
            config.allowed_domains = ("other.com",)


# =============================================================================
# is_email_allowed Tests
# =============================================================================

class TestIsEmailAllowed:
    """Tests for the admission decision."""

    def test_allowed_domain_with_empty_whitelist(self, access_policy):
        """acme.com is allowed, other.com is not, with no whitelist rows."""
        assert access_policy.is_email_allowed("a@acme.com") is True
        assert access_policy.is_email_allowed("a@other.com") is False

    @pytest.mark.parametrize("email", ["a@acme.com", "first.last@acme.com", "x+tag@acme.com"])
    def test_allowed_domain_ignores_whitelist(self, fake_db, access_policy, email):
        """Domain members are admitted whatever the whitelist holds."""
        make_whitelist_entry(fake_db, "someone@else.org")

        assert access_policy.is_email_allowed(email) is True

    def test_allowed_domain_skips_database(self, fake_db, access_policy):
        """The domain check short-circuits before any query."""
        access_policy.is_email_allowed("a@acme.com")

        assert fake_db.queries == []

    def test_whitelisted_email_is_allowed(self, fake_db, access_policy):
        make_whitelist_entry(fake_db, "guest@partner.org")

        assert access_policy.is_email_allowed("guest@partner.org") is True

    def test_whitelist_lookup_lowercases_email(self, fake_db, access_policy):
        """Mixed-case input matches the stored lowercase row."""
        make_whitelist_entry(fake_db, "guest@partner.org")

        assert access_policy.is_email_allowed("Guest@Partner.ORG") is True

    def test_non_whitelisted_email_is_denied(self, fake_db, access_policy):
        make_whitelist_entry(fake_db, "guest@partner.org")

        assert access_policy.is_email_allowed("other@partner.org") is False

    def test_no_domains_configured_uses_whitelist_only(self, fake_db):
        policy = AccessPolicy(AccessConfig(), WhitelistService(fake_db))
        make_whitelist_entry(fake_db, "a@acme.com")

        assert policy.is_email_allowed("a@acme.com") is True
        assert policy.is_email_allowed("b@acme.com") is False

    def test_database_errors_propagate(self, fake_db, access_policy):
        """A failed lookup is fatal, not a silent deny."""
        fake_db.fail_with = RuntimeError("connection refused")

        with pytest.raises(RuntimeError, match="connection refused"):
            access_policy.is_email_allowed("guest@partner.org")


# =============================================================================
# should_be_admin Tests
# =============================================================================

class TestShouldBeAdmin:
    """Tests for the admin bootstrap rule."""

    def test_domain_member_is_admin(self, access_policy):
        assert access_policy.should_be_admin("a@acme.com") is True

    def test_whitelisted_only_is_not_admin(self, fake_db, access_policy):
        make_whitelist_entry(fake_db, "guest@partner.org")

        assert access_policy.should_be_admin("guest@partner.org") is False

    def test_no_domains_means_no_admins(self, fake_db):
        policy = AccessPolicy(AccessConfig(), WhitelistService(fake_db))

        assert policy.should_be_admin("a@acme.com") is False


# =============================================================================
# check_sign_in Tests
# =============================================================================

class TestCheckSignIn:
    """Tests for the boolean sign-in gate."""

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_missing_email_is_denied(self, fake_db, access_policy, email):
        assert access_policy.check_sign_in(email) is False
        assert fake_db.queries == []

    def test_allowed_email_passes(self, access_policy):
        assert access_policy.check_sign_in("a@acme.com") is True

    def test_unknown_email_is_denied_without_side_effects(self, fake_db, access_policy):
        """A deny only reads the whitelist."""
        assert access_policy.check_sign_in("stranger@other.com") is False
        assert fake_db.queries == [("email_whitelist", "select")]
