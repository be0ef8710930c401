# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .access_control import AccessConfig, AccessPolicy
from .auth_service import AuthConfig, AuthService
from .storage_service import StorageService
from .user_service import UserService
from .whitelist_service import WhitelistService

__all__ = [
    "AccessConfig",
    "AccessPolicy",
    "AuthConfig",
    "AuthService",
    "StorageService",
    "UserService",
    "WhitelistService",
]
