# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for services.
# These are injected into route handlers using Depends(), and swapped out
# in tests with app.dependency_overrides.
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from supabase import Client

from app.config import settings
from core.services.access_control import AccessConfig, AccessPolicy
from core.services.auth_service import AuthConfig, AuthService
from core.services.storage_service import StorageService
from core.services.user_service import UserService
from core.services.whitelist_service import WhitelistService
from lib.mailer import EmailClient
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> Client:
    """Get the singleton Supabase client."""
    return SupabaseClient.get_client()


@lru_cache
def get_access_config() -> AccessConfig:
    """Allowed domains are parsed once, at first use."""
    return AccessConfig.from_settings(settings)


@lru_cache
def get_auth_config() -> AuthConfig:
    return AuthConfig.from_settings(settings)


@lru_cache
def get_email_client() -> EmailClient:
    return EmailClient.from_settings()


def get_user_service(client: Annotated[Client, Depends(get_supabase_client)]) -> UserService:
    return UserService(client)


def get_whitelist_service(client: Annotated[Client, Depends(get_supabase_client)]) -> WhitelistService:
    return WhitelistService(client)


def get_storage_service(client: Annotated[Client, Depends(get_supabase_client)]) -> StorageService:
    return StorageService(client)


def get_access_policy(
    config: Annotated[AccessConfig, Depends(get_access_config)],
    whitelist: Annotated[WhitelistService, Depends(get_whitelist_service)],
) -> AccessPolicy:
    return AccessPolicy(config, whitelist)


def get_auth_service(
    config: Annotated[AuthConfig, Depends(get_auth_config)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    users: Annotated[UserService, Depends(get_user_service)],
    mailer: Annotated[EmailClient, Depends(get_email_client)],
    client: Annotated[Client, Depends(get_supabase_client)],
) -> AuthService:
    return AuthService(config, policy, users, mailer, client)


# Type aliases for dependency injection
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
WhitelistServiceDep = Annotated[WhitelistService, Depends(get_whitelist_service)]
StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
