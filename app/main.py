# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the HQ API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.exceptions import (
    HQException,
    hq_exception_handler,
    validation_exception_handler,
)
from app.routers import account, admin_users, health, uploads, whitelist
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the effective access configuration on startup so a misconfigured
    ALLOWED_EMAIL_DOMAINS is visible immediately.
    """
    logger.info(f"Starting {settings.APP_NAME} API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if settings.allowed_email_domains_list:
        logger.info(f"Allowed email domains: {settings.allowed_email_domains_list}")
    else:
        logger.warning("ALLOWED_EMAIL_DOMAINS is empty; only whitelisted emails can sign in")

    providers = {
        "postmark": settings.has_postmark,
        "llm": settings.has_llm,
        "cloudflare": settings.has_cloudflare,
        "replicate": settings.has_replicate,
    }
    logger.info(f"Configured providers: {[name for name, ok in providers.items() if ok]}")
    if not settings.has_postmark and not settings.is_development:
        logger.warning("POSTMARK_API_KEY is not set; magic-link emails cannot be delivered")

    yield

    logger.info(f"Shutting down {settings.APP_NAME} API")


# Create FastAPI application
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="""
## Internal Admin API

Passwordless sign-in restricted to approved email domains plus an
admin-managed whitelist of individual addresses.

### Access Rules

| Email | Can sign in | Admin on first sign-in |
|-------|-------------|------------------------|
| On an allowed domain | Yes | Yes |
| Whitelisted | Yes | No |
| Anything else | No | - |

### Quick Start

```bash
# 1. Request a sign-in link
curl -X POST http://localhost:8000/api/v1/auth/magic-link \\
  -H "Content-Type: application/json" \\
  -d '{"email": "ada@acme.com"}'

# 2. Exchange the emailed token for a session
curl -X POST http://localhost:8000/api/v1/auth/verify \\
  -H "Content-Type: application/json" \\
  -d '{"email": "ada@acme.com", "token": "..."}'

# 3. Call the API
curl http://localhost:8000/api/v1/auth/me -H "Authorization: Bearer <access_token>"
```
""",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Magic-link sign-in and the current user",
        },
        {
            "name": "Admin",
            "description": "User administration (admins only)",
        },
        {
            "name": "Whitelist",
            "description": "Individually allowed email addresses (admins only)",
        },
        {
            "name": "Account",
            "description": "The signed-in user's own profile",
        },
        {
            "name": "Uploads",
            "description": "File uploads to object storage",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(HQException)
async def handle_hq_exception(request: Request, exc: HQException):
    """Handle custom HQ exceptions."""
    return await hq_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# User administration endpoints
app.include_router(
    admin_users.router,
    prefix="/api/v1/admin/users",
    tags=["Admin"]
)

# Email whitelist endpoints
app.include_router(
    whitelist.router,
    prefix="/api/v1/email-whitelist",
    tags=["Whitelist"]
)

# Own account endpoints
app.include_router(
    account.router,
    prefix="/api/v1/account",
    tags=["Account"]
)

# File upload endpoints
app.include_router(
    uploads.router,
    prefix="/api/v1/uploads",
    tags=["Uploads"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": f"{settings.APP_NAME} API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
