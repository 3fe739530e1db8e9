"""FastAPI dependency injection functions."""

import secrets
from typing import Annotated

from fastapi import Depends, Header, Request, Response

from storefront.api.middleware.error_handler import AuthenticationError
from storefront.core.config import get_settings


def get_session_cookie_config() -> dict:
    """Get session cookie configuration from settings."""
    settings = get_settings()
    # SameSite=None requires Secure=True; use Lax for local development
    samesite = "none" if settings.session_cookie_secure else "lax"
    return {
        "key": settings.session_cookie_name,
        "max_age": settings.session_cookie_max_age,
        "httponly": True,
        "secure": settings.session_cookie_secure,
        "samesite": samesite,
        "path": "/",
    }


# Cookie utility functions


def get_session_id(request: Request) -> str | None:
    """Extract the session id from the X-Session-Id header or cookie.

    Checks header first (works when third-party cookies are blocked),
    then falls back to cookie.

    Args:
        request: FastAPI request object.

    Returns:
        str | None: The session id or None if not present.
    """
    header_id = request.headers.get("x-session-id")
    if header_id:
        return header_id

    config = get_session_cookie_config()
    return request.cookies.get(config["key"])


def set_session_cookie(response: Response, session_id: str) -> None:
    """Set session cookie on response.

    Args:
        response: FastAPI response object.
        session_id: The session id to set.
    """
    config = get_session_cookie_config()
    response.set_cookie(
        key=config["key"],
        value=session_id,
        max_age=config["max_age"],
        httponly=config["httponly"],
        secure=config["secure"],
        samesite=config["samesite"],
        path=config["path"],
    )


def clear_session_cookie(response: Response) -> None:
    """Clear session cookie from response.

    Args:
        response: FastAPI response object.
    """
    config = get_session_cookie_config()
    response.delete_cookie(
        key=config["key"],
        path=config["path"],
    )


def get_auth_token(request: Request) -> str | None:
    """Read the Supabase access token from the auth cookie."""
    return request.cookies.get(get_settings().auth_cookie_name)


def set_auth_cookie(response: Response, access_token: str) -> None:
    """Store the Supabase access token in the login cookie."""
    settings = get_settings()
    config = get_session_cookie_config()
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=access_token,
        max_age=settings.auth_cookie_max_age,
        httponly=True,
        secure=config["secure"],
        samesite=config["samesite"],
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    """Remove the login cookie."""
    response.delete_cookie(key=get_settings().auth_cookie_name, path="/")


SessionId = Annotated[str | None, Depends(get_session_id)]
AuthToken = Annotated[str | None, Depends(get_auth_token)]


# Shared-secret protection


def _secret_matches(provided: str | None, expected: str) -> bool:
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


async def verify_cron_auth(
    x_cron_auth: Annotated[str | None, Header(description="Cron job secret")] = None,
) -> None:
    """Require the configured cron secret in the x-cron-auth header.

    Raises:
        AuthenticationError: If the header is missing, wrong, or no secret is configured.
    """
    if not _secret_matches(x_cron_auth, get_settings().cron_auth_token):
        raise AuthenticationError("Invalid or missing cron secret")


async def verify_admin_auth(
    x_admin_auth: Annotated[str | None, Header(description="Admin secret")] = None,
) -> None:
    """Require the configured admin secret in the x-admin-auth header.

    Raises:
        AuthenticationError: If the header is missing, wrong, or no secret is configured.
    """
    if not _secret_matches(x_admin_auth, get_settings().admin_auth_token):
        raise AuthenticationError("Invalid or missing admin secret")


CronAuth = Depends(verify_cron_auth)
AdminAuth = Depends(verify_admin_auth)
