"""Storefront login against Supabase Auth."""

import logging
from typing import Any

from supabase import Client

from storefront.api.middleware.error_handler import AuthenticationError
from storefront.core.supabase import get_supabase_client

logger = logging.getLogger(__name__)


class AuthService:
    """Service for the storefront login cookie."""

    def __init__(self, supabase_client: Client | None = None) -> None:
        self.client = supabase_client or get_supabase_client()

    async def check_auth(self, access_token: str | None) -> dict[str, Any]:
        """Resolve an access token to the logged-in user.

        Never raises: an absent, expired or rejected token simply means
        the visitor is not logged in.

        Args:
            access_token: Supabase access token from the auth cookie.

        Returns:
            dict: ``{"loggedIn": True, "email": ...}`` or ``{"loggedIn": False}``.
        """
        if not access_token:
            return {"loggedIn": False}

        try:
            response = self.client.auth.get_user(access_token)
        except Exception as e:
            logger.info("Auth token rejected: %s", str(e))
            return {"loggedIn": False}

        user = getattr(response, "user", None) if response else None
        if user is None:
            return {"loggedIn": False}
        return {"loggedIn": True, "email": getattr(user, "email", None)}

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Sign in with email and password.

        Args:
            email: User's email address.
            password: User's password.

        Returns:
            dict: ``access_token``, ``email`` and ``expires_in`` of the new session.

        Raises:
            AuthenticationError: If Supabase rejects the credentials or
                returns no session.
        """
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning("Login failed for %s: %s", email, str(e))
            raise AuthenticationError("Invalid email or password") from e

        if not response or not response.user or not response.session:
            raise AuthenticationError("Login failed: No session created")

        logger.info("User logged in: %s", response.user.id)
        return {
            "access_token": response.session.access_token,
            "email": response.user.email or email,
            "expires_in": response.session.expires_in or 3600,
        }

    async def logout(self, access_token: str | None) -> None:
        """Invalidate the Supabase session behind an access token.

        Failures are only logged; the caller clears the cookie either way.
        """
        if not access_token:
            return

        try:
            self.client.auth.set_session(access_token, "")
            self.client.auth.sign_out()
            logger.info("User logged out")
        except Exception as e:
            logger.warning("Logout failed: %s", str(e))
