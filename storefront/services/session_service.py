"""Session business logic service."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from supabase import Client

from storefront.api.middleware.error_handler import NotFoundError
from storefront.core.config import get_settings
from storefront.core.supabase import get_supabase_client

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def empty_basket() -> dict[str, Any]:
    """Basket details of a fresh session."""
    return {"items": [], "customerDetails": {}, "deliveryDetails": {}}


class SessionService:
    """Service for managing anonymous visitor sessions."""

    TOKEN_LENGTH = 32  # Length of session id in characters

    def __init__(self, supabase_client: Client | None = None) -> None:
        """Initialize session service with Supabase client.

        Args:
            supabase_client: Optional Supabase client for testing.
        """
        self.client = supabase_client or get_supabase_client()

    def _generate_session_id(self) -> str:
        """Generate a cryptographically secure session id.

        Returns:
            str: A 32-character hex id.
        """
        return secrets.token_hex(self.TOKEN_LENGTH // 2)

    async def create_session(self) -> dict[str, Any]:
        """Create a new session with an empty basket.

        Returns:
            dict: The created session row.
        """
        session_data = {
            "session_id": self._generate_session_id(),
            "allow_cookies": False,
            "basket_details": empty_basket(),
            "temporary_selections": {},
        }

        response = (
            self.client.table("sessions")
            .insert(session_data)
            .execute()
        )

        session = response.data[0] if response.data else session_data
        logger.info("Created session %s", session["session_id"])
        return session

    async def get_session(self, session_id: str) -> dict[str, Any] | None:
        """Get a session by its id.

        Args:
            session_id: The session id from cookie or request.

        Returns:
            dict | None: The session data or None if not found.
        """
        response = (
            self.client.table("sessions")
            .select("*")
            .eq("session_id", session_id)
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def require_session(self, session_id: str | None) -> dict[str, Any]:
        """Get a session or raise 404.

        Raises:
            NotFoundError: If the id is empty or unknown.
        """
        session = await self.get_session(session_id) if session_id else None
        if session is None:
            raise NotFoundError("Session not found")
        return session

    async def get_or_create_session(self, session_id: str | None) -> tuple[dict[str, Any], bool]:
        """Get the session for an id, creating a new one if it is unknown.

        Returns:
            tuple: (session_data, created)
        """
        if session_id:
            session = await self.get_session(session_id)
            if session is not None:
                return session, False
        return await self.create_session(), True

    async def update_session(self, session_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Write fields of a session row.

        Raises:
            NotFoundError: If no row was updated.
        """
        update_data = {**data, "updated_at": _utcnow().isoformat()}
        response = (
            self.client.table("sessions")
            .update(update_data)
            .eq("session_id", session_id)
            .execute()
        )
        if not response.data:
            raise NotFoundError("Session not found")
        return response.data[0]

    async def accept_cookies(self, session_id: str | None) -> dict[str, Any]:
        """Record cookie consent on a session."""
        await self.require_session(session_id)
        session = await self.update_session(session_id, {"allow_cookies": True})
        logger.info("Cookies accepted for session %s", session_id)
        return session

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session (consent withdrawal or logout).

        Returns:
            bool: True if a row was deleted.
        """
        response = (
            self.client.table("sessions")
            .delete()
            .eq("session_id", session_id)
            .execute()
        )
        deleted = bool(response.data)
        logger.info("Deleted session %s: %s", session_id, deleted)
        return deleted

    async def delete_sessions_created_before(self, cutoff: datetime) -> int:
        """Delete every session created strictly before ``cutoff``.

        Runs as a single delete statement.

        Returns:
            int: Number of deleted sessions.
        """
        response = (
            self.client.table("sessions")
            .delete()
            .lt("created_at", cutoff.isoformat())
            .execute()
        )
        return len(response.data or [])

    async def delete_old_sessions(
        self,
        retention_days: int | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Delete sessions older than the retention window.

        Args:
            retention_days: Override of the configured retention window.
            now: Reference time, defaults to the current time.

        Returns:
            dict: Number of deleted sessions and the cutoff used.
        """
        if retention_days is None:
            retention_days = get_settings().session_retention_days
        cutoff = (now or _utcnow()) - timedelta(days=retention_days)

        deleted = await self.delete_sessions_created_before(cutoff)
        logger.info("Deleted %d sessions created before %s", deleted, cutoff.isoformat())
        return {"deleted": deleted, "cutoff": cutoff.isoformat()}
