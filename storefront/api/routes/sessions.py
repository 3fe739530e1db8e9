"""Session API routes for anonymous visitor sessions and cookie consent."""

from fastapi import APIRouter, Response, status

from storefront.api.deps import SessionId, clear_session_cookie, set_session_cookie
from storefront.schemas.common import MessageResponse
from storefront.schemas.session import AcceptCookiesRequest, SessionResponse
from storefront.services.session_service import SessionService

router = APIRouter(prefix="/session", tags=["sessions"])


@router.get(
    "",
    response_model=SessionResponse,
    summary="Get or create session",
    description="Returns the current session. Creates a new session and sets the cookie if none exists.",
)
async def get_or_create_session(response: Response, session_id: SessionId) -> SessionResponse:
    """Get the current session, creating one on first visit.

    Args:
        response: FastAPI response object for setting cookie.
        session_id: Session id from header or cookie.

    Returns:
        SessionResponse: The session id and consent state.
    """
    service = SessionService()
    session, created = await service.get_or_create_session(session_id)

    if created:
        set_session_cookie(response, session["session_id"])
        response.status_code = status.HTTP_201_CREATED
    # Exposed for clients where cookies are blocked
    response.headers["x-session-id"] = session["session_id"]

    return SessionResponse(
        sessionId=session["session_id"],
        allowCookies=bool(session.get("allow_cookies")),
        created=created,
    )


@router.post(
    "/accept-cookies",
    response_model=MessageResponse,
    summary="Accept cookies",
    description="Records cookie consent on the session.",
)
async def accept_cookies(session_id: SessionId, data: AcceptCookiesRequest | None = None) -> MessageResponse:
    """Set allow_cookies on the session.

    Args:
        session_id: Session id from header or cookie.
        data: Optional body carrying the session id as consentId.

    Returns:
        MessageResponse: Success acknowledgement.
    """
    service = SessionService()
    await service.accept_cookies((data.consentId if data else None) or session_id)
    return MessageResponse(message="Cookies accepted")


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Delete session",
    description="Deletes the session and its basket and clears the cookie.",
)
async def delete_session(response: Response, session_id: SessionId) -> MessageResponse:
    """Delete the current session.

    Args:
        response: FastAPI response object for clearing cookie.
        session_id: Session id from header or cookie.

    Returns:
        MessageResponse: Whether a session was deleted.
    """
    deleted = False
    if session_id:
        service = SessionService()
        deleted = await service.delete_session(session_id)

    clear_session_cookie(response)
    return MessageResponse(success=True, message="Session deleted" if deleted else "No session")
