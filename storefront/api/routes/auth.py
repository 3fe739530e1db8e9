"""Login, logout and auth check routes."""

from fastapi import APIRouter, Response

from storefront.api.deps import AuthToken, clear_auth_cookie, set_auth_cookie
from storefront.schemas.auth import (
    CheckAuthResponse,
    SessionLoginRequest,
    SessionLoginResponse,
    SessionLogoutResponse,
)
from storefront.services.auth_service import AuthService

router = APIRouter(tags=["auth"])


@router.post(
    "/sessionLogin",
    response_model=SessionLoginResponse,
    summary="Log in",
    description="Authenticate with email and password and store the access token in the login cookie.",
)
async def session_login(data: SessionLoginRequest, response: Response) -> SessionLoginResponse:
    """Log in and set the login cookie.

    Raises:
        AuthenticationError: 401 if Supabase rejects the credentials.
    """
    service = AuthService()
    result = await service.login(email=data.email, password=data.password)

    set_auth_cookie(response, result["access_token"])
    return SessionLoginResponse(email=result["email"])


@router.post(
    "/sessionLogout",
    response_model=SessionLogoutResponse,
    summary="Log out",
    description="Sign out of Supabase and clear the login cookie.",
)
async def session_logout(token: AuthToken, response: Response) -> SessionLogoutResponse:
    service = AuthService()
    await service.logout(token)

    clear_auth_cookie(response)
    return SessionLogoutResponse()


@router.get(
    "/checkAuth",
    response_model=CheckAuthResponse,
    response_model_exclude_none=True,
    summary="Check login",
    description="Reports whether the auth cookie holds a valid Supabase access token.",
)
async def check_auth(token: AuthToken) -> CheckAuthResponse:
    service = AuthService()
    return CheckAuthResponse(**await service.check_auth(token))
