"""Login and auth check schemas."""

from pydantic import BaseModel, ConfigDict, Field


class CheckAuthResponse(BaseModel):
    """Schema for GET /checkAuth."""

    model_config = ConfigDict(from_attributes=True)

    loggedIn: bool = Field(description="Whether the auth cookie holds a valid access token")
    email: str | None = Field(default=None, description="Email of the logged-in user")


class SessionLoginRequest(BaseModel):
    """Schema for POST /sessionLogin."""

    model_config = ConfigDict(from_attributes=True)

    email: str = Field(..., min_length=1, description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class SessionLoginResponse(BaseModel):
    """Schema for POST /sessionLogin."""

    model_config = ConfigDict(from_attributes=True)

    message: str = Field(default="Session cookie set")
    email: str = Field(description="Email of the logged-in user")


class SessionLogoutResponse(BaseModel):
    """Schema for POST /sessionLogout."""

    success: bool = True
