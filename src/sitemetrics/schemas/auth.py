"""Login and current-user schemas for the metrics gate."""

from pydantic import BaseModel, EmailStr

from sitemetrics.models.user import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Bearer token; the same value is set as the session cookie."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    """The logged-in user and whether the metrics page will let them in."""

    id: int
    email: str
    role: UserRole
    is_blocked: bool
    can_view_metrics: bool

    model_config = {"from_attributes": True}
