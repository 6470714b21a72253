"""Login, logout and current-user endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from sitemetrics.core.config import settings
from sitemetrics.core.deps import CurrentUser, DbSession
from sitemetrics.schemas.auth import LoginRequest, TokenResponse, UserResponse
from sitemetrics.services.auth import authenticate_user, create_user_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: DbSession,
) -> TokenResponse:
    """Authenticate and return a JWT, also set as an HttpOnly session cookie.

    API clients send the token as a bearer header; browsers browsing the
    metrics page rely on the cookie.
    """
    user = await authenticate_user(db, request.email, request.password)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_user_token(user)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token.access_token,
        max_age=token.expires_in,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )
    return token


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """Drop the session cookie. Bearer tokens simply expire."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: CurrentUser,
) -> UserResponse:
    return UserResponse.model_validate(current_user)
