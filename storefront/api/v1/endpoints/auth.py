"""
Auth endpoints: registration, login, token refresh, current user.
"""

from fastapi import APIRouter, Cookie, Depends, Request, Response

from storefront.api.v1.deps import (get_current_identity, get_identity_provider,
                                    get_user_service)
from storefront.core.config import settings
from storefront.core.exceptions import UnauthorizedError
from storefront.core.limiter import limiter
from storefront.schemas.base import SuccessResponse
from storefront.schemas.token import LoginRequest, RefreshRequest, Token
from storefront.schemas.user import RegisterRequest, RegisterResponse, UserResponse
from storefront.services.identity import (Identity, IdentityError, IdentityProvider,
                                          TokenPair)
from storefront.services.users import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    response.set_cookie(
        key="access_token",
        value=f"Bearer {tokens.access_token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    response.set_cookie(
        key="refresh_token",
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


def _token(tokens: TokenPair) -> Token:
    return Token(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user_id=tokens.user_id,
    )


@router.post("/register", response_model=RegisterResponse)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    users: UserService = Depends(get_user_service),
) -> RegisterResponse:
    """Create an identity and its user record."""
    user = await users.register(body)
    return RegisterResponse(user_id=user["id"], message="User registered successfully")


@router.post("/login", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> Token:
    """Authenticate with email/password. Tokens are also set as HttpOnly cookies."""
    try:
        tokens = await identity_provider.sign_in(body.email.strip().lower(), body.password)
    except IdentityError as exc:
        raise UnauthorizedError(str(exc)) from exc

    _set_auth_cookies(response, tokens)
    return _token(tokens)


@router.post("/refresh", response_model=Token)
async def refresh(
    response: Response,
    body: RefreshRequest | None = None,
    refresh_token_cookie: str | None = Cookie(None, alias="refresh_token"),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> Token:
    # Priority: Body > Cookie
    token_str = body.refresh_token if body and body.refresh_token else refresh_token_cookie
    if not token_str:
        raise UnauthorizedError("Refresh token missing")

    try:
        tokens = await identity_provider.refresh(token_str)
    except IdentityError as exc:
        raise UnauthorizedError(str(exc)) from exc

    _set_auth_cookies(response, tokens)
    return _token(tokens)


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response) -> SuccessResponse:
    """Clear auth cookies and end the session."""
    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")
    return SuccessResponse(message="Logged out")


@router.get("/user", response_model=UserResponse)
async def read_current_user(
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    """Return the caller's stored user record."""
    return UserResponse(user=await users.get_current(identity))
