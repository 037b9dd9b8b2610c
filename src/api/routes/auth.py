from typing import Literal, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, EmailStr, Field

from libs.result import Error
from src.api.cookies import (
    CSRF_COOKIE,
    CSRF_HEADER,
    REFRESH_COOKIE,
    clear_auth_cookies,
    set_auth_cookies,
)
from src.api.error import ClientError, http_error
from src.api.utils.client import get_request_context
from src.api.utils.csrf import require_csrf
from src.api.utils.rate_limit import enforce_api_rate_limit
from src.app.services.password_policy import UserInfo
from src.app.services.request_context import RequestContext
from src.app.services.security_services import SecurityServices
from src.app.services.session_manager import SessionData
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    ChangePasswordCommand,
    ChangePasswordResponse,
    ChangePasswordUseCase,
    ConfirmPasswordResetResponse,
    ConfirmPasswordResetUseCase,
    LoginCommand,
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    PasswordStrengthResponse,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
    SessionValidationResponse,
    SignupCommand,
    SignupResponse,
    SignupUseCase,
    ValidateSessionUseCase,
)
from src.depends import (
    extract_session_token,
    get_current_session,
    get_security_services,
    get_unit_of_work,
    security,
)
from src.domain.base import to_epoch
from src.domain.entities import AuthErrorCode, UserRole

router = APIRouter(prefix="/auth", tags=["Authentication"])


class SignupRequest(BaseModel):
    """
    Signup HTTP request payload

    Validates incoming HTTP request before converting to SignupCommand.
    Password strength is judged by the password policy, not here.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=1024, description="User password")
    username: Optional[str] = Field(
        None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$"
    )
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    role: Literal["student", "parent", "teacher"] = "student"


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=SignupResponse)
async def signup(
    request: SignupRequest,
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    User Signup

    Raises:
        - 400 Bad Request: Password rejected by policy (WEAK_PASSWORD)
        - 409 Conflict: Email or username already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = SignupCommand(
        email=request.email,
        password=request.password,
        username=request.username,
        first_name=request.first_name,
        last_name=request.last_name,
        role=UserRole(request.role),
    )

    result = await SignupUseCase(uow, services).execute(command, ctx)
    if result.is_err():
        raise http_error(result.error)

    return result.value


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    identifier is an email address or a username.
    """

    identifier: str = Field(..., min_length=1, max_length=255, description="Email or username")
    password: str = Field(..., min_length=1, max_length=1024, description="User password")
    role: Optional[UserRole] = Field(None, description="Expected account role")
    remember_me: bool = Field(False, description="Keep the session for 30 days instead of 7")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    User Login

    Sets auth-token, refresh-token, session-token (HttpOnly) and csrf-token
    cookies on success.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Account not active
        - 423 Locked: Account temporarily locked
        - 429 Too Many Requests: Rate limited (Retry-After, X-RateLimit-*)
        - 500 Internal Server Error: Server error
    """
    command = LoginCommand(
        identifier=request.identifier,
        password=request.password,
        role=request.role,
        remember_me=request.remember_me,
    )
    result = await LoginUseCase(uow, services).execute(command, ctx)

    if result.is_err():
        raise http_error(result.error)

    data = result.value
    if data.access_token:
        set_auth_cookies(
            response,
            services.config,
            data.access_token,
            data.refresh_token,
            data.session_token,
            data.csrf_token,
            data.session_expires_at,
        )
    return data


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    Logout

    A missing or already-invalid session is reported as already logged out.
    When the token comes from a cookie the X-CSRF-Token header must match.
    Clears all auth cookies.

    Raises:
        - 403 Forbidden: Cookie session without a valid CSRF token (CSRF_INVALID)
    """
    from_bearer = credentials is not None and bool(credentials.credentials)
    token = extract_session_token(request, credentials) or request.cookies.get(REFRESH_COOKIE)
    result = await LogoutUseCase(uow, services).execute(
        token,
        ctx,
        csrf_token=request.headers.get(CSRF_HEADER),
        require_csrf=not from_bearer,
    )

    if result.is_err():
        raise http_error(result.error)

    clear_auth_cookies(response, services.config)
    return result.value


class RefreshRequest(BaseModel):
    """Refresh token HTTP request payload; falls back to the refresh-token cookie"""

    refresh_token: Optional[str] = Field(None, description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(
    request: Request,
    response: Response,
    body: Optional[RefreshRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    Refresh Tokens

    Rotates the session: returns a new token pair and invalidates the old
    refresh token.

    Raises:
        - 401 Unauthorized: Invalid, reused or expired refresh token
        - 403 Forbidden: Account not active
        - 500 Internal Server Error: Server error
    """
    refresh_token = (body.refresh_token if body else None) or request.cookies.get(REFRESH_COOKIE)
    if not refresh_token:
        raise ClientError(
            Error(AuthErrorCode.INVALID_TOKEN, "Refresh token required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = await RefreshTokenUseCase(uow, services).execute(refresh_token, ctx)
    if result.is_err():
        raise http_error(result.error)

    data = result.value
    set_auth_cookies(
        response,
        services.config,
        data.access_token,
        data.refresh_token,
        data.session_token,
        data.csrf_token,
        data.session_expires_at,
    )
    return data


@router.get("/session", status_code=status.HTTP_200_OK, response_model=SessionValidationResponse)
async def get_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
    _: None = Depends(enforce_api_rate_limit),
):
    """
    Validate Session

    Accepts a bearer token or the session-token/auth-token cookie.
    Returns valid=false rather than an error for unknown or expired tokens.
    """
    result = await ValidateSessionUseCase(uow, services).execute(
        extract_session_token(request, credentials)
    )
    if result.is_err():
        raise http_error(result.error)

    return result.value


class CSRFTokenResponse(BaseModel):
    csrf_token: str


@router.get("/csrf-token", status_code=status.HTTP_200_OK, response_model=CSRFTokenResponse)
async def get_csrf_token(
    response: Response,
    current: SessionData = Depends(get_current_session),
    services: SecurityServices = Depends(get_security_services),
    _: None = Depends(enforce_api_rate_limit),
):
    """
    Issue CSRF Token

    Replaces any previous token for the caller's session.
    """
    session = current.session
    token = services.csrf_store.issue(str(session.id), not_after=to_epoch(session.expires_at))
    response.set_cookie(
        CSRF_COOKIE,
        token,
        max_age=services.config.csrf_token_ttl_minutes * 60,
        httponly=False,
        secure=services.config.cookie_secure,
        samesite="strict",
        path="/",
    )
    return CSRFTokenResponse(csrf_token=token)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=1024)
    new_password: str = Field(..., min_length=1, max_length=1024)


@router.post(
    "/change-password", status_code=status.HTTP_200_OK, response_model=ChangePasswordResponse
)
async def change_password(
    request: ChangePasswordRequest,
    current: SessionData = Depends(require_csrf),
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
    _: None = Depends(enforce_api_rate_limit),
):
    """
    Change Password

    Requires an authenticated session and a matching X-CSRF-Token header.
    Every other session of the user is revoked.

    Raises:
        - 400 Bad Request: New password rejected by policy
        - 401 Unauthorized: Not authenticated or wrong current password
        - 403 Forbidden: CSRF token missing or invalid
    """
    command = ChangePasswordCommand(
        current_password=request.current_password, new_password=request.new_password
    )
    result = await ChangePasswordUseCase(uow, services).execute(
        current.user.id, current.session.id, command, ctx
    )
    if result.is_err():
        raise http_error(result.error)

    return result.value


class PasswordStrengthRequest(BaseModel):
    password: str = Field(..., max_length=1024)
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@router.post(
    "/password-strength", status_code=status.HTTP_200_OK, response_model=PasswordStrengthResponse
)
async def password_strength(
    request: PasswordStrengthRequest,
    services: SecurityServices = Depends(get_security_services),
    _: None = Depends(enforce_api_rate_limit),
):
    """Score a candidate password against the password policy"""
    user_info = None
    if any([request.username, request.email, request.first_name, request.last_name]):
        user_info = UserInfo(
            username=request.username,
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
        )

    result = services.password_validator.validate(request.password, user_info)
    return PasswordStrengthResponse(**result.model_dump())


class RequestPasswordResetRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")


@router.post(
    "/request-password-reset",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def request_password_reset(
    request: RequestPasswordResetRequest,
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    Request Password Reset

    Same response whether or not the email exists.

    Raises:
        - 429 Too Many Requests: Rate limited
    """
    result = await RequestPasswordResetUseCase(uow, services).execute(request.email, ctx)
    if result.is_err():
        raise http_error(result.error)

    return result.value


class ConfirmPasswordResetRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Password reset token")
    new_password: str = Field(..., min_length=1, max_length=1024)


@router.post(
    "/confirm-password-reset",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmPasswordResetResponse,
)
async def confirm_password_reset(
    request: ConfirmPasswordResetRequest,
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    Confirm Password Reset

    Raises:
        - 400 Bad Request: Invalid or used token, or weak password
        - 410 Gone: Expired token
    """
    result = await ConfirmPasswordResetUseCase(uow, services).execute(
        request.token, request.new_password, ctx
    )
    if result.is_err():
        raise http_error(
            result.error,
            overrides={
                AuthErrorCode.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
                AuthErrorCode.TOKEN_EXPIRED: status.HTTP_410_GONE,
            },
        )

    return result.value
