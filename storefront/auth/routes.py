# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/signup                       - Create account, set session cookie
#   POST /auth/signin                       - Check credentials, set session cookie
#   POST /auth/signout                      - Clear session cookie
#   POST /auth/request-reset                - Email a password reset link
#   POST /auth/reset-password               - Reset password with token
#   GET  /auth/me                           - Current user (null when signed out)
#   GET  /auth/users                        - All users (ADMIN / PERMISSIONUPDATE)
#   PUT  /auth/users/{user_id}/permissions  - Replace a user's permissions
#
# =============================================================================

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field

from storefront.auth.context import RequestContext
from storefront.auth.session import get_request_context
from storefront.core.models import Permission, SuccessMessage, UserResponse
from storefront.resolvers import mutations, queries

router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# Request Models
# =============================================================================

class SignupRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)


class SigninRequest(BaseModel):
    email: EmailStr
    password: str


class RequestResetRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    reset_token: str
    password: str = Field(min_length=1)
    confirm_password: str


class UpdatePermissionsRequest(BaseModel):
    permissions: list[Permission]


# =============================================================================
# Session Endpoints
# =============================================================================

@router.post("/signup", response_model=UserResponse)
async def signup(
    data: SignupRequest,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
):
    """Create a new account and sign it in."""
    user = await mutations.signup(ctx, email=data.email, password=data.password, name=data.name)
    ctx.apply_cookies(response)
    return user


@router.post("/signin", response_model=UserResponse)
async def signin(
    data: SigninRequest,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
):
    user = await mutations.signin(ctx, email=data.email, password=data.password)
    ctx.apply_cookies(response)
    return user


@router.post("/signout", response_model=SuccessMessage)
async def signout(
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
):
    message = mutations.signout(ctx)
    ctx.apply_cookies(response)
    return message


@router.post("/request-reset", response_model=SuccessMessage)
async def request_reset(
    data: RequestResetRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Email a password reset link to the account owner."""
    return await mutations.request_reset(ctx, email=data.email)


@router.post("/reset-password", response_model=UserResponse)
async def reset_password(
    data: ResetPasswordRequest,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
):
    """Reset password using the token from the email, then sign in."""
    user = await mutations.reset_password(
        ctx,
        password=data.password,
        confirm_password=data.confirm_password,
        reset_token=data.reset_token,
    )
    ctx.apply_cookies(response)
    return user


# =============================================================================
# User Endpoints
# =============================================================================

@router.get("/me", response_model=UserResponse | None)
async def get_current_user(ctx: RequestContext = Depends(get_request_context)):
    """The signed-in user, or null."""
    return await queries.me(ctx)


@router.get("/users", response_model=list[UserResponse])
async def list_users(ctx: RequestContext = Depends(get_request_context)):
    return await queries.users(ctx)


@router.put("/users/{user_id}/permissions", response_model=UserResponse)
async def update_permissions(
    user_id: str,
    data: UpdatePermissionsRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Replace (not merge) a user's permissions."""
    return await mutations.update_permissions(ctx, user_id=user_id, permissions=data.permissions)
