"""
Identity API endpoints with JWT bearer authentication.

Provides registration, login, profile, password reset and the admin
user listing.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from ninja import Router, Schema
from django.http import HttpRequest
from ninja.errors import HttpError

from . import services
from .permissions import require_admin, require_user

router = Router(tags=["Identity"])
admin_router = Router(tags=["Admin Users"])


# =============================================================================
# Schemas
# =============================================================================

class RegisterSchema(Schema):
    email: str
    password: str
    name: str = ""
    phone: str = ""


class LoginSchema(Schema):
    email: str
    password: str


class ForgotPasswordSchema(Schema):
    email: str


class ResetPasswordSchema(Schema):
    token: str
    password: str


class UserOut(Schema):
    id: UUID
    email: str
    name: str
    phone: str
    is_admin: bool
    is_active: bool
    created_at: datetime


class TokenResponse(Schema):
    token: str
    user: UserOut


class MeOut(Schema):
    id: str
    email: str
    name: str
    is_admin: bool
    source: str
    profile: Optional[UserOut] = None


class MessageOut(Schema):
    success: bool
    message: str


class AdminFlagIn(Schema):
    is_admin: bool


# =============================================================================
# Auth Endpoints
# =============================================================================

@router.post("/register", response={201: TokenResponse}, auth=None)
def register(request: HttpRequest, payload: RegisterSchema):
    """Create an account and return a bearer token."""
    try:
        result = services.register_user(
            email=payload.email,
            password=payload.password,
            name=payload.name,
            phone=payload.phone,
        )
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, TokenResponse(token=result.token, user=UserOut(**result.user.__dict__))


@router.post("/login", response=TokenResponse, auth=None)
def login(request: HttpRequest, payload: LoginSchema):
    """Authenticate with email and password."""
    try:
        result = services.authenticate_user(payload.email, payload.password)
    except ValueError as e:
        raise HttpError(401, str(e))
    return TokenResponse(token=result.token, user=UserOut(**result.user.__dict__))


@router.get("/me", response=MeOut, auth=None)
def get_me(request: HttpRequest):
    """
    Current caller. `profile` is present when the token maps to a
    local account.
    """
    user = require_user(request)
    profile = services.get_user_dto(user.local_user_id) if user.local_user_id else None
    return MeOut(
        id=user.id,
        email=user.email,
        name=user.name,
        is_admin=user.is_admin,
        source=user.source,
        profile=UserOut(**profile.__dict__) if profile else None,
    )


@router.post("/forgot-password", response=MessageOut, auth=None)
def forgot_password(request: HttpRequest, payload: ForgotPasswordSchema):
    services.request_password_reset(payload.email)
    return MessageOut(
        success=True,
        message="If an account exists for that email, a reset link has been sent",
    )


@router.post("/reset-password", response=MessageOut, auth=None)
def reset_password(request: HttpRequest, payload: ResetPasswordSchema):
    try:
        services.reset_password(payload.token, payload.password)
    except ValueError as e:
        raise HttpError(400, str(e))
    return MessageOut(success=True, message="Password updated")


# =============================================================================
# Admin User Management
# =============================================================================

@admin_router.get("/", response=List[UserOut], auth=None)
def list_users(request: HttpRequest):
    require_admin(request)
    return [UserOut(**u.__dict__) for u in services.list_users()]


@admin_router.put("/{user_id}/admin", response=UserOut, auth=None)
def set_user_admin(request: HttpRequest, user_id: UUID, payload: AdminFlagIn):
    """Grant or revoke the admin flag."""
    admin = require_admin(request)
    if not payload.is_admin and admin.local_user_id == user_id:
        raise HttpError(400, "You cannot remove your own admin access")
    user = services.set_admin(user_id, payload.is_admin)
    if not user:
        raise HttpError(404, "User not found")
    return UserOut(**user.__dict__)
