"""Services for Identity app."""
import logging
import secrets
from datetime import timedelta
from typing import List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .dtos import AuthResultDTO, UserDTO
from .jwt_auth import create_access_token
from .models import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
RESET_TOKEN_TTL = timedelta(hours=1)


def _to_dto(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        email=user.email,
        name=user.name,
        phone=user.phone,
        is_admin=user.is_admin,
        is_active=user.is_active,
        created_at=user.date_joined,
    )


def _validate_password(password: str):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def get_user_dto(user_id) -> UserDTO | None:
    try:
        return _to_dto(User.objects.get(id=user_id))
    except (User.DoesNotExist, ValidationError, ValueError):
        return None


def register_user(email: str, password: str, name: str = "", phone: str = "") -> AuthResultDTO:
    """
    Create a customer account and sign it in.

    Raises:
        ValueError: missing email, short password or email already registered
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValueError("Email is required")
    _validate_password(password)

    if User.objects.filter(email__iexact=email).exists():
        raise ValueError("User already exists")

    user = User.objects.create_user(
        username=email,
        email=email,
        password=password,
        name=name or "",
        phone=phone or "",
    )
    logger.info("Registered user %s", user.id)
    return AuthResultDTO(token=create_access_token(user), user=_to_dto(user))


def authenticate_user(email: str, password: str) -> AuthResultDTO:
    """
    Check credentials and issue a token.

    Raises:
        ValueError: unknown email, wrong password or disabled account
    """
    email = (email or "").strip().lower()
    user = User.objects.filter(email__iexact=email).first()
    if user is None or not user.check_password(password):
        raise ValueError("Invalid credentials")
    if not user.is_active:
        raise ValueError("Account is disabled")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return AuthResultDTO(token=create_access_token(user), user=_to_dto(user))


def request_password_reset(email: str) -> Optional[str]:
    """
    Issue a one-hour reset token and email the reset link.

    Returns the token, or None when no account matches. Callers answer the
    same way in both cases so account existence is not revealed.
    """
    from apps.notifications.services import send_password_reset_email

    email = (email or "").strip().lower()
    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return None

    token = secrets.token_urlsafe(32)
    user.reset_token = token
    user.reset_token_expires = timezone.now() + RESET_TOKEN_TTL
    user.save(update_fields=['reset_token', 'reset_token_expires'])

    reset_url = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
    send_password_reset_email(user.email, user.name, reset_url)
    return token


@transaction.atomic
def reset_password(token: str, new_password: str) -> UserDTO:
    """
    Set a new password using a reset token.

    Raises:
        ValueError: short password, unknown or expired token
    """
    _validate_password(new_password)
    if not token:
        raise ValueError("Invalid or expired reset token")

    user = User.objects.select_for_update().filter(reset_token=token).first()
    if user is None or not user.reset_token_expires or user.reset_token_expires < timezone.now():
        raise ValueError("Invalid or expired reset token")

    user.set_password(new_password)
    user.reset_token = ""
    user.reset_token_expires = None
    user.save()
    return _to_dto(user)


def list_users() -> List[UserDTO]:
    return [_to_dto(u) for u in User.objects.all()]


def set_admin(user_id, is_admin: bool) -> UserDTO | None:
    try:
        user = User.objects.get(id=user_id)
    except (User.DoesNotExist, ValidationError, ValueError):
        return None

    user.is_admin = is_admin
    user.save(update_fields=['is_admin'])
    logger.info("User %s admin flag set to %s", user.id, is_admin)
    return _to_dto(user)
