"""
Request authentication helpers.

Endpoints are declared with auth=None and call one of these helpers,
which raise HttpError(401/403) when the caller is not allowed.
"""
from typing import Optional
from uuid import UUID

from django.db.models import Q
from django.http import HttpRequest
from ninja.errors import HttpError

from .dtos import RequestUserDTO
from .jwt_auth import decode_token, get_bearer_token
from .models import User


def _parse_uuid(value) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def find_local_user(subject: str, email: str) -> Optional[User]:
    """Match a token subject to a local user by id, then by email."""
    lookup = Q()
    user_uuid = _parse_uuid(subject)
    if user_uuid:
        lookup |= Q(id=user_uuid)
    if email:
        lookup |= Q(email__iexact=email)
    if not lookup:
        return None
    return User.objects.filter(lookup, is_active=True).first()


def get_request_user(request: HttpRequest) -> Optional[RequestUserDTO]:
    """
    Resolve the caller from the bearer token.

    Returns None when no valid token is present.
    """
    cached = getattr(request, '_store_user', None)
    if cached is not None:
        return cached

    token = get_bearer_token(request)
    if not token:
        return None

    payload = decode_token(token)
    if not payload or not payload.get('sub'):
        return None

    subject = str(payload['sub'])
    email = payload.get('email') or ''
    local_user = find_local_user(subject, email)

    metadata = payload.get('user_metadata') or {}
    name = payload.get('name') or metadata.get('full_name') or metadata.get('name') or ''

    request_user = RequestUserDTO(
        id=subject,
        email=email or (local_user.email if local_user else ''),
        name=name or (local_user.name if local_user else ''),
        is_admin=bool(local_user and local_user.is_admin),
        source=payload['source'],
        local_user_id=local_user.id if local_user else None,
    )
    request._store_user = request_user
    return request_user


def require_user(request: HttpRequest) -> RequestUserDTO:
    """Require a valid bearer token. Raises 401 otherwise."""
    user = get_request_user(request)
    if user is None:
        raise HttpError(401, "Authentication required")
    return user


def require_admin(request: HttpRequest) -> RequestUserDTO:
    """Require a bearer token belonging to a local admin user."""
    user = require_user(request)
    if not user.is_admin:
        raise HttpError(403, "Admin access required")
    return user
