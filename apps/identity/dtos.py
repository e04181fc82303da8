"""DTOs for Identity app."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class UserDTO:
    id: UUID
    email: str
    name: str
    phone: str
    is_admin: bool
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class AuthResultDTO:
    """Issued bearer token plus the signed-in profile."""
    token: str
    user: UserDTO


@dataclass(frozen=True)
class RequestUserDTO:
    """
    Identity resolved from a bearer token.

    `id` is the token subject. For tokens issued by Supabase it need not
    match a local User row, so other apps store it as an opaque string.
    """
    id: str
    email: str
    name: str
    is_admin: bool
    source: str  # 'local' or 'supabase'
    local_user_id: Optional[UUID] = None
