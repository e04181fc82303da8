"""
JWT Authentication utilities.

Issues the store's own bearer tokens and validates incoming ones. Besides
tokens signed with JWT_SECRET, tokens issued by Supabase Auth are accepted
when they are signed with the project's shared HS256 secret or with an
asymmetric key published on the project's JWKS endpoint.
"""
import logging
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from django.conf import settings
from django.http import HttpRequest

logger = logging.getLogger(__name__)


JWT_ALGORITHM = 'HS256'
ACCESS_TOKEN_EXPIRE_DAYS = 7
SUPABASE_ASYMMETRIC_ALGORITHMS = ['RS256', 'ES256']

_jwks_client = None
_jwks_url = None


def _app_secret() -> str:
    return getattr(settings, 'JWT_SECRET', '') or settings.SECRET_KEY


def create_access_token(user) -> str:
    """
    Create a store access token for a local user.

    Expires in 7 days.
    """
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user.id),
        'email': user.email,
        'name': user.name,
        'is_admin': user.is_admin,
        'exp': now + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS),
        'iat': now,
        'type': 'access',
    }
    return jwt.encode(payload, _app_secret(), algorithm=JWT_ALGORITHM)


def decode_app_token(token: str) -> Optional[dict]:
    """Decode a token issued by this API. None if invalid or expired."""
    try:
        return jwt.decode(token, _app_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def _get_jwks_client() -> Optional[jwt.PyJWKClient]:
    global _jwks_client, _jwks_url
    base_url = getattr(settings, 'SUPABASE_URL', '')
    if not base_url:
        return None

    url = f"{base_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
    if _jwks_client is None or _jwks_url != url:
        _jwks_client = jwt.PyJWKClient(url, cache_keys=True)
        _jwks_url = url
    return _jwks_client


def decode_supabase_token(token: str) -> Optional[dict]:
    """
    Decode a Supabase Auth token.

    HS256 tokens are checked against SUPABASE_JWT_SECRET; RS256/ES256
    tokens against the signing key published at SUPABASE_URL.
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError:
        return None

    algorithm = header.get('alg')
    # Supabase sets aud=authenticated; it carries no extra meaning here
    options = {'verify_aud': False}

    try:
        if algorithm == 'HS256':
            secret = getattr(settings, 'SUPABASE_JWT_SECRET', '')
            if not secret:
                return None
            return jwt.decode(token, secret, algorithms=['HS256'], options=options)

        if algorithm in SUPABASE_ASYMMETRIC_ALGORITHMS:
            client = _get_jwks_client()
            if client is None:
                return None
            signing_key = client.get_signing_key_from_jwt(token)
            return jwt.decode(token, signing_key.key, algorithms=[algorithm], options=options)
    except jwt.PyJWTError as e:
        logger.debug("Supabase token rejected: %s", e)
        return None

    return None


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate any accepted bearer token.

    Returns:
        Payload with an added 'source' key ('local' or 'supabase'),
        None if the token is invalid or expired.
    """
    payload = decode_app_token(token)
    if payload is not None:
        payload['source'] = 'local'
        return payload

    payload = decode_supabase_token(token)
    if payload is not None:
        payload['source'] = 'supabase'
        return payload

    return None


def get_bearer_token(request: HttpRequest) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
