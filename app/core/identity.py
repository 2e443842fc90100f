# app/core/identity.py
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import httpx
import jwt

from app.core.config import settings
from app.core.errors import AuthenticationRequired

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalIdentity:
    """An opaque user reference issued by the identity provider, plus whatever profile it shared."""

    external_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    primary_email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


def _first(items: Any, key: str) -> Optional[str]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get(key)
    return None


def identity_from_profile(external_id: str, data: Dict[str, Any]) -> ExternalIdentity:
    """Build an identity from either token claims or a provider user record"""
    return ExternalIdentity(
        external_id=external_id,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        username=data.get("username"),
        primary_email=data.get("email") or _first(data.get("email_addresses"), "email_address"),
        phone=data.get("phone") or _first(data.get("phone_numbers"), "phone_number"),
        avatar_url=data.get("image_url"),
    )


def decode_session_token(token: str) -> ExternalIdentity:
    """
    Validate a provider-issued session token and return the identity it names.

    The token's `sub` claim is the external identity reference.
    """
    options = {"verify_aud": False}
    decode_kwargs: Dict[str, Any] = {}
    if settings.IDENTITY_JWT_ISSUER:
        decode_kwargs["issuer"] = settings.IDENTITY_JWT_ISSUER

    try:
        payload = jwt.decode(
            token,
            settings.IDENTITY_JWT_SECRET,
            algorithms=[settings.IDENTITY_JWT_ALGORITHM],
            options=options,
            **decode_kwargs,
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationRequired("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected session token: {e}")
        raise AuthenticationRequired("Invalid token")

    external_id = payload.get("sub")
    if not external_id:
        raise AuthenticationRequired("Invalid token: missing subject")

    return identity_from_profile(str(external_id), payload)


async def fetch_provider_profile(external_id: str) -> Dict[str, Any]:
    """Get the user record from the identity provider's user API"""
    headers = {"Authorization": f"Bearer {settings.IDENTITY_API_KEY}"}
    async with httpx.AsyncClient(timeout=settings.IDENTITY_API_TIMEOUT) as client:
        response = await client.get(
            f"{settings.IDENTITY_API_URL.rstrip('/')}/users/{external_id}",
            headers=headers,
        )
        response.raise_for_status()
        return response.json()


async def load_identity_profile(identity: ExternalIdentity) -> ExternalIdentity:
    """
    Fill in profile fields for a first-seen user.

    Provider values win over token claims; when the user API is not
    configured or unreachable the claims are the best available profile.
    """
    if not settings.IDENTITY_API_URL:
        return identity

    try:
        data = await fetch_provider_profile(identity.external_id)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Identity profile lookup failed for {identity.external_id}, using token claims: {e}")
        return identity

    fetched = identity_from_profile(identity.external_id, data)
    return replace(
        identity,
        first_name=fetched.first_name or identity.first_name,
        last_name=fetched.last_name or identity.last_name,
        username=fetched.username or identity.username,
        primary_email=fetched.primary_email or identity.primary_email,
        phone=fetched.phone or identity.phone,
        avatar_url=fetched.avatar_url or identity.avatar_url,
    )
