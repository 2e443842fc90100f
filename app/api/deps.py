# app/api/deps.py
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_async_session
from app.core.errors import AuthenticationRequired
from app.core.identity import ExternalIdentity, decode_session_token, load_identity_profile
from app.crud.user import resolve_user
from app.models.user import User

# Security scheme (auto_error off so a missing token maps to AuthenticationRequired)
optional_security = HTTPBearer(auto_error=False)


def extract_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
) -> Optional[str]:
    """
    Find the provider session token in the usual places:
    - Authorization header
    - Query parameters
    - The provider's `__session` cookie, or `access_token`
    """
    auth_header = request.headers.get("Authorization", "")
    token = None

    if auth_header.startswith("Bearer "):
        token = auth_header[7:]
    elif credentials and credentials.credentials:
        token = credentials.credentials

    if not token:
        token = request.query_params.get("token") or request.query_params.get("access_token")

    if not token:
        token = request.cookies.get("__session") or request.cookies.get("access_token")
        if token and token.startswith("Bearer "):
            token = token[7:]

    return token or None


async def get_external_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> ExternalIdentity:
    token = extract_session_token(request, credentials)
    if not token:
        raise AuthenticationRequired()
    return decode_session_token(token)


async def get_identity_profile_loader():
    """Overridable in tests to stub out the identity provider's user API"""
    return load_identity_profile


async def get_current_user(
    identity: ExternalIdentity = Depends(get_external_identity),
    db: AsyncSession = Depends(get_async_session),
    profile_loader=Depends(get_identity_profile_loader),
) -> User:
    """The internal user for the request's identity, created on first sight"""
    return await resolve_user(identity, db, profile_loader=profile_loader)
