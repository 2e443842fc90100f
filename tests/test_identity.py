"""Session token validation and profile enrichment from the identity provider."""

from datetime import timedelta

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from starlette.requests import Request

from app.api.deps import extract_session_token
from app.core import identity as identity_module
from app.core.config import settings
from app.core.errors import AuthenticationRequired
from app.core.identity import (
    ExternalIdentity,
    decode_session_token,
    identity_from_profile,
    load_identity_profile,
)


def test_decode_valid_token_returns_claims(token_factory):
    token = token_factory("user_42", first_name="Grace", last_name="Hopper", email="grace@example.org")

    identity = decode_session_token(token)

    assert identity.external_id == "user_42"
    assert identity.first_name == "Grace"
    assert identity.primary_email == "grace@example.org"


def test_decode_expired_token(token_factory):
    with pytest.raises(AuthenticationRequired, match="expired"):
        decode_session_token(token_factory(expires_in=timedelta(seconds=-30)))


def test_decode_token_with_wrong_signature():
    forged = jwt.encode({"sub": "user_2abc"}, "someone-elses-secret", algorithm="HS256")
    with pytest.raises(AuthenticationRequired, match="Invalid token"):
        decode_session_token(forged)


def test_decode_token_without_subject():
    token = jwt.encode({"first_name": "Nobody"}, settings.IDENTITY_JWT_SECRET, algorithm="HS256")
    with pytest.raises(AuthenticationRequired, match="missing subject"):
        decode_session_token(token)


def test_identity_from_provider_record():
    record = {
        "id": "user_9",
        "first_name": "Lin",
        "last_name": None,
        "username": "lin",
        "email_addresses": [{"email_address": "lin@example.org"}, {"email_address": "old@example.org"}],
        "phone_numbers": [{"phone_number": "+15550100"}],
        "image_url": "https://img.example.org/lin.png",
    }

    identity = identity_from_profile("user_9", record)

    assert identity.primary_email == "lin@example.org"
    assert identity.phone == "+15550100"
    assert identity.avatar_url == "https://img.example.org/lin.png"
    assert identity.last_name is None


async def test_profile_unchanged_when_user_api_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "IDENTITY_API_URL", "")
    identity = ExternalIdentity(external_id="user_1", first_name="A")

    assert await load_identity_profile(identity) is identity


async def test_provider_values_win_over_claims(monkeypatch):
    async def fake_fetch(external_id):
        return {"first_name": "Provider", "email_addresses": [{"email_address": "p@example.org"}]}

    monkeypatch.setattr(settings, "IDENTITY_API_URL", "https://identity.example.org/v1")
    monkeypatch.setattr(identity_module, "fetch_provider_profile", fake_fetch)
    claims = ExternalIdentity(external_id="user_1", first_name="Claim", last_name="Last", primary_email="c@example.org")

    enriched = await load_identity_profile(claims)

    assert enriched.first_name == "Provider"
    assert enriched.last_name == "Last"
    assert enriched.primary_email == "p@example.org"


async def test_provider_failure_falls_back_to_claims(monkeypatch):
    async def failing_fetch(external_id):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(settings, "IDENTITY_API_URL", "https://identity.example.org/v1")
    monkeypatch.setattr(identity_module, "fetch_provider_profile", failing_fetch)
    claims = ExternalIdentity(external_id="user_1", username="claims-only")

    assert await load_identity_profile(claims) == claims


def _request(headers=None, query_string=b""):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "query_string": query_string,
    }
    return Request(scope)


@pytest.mark.parametrize(
    "headers, query_string, expected",
    [
        ({"Authorization": "Bearer header-token"}, b"token=query-token", "header-token"),
        ({}, b"access_token=query-token", "query-token"),
        ({"Cookie": "__session=cookie-token"}, b"", "cookie-token"),
        ({"Cookie": "access_token=Bearer cookie-token"}, b"", "cookie-token"),
        ({}, b"", None),
    ],
)
def test_extract_session_token_sources(headers, query_string, expected):
    assert extract_session_token(_request(headers, query_string)) == expected


def test_decode_rs256_token_with_public_key(monkeypatch):
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode()
    monkeypatch.setattr(settings, "IDENTITY_JWT_SECRET", public_pem)
    monkeypatch.setattr(settings, "IDENTITY_JWT_ALGORITHM", "RS256")

    token = jwt.encode({"sub": "user_rsa", "username": "rsa"}, private_key, algorithm="RS256")

    assert decode_session_token(token).external_id == "user_rsa"
