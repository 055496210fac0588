from __future__ import annotations

import asyncio
import json
import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from jwt.algorithms import RSAAlgorithm

from digital_id_svc import deps
from digital_id_svc.core.config import Settings
from digital_id_svc.core.digital_id import DigitalIDCodec, RejectedID, VerifiedID, ERR_INTEGRITY

KID = "authentication-svc"


@pytest.fixture(scope="module")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(autouse=True)
def fake_jwks(monkeypatch, signing_key):
    jwk = json.loads(RSAAlgorithm.to_jwk(signing_key.public_key()))
    jwk.update({"kid": KID, "alg": "RS256", "use": "sig"})
    doc = {"keys": [jwk]}

    async def _fetch(*, force=False):
        return doc

    monkeypatch.setattr(deps, "fetch_jwks", _fetch)
    return doc


def _token(key, kid=KID, **overrides):
    now = int(time.time())
    claims = {"sub": "u1", "role": "tourist", "iss": "authentication-svc", "iat": now, "exp": now + 300}
    claims.update(overrides)
    return jwt.encode(claims, key, algorithm="RS256", headers={"kid": kid})


def _claims(header):
    return asyncio.run(deps.get_claims(authorization=header))


def test_valid_token(signing_key):
    claims = _claims(f"Bearer {_token(signing_key)}")
    assert claims["sub"] == "u1"
    assert claims["role"] == "tourist"


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Token xyz"])
def test_missing_bearer(header):
    with pytest.raises(HTTPException) as exc:
        _claims(header)
    assert exc.value.status_code == 401
    assert exc.value.detail == "Missing token"


def test_rejects_other_issuer(signing_key):
    with pytest.raises(HTTPException) as exc:
        _claims(f"Bearer {_token(signing_key, iss='someone-else')}")
    assert exc.value.detail == "Invalid token"


def test_rejects_expired(signing_key):
    with pytest.raises(HTTPException) as exc:
        _claims(f"Bearer {_token(signing_key, exp=int(time.time()) - 60)}")
    assert exc.value.status_code == 401


def test_rejects_unknown_kid(signing_key):
    with pytest.raises(HTTPException) as exc:
        _claims(f"Bearer {_token(signing_key, kid='rotated-away')}")
    assert exc.value.status_code == 401


def test_rejects_foreign_signature():
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with pytest.raises(HTTPException) as exc:
        _claims(f"Bearer {_token(other)}")
    assert exc.value.status_code == 401


def test_rejects_garbage_token():
    with pytest.raises(HTTPException) as exc:
        _claims("Bearer not.a.jwt")
    assert exc.value.status_code == 401


def test_codec_follows_settings(monkeypatch):
    monkeypatch.setattr(deps, "_codec", None)
    codec = deps.get_codec()
    assert isinstance(codec, DigitalIDCodec)
    assert codec.production is False  # APP_ENV=development in conftest
    assert deps.get_codec() is codec


def test_codec_built_for_production(monkeypatch, goa_trip):
    monkeypatch.setattr(deps, "settings", Settings(APP_ENV=" Production ", ID_TIMEZONE="Asia/Kolkata"))
    monkeypatch.setattr(deps, "_codec", None)
    codec = deps.get_codec()
    assert codec.production is True
    assert codec.tz == ZoneInfo("Asia/Kolkata")

    payload = codec.build_payload("u1", "t1", goa_trip)
    # last trip day ends at 23:59:59 IST
    assert payload.expires_at == int(datetime(2025, 1, 15, 18, 29, 59, tzinfo=timezone.utc).timestamp())

    scan_at = datetime(2025, 1, 12, tzinfo=timezone.utc)
    assert isinstance(codec.decode(codec.encode_payload(payload), now=scan_at), VerifiedID)
    tampered = payload.model_copy(update={"checksum": "bogus"})
    result = codec.decode(codec.encode_payload(tampered), now=scan_at)
    assert isinstance(result, RejectedID)
    assert result.error == ERR_INTEGRITY
