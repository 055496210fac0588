from __future__ import annotations
from typing import Any, Dict
from fastapi import Header, HTTPException, status
import time
import httpx
import jwt

from .core.config import get_settings
from .core.digital_id import DigitalIDCodec

settings = get_settings()

_JWKS: Dict[str, Any] | None = None
_JWKS_TS: float = 0.0
_JWKS_TTL: int = 3600

async def fetch_jwks(*, force: bool = False) -> Dict[str, Any]:
    global _JWKS, _JWKS_TS
    now = time.time()
    if force or _JWKS is None or (now - _JWKS_TS) > _JWKS_TTL:
        async with httpx.AsyncClient() as client:
            r = await client.get(settings.auth_jwks_url, timeout=5.0)
            r.raise_for_status()
            _JWKS = r.json()
            _JWKS_TS = now
    return _JWKS

def _pick_jwk(jwks: Dict[str, Any], kid: str | None) -> Dict[str, Any] | None:
    keys = jwks.get("keys") or []
    if kid is None:
        return keys[0] if keys else None
    return next((k for k in keys if k.get("kid") == kid), None)

async def get_signing_key(token: str):
    from jwt.algorithms import RSAAlgorithm
    kid = jwt.get_unverified_header(token).get("kid")
    jwk = _pick_jwk(await fetch_jwks(), kid)
    if jwk is None:
        # auth service may have rotated its key since the last fetch
        jwk = _pick_jwk(await fetch_jwks(force=True), kid)
    if jwk is None:
        raise jwt.InvalidKeyError("no matching signing key")
    return RSAAlgorithm.from_jwk(jwk)

async def get_claims(authorization: str | None = Header(default=None)) -> Dict[str, Any]:
    """Claims of the tourist's access token; ``sub`` is the user id."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    token = authorization.split(" ", 1)[1].strip()
    try:
        key = await get_signing_key(token)
        payload = jwt.decode(
            token,
            key=key,
            algorithms=["RS256"],
            issuer=settings.token_issuer,
            options={"verify_aud": False, "require": ["exp", "sub"]},
        )
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return payload

_codec: DigitalIDCodec | None = None

def get_codec() -> DigitalIDCodec:
    global _codec
    if _codec is None:
        _codec = DigitalIDCodec(production=settings.is_production, tz=settings.id_tzinfo)
    return _codec
