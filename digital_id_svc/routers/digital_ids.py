from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from qrcode.exceptions import DataOverflowError

from ..deps import get_claims, get_codec
from ..core.digital_id import DigitalIDCodec, DecodeResult
from ..core.offline_code import validate_offline_code
from ..core.qr import render_qr_png
from ..core.redis import allow_request
from ..schemas import (
    DigitalIDCreate, DigitalTouristIDRead, ScanRequest,
    OfflineCodeCheck, OfflineCodeResult, DevQRResponse,
)
from ..services.digital_ids import issue_digital_id, verify_scanned_token, build_test_token

router = APIRouter(prefix="/digital-ids", tags=["digital-ids"])

def _is_utf8_text(*values: str) -> bool:
    try:
        for v in values:
            v.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True

# --- 1) Tourist starts a trip: issue the Digital Tourist ID for it
@router.post("/trips/{trip_id}", response_model=DigitalTouristIDRead, status_code=201)
async def issue_for_trip(
    trip_id: str,
    payload: DigitalIDCreate,
    claims: dict = Depends(get_claims),
    codec: DigitalIDCodec = Depends(get_codec),
):
    user_id = str(claims["sub"])
    if not _is_utf8_text(user_id, trip_id, payload.title, payload.destination, *payload.emergency_contacts):
        # lone surrogate escapes parse as JSON but cannot be encoded; the input is not echoed back
        raise HTTPException(status_code=422, detail="Trip details must be valid unicode text")
    return issue_digital_id(
        codec,
        user_id=user_id,
        trip_id=trip_id,
        trip=payload,
        emergency_contacts=payload.emergency_contacts,
    )

# --- 2) PNG of a token (kiosk / print)
@router.get("/qr.png")
async def token_qr_png(token: str = Query(..., min_length=1)):
    try:
        png = render_qr_png(token)
    except DataOverflowError:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Token does not fit in a QR code")
    return Response(content=png, media_type="image/png")

# --- 3) Checkpoint scans a QR: public, rate-limited per IP
@router.post("/verify", response_model=DecodeResult)
async def verify_scan(
    payload: ScanRequest,
    request: Request,
    codec: DigitalIDCodec = Depends(get_codec),
):
    ip = request.client.host if request.client else "unknown"
    if not await allow_request(ip, "digital-ids.verify"):
        raise HTTPException(status_code=429, detail="Too many requests")
    return verify_scanned_token(codec, payload.token)

# --- 4) Manual fallback when the QR cannot be scanned
@router.post("/offline-codes/verify", response_model=OfflineCodeResult)
async def verify_offline_code(payload: OfflineCodeCheck):
    return OfflineCodeResult(code=payload.code.upper(), valid=validate_offline_code(payload.code))

# --- 5) Development only: sample token that verifies outside production
@router.get("/dev/test-qr", response_model=DevQRResponse)
async def dev_test_qr(codec: DigitalIDCodec = Depends(get_codec)):
    if codec.production:
        raise HTTPException(status_code=404, detail="Not found")
    token, qr_payload = build_test_token(codec)
    return DevQRResponse(
        token=token,
        expires_at=qr_payload.expires_at,
        verification=codec.decode(token),
    )
