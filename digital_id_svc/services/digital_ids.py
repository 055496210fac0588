from __future__ import annotations
import secrets
from datetime import datetime, timedelta, timezone
from typing import Iterable, Tuple

from ..core.app_logger import get_logger
from ..core.digital_id import (
    DigitalIDCodec, DecodeResult, IdentityPayload, TripFacts,
    EXPIRY_BUFFER_SECONDS, PAYLOAD_TYPE, PAYLOAD_VERSION,
)
from ..core.offline_code import generate_offline_code
from ..schemas import DigitalTouristIDRead

log = get_logger("services.digital_ids")

def _blockchain_hash_stub(now_ms: int) -> str:
    # placeholder shape only, nothing is anchored anywhere
    return f"0x{now_ms:x}{secrets.token_hex(4)}"

def issue_digital_id(
    codec: DigitalIDCodec,
    *,
    user_id: str,
    trip_id: str,
    trip: TripFacts,
    emergency_contacts: Iterable[str] = (),
    now: datetime | None = None,
) -> DigitalTouristIDRead:
    now = now or codec.clock()
    now_ms = int(now.timestamp() * 1000)
    token = codec.encode(user_id, trip_id, trip, now=now)
    return DigitalTouristIDRead(
        id=f"digital_{now_ms}",
        user_id=user_id,
        trip_id=trip_id,
        qr_code_data=token,
        blockchain_hash=_blockchain_hash_stub(now_ms),
        issued_at=now,
        expires_at=trip.end_date,
        status="active",
        verification_level="standard",
        offline_verification_code=generate_offline_code(),
        emergency_contacts=list(emergency_contacts),
    )

def verify_scanned_token(codec: DigitalIDCodec, token: str) -> DecodeResult:
    result = codec.decode(token)
    if result.valid:
        log.info("QR code is valid for trip %r", result.data.trip_name)
    else:
        log.info("QR verification failed: %s", result.error)
    return result

def build_test_token(codec: DigitalIDCodec, *, now: datetime | None = None) -> Tuple[str, IdentityPayload]:
    """
    Token for a fixed sample trip running from today for a week.

    The checksum is a placeholder, so the token only verifies when the codec
    does not enforce checksums.
    """
    now = now or codec.clock()
    today = now.date()
    next_week = now + timedelta(days=7)
    payload = IdentityPayload(
        user_id="user_test_456",
        trip_id="trip_test_123",
        name="Test Golden Triangle Trip",
        destination="Delhi, Agra, Jaipur",
        start_date=today,
        end_date=next_week.date(),
        status="active",
        issued_at=int(now.timestamp()),
        expires_at=int(next_week.timestamp()) + EXPIRY_BUFFER_SECONDS,
        version=PAYLOAD_VERSION,
        payload_type=PAYLOAD_TYPE,
        checksum="test123",
    )
    log.debug("generated test QR payload, expires %s", datetime.fromtimestamp(payload.expires_at, tz=timezone.utc).isoformat())
    return codec.encode_payload(payload), payload
