from __future__ import annotations
import json
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Callable, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .app_logger import get_logger
from .checksum import checksum
from .transport import shift_decode, shift_encode

log = get_logger("digital_id")

PAYLOAD_TYPE = "YatriSahayak-DigitalID"
PAYLOAD_VERSION = "1.0"
EXPIRY_BUFFER_SECONDS = 24 * 60 * 60

ERR_FORMAT = "Invalid QR code format"
ERR_FAMILY = "Invalid Digital ID format"
ERR_INTEGRITY = "Digital ID integrity check failed"

# end of the trip's last day; seconds are floored when stored
END_OF_DAY = time(23, 59, 59, 999000)
# 9999-12-31T23:59:59Z + 1s
_MAX_UNIX = 253402300800

def _now() -> datetime:
    return datetime.now(timezone.utc)

class TripFacts(BaseModel):
    title: str
    destination: str
    start_date: date
    end_date: date

class IdentityPayload(BaseModel):
    """What goes inside the QR, keyed by the short wire names."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="uid")
    trip_id: str = Field(alias="tid")
    name: str
    destination: str = Field(alias="dest")
    start_date: date = Field(alias="start")
    end_date: date = Field(alias="end")
    status: str = "active"
    issued_at: int = Field(alias="iat", ge=0, lt=_MAX_UNIX)
    expires_at: Optional[int] = Field(default=None, alias="exp", ge=0, lt=_MAX_UNIX)
    version: str = Field(default=PAYLOAD_VERSION, alias="ver")
    payload_type: str = Field(default=PAYLOAD_TYPE, alias="typ")
    checksum: str

class DigitalIDData(BaseModel):
    user_id: str
    trip_id: str
    trip_name: str
    destination: str
    start_date: date
    end_date: date
    status: str
    issued_at: datetime
    version: str

class VerifiedID(BaseModel):
    valid: Literal[True] = True
    data: DigitalIDData

class RejectedID(BaseModel):
    valid: Literal[False] = False
    error: str

DecodeResult = Union[VerifiedID, RejectedID]

class DigitalIDCodec:
    """
    Builds and reads Digital Tourist ID tokens.

    ``production`` switches on the checksum comparison during decode; outside
    production a wrong checksum is only logged. ``tz`` decides where "end of
    the last trip day" falls and how expiry dates are printed.
    """

    def __init__(
        self,
        *,
        production: bool = False,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _now,
    ):
        self.production = production
        self.tz = tz
        self.clock = clock

    # --- encode

    def build_payload(self, user_id: str, trip_id: str, trip: TripFacts, *, now: datetime | None = None) -> IdentityPayload:
        now = now or self.clock()
        expires = datetime.combine(trip.end_date, END_OF_DAY, tzinfo=self.tz)
        return IdentityPayload(
            user_id=user_id,
            trip_id=trip_id,
            name=trip.title,
            destination=trip.destination,
            start_date=trip.start_date,
            end_date=trip.end_date,
            status="active",
            issued_at=int(now.timestamp()),
            expires_at=int(expires.timestamp()),
            version=PAYLOAD_VERSION,
            payload_type=PAYLOAD_TYPE,
            checksum=checksum(trip_id + user_id),
        )

    def encode_payload(self, payload: IdentityPayload) -> str:
        return shift_encode(payload.model_dump_json(by_alias=True))

    def encode(self, user_id: str, trip_id: str, trip: TripFacts, *, now: datetime | None = None) -> str:
        payload = self.build_payload(user_id, trip_id, trip, now=now)
        log.info("issuing Digital ID for trip %s (expires %s)", trip_id, payload.expires_at)
        return self.encode_payload(payload)

    # --- decode

    def decode(self, token: str, *, now: datetime | None = None) -> DecodeResult:
        try:
            text = shift_decode(token)
            raw: Any = json.loads(text)
        except (ValueError, RecursionError) as exc:
            log.debug("QR decode failed: %s", exc)
            return RejectedID(error=ERR_FORMAT)
        if not isinstance(raw, dict):
            return RejectedID(error=ERR_FORMAT)

        # other QR content (URLs, tickets, ...) is turned away before the schema check
        if raw.get("typ") != PAYLOAD_TYPE:
            return RejectedID(error=ERR_FAMILY)

        # strict: no bool-as-int or int-as-date coercion; ISO date strings still pass
        try:
            payload = IdentityPayload.model_validate_json(text, strict=True)
        except ValidationError as exc:
            log.debug("Digital ID payload rejected: %s", exc)
            return RejectedID(error=ERR_FORMAT)

        current = int((now or self.clock()).timestamp())
        # exp == 0 counts as present: it expired on 1970-01-01
        if payload.expires_at is not None and payload.expires_at + EXPIRY_BUFFER_SECONDS < current:
            expired_on = datetime.fromtimestamp(payload.expires_at, tz=self.tz).date()
            return RejectedID(error=f"Digital ID expired on {expired_on.isoformat()}")

        if self.production:
            if payload.checksum != checksum(payload.trip_id + payload.user_id):
                return RejectedID(error=ERR_INTEGRITY)
        else:
            log.debug("non-production mode: checksum not enforced for trip %s", payload.trip_id)

        return VerifiedID(data=self._to_data(payload))

    @staticmethod
    def _to_data(payload: IdentityPayload) -> DigitalIDData:
        return DigitalIDData(
            user_id=payload.user_id,
            trip_id=payload.trip_id,
            trip_name=payload.name,
            destination=payload.destination,
            start_date=payload.start_date,
            end_date=payload.end_date,
            status=payload.status,
            issued_at=datetime.fromtimestamp(payload.issued_at, tz=timezone.utc),
            version=payload.version,
        )
