from __future__ import annotations
from typing import Annotated, Literal
from datetime import date, datetime
from pydantic import BaseModel, Field

from .core.digital_id import DecodeResult, TripFacts

Str255 = Annotated[str, Field(min_length=1, max_length=255)]

class DigitalIDCreate(TripFacts):
    """Trip facts sent by the trip-start flow."""
    title: Str255
    destination: Str255
    emergency_contacts: list[str] = Field(default_factory=list)

class DigitalTouristIDRead(BaseModel):
    id: str
    user_id: str
    trip_id: str
    qr_code_data: str  # encoded token; frontends render this as the QR
    blockchain_hash: str
    issued_at: datetime
    expires_at: date
    status: Literal["active", "expired", "revoked"] = "active"
    verification_level: Literal["basic", "standard", "premium"] = "standard"
    offline_verification_code: str
    emergency_contacts: list[str] = Field(default_factory=list)

class ScanRequest(BaseModel):
    token: str  # raw text read from the QR symbol

class OfflineCodeCheck(BaseModel):
    code: str

class OfflineCodeResult(BaseModel):
    code: str
    valid: bool

class DevQRResponse(BaseModel):
    token: str
    expires_at: int
    verification: DecodeResult
