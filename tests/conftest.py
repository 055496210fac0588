from __future__ import annotations

import os

# settings are read once at import time; pin them before the app is imported
os.environ["APP_ENV"] = "development"
os.environ["RL_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone

import pytest

from digital_id_svc.core.digital_id import DigitalIDCodec, TripFacts

ISSUED_AT = datetime(2025, 1, 10, tzinfo=timezone.utc)


@pytest.fixture
def issued_at() -> datetime:
    return ISSUED_AT


@pytest.fixture
def goa_trip() -> TripFacts:
    return TripFacts(title="Goa Trip", destination="Goa", start_date="2025-01-10", end_date="2025-01-15")


@pytest.fixture
def codec() -> DigitalIDCodec:
    return DigitalIDCodec(production=False, clock=lambda: ISSUED_AT)


@pytest.fixture
def prod_codec() -> DigitalIDCodec:
    return DigitalIDCodec(production=True, clock=lambda: ISSUED_AT)
