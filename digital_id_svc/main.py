from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from .core.app_logger import setup_logging
from .core.config import get_settings
from .core.redis import ping_redis, close_redis
from .routers import digital_ids

settings = get_settings()
log = setup_logging(settings.log_level)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # best-effort: the service starts without redis
    if not await ping_redis():
        log.warning("redis not reachable at startup (%s)", settings.redis_url)
    log.info("digital-id-svc started (env=%s, checksum enforced=%s)", settings.app_env, settings.is_production)
    yield
    await close_redis()

app = FastAPI(title="digital-id-svc", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8081",
        "http://127.0.0.1:8081",
        "http://localhost:19006",
        "http://127.0.0.1:19006",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(digital_ids.router)

@app.get("/health")
async def health():
    return {"status": "ok", "service": "digital-id-svc"}

Instrumentator().instrument(app).expose(app)
