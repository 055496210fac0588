from __future__ import annotations
import redis.asyncio as redis
from redis.exceptions import RedisError

from .app_logger import get_logger
from .config import get_settings

log = get_logger("redis")
_settings = get_settings()
_r: redis.Redis | None = None

def get_redis() -> redis.Redis:
    global _r
    if _r is None:
        _r = redis.from_url(_settings.redis_url, decode_responses=True)
    return _r

async def ping_redis() -> bool:
    try:
        r = get_redis()
        pong = await r.ping()
        return bool(pong)
    except Exception:
        return False

async def close_redis() -> None:
    global _r
    if _r is not None:
        await _r.aclose()
        _r = None

# ---- Fixed-window rate limit per IP/route (public scan endpoint) ----
async def allow_request(ip: str, route_key: str) -> bool:
    """
    Count the client's hits in a key that lives for one window; allow while
    the count stays within ``RL_MAX_REQS``.

    Scanning is a pure decode, so when redis cannot be reached the request is
    let through and only a warning is logged.
    """
    if not _settings.rl_enabled:
        return True
    key = f"rl:{route_key}:{ip}"
    try:
        r = get_redis()
        pipe = r.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = await pipe.execute()
        if ttl < 0:
            # first hit of the window, or a counter whose expiry was never set
            await r.expire(key, _settings.rl_window_seconds)
    except RedisError as exc:
        log.warning("rate limit skipped for %s, redis unavailable: %s", route_key, exc)
        return True
    if int(count) > _settings.rl_max_reqs:
        log.info("rate limit hit on %s for %s (%s requests)", route_key, ip, count)
        return False
    return True
