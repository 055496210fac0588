from __future__ import annotations
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo
from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    # "production" turns on the Digital ID checksum check
    app_env: str = Field("development", alias="APP_ENV")
    id_timezone: str = Field("UTC", alias="ID_TIMEZONE")

    auth_jwks_url: str = Field("http://localhost:8001/auth/jwks", alias="AUTH_JWKS_URL")
    token_issuer: str = Field("authentication-svc", alias="TOKEN_ISSUER")

    # QR rendering
    qr_box_size: int = Field(default=10, alias="QR_BOX_SIZE")
    qr_border: int = Field(default=4, alias="QR_BORDER")

    # Redis
    redis_url: str = Field("redis://127.0.0.1:6379/0", alias="REDIS_URL")
    rl_enabled: bool = Field(default=True, alias="RL_ENABLED")
    rl_window_seconds: int = Field(default=60, alias="RL_WINDOW_SECONDS")
    rl_max_reqs: int = Field(default=60, alias="RL_MAX_REQS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_prefix = ""
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @property
    def id_tzinfo(self) -> tzinfo:
        if self.id_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.id_timezone)

_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
