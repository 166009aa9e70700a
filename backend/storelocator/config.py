from __future__ import annotations

import warnings
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_STATIC_DIR = Path(__file__).resolve().parent / "static"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    google_api_key: str = ""  # Server-held credential, NEVER send to clients

    @field_validator("google_api_key")
    @classmethod
    def _strip_api_key(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _check_api_key(self) -> Settings:
        if not self.google_api_key:
            warnings.warn(
                "GOOGLE_API_KEY is not set. The server will still run but "
                "every /api proxy endpoint will answer 500 until it is configured.",
                stacklevel=2,
            )
        return self

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    places_api_base_url: str = "https://maps.googleapis.com/maps/api"
    upstream_timeout_seconds: float = 10.0  # per outbound request
    static_dir: Path = _PACKAGE_STATIC_DIR


@lru_cache
def get_settings() -> Settings:
    return Settings()
