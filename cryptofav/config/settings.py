# cryptofav/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


def parse_csv(value: str | None, default: List[str]) -> List[str]:
    if not value:
        return default
    items = [x.strip() for x in value.split(",")]
    return [x for x in items if x]


def parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value)


def parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    DATABASE_URL: str
    COINGECKO_BASE_URL: str
    COINGECKO_TIMEOUT_SECONDS: float
    COINGECKO_RETRIES: int
    COINGECKO_RETRY_DELAY_MS: int
    CACHE_TTL_SECONDS: int
    LOG_LEVEL: str
    LOG_JSON: bool
    CORS_ORIGINS: List[str]

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            DATABASE_URL=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./cryptofav.db"),
            COINGECKO_BASE_URL=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3"),
            COINGECKO_TIMEOUT_SECONDS=parse_float(os.getenv("COINGECKO_TIMEOUT_SECONDS"), 10.0),
            COINGECKO_RETRIES=parse_int(os.getenv("COINGECKO_RETRIES"), 1),
            COINGECKO_RETRY_DELAY_MS=parse_int(os.getenv("COINGECKO_RETRY_DELAY_MS"), 200),
            CACHE_TTL_SECONDS=parse_int(os.getenv("CACHE_TTL_SECONDS"), 60),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
            LOG_JSON=parse_bool(os.getenv("LOG_JSON"), False),
            CORS_ORIGINS=parse_csv(os.getenv("CORS_ORIGINS"), ["*"]),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
