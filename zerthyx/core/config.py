from decimal import Decimal
from functools import lru_cache
import json

from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors_origins(value: str) -> list[str]:
    if not value:
        return []

    parsed: list[str]
    raw = value.strip()
    if raw.startswith("["):
        try:
            items = json.loads(raw)
            parsed = [str(item).strip() for item in items if str(item).strip()]
        except (TypeError, ValueError):
            parsed = []
    else:
        parsed = [origin.strip() for origin in raw.split(",") if origin.strip()]

    # Preserve order and remove duplicates.
    return list(dict.fromkeys(parsed))


def parse_blockchains(value: str) -> list[str]:
    return list(dict.fromkeys(item.strip().upper() for item in (value or "").split(",") if item.strip()))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Zerthyx"
    environment: str = "development"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Security (tokens are issued by the identity service and share this key)
    secret_key: str
    access_token_expire_minutes: int = 30

    # Database
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: int = 15
    db_pool_recycle: int = 1200
    db_pool_pre_ping: bool = True

    # Ledger policy
    daily_rate: Decimal = Decimal("0.022")
    maturity_days: int = 45
    withdrawal_min: Decimal = Decimal("10")
    withdrawal_max: Decimal = Decimal("5000")
    # Calendar day used for the one-withdrawal-per-day rule.
    ledger_timezone: str = "UTC"
    supported_blockchains: str = "TRC20,BEP20"
    default_referral_reward: Decimal = Decimal("1")

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    auto_create_tables: bool = False
    rate_limit_enabled: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
