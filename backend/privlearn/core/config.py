from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(default="development", validation_alias="APP_ENV")

    database_url: str = Field(
        default="sqlite+pysqlite:///./privlearn.db",
        validation_alias="DATABASE_URL",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias="REDIS_URL",
    )

    jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    jwt_access_token_minutes: int = Field(default=60, validation_alias="JWT_ACCESS_TOKEN_MINUTES")
    jwt_issuer: str = Field(default="privlearn", validation_alias="JWT_ISSUER")

    cors_allow_origins: str = Field(default="http://localhost:3000", validation_alias="CORS_ALLOW_ORIGINS")
    trust_proxy_headers: bool = Field(default=False, validation_alias="TRUST_PROXY_HEADERS")

    # Comma separated account identifiers allowed to edit the module catalog.
    admin_accounts: str = Field(default="", validation_alias="ADMIN_ACCOUNTS")

    # Shifts the UTC day boundary used for streaks, in hours.
    ledger_day_offset_hours: int = Field(default=0, validation_alias="LEDGER_DAY_OFFSET_HOURS")
    ledger_max_modules: int = Field(default=255, validation_alias="LEDGER_MAX_MODULES")
    ledger_journal_enabled: bool = Field(default=True, validation_alias="LEDGER_JOURNAL_ENABLED")

    rate_limit_writes_per_minute: int = Field(default=120, validation_alias="RATE_LIMIT_WRITES_PER_MINUTE")
    rate_limit_admin_per_minute: int = Field(default=30, validation_alias="RATE_LIMIT_ADMIN_PER_MINUTE")
    rate_limit_lookups_per_minute: int = Field(default=600, validation_alias="RATE_LIMIT_LOOKUPS_PER_MINUTE")


settings = Settings()


def _is_prod() -> bool:
    return (settings.app_env or "").strip().lower() in {"prod", "production"}


def admin_account_set() -> set[str]:
    return {a.strip() for a in str(settings.admin_accounts or "").split(",") if a.strip()}


if _is_prod():
    if not settings.jwt_secret_key or settings.jwt_secret_key.strip().lower() in {"change-me", "your-secret", "secret"}:
        raise RuntimeError("JWT_SECRET_KEY must be set to a strong value in production")

    if settings.database_url.strip() == "sqlite+pysqlite:///./privlearn.db":
        raise RuntimeError("DATABASE_URL must be set in production")
    if settings.redis_url.strip() == "redis://localhost:6379/0":
        raise RuntimeError("REDIS_URL must be set in production")

    if not admin_account_set():
        raise RuntimeError("ADMIN_ACCOUNTS must name at least one administrator in production")
