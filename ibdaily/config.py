from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="IBDaily", alias="APP_NAME")
    environment: str = Field(default="production", alias="ENVIRONMENT")
    app_base_url: str = Field(default="http://localhost:3000", alias="APP_BASE_URL")
    database_url: str = Field(alias="DATABASE_URL")
    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    token_ttl_days: int = Field(default=30, alias="TOKEN_TTL_DAYS")
    allow_insecure_http: bool = Field(default=False, alias="ALLOW_INSECURE_HTTP")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    rate_limit_session_per_minute: int = Field(default=10, alias="RATE_LIMIT_SESSION_PER_MINUTE")
    rate_limit_submission_per_minute: int = Field(default=20, alias="RATE_LIMIT_SUBMISSION_PER_MINUTE")
    cron_secret: str | None = Field(default=None, alias="CRON_SECRET")

    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_price_id: str | None = Field(default=None, alias="STRIPE_PRICE_ID")
    stripe_webhook_secret: str | None = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")

    email_provider: str | None = Field(default=None, alias="EMAIL_PROVIDER")
    email_from: str = Field(default="IBDaily <noreply@ibdaily.app>", alias="EMAIL_FROM")
    email_timeout_seconds: int = Field(default=10, alias="EMAIL_TIMEOUT_SECONDS")
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int | None = Field(default=None, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_pass: str | None = Field(default=None, alias="SMTP_PASS")
    smtp_secure: bool = Field(default=False, alias="SMTP_SECURE")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
