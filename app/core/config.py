# app/core/config.py
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.errors import ConfigurationError


def ensure_signing_secrets(access_secret: str | None, refresh_secret: str | None) -> None:
    if not access_secret:
        raise ConfigurationError("ACCESS_TOKEN_SECRET is not defined")
    if not refresh_secret:
        raise ConfigurationError("REFRESH_TOKEN_SECRET is not defined")
    if access_secret == refresh_secret:
        raise ConfigurationError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be different")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "Dynastia Backend API"

    ACCESS_TOKEN_SECRET: str | None = None
    REFRESH_TOKEN_SECRET: str | None = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=15, gt=0)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, gt=0)

    TOTP_ISSUER: str = "Dynastia"
    TOTP_VALID_WINDOW: int = Field(default=1, ge=0)   # steps of drift accepted each side

    DATABASE_URL: str | None = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "dynastia"
    DB_PASSWORD: str = ""
    DB_NAME: str = "dynastia"

    CORS_ORIGINS: list[str] = ["http://localhost:8081", "http://127.0.0.1:8081"]

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @model_validator(mode="after")
    def _check_signing_secrets(self) -> "Settings":
        ensure_signing_secrets(self.ACCESS_TOKEN_SECRET, self.REFRESH_TOKEN_SECRET)
        return self

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")


settings = Settings()  # type: ignore[call-arg]
