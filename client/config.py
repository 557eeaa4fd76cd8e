from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DYNASTIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    API_BASE_URL: str = "http://localhost:8000"
    # transport timeout; nothing else in the flow times out
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    BIOMETRIC_PROMPT: str = "Unlock your financial sanctuary"
    BIOMETRIC_FALLBACK_LABEL: str = "Use password instead"
