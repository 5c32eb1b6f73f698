"""Client-side settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    API_BASE_URL: str = "http://localhost:5000/api"
    API_TIMEOUT: float = 5.0
    LOCAL_STORAGE_PATH: Path = Path("~/.event-logger/storage.json")
    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )
