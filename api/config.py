"""Settings and logging setup for the Event Manager API."""

import json
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

SQLITE_PREFIX = "sqlite:///"


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///events.db"
    HOST: str = "127.0.0.1"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def database_path(self) -> str:
        """Filesystem path (or ``:memory:``) named by DATABASE_URL."""
        return database_path(self.DATABASE_URL)


def database_path(url: str) -> str:
    """Strip the ``sqlite:///`` scheme; bare paths pass through unchanged."""
    if url.startswith(SQLITE_PREFIX):
        url = url[len(SQLITE_PREFIX):]
    elif "://" in url:
        raise ValueError(f"Unsupported database URL: {url!r}")
    if not url:
        raise ValueError("DATABASE_URL does not name a database")
    return url


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def configure_logging(level: str = "INFO") -> None:
    """Install a single JSON stream handler on the root logger."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
