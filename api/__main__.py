"""Server entry-point: python -m api serve."""

from __future__ import annotations

import logging

import typer
import uvicorn

from .config import Settings, configure_logging
from .main import create_app

app = typer.Typer(help="Event Manager – REST API server")

logger = logging.getLogger(__name__)


@app.callback()
def main() -> None:
    """Event Manager REST API server."""


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on."),
    database: str | None = typer.Option(
        None,
        "--database",
        "-d",
        help="Store connection, e.g. sqlite:///events.db or sqlite:///:memory:.",
    ),
) -> None:
    """Start the API against the configured event store."""
    overrides: dict[str, object] = {}
    if host is not None:
        overrides["HOST"] = host
    if port is not None:
        overrides["PORT"] = port
    if database is not None:
        overrides["DATABASE_URL"] = database
    settings = Settings(**overrides)

    configure_logging(settings.LOG_LEVEL)
    logger.info(
        "Starting Event Manager API on %s:%s with %s",
        settings.HOST,
        settings.PORT,
        settings.DATABASE_URL,
    )
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    app()
