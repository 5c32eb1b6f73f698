"""CLI entry-point: python -m client [health|list|add|edit|status|delete|local]."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer

from api.config import configure_logging
from client.api import EventsApi
from client.app import EventManager
from client.config import ClientSettings
from client.local import TYPE_LABELS, EventLogForm, EventLogger, LocalStorage, LogType
from client.models import EventStatus
from client.state import STATUS_LABELS, TABS, ConnectionStatus, ViewState

T = TypeVar("T")

app = typer.Typer(help="Event Manager – command-line client")
local_app = typer.Typer(help="Local event logger (no server involved)")
app.add_typer(local_app, name="local")


@app.callback()
def main() -> None:
    settings = ClientSettings()
    configure_logging(settings.LOG_LEVEL)


def _run(action: Callable[[EventManager], Awaitable[T]]) -> T:
    """Connect, load the list, run *action*, and report any banner."""
    settings = ClientSettings()

    async def go() -> T:
        async with EventsApi(settings.API_BASE_URL, settings.API_TIMEOUT) as api:
            manager = EventManager(api, confirm=typer.confirm)
            await manager.start()
            result = await action(manager)
            if manager.state.error:
                typer.secho(manager.state.error, fg=typer.colors.RED, err=True)
            return result

    return asyncio.run(go())


def _render(state: ViewState) -> None:
    stats = state.stats
    counts = "  ".join(
        f"{STATUS_LABELS[status]}: {count}" for status, count in stats.by_status.items()
    )
    typer.echo(f"Total: {stats.total}  {counts}")
    for event in state.visible_events:
        when = event.display_date + (f" at {event.time}" if event.time else "")
        typer.echo(
            f"  [{event.id}] {event.name} – {when} @ {event.place} "
            f"({STATUS_LABELS[event.status]})"
        )
        if event.description:
            typer.echo(f"        {event.description}")


@app.command()
def health() -> None:
    """Probe the API and report connectivity."""

    async def action(manager: EventManager) -> bool:
        return manager.state.connection is ConnectionStatus.CONNECTED

    connected = _run(action)
    typer.echo("connected" if connected else "disconnected")
    if not connected:
        raise typer.Exit(1)


@app.command(name="list")
def list_events(
    tab: str = typer.Option(
        EventStatus.UPCOMING.value,
        "--tab",
        "-t",
        help="all, upcoming, success or cancelled.",
    ),
) -> None:
    """Show events for one tab, upcoming first then by date."""
    if tab not in TABS:
        raise typer.BadParameter(f"choose from {', '.join(TABS)}", param_hint="--tab")

    async def action(manager: EventManager) -> None:
        manager.state.select_tab(tab)
        _render(manager.state)

    _run(action)


@app.command()
def add(
    name: str = typer.Option(..., "--name", "-n"),
    date: str = typer.Option(..., "--date", "-d", help="YYYY-MM-DD"),
    place: str = typer.Option(..., "--place", "-p"),
    time: str = typer.Option("", "--time", help="HH:MM"),
    description: str = typer.Option("", "--description"),
    status: EventStatus = typer.Option(EventStatus.UPCOMING, "--status"),
) -> None:
    """Create an event."""

    async def action(manager: EventManager) -> bool:
        form = manager.state.form
        form.name, form.date, form.place = name, date, place
        form.time, form.description, form.status = time, description, status
        return await manager.submit()

    if not _run(action):
        raise typer.Exit(1)
    typer.echo("Event created.")


@app.command()
def edit(
    event_id: int = typer.Argument(..., help="Event id"),
    name: str | None = typer.Option(None, "--name", "-n"),
    date: str | None = typer.Option(None, "--date", "-d", help="YYYY-MM-DD"),
    place: str | None = typer.Option(None, "--place", "-p"),
    time: str | None = typer.Option(None, "--time", help="HH:MM"),
    description: str | None = typer.Option(None, "--description"),
    status: EventStatus | None = typer.Option(None, "--status"),
) -> None:
    """Edit an event; fields not given keep their current value."""

    async def action(manager: EventManager) -> bool:
        if manager.state.controls_disabled:
            return False
        if manager.state.find(event_id) is None:
            manager.state.error = f"Event {event_id} not found."
            return False
        manager.edit(event_id)
        form = manager.state.form
        for attr, value in (
            ("name", name),
            ("date", date),
            ("place", place),
            ("time", time),
            ("description", description),
            ("status", status),
        ):
            if value is not None:
                setattr(form, attr, value)
        return await manager.submit()

    if not _run(action):
        raise typer.Exit(1)
    typer.echo("Event updated.")


@app.command()
def status(
    event_id: int = typer.Argument(..., help="Event id"),
    new_status: EventStatus = typer.Argument(..., help="New status"),
) -> None:
    """Change an event's status."""

    async def action(manager: EventManager) -> bool:
        return await manager.change_status(event_id, new_status)

    if not _run(action):
        raise typer.Exit(1)
    typer.echo(f"Event {event_id} is now {STATUS_LABELS[new_status]}.")


@app.command()
def delete(
    event_id: int = typer.Argument(..., help="Event id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete an event after confirmation."""

    async def action(manager: EventManager) -> bool:
        if yes:
            manager.confirm = lambda prompt: True
        return await manager.delete(event_id)

    if not _run(action):
        raise typer.Exit(1)
    typer.echo("Event deleted.")


# ------------------------------------------------------------------
# Local variant
# ------------------------------------------------------------------


def _logger() -> EventLogger:
    return EventLogger(LocalStorage(ClientSettings().LOCAL_STORAGE_PATH))


@local_app.command("log")
def local_log(
    name: str = typer.Option(..., "--name", "-n"),
    description: str = typer.Option("", "--description"),
    type: LogType = typer.Option(LogType.INFO, "--type"),
) -> None:
    """Log a new local event."""
    event_log = _logger()
    event_log.form = EventLogForm(name, description, type)
    event = event_log.submit()
    if event is None:
        typer.secho("Event name is required.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.echo(f"Logged event {event.id}.")


@local_app.command("list")
def local_list(
    search: str = typer.Option("", "--search", "-s"),
    type: str = typer.Option("all", "--type", help="all or one event type."),
    date_range: str = typer.Option(
        "all", "--range", "-r", help="all, today, week or month."
    ),
) -> None:
    """Show local events matching every given filter."""
    event_log = _logger()
    stats = event_log.stats()
    typer.echo(
        f"Total: {stats['total']}  "
        + "  ".join(f"{label}: {stats[t.value]}" for t, label in TYPE_LABELS.items())
    )
    for event in event_log.filtered(search, type, date_range):
        typer.echo(
            f"  [{event.id}] {TYPE_LABELS[event.type]}: {event.name} "
            f"({event.date} {event.time})"
        )
        if event.description:
            typer.echo(f"        {event.description}")


@local_app.command("delete")
def local_delete(event_id: int = typer.Argument(..., help="Event id")) -> None:
    """Delete one local event."""
    if not _logger().delete(event_id):
        typer.secho(f"Event {event_id} not found.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.echo("Event deleted.")


@local_app.command("export")
def local_export(
    directory: Path = typer.Option(Path("."), "--dir", help="Output directory."),
) -> None:
    """Write every local event to events-YYYY-MM-DD.json."""
    out = _logger().export(directory)
    typer.echo(f"Exported to {out}")


@local_app.command("clear")
def local_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete every local event."""
    confirm = (lambda prompt: True) if yes else typer.confirm
    if _logger().clear_all(confirm):
        typer.echo("All events cleared.")


if __name__ == "__main__":
    app()
