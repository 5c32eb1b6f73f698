"""Event store: schema setup and single-document operations over SQLite."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

import aiosqlite
from pydantic import ValidationError

from client.models import Event, EventInput, EventStatus, format_display_date

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL CHECK (length(trim(name)) > 0),
        description TEXT NOT NULL DEFAULT '',
        date TEXT NOT NULL,
        time TEXT NOT NULL DEFAULT '',
        place TEXT NOT NULL CHECK (length(trim(place)) > 0),
        status TEXT NOT NULL DEFAULT 'upcoming'
            CHECK (status IN ('upcoming', 'success', 'cancelled')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_events_date ON events(date);
"""


class EventValidationError(ValueError):
    """A write was rejected because the document breaks the schema."""


class EventNotFoundError(LookupError):
    """No event exists with the requested id."""

    def __init__(self, event_id: int) -> None:
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _validate(data: EventInput | Mapping[str, Any]) -> EventInput:
    if isinstance(data, EventInput):
        return data
    try:
        return EventInput.model_validate(data)
    except ValidationError as exc:
        raise EventValidationError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(parts)


def _row_to_event(row: aiosqlite.Row) -> Event:
    event_date = date.fromisoformat(row["date"])
    return Event(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        date=event_date,
        time=row["time"],
        place=row["place"],
        status=EventStatus(row["status"]),
        display_date=format_display_date(event_date),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class EventStore:
    """Durable home of Event documents, backed by one aiosqlite connection.

    A single connection is shared by every request so that ``:memory:``
    databases survive between requests; aiosqlite runs statements one at a
    time on its worker thread. There is no locking across requests, so two
    clients replacing the same event race and the last write wins.
    """

    def __init__(self, db: aiosqlite.Connection, path: str) -> None:
        self._db = db
        self.path = path
        self._closed = False

    @classmethod
    async def open(cls, path: str) -> EventStore:
        """Connect to *path* (a file or ``:memory:``) and ensure the schema."""
        db = await aiosqlite.connect(path)
        db.row_factory = aiosqlite.Row
        if path != ":memory:":
            await db.execute("PRAGMA journal_mode=WAL")
        await db.executescript(SCHEMA)
        await db.commit()
        logger.info("Event store opened at %s", path)
        return cls(db, path)

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._db.close()
            logger.info("Event store at %s closed", self.path)

    async def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        if self._closed:
            return False
        try:
            cursor = await self._db.execute("SELECT 1")
            await cursor.fetchone()
        except (sqlite3.Error, ValueError) as exc:
            logger.warning("Event store ping failed: %s", exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_all(self, status: EventStatus | str | None = None) -> list[Event]:
        """Return every event (optionally one status only), oldest date first."""
        query = "SELECT * FROM events"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(_status(status).value)
        query += " ORDER BY date ASC, time ASC, id ASC"
        cursor = await self._db.execute(query, params)
        rows = await cursor.fetchall()
        return [_row_to_event(row) for row in rows]

    async def find_by_id(self, event_id: int) -> Event:
        cursor = await self._db.execute(
            "SELECT * FROM events WHERE id = ?", (event_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            logger.warning("Event %s not found", event_id)
            raise EventNotFoundError(event_id)
        return _row_to_event(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, data: EventInput | Mapping[str, Any]) -> Event:
        """Validate and store a new event; return it with its assigned id."""
        event = _validate(data)
        now = _now()
        cursor = await self._write(
            """
            INSERT INTO events (
                name, description, date, time, place, status,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.name,
                event.description,
                event.date.isoformat(),
                event.time,
                event.place,
                event.status.value,
                now,
                now,
            ),
        )
        logger.info("Created event %s (%s)", cursor.lastrowid, event.name)
        return await self.find_by_id(cursor.lastrowid)

    async def replace(
        self, event_id: int, data: EventInput | Mapping[str, Any]
    ) -> Event:
        """Overwrite every writable field of an existing event."""
        event = _validate(data)
        cursor = await self._write(
            """
            UPDATE events SET
                name = ?, description = ?, date = ?, time = ?, place = ?,
                status = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                event.name,
                event.description,
                event.date.isoformat(),
                event.time,
                event.place,
                event.status.value,
                _now(),
                event_id,
            ),
        )
        if cursor.rowcount == 0:
            logger.warning("Cannot replace missing event %s", event_id)
            raise EventNotFoundError(event_id)
        logger.info("Replaced event %s", event_id)
        return await self.find_by_id(event_id)

    async def patch_status(self, event_id: int, status: EventStatus | str) -> Event:
        """Set only the status field of an existing event."""
        new_status = _status(status)
        cursor = await self._write(
            "UPDATE events SET status = ?, updated_at = ? WHERE id = ?",
            (new_status.value, _now(), event_id),
        )
        if cursor.rowcount == 0:
            logger.warning("Cannot patch status of missing event %s", event_id)
            raise EventNotFoundError(event_id)
        logger.info("Event %s status set to %s", event_id, new_status.value)
        return await self.find_by_id(event_id)

    async def delete(self, event_id: int) -> None:
        cursor = await self._write("DELETE FROM events WHERE id = ?", (event_id,))
        if cursor.rowcount == 0:
            logger.warning("Cannot delete missing event %s", event_id)
            raise EventNotFoundError(event_id)
        logger.info("Deleted event %s", event_id)

    async def _write(self, sql: str, params: tuple) -> aiosqlite.Cursor:
        try:
            cursor = await self._db.execute(sql, params)
        except sqlite3.IntegrityError as exc:
            await self._db.rollback()
            raise EventValidationError(str(exc)) from exc
        await self._db.commit()
        return cursor


def _status(value: EventStatus | str) -> EventStatus:
    try:
        return EventStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in EventStatus)
        raise EventValidationError(
            f"status: {value!r} is not one of {allowed}"
        ) from None
