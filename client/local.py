"""Local event logger: the same list/form/filter pattern, kept on disk only.

Events live under one key of a small JSON key-value file that plays the
part of browser local storage. Nothing here talks to the REST API and the
dataset is never synced with the event store.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

STORAGE_KEY = "events"

CLEAR_PROMPT = "Are you sure you want to delete all events?"


class LogType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    DEBUG = "debug"


TYPE_LABELS = {
    LogType.INFO: "Info",
    LogType.WARNING: "Warning",
    LogType.ERROR: "Error",
    LogType.SUCCESS: "Success",
    LogType.DEBUG: "Debug",
}

DATE_RANGES = ("all", "today", "week", "month")


class LocalEvent(BaseModel):
    id: int
    name: str
    description: str = ""
    type: LogType = LogType.INFO
    timestamp: datetime
    date: str = ""
    time: str = ""


_event_list = TypeAdapter(list[LocalEvent])


class LocalStorage:
    """String key-value store persisted as a single JSON object."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


@dataclass
class EventLogForm:
    name: str = ""
    description: str = ""
    type: LogType = LogType.INFO


def _month_ago(now: datetime) -> datetime:
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = now.day
    while True:
        try:
            return now.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


def _local(value: datetime) -> datetime:
    """Aware datetimes become naive local time; naive ones are already local."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def in_date_range(timestamp: datetime, date_range: str, now: datetime) -> bool:
    """Whether *timestamp* falls inside *date_range* as seen at *now*."""
    timestamp, now = _local(timestamp), _local(now)
    if date_range == "today":
        return timestamp.date() == now.date()
    if date_range == "week":
        return timestamp >= now - timedelta(days=7)
    if date_range == "month":
        return timestamp >= _month_ago(now)
    if date_range == "all":
        return True
    raise ValueError(f"Unknown date range {date_range!r}. Available: {list(DATE_RANGES)}")


class EventLogger:
    """Local-only event list with search, type and date-range filters."""

    def __init__(
        self,
        storage: LocalStorage,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.storage = storage
        self.now = now
        self.form = EventLogForm()
        self.editing_id: int | None = None
        self.events: list[LocalEvent] = self._load()

    def _load(self) -> list[LocalEvent]:
        raw = self.storage.get_item(STORAGE_KEY)
        if not raw:
            return []
        try:
            return _event_list.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable saved events: %s", exc)
            return []

    def _persist(self) -> None:
        self.storage.set_item(STORAGE_KEY, _event_list.dump_json(self.events).decode())

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def submit(self) -> LocalEvent | None:
        """Log the form as a new event, or overwrite the one being edited."""
        if not self.form.name.strip():
            return None

        stamp = self.now()
        event = LocalEvent(
            id=self.editing_id if self.editing_id is not None else self._new_id(stamp),
            name=self.form.name,
            description=self.form.description,
            type=self.form.type,
            timestamp=stamp,
            date=stamp.strftime("%m/%d/%Y"),
            time=stamp.strftime("%I:%M:%S %p"),
        )
        if self.editing_id is not None:
            self.events = [
                event if existing.id == self.editing_id else existing
                for existing in self.events
            ]
            self.editing_id = None
        else:
            self.events.insert(0, event)

        self.form = EventLogForm()
        self._persist()
        return event

    def _new_id(self, stamp: datetime) -> int:
        new_id = int(stamp.timestamp() * 1000)
        taken = {event.id for event in self.events}
        while new_id in taken:
            new_id += 1
        return new_id

    def start_edit(self, event_id: int) -> LocalEvent:
        for event in self.events:
            if event.id == event_id:
                self.form = EventLogForm(event.name, event.description, event.type)
                self.editing_id = event.id
                return event
        raise KeyError(f"Event {event_id} not found")

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.form = EventLogForm()

    def delete(self, event_id: int) -> bool:
        remaining = [event for event in self.events if event.id != event_id]
        if len(remaining) == len(self.events):
            return False
        self.events = remaining
        if self.editing_id == event_id:
            self.cancel_edit()
        self._persist()
        return True

    def clear_all(self, confirm: Callable[[str], bool]) -> bool:
        if not confirm(CLEAR_PROMPT):
            return False
        self.events = []
        self.cancel_edit()
        self.storage.remove_item(STORAGE_KEY)
        logger.info("Cleared all local events")
        return True

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def filtered(
        self,
        search: str = "",
        type: str = "all",
        date_range: str = "all",
    ) -> list[LocalEvent]:
        """Events matching the search text AND the type AND the date range."""
        needle = search.lower()
        now = self.now()
        return [
            event
            for event in self.events
            if (needle in event.name.lower() or needle in event.description.lower())
            and (type == "all" or event.type.value == type)
            and in_date_range(event.timestamp, date_range, now)
        ]

    def stats(self) -> dict[str, int]:
        counts = {"total": len(self.events)}
        for log_type in LogType:
            counts[log_type.value] = sum(
                1 for event in self.events if event.type is log_type
            )
        return counts

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        return json.dumps(
            [event.model_dump(mode="json") for event in self.events], indent=2
        )

    def export_filename(self) -> str:
        return f"events-{self.now().date().isoformat()}.json"

    def export(self, directory: Path | str) -> Path:
        """Write the whole list to a dated JSON file in *directory*."""
        out = Path(directory) / self.export_filename()
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(self.export_json(), encoding="utf-8")
        logger.info("Exported %d event(s) to %s", len(self.events), out)
        return out
