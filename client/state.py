"""View-model for the remote client.

Everything the UI shows is derived from one :class:`ViewState`: the mirror
of the server's event list, the create/edit form, the active tab, the
connectivity indicator and the error banner. Filtering, sorting and the
header counts are pure functions over the mirrored list and are recomputed
on every read, so they never drift from what the server returned.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from client.models import Event, EventInput, EventStatus

TAB_ALL = "all"

STATUS_LABELS = {
    EventStatus.UPCOMING: "Upcoming",
    EventStatus.SUCCESS: "Completed",
    EventStatus.CANCELLED: "Cancelled",
}

TABS = (TAB_ALL, *(status.value for status in EventStatus))

MISSING_FIELDS = "Please fill in all required fields: Event Name, Date, and Place."
PAST_DATE = "Please select a date in the future."
BAD_DATE = "Please enter the date as YYYY-MM-DD."

ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


class ConnectionStatus(str, Enum):
    CHECKING = "checking"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass
class EventForm:
    """Contents of the create/edit form, as typed by the user."""

    name: str = ""
    description: str = ""
    date: str = ""
    time: str = ""
    place: str = ""
    status: EventStatus = EventStatus.UPCOMING

    @classmethod
    def from_event(cls, event: Event) -> EventForm:
        return cls(
            name=event.name,
            description=event.description,
            date=event.date.isoformat(),
            time=event.time,
            place=event.place,
            status=event.status,
        )

    def validate(self, today: date) -> str | None:
        """Return the message to show, or None when the form may be sent."""
        if not self.name.strip() or not self.date.strip() or not self.place.strip():
            return MISSING_FIELDS
        if not ISO_DATE.fullmatch(self.date.strip()):
            return BAD_DATE
        try:
            chosen = date.fromisoformat(self.date.strip())
        except ValueError:
            return BAD_DATE
        if chosen < today:
            return PAST_DATE
        return None

    def to_input(self) -> EventInput:
        return EventInput(
            name=self.name,
            description=self.description,
            date=self.date.strip(),
            time=self.time,
            place=self.place,
            status=self.status,
        )


@dataclass(frozen=True)
class Stats:
    total: int
    by_status: dict[EventStatus, int]


def filter_events(events: Iterable[Event], tab: str) -> list[Event]:
    """Keep the events shown under *tab*: all of them, or one status."""
    if tab == TAB_ALL:
        return list(events)
    return [event for event in events if event.status.value == tab]


def sort_events(events: Iterable[Event]) -> list[Event]:
    """Upcoming events first, then by ascending date; ties keep list order."""
    return sorted(
        events,
        key=lambda event: (event.status is not EventStatus.UPCOMING, event.date),
    )


def compute_stats(events: Iterable[Event]) -> Stats:
    events = list(events)
    by_status = {status: 0 for status in EventStatus}
    for event in events:
        by_status[event.status] += 1
    return Stats(total=len(events), by_status=by_status)


@dataclass
class ViewState:
    events: list[Event] = field(default_factory=list)
    form: EventForm = field(default_factory=EventForm)
    editing_id: int | None = None
    active_tab: str = EventStatus.UPCOMING.value
    connection: ConnectionStatus = ConnectionStatus.CHECKING
    loading: bool = False
    error: str | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def controls_disabled(self) -> bool:
        return self.connection is ConnectionStatus.DISCONNECTED or self.loading

    @property
    def visible_events(self) -> list[Event]:
        return sort_events(filter_events(self.events, self.active_tab))

    @property
    def stats(self) -> Stats:
        return compute_stats(self.events)

    def find(self, event_id: int) -> Event | None:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def start_edit(self, event: Event) -> None:
        self.form = EventForm.from_event(event)
        self.editing_id = event.id

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.reset_form()

    def reset_form(self) -> None:
        self.form = EventForm()

    def select_tab(self, tab: str) -> None:
        if tab not in TABS:
            raise ValueError(f"Unknown tab {tab!r}. Available: {list(TABS)}")
        self.active_tab = tab

    def dismiss_error(self) -> None:
        self.error = None
