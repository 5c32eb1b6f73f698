"""Controller for the remote client: user action → API call → re-fetch → state."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from client.api import ApiError, EventsApi
from client.models import Event, EventStatus
from client.state import ConnectionStatus, ViewState

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this event?"


class EventManager:
    """Drives a :class:`ViewState` from user actions.

    Each action makes at most one mutating call, holds ``loading`` for its
    duration, and re-fetches the whole list on success instead of patching
    the mirror locally, so the view always shows what the store holds.
    """

    def __init__(
        self,
        api: EventsApi,
        confirm: Callable[[str], bool],
        today: Callable[[], date] = date.today,
        state: ViewState | None = None,
    ) -> None:
        self.api = api
        self.confirm = confirm
        self.today = today
        self.state = state or ViewState()

    async def start(self) -> None:
        """Probe the backend, then load the list if it answered."""
        if await self.check_connection():
            await self.refresh()

    async def check_connection(self) -> bool:
        self.state.connection = ConnectionStatus.CHECKING
        try:
            await self.api.health()
        except ApiError as exc:
            logger.error("Backend connection error: %s", exc)
            self.state.connection = ConnectionStatus.DISCONNECTED
            self.state.error = (
                f"Backend server is not reachable at {self.api.base_url}."
            )
            return False
        self.state.connection = ConnectionStatus.CONNECTED
        return True

    async def retry_connection(self) -> bool:
        """Manual retry: re-probe, and reload the list once reconnected."""
        self.state.dismiss_error()
        connected = await self.check_connection()
        if connected:
            await self.refresh()
        return connected

    async def refresh(self) -> bool:
        self.state.loading = True
        try:
            events = await self.api.list_events()
        except ApiError as exc:
            logger.error("Error fetching events: %s", exc)
            self.state.error = f"Failed to fetch events: {exc.message}"
            self.state.loading = False
            await self.check_connection()
            return False
        self.state.events = events
        self.state.error = None
        self.state.loading = False
        return True

    async def submit(self) -> bool:
        """Create (idle) or update (editing) from the form.

        Returns True when the store accepted the write.
        """
        if self.state.controls_disabled:
            return False

        message = self.state.form.validate(self.today())
        if message:
            self.state.error = message
            return False

        data = self.state.form.to_input()
        self.state.loading = True
        self.state.error = None
        try:
            if self.state.editing_id is not None:
                await self.api.update_event(self.state.editing_id, data)
            else:
                await self.api.create_event(data)
        except ApiError as exc:
            logger.error("Error saving event: %s", exc)
            self.state.error = f"Failed to save event: {exc.message}"
            return False
        finally:
            self.state.loading = False

        self.state.editing_id = None
        self.state.reset_form()
        await self.refresh()
        return True

    def edit(self, event_id: int) -> Event | None:
        """Load an event into the form; refused while controls are disabled."""
        if self.state.controls_disabled:
            return None
        event = self.state.find(event_id)
        if event is None:
            raise KeyError(f"Event {event_id} is not in the list")
        self.state.start_edit(event)
        return event

    def cancel_edit(self) -> None:
        self.state.cancel_edit()

    async def delete(self, event_id: int) -> bool:
        if self.state.controls_disabled:
            return False
        if not self.confirm(DELETE_PROMPT):
            return False

        self.state.loading = True
        self.state.error = None
        try:
            await self.api.delete_event(event_id)
        except ApiError as exc:
            logger.error("Error deleting event: %s", exc)
            self.state.error = f"Failed to delete event: {exc.message}"
            return False
        finally:
            self.state.loading = False

        if self.state.editing_id == event_id:
            self.state.cancel_edit()
        await self.refresh()
        return True

    async def change_status(self, event_id: int, status: EventStatus | str) -> bool:
        if self.state.controls_disabled:
            return False

        self.state.loading = True
        self.state.error = None
        try:
            await self.api.update_status(event_id, EventStatus(status))
        except ApiError as exc:
            logger.error("Error updating status: %s", exc)
            self.state.error = f"Failed to update status: {exc.message}"
            return False
        finally:
            self.state.loading = False

        await self.refresh()
        return True
