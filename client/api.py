"""Async httpx wrapper over the Event Manager REST API."""

from __future__ import annotations

import logging

import httpx

from client.models import Event, EventInput, EventStatus

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A call to the REST API failed: transport error, timeout or non-2xx."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


def _error_message(resp: httpx.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if isinstance(detail, list) and detail:
        first = detail[0]
        field = ".".join(str(loc) for loc in first.get("loc", [])[1:])
        return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    if detail:
        return str(detail)
    return f"Request failed with status code {resp.status_code}"


class EventsApi:
    """One method per REST operation, each a single request with a fixed timeout."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> EventsApi:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)  # type: ignore[arg-type]
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise ApiError("Request timed out") from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(str(exc) or exc.__class__.__name__) from exc
        if resp.is_error:
            message = _error_message(resp)
            logger.warning("%s %s -> %s: %s", method, path, resp.status_code, message)
            raise ApiError(message, status_code=resp.status_code)
        return resp

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def health(self) -> dict:
        resp = await self._request("GET", "/health")
        return resp.json()

    async def list_events(self) -> list[Event]:
        resp = await self._request("GET", "/events")
        return [Event.model_validate(item) for item in resp.json()]

    async def get_event(self, event_id: int) -> Event:
        resp = await self._request("GET", f"/events/{event_id}")
        return Event.model_validate(resp.json())

    async def create_event(self, data: EventInput) -> Event:
        resp = await self._request("POST", "/events", json=data.model_dump(mode="json"))
        return Event.model_validate(resp.json())

    async def update_event(self, event_id: int, data: EventInput) -> Event:
        resp = await self._request(
            "PUT", f"/events/{event_id}", json=data.model_dump(mode="json")
        )
        return Event.model_validate(resp.json())

    async def update_status(self, event_id: int, status: EventStatus) -> Event:
        resp = await self._request(
            "PATCH",
            f"/events/{event_id}/status",
            json={"status": EventStatus(status).value},
        )
        return Event.model_validate(resp.json())

    async def delete_event(self, event_id: int) -> None:
        await self._request("DELETE", f"/events/{event_id}")
