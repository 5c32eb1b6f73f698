"""Shared Pydantic models for Event Manager."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    SUCCESS = "success"
    CANCELLED = "cancelled"


class EventInput(BaseModel):
    """Writable event fields, as sent by clients on create and replace."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    description: str = ""
    date: date
    time: str = ""
    place: str = Field(min_length=1)
    status: EventStatus = EventStatus.UPCOMING


class StatusUpdate(BaseModel):
    status: EventStatus


class Event(BaseModel):
    """Core event schema shared by the store, the API, and the clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    description: str = ""
    date: date
    time: str = ""
    place: str
    status: EventStatus = EventStatus.UPCOMING
    display_date: str
    created_at: datetime
    updated_at: datetime


def format_display_date(value: date) -> str:
    """Render *value* the long way, e.g. ``Tuesday, October 20, 2026``."""
    return f"{value:%A, %B} {value.day}, {value.year}"
