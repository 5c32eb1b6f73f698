"""Tests for the remote client's view-model."""

from datetime import date, datetime, timezone

import pytest

from client.models import Event, EventStatus
from client.state import (
    BAD_DATE,
    MISSING_FIELDS,
    PAST_DATE,
    TABS,
    ConnectionStatus,
    EventForm,
    ViewState,
    compute_stats,
    filter_events,
    sort_events,
)

TODAY = date(2026, 10, 19)
STAMP = datetime(2026, 10, 1, tzinfo=timezone.utc)


def make_event(event_id: int, day: date, status: EventStatus = EventStatus.UPCOMING) -> Event:
    return Event(
        id=event_id,
        name=f"Event {event_id}",
        date=day,
        place="Hall",
        status=status,
        display_date="",
        created_at=STAMP,
        updated_at=STAMP,
    )


@pytest.fixture
def events() -> list[Event]:
    return [
        make_event(1, date(2026, 11, 3), EventStatus.SUCCESS),
        make_event(2, date(2026, 11, 5)),
        make_event(3, date(2026, 10, 30), EventStatus.CANCELLED),
        make_event(4, date(2026, 11, 1)),
        make_event(5, date(2026, 10, 25), EventStatus.SUCCESS),
    ]


class TestEventForm:
    def test_valid_form(self):
        form = EventForm(name="Standup", date="2026-10-20", place="Room A")

        assert form.validate(TODAY) is None

    def test_today_is_allowed(self):
        form = EventForm(name="Standup", date=TODAY.isoformat(), place="Room A")

        assert form.validate(TODAY) is None

    @pytest.mark.parametrize(
        "form",
        [
            EventForm(name="", date="2026-10-20", place="Room A"),
            EventForm(name="   ", date="2026-10-20", place="Room A"),
            EventForm(name="Standup", date="", place="Room A"),
            EventForm(name="Standup", date="2026-10-20", place=" "),
        ],
    )
    def test_missing_required_fields(self, form):
        assert form.validate(TODAY) == MISSING_FIELDS

    def test_past_date(self):
        form = EventForm(name="Standup", date="2026-10-18", place="Room A")

        assert form.validate(TODAY) == PAST_DATE

    @pytest.mark.parametrize(
        "value",
        ["20/10/2026", "2099-W01-1", "20991231", "2099-12-31T10:00", "2099-02-30"],
    )
    def test_date_must_be_year_month_day(self, value):
        form = EventForm(name="Standup", date=value, place="Room A")

        assert form.validate(TODAY) == BAD_DATE

    def test_to_input_trims(self):
        form = EventForm(
            name=" Standup ", description=" daily ", date="2026-10-20", place=" A "
        )

        data = form.to_input()

        assert data.name == "Standup"
        assert data.description == "daily"
        assert data.place == "A"
        assert data.date == date(2026, 10, 20)

    def test_from_event(self):
        event = make_event(7, date(2026, 12, 24), EventStatus.CANCELLED)

        form = EventForm.from_event(event)

        assert form.name == "Event 7"
        assert form.date == "2026-12-24"
        assert form.status is EventStatus.CANCELLED


def test_filter_shows_event_iff_tab_is_all_or_matches(events):
    for tab in TABS:
        shown = filter_events(events, tab)
        for event in events:
            assert (event in shown) == (tab == "all" or event.status.value == tab)


def test_sort_puts_upcoming_first_then_by_date(events):
    ordered = sort_events(events)

    assert [event.id for event in ordered] == [4, 2, 5, 3, 1]
    for earlier, later in zip(ordered, ordered[1:]):
        if earlier.status is not EventStatus.UPCOMING:
            assert later.status is not EventStatus.UPCOMING
        if (earlier.status is EventStatus.UPCOMING) == (later.status is EventStatus.UPCOMING):
            assert earlier.date <= later.date


def test_sort_is_stable_for_equal_keys():
    same_day = date(2026, 11, 1)
    events = [make_event(i, same_day) for i in (3, 1, 2)]

    assert [event.id for event in sort_events(events)] == [3, 1, 2]


def test_stats_count_every_status(events):
    stats = compute_stats(events)

    assert stats.total == len(events)
    assert stats.by_status == {
        EventStatus.UPCOMING: 2,
        EventStatus.SUCCESS: 2,
        EventStatus.CANCELLED: 1,
    }


def test_stats_of_empty_list():
    stats = compute_stats([])

    assert stats.total == 0
    assert set(stats.by_status.values()) == {0}


class TestViewState:
    def test_defaults(self):
        state = ViewState()

        assert state.connection is ConnectionStatus.CHECKING
        assert state.active_tab == "upcoming"
        assert not state.is_editing
        assert not state.controls_disabled

    def test_visible_events_filters_then_sorts(self, events):
        state = ViewState(events=events)
        state.select_tab("success")

        assert [event.id for event in state.visible_events] == [5, 1]

    def test_select_unknown_tab(self):
        state = ViewState()

        with pytest.raises(ValueError):
            state.select_tab("completed")
        assert state.active_tab == "upcoming"

    def test_edit_then_cancel_returns_to_idle(self, events):
        state = ViewState(events=events)

        state.start_edit(events[1])
        assert state.is_editing
        assert state.editing_id == 2
        assert state.form.name == "Event 2"

        state.form.name = "changed"
        state.cancel_edit()

        assert not state.is_editing
        assert state.form == EventForm()
        assert state.find(2).name == "Event 2"

    def test_controls_disabled_while_disconnected_or_loading(self):
        state = ViewState(connection=ConnectionStatus.DISCONNECTED)
        assert state.controls_disabled

        state = ViewState(connection=ConnectionStatus.CONNECTED, loading=True)
        assert state.controls_disabled

    def test_dismiss_error(self):
        state = ViewState(error="boom")

        state.dismiss_error()

        assert state.error is None
