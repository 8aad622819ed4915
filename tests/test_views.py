from datetime import datetime, timezone

import pytest

from conftest import make_entry, make_memory
from journal_client.controller import JournalState
from journal_client.models import Entry, MemoryOption
from journal_client.views import REFLECTION_THRESHOLD, UNKNOWN_DATE, build_view, format_timestamp


def entries(n):
    return tuple(Entry.from_json(make_entry(i, f"entry {i}")) for i in range(n))


@pytest.mark.parametrize("count, visible", [(0, False), (2, False), (3, True), (5, True)])
def test_reflection_panel_needs_three_entries(count, visible):
    view = build_view(JournalState(entries=entries(count)))
    assert view["show_reflection_panel"] is visible
    assert REFLECTION_THRESHOLD == 3


@pytest.mark.parametrize(
    "draft, busy, disabled",
    [
        ("", False, True),
        ("   ", False, True),
        ("Hello", False, False),
        ("Hello", True, True),
    ],
)
def test_submit_disabled_when_busy_or_blank(draft, busy, disabled):
    view = build_view(JournalState(draft_text=draft, is_busy=busy))
    assert view["submit_disabled"] is disabled


def test_busy_labels_and_loading_indicator():
    idle = build_view(JournalState())
    busy = build_view(JournalState(is_busy=True))

    assert idle["show_loading"] is False
    assert idle["submit_label"] == "Save Entry"
    assert idle["reflect_label"] == "Reflect on a Past Memory"
    assert busy["show_loading"] is True
    assert busy["submit_label"] == "Saving..."
    assert busy["reflect_disabled"] is True


def test_empty_placeholder_only_without_entries():
    assert build_view(JournalState())["show_empty_placeholder"] is True
    assert build_view(JournalState(entries=entries(1)))["show_empty_placeholder"] is False


def test_entry_rows_keep_text_and_optional_mood():
    state = JournalState(entries=(
        Entry.from_json(make_entry(1, "line one\nline two", mood="calm")),
        Entry.from_json(make_entry(2, "no mood")),
    ))

    rows = build_view(state)["entries"]

    assert rows[0]["text"] == "line one\nline two"
    assert rows[0]["mood"] == "calm"
    assert rows[1]["mood"] is None


def test_memory_rows_are_keyed_by_string_id():
    state = JournalState(memory_options=(MemoryOption.from_json(make_memory(42, "Trip")),))

    rows = build_view(state)["memory_options"]

    assert rows == [{"key": "42", "timestamp": rows[0]["timestamp"], "summary": "Trip"}]


def test_build_view_does_not_touch_state():
    state = JournalState(draft_text="x", entries=entries(3))
    build_view(state)
    assert state == JournalState(draft_text="x", entries=entries(3))


def test_format_timestamp_converts_aware_times_to_local():
    aware = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert format_timestamp(aware) == aware.astimezone().strftime("%x, %X")
    naive = datetime(2025, 3, 1, 9, 30)
    assert format_timestamp(naive) == naive.strftime("%x, %X")


def test_undated_entry_shows_placeholder_timestamp():
    state = JournalState(entries=(Entry.from_json({"id": 1, "text": "undated", "date": "??"}),))

    assert build_view(state)["entries"][0]["timestamp"] == UNKNOWN_DATE
