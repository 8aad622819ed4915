"""Pure mapping from JournalState to what the page template shows."""

from datetime import datetime
from typing import Optional

from journal_client.controller import JournalState

# Reflection needs a few entries to pick from.
REFLECTION_THRESHOLD = 3

APP_TITLE = "Mementote - Your AI Journaling Assistant"
EMPTY_PLACEHOLDER = "No entries yet. Write your first journal entry above!"
UNKNOWN_DATE = "Date unknown"


def format_timestamp(value: Optional[datetime]) -> str:
    """Localized display: server timezone, locale date and time."""
    if value is None:
        return UNKNOWN_DATE
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%x, %X")


def build_view(state: JournalState) -> dict:
    busy = state.is_busy
    return {
        "title": APP_TITLE,
        "draft_text": state.draft_text,
        "draft_mood": state.draft_mood,
        "submit_disabled": busy or not state.draft_text.strip(),
        "submit_label": "Saving..." if busy else "Save Entry",
        "show_empty_placeholder": not state.entries,
        "empty_placeholder": EMPTY_PLACEHOLDER,
        "entries": [
            {
                "id": e.id,
                "timestamp": format_timestamp(e.date),
                "text": e.text,
                "mood": e.mood,
            }
            for e in state.entries
        ],
        "show_reflection_panel": len(state.entries) >= REFLECTION_THRESHOLD,
        "reflect_disabled": busy,
        "reflect_label": "Loading..." if busy else "Reflect on a Past Memory",
        "memory_options": [
            {
                "key": str(m.id),
                "timestamp": format_timestamp(m.date),
                "summary": m.summary,
            }
            for m in state.memory_options
        ],
        "reflection_text": state.reflection_text,
        "show_loading": busy,
    }
