"""
Client-side state for one journal page.

The controller is the only writer of its JournalState. Each public coroutine is
one named transition; callers read immutable snapshots through ``state``.

Overlapping requests of the same kind are numbered. When a request settles its
result is applied only if no newer request of that kind was issued meanwhile,
so a slow response can never overwrite a fresher one.
"""

import logging
import threading
import uuid
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from journal_client.api_service import ApiError, JournalApi

logger = logging.getLogger(__name__)

ENTRIES = "entries"
MEMORIES = "memories"
REFLECTION = "reflection"


@dataclass(frozen=True)
class JournalState:
    draft_text: str = ""
    draft_mood: str = ""
    entries: tuple = ()
    memory_options: tuple = ()
    reflection_text: str = ""
    is_busy: bool = False

    def to_json(self) -> dict:
        return {
            "draft_text": self.draft_text,
            "draft_mood": self.draft_mood,
            "entries": [e.to_json() for e in self.entries],
            "memory_options": [m.to_json() for m in self.memory_options],
            "reflection_text": self.reflection_text,
            "is_busy": self.is_busy,
        }


class JournalController:
    def __init__(self, api: JournalApi):
        self._api = api
        self._state = JournalState()
        self._in_flight = 0
        self._latest = {ENTRIES: 0, MEMORIES: 0, REFLECTION: 0}
        self._lock = threading.Lock()

    @property
    def state(self) -> JournalState:
        return self._state

    # ---------- Bookkeeping ----------

    def _update(self, **changes) -> None:
        with self._lock:
            self._state = replace(self._state, **changes)

    @contextmanager
    def _busy(self):
        with self._lock:
            self._in_flight += 1
            self._state = replace(self._state, is_busy=True)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= 1
                self._state = replace(self._state, is_busy=self._in_flight > 0)

    def _issue(self, kind: str) -> int:
        with self._lock:
            self._latest[kind] += 1
            return self._latest[kind]

    def _apply(self, kind: str, ticket: int, **changes) -> bool:
        with self._lock:
            if ticket != self._latest[kind]:
                logger.debug(
                    "Discarding stale %s result (request %d, latest %d)",
                    kind, ticket, self._latest[kind],
                )
                return False
            self._state = replace(self._state, **changes)
            return True

    # ---------- Draft edits ----------

    def set_draft_text(self, text: str) -> None:
        self._update(draft_text=text or "")

    def set_draft_mood(self, mood: str) -> None:
        self._update(draft_mood=mood or "")

    def _clear_draft_if_unchanged(self, sent_text: str) -> bool:
        # Edits made while the post was in flight are kept.
        with self._lock:
            if self._state.draft_text != sent_text:
                return False
            self._state = replace(self._state, draft_text="", draft_mood="")
            return True

    # ---------- Remote operations ----------

    async def mount(self) -> bool:
        """Initial load of the page."""
        return await self.load_entries()

    async def load_entries(self) -> bool:
        ticket = self._issue(ENTRIES)
        with self._busy():
            try:
                entries = await self._api.fetch_entries()
            except ApiError as e:
                logger.error("Error fetching entries: %s", e)
                return False
            return self._apply(ENTRIES, ticket, entries=tuple(entries))

    async def load_memory_options(self) -> bool:
        ticket = self._issue(MEMORIES)
        with self._busy():
            try:
                memories = await self._api.fetch_memory_options()
            except ApiError as e:
                logger.error("Error fetching memories: %s", e)
                return False
            return self._apply(MEMORIES, ticket, memory_options=tuple(memories))

    async def submit_entry(self) -> bool:
        """Post the draft, clear it, then refresh the entry list.

        Blank (empty or whitespace-only) drafts are ignored: nothing is sent.
        The draft is only cleared if it was not edited during the post.
        """
        text = self._state.draft_text
        mood = self._state.draft_mood.strip() or None
        if not text.strip():
            return False

        with self._busy():
            try:
                await self._api.create_entry(text, mood)
            except ApiError as e:
                logger.error("Error posting entry: %s", e)
                return False
            self._clear_draft_if_unchanged(text)
            await self.load_entries()
            return True

    async def request_reflection(self, memory_id) -> bool:
        ticket = self._issue(REFLECTION)
        with self._busy():
            try:
                reflection = await self._api.reflect_on_memory(memory_id)
            except ApiError as e:
                logger.error("Error reflecting on memory: %s", e)
                return False
            return self._apply(REFLECTION, ticket, reflection_text=reflection)

    def memory_option_by_key(self, key: str):
        """Find an offered memory by the string form of its id (as seen in URLs)."""
        for option in self._state.memory_options:
            if str(option.id) == key:
                return option
        return None


class ControllerRegistry:
    """One controller per browser session, kept in memory.

    At most ``max_sessions`` controllers are held; the least recently used one
    is evicted to make room for a new session.
    """

    def __init__(self, api_factory: Callable[[], JournalApi], max_sessions: int = 1000):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._api_factory = api_factory
        self.max_sessions = max_sessions
        self._controllers: "OrderedDict[str, JournalController]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> Optional[JournalController]:
        with self._lock:
            return self._controllers.get(session_id)

    def get_or_create(self, session_id: str) -> Tuple[JournalController, bool]:
        """Return (controller, created), marking the session as recently used."""
        with self._lock:
            controller = self._controllers.get(session_id)
            if controller is not None:
                self._controllers.move_to_end(session_id)
                return controller, False
            while len(self._controllers) >= self.max_sessions:
                evicted, _ = self._controllers.popitem(last=False)
                logger.debug("Evicting least recently used session %s", evicted)
            controller = JournalController(self._api_factory())
            self._controllers[session_id] = controller
            return controller, True

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._controllers.pop(session_id, None)

    def __len__(self):
        return len(self._controllers)
