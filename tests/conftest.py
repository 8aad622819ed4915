"""
Shared fixtures: an in-memory stand-in for the remote journal API, wired in
through httpx.MockTransport so no network is touched.
"""

import json

import httpx
import pytest

from journal_client.api_service import JournalApi
from journal_client.app import create_app
from journal_client.controller import JournalController

API_URL = "http://journal-api.test"


def make_entry(entry_id, text="Entry", mood=None, date="2025-03-01T09:30:00Z"):
    return {"id": entry_id, "text": text, "mood": mood, "date": date}


def make_memory(memory_id, summary="A memory", date="2025-02-01T18:00:00Z"):
    return {"id": memory_id, "summary": summary, "date": date}


class FakeJournalBackend:
    """Answers the four endpoints from in-memory lists and records every call."""

    def __init__(self):
        self.entries = []
        self.memories = []
        self.reflection = "You grew from this."
        self.failing = set()  # (method, path) pairs answered with 500
        self.requests = []

    def calls(self, method=None, path=None):
        return [
            (m, p, body) for (m, p, body) in self.requests
            if (method is None or m == method) and (path is None or p == path)
        ]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        key = (request.method, request.url.path)
        self.requests.append((request.method, request.url.path, body))

        if key in self.failing:
            return httpx.Response(500, json={"error": "boom"})
        if key == ("GET", "/entries"):
            return httpx.Response(200, json=self.entries)
        if key == ("POST", "/entries"):
            entry = make_entry(
                len(self.entries) + 1,
                text=body["text"],
                mood=body.get("mood"),
            )
            # Server keeps newest first
            self.entries.insert(0, entry)
            return httpx.Response(201, json=entry)
        if key == ("GET", "/memory-options"):
            return httpx.Response(200, json={"memories": self.memories})
        if key == ("POST", "/reflect-memory"):
            return httpx.Response(200, json={"reflection": self.reflection})
        return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture
def backend():
    return FakeJournalBackend()


@pytest.fixture
def transport(backend):
    return httpx.MockTransport(backend.handler)


@pytest.fixture
def api(transport):
    return JournalApi(API_URL, transport=transport)


@pytest.fixture
def controller(api):
    return JournalController(api)


@pytest.fixture
def app(transport):
    app = create_app(api_url=API_URL, transport=transport, secret_key="test-secret")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
