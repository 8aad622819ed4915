# api_service.py
import logging

import httpx

from journal_client import config
from journal_client.models import Entry, MalformedPayload, MemoryOption

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Any failed round trip: unreachable host, non-OK status, bad JSON."""


class JournalApi:
    """
    Thin async client for the remote journal API.

    Endpoints:
      GET  /entries         -> [ {id, text, mood?, date}, ... ]
      POST /entries         <- {text, mood?}
      GET  /memory-options  -> {memories: [ {id, summary, date}, ... ]}
      POST /reflect-memory  <- {memory_id}  -> {reflection}
    """

    def __init__(self, base_url: str = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        # Tests pass an httpx.MockTransport; production uses the default one.
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self.transport)

    async def _request(self, method: str, path: str, json=None, parse=True):
        try:
            async with self._client() as client:
                resp = await client.request(method, path, json=json)
                logger.debug("%s %s -> %s", method, path, resp.status_code)
                resp.raise_for_status()
                return resp.json() if parse else None
        except httpx.HTTPStatusError as e:
            raise ApiError(
                f"{method} {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ApiError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            raise ApiError(f"{method} {path} returned invalid JSON") from e

    async def fetch_entries(self) -> list:
        data = await self._request("GET", "/entries")
        if not isinstance(data, list):
            raise ApiError("GET /entries did not return a list")
        try:
            return [Entry.from_json(item) for item in data]
        except MalformedPayload as e:
            raise ApiError(f"GET /entries returned a malformed entry: {e}") from e

    async def create_entry(self, text: str, mood: str = None) -> None:
        """Post a new entry. The response body is not used; callers re-fetch."""
        body = {"text": text}
        if mood:
            body["mood"] = mood
        await self._request("POST", "/entries", json=body, parse=False)

    async def fetch_memory_options(self) -> list:
        data = await self._request("GET", "/memory-options")
        if not isinstance(data, dict) or not isinstance(data.get("memories"), list):
            raise ApiError("GET /memory-options did not return {memories: [...]}")
        try:
            return [MemoryOption.from_json(item) for item in data["memories"]]
        except MalformedPayload as e:
            raise ApiError(f"GET /memory-options returned a malformed memory: {e}") from e

    async def reflect_on_memory(self, memory_id) -> str:
        data = await self._request("POST", "/reflect-memory", json={"memory_id": memory_id})
        reflection = data.get("reflection") if isinstance(data, dict) else None
        if not isinstance(reflection, str):
            raise ApiError("POST /reflect-memory did not return {reflection: string}")
        return reflection
