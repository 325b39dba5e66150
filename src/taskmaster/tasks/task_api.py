# src/taskmaster/tasks/task_api.py

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import RemoteRejection, TransportError
from ..core.ports import TaskRecord

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Best-effort: the service answers errors as {"message": ...}."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    text = (response.text or "").strip()
    return text[:200] if text else f"HTTP {response.status_code}"


class TaskServiceClient:
    """
    Async HTTP client for the task persistence service.

    Errors:
    - network / timeout / undecodable JSON -> TransportError
    - non-2xx answers -> RemoteRejection carrying the server message
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> TaskServiceClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _item_url(self, task_id: str) -> str:
        return f"{self._url}/{quote(str(task_id), safe='')}"

    async def _request(self, method: str, url: str, *, json: Any = None) -> Any:
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"Could not reach the task service ({e.__class__.__name__}).") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.info("%s %s -> %s %s", method, url, response.status_code, message)
            raise RemoteRejection(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError("Task service returned invalid JSON.") from e

    async def list_tasks(self) -> list[TaskRecord]:
        data = await self._request("GET", self._url)
        if not isinstance(data, list):
            raise TransportError("Task list response is not an array.")
        return data

    async def create_task(self, body: TaskRecord) -> TaskRecord:
        data = await self._request("POST", self._url, json=body)
        if not isinstance(data, dict):
            raise TransportError("Create response is not an object.")
        return data

    async def update_task(self, task_id: str, patch: TaskRecord) -> TaskRecord:
        data = await self._request("PUT", self._item_url(task_id), json=patch)
        if not isinstance(data, dict):
            raise TransportError("Update response is not an object.")
        return data

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", self._item_url(task_id))
