# tests/test_task_api.py

from __future__ import annotations

import json

import httpx
import pytest

from taskmaster.core.errors import RemoteRejection, TransportError
from taskmaster.tasks.task_api import TaskServiceClient

BASE = "http://tasks.test/api/tasks"


def _client(handler) -> TaskServiceClient:
    return TaskServiceClient(BASE, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_crud_requests_hit_the_right_urls() -> None:
    seen: list[tuple[str, str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        seen.append((request.method, str(request.url), body))
        if request.method == "GET":
            return httpx.Response(200, json=[{"id": "1", "title": "x"}])
        if request.method == "POST":
            return httpx.Response(201, json={"id": "2", **body})
        if request.method == "PUT":
            return httpx.Response(200, json={"id": "a b", **body})
        return httpx.Response(200, json={"message": "Task deleted"})

    async with _client(handler) as client:
        assert await client.list_tasks() == [{"id": "1", "title": "x"}]
        assert (await client.create_task({"title": "t"}))["id"] == "2"
        assert (await client.update_task("a b", {"completed": True}))["completed"] is True
        await client.delete_task("a b")

    assert seen == [
        ("GET", BASE, None),
        ("POST", BASE, {"title": "t"}),
        ("PUT", f"{BASE}/a%20b", {"completed": True}),
        ("DELETE", f"{BASE}/a%20b", None),
    ]


@pytest.mark.asyncio
async def test_error_status_becomes_remote_rejection_with_server_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Task not found"})

    async with _client(handler) as client:
        with pytest.raises(RemoteRejection) as exc:
            await client.update_task("nope", {"title": "x"})

    assert exc.value.message == "Task not found"
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_network_failure_becomes_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportError):
            await client.list_tasks()


@pytest.mark.asyncio
async def test_bad_payloads_become_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"not": "a list"})
        return httpx.Response(200, content=b"<html>oops</html>")

    async with _client(handler) as client:
        with pytest.raises(TransportError):
            await client.list_tasks()
        with pytest.raises(TransportError):
            await client.create_task({"title": "x"})
