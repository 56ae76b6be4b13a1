#!/usr/bin/env python3
"""Golden path demo for TaskTrack (two users, one handed-off task)."""

from __future__ import annotations

import json
import os
import sys
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


def _env(name: str, default: str | None = None) -> str | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


class HttpClient:
    def __init__(self, base_url: str, token: str | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers: dict[str, str] = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def with_token(self, token: str) -> "HttpClient":
        return HttpClient(self.base_url, token=token)

    def request_json(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
        timeout: float = 10.0,
    ) -> Any:
        url = f"{self.base_url}{path}"
        if query:
            query = {k: v for k, v in query.items() if v is not None}
            if query:
                url = f"{url}?{urlencode(query)}"

        data = None
        if payload is not None:
            data = json.dumps(payload, default=str).encode("utf-8")

        req = Request(url, data=data, method=method)
        for key, value in self.headers.items():
            req.add_header(key, value)

        try:
            with urlopen(req, timeout=timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"{method} {url} failed: {exc.code} {exc.reason}: {detail}") from None

        if not raw:
            return {}
        return json.loads(raw.decode("utf-8"))


def _register(client: HttpClient, name: str) -> tuple[str, str]:
    email = f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
    resp = client.request_json(
        "POST",
        "/v1/auth/register",
        payload={"email": email, "password": "golden-path", "name": name},
    )
    return resp["user"]["id"], resp["token"]


def main() -> int:
    base_url = _env("TASKTRACK_URL", "http://localhost:8000")
    client = HttpClient(base_url)

    print("Checking health...")
    health = client.request_json("GET", "/v1/health")
    if health.get("status") != "healthy":
        raise RuntimeError(f"Unexpected health response: {health}")

    print("Registering users...")
    alice_id, alice_token = _register(client, "Alice")
    bob_id, bob_token = _register(client, "Bob")
    alice = client.with_token(alice_token)
    bob = client.with_token(bob_token)

    print("Creating task...")
    due = datetime.now(timezone.utc) + timedelta(days=3)
    create_resp = alice.request_json(
        "POST",
        "/v1/tasks",
        payload={
            "title": "Golden path demo task",
            "description": "Hand this task from Alice to Bob.",
            "due_date": due.isoformat(),
            "priority": "HIGH",
        },
    )
    task_id = create_resp["task"]["id"]
    print(f"Task created: {task_id}")

    print("Assigning task to Bob...")
    alice.request_json(
        "PUT",
        f"/v1/tasks/{task_id}",
        payload={"assigned_to_id": bob_id, "status": "IN_PROGRESS"},
    )

    task = bob.request_json("GET", f"/v1/tasks/{task_id}")
    if task.get("assigned_to_id") != bob_id:
        raise RuntimeError(f"Task not assigned to Bob: {task}")

    fields = {log.get("field") for log in task.get("audit_logs", [])}
    if not {"assignedTo", "status"} <= fields:
        raise RuntimeError(f"Missing expected audit entries: {fields}")

    dashboard = bob.request_json("GET", "/v1/tasks/dashboard")
    assigned_ids = {t.get("id") for t in dashboard.get("assigned_tasks", [])}
    if task_id not in assigned_ids:
        raise RuntimeError("Task missing from assignee dashboard")

    listed = alice.request_json("GET", "/v1/tasks", query={"status": "IN_PROGRESS"})
    if task_id not in {t.get("id") for t in listed}:
        raise RuntimeError("Task missing from filtered list")

    print("Deleting task...")
    alice.request_json("DELETE", f"/v1/tasks/{task_id}")

    print(
        f"Golden path complete: task {task_id} handed from {alice_id} to {bob_id}, "
        "audited, and removed."
    )
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise
