"""Shared fixtures: webhook payloads and a fake GitHub REST API."""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Optional

import httpx
import pytest

from checksummarizer.config import AppIdentity, Settings

SECRET = "s3cr3t"
API_URL = "https://api.github.test"
OBSERVED_APP = {"id": 42, "name": "Spacelift", "slug": "spacelift"}
OTHER_APP = {"id": 7, "name": "GitHub Actions", "slug": "github-actions"}


def check_run_payload(
    *,
    app: Optional[dict] = None,
    status: str = "completed",
    conclusion: Optional[str] = "success",
    name: str = "plan",
    head_sha: str = "abc123",
) -> dict[str, Any]:
    return {
        "action": "completed",
        "check_run": {
            "id": 1001,
            "name": name,
            "status": status,
            "conclusion": conclusion,
            "head_sha": head_sha,
            "details_url": f"https://ci.example/{name}",
            "html_url": f"https://github.com/octo/reef/runs/{name}",
            "app": app or OBSERVED_APP,
        },
        "repository": {
            "name": "reef",
            "full_name": "octo/reef",
            "owner": {"login": "octo"},
        },
        "installation": {"id": 555},
        "sender": {"login": "octocat"},
    }


def check_run_record(
    name: str,
    status: str = "completed",
    conclusion: Optional[str] = "success",
    details_url: Optional[str] = None,
) -> dict[str, Any]:
    return {
        "id": 1,
        "name": name,
        "status": status,
        "conclusion": conclusion,
        "details_url": details_url if details_url is not None else f"https://ci.example/{name}",
        "app": OBSERVED_APP,
    }


def sign(body: bytes, secret: str = SECRET, algo: str = "sha256") -> str:
    digest = hmac.new(secret.encode(), body, getattr(hashlib, algo)).hexdigest()
    return f"{algo}={digest}"


class FakeGitHub:
    """
    Minimal stand-in for the check-runs endpoints.

    ``check_runs`` is served from the listing endpoint in pages; created check
    runs are appended to ``created``. ``list_status`` / ``create_status``
    force error responses. ``list_response`` replaces the listing
    response outright.
    """

    def __init__(self) -> None:
        self.check_runs: list[dict[str, Any]] = []
        self.created: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.list_status = 200
        self.create_status = 201
        self.list_error: Optional[Exception] = None
        self.list_response: Optional[httpx.Response] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path.endswith("/check-runs"):
            if self.list_error is not None:
                raise self.list_error
            if self.list_response is not None:
                return self.list_response
            if self.list_status != 200:
                return httpx.Response(self.list_status, json={"message": "boom"})
            per_page = int(request.url.params.get("per_page", "30"))
            page = int(request.url.params.get("page", "1"))
            start = (page - 1) * per_page
            return httpx.Response(
                200,
                json={
                    "total_count": len(self.check_runs),
                    "check_runs": self.check_runs[start : start + per_page],
                },
            )
        if request.method == "POST" and path.endswith("/check-runs"):
            body = json.loads(request.content)
            if self.create_status != 201:
                return httpx.Response(self.create_status, json={"message": "nope"})
            self.created.append(body)
            return httpx.Response(201, json={"id": len(self.created), **body})
        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def list_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        webhook_secret=SECRET,
        observed_app=AppIdentity(app_name=OBSERVED_APP["name"]),
        static_token="ghs_test",
        api_url=API_URL,
    )
