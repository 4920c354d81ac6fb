"""Tests for the check-runs REST client."""

from __future__ import annotations

import httpx
import pytest
from conftest import API_URL, check_run_record

from checksummarizer.errors import UpstreamError
from checksummarizer.schemas import CheckRunOutput, CreateCheckRunRequest
from checksummarizer.services.auth import StaticTokenProvider
from checksummarizer.services.github import PER_PAGE, ChecksClient


def _client(github, **kwargs) -> ChecksClient:
    return ChecksClient(github.client(), StaticTokenProvider("ghs_test"), api_url=API_URL, **kwargs)


@pytest.mark.asyncio
async def test_list_follows_pages_until_total_count(github):
    github.check_runs = [check_run_record(f"job-{i}") for i in range(PER_PAGE + 5)]
    records = await _client(github).list_check_runs_for_ref("octo", "reef", "abc123", 42)

    assert [r.name for r in records] == [f"job-{i}" for i in range(PER_PAGE + 5)]
    assert [call.url.params["page"] for call in github.list_calls] == ["1", "2"]


@pytest.mark.asyncio
async def test_list_sends_filter_and_api_headers(github):
    await _client(github, check_run_filter="all").list_check_runs_for_ref(
        "octo", "reef", "abc123", 42
    )
    [call] = github.list_calls
    assert call.url.params["filter"] == "all"
    assert call.url.params["per_page"] == str(PER_PAGE)
    assert call.headers["Accept"] == "application/vnd.github+json"
    assert call.headers["X-GitHub-Api-Version"] == "2022-11-28"


@pytest.mark.asyncio
async def test_list_normalizes_blank_fields(github):
    github.check_runs = [check_run_record("plan", status="queued", conclusion="", details_url="")]
    [record] = await _client(github).list_check_runs_for_ref("octo", "reef", "abc123", 42)
    assert record.conclusion is None
    assert record.details_url is None


@pytest.mark.asyncio
async def test_list_rejects_unexpected_status(github):
    github.list_status = 404
    with pytest.raises(UpstreamError) as excinfo:
        await _client(github).list_check_runs_for_ref("octo", "reef", "abc123", 42)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>proxy error</html>"),
        httpx.Response(200, json=[]),
        httpx.Response(200, json={"total_count": 1, "check_runs": [{"status": "completed"}]}),
    ],
)
async def test_list_rejects_malformed_body(github, response):
    github.list_response = response
    with pytest.raises(UpstreamError) as excinfo:
        await _client(github).list_check_runs_for_ref("octo", "reef", "abc123", 42)
    assert excinfo.value.operation == "listing check runs"
    assert excinfo.value.sha == "abc123"
    assert "malformed response" in str(excinfo.value)


@pytest.mark.asyncio
async def test_create_posts_payload(github):
    request = CreateCheckRunRequest(
        name="Synthetic status for Spacelift",
        head_sha="abc123",
        status="completed",
        conclusion="success",
        output=CheckRunOutput(title="1 successful", summary="## Successful checks:\n"),
    )
    created = await _client(github).create_check_run("octo", "reef", request)

    assert created["id"] == 1
    [call] = [r for r in github.requests if r.method == "POST"]
    assert call.url.path == "/repos/octo/reef/check-runs"
    assert github.created == [request.to_payload()]


@pytest.mark.asyncio
async def test_create_rejects_ok_instead_of_created(github):
    github.create_status = 200
    request = CreateCheckRunRequest(
        name="x",
        head_sha="abc123",
        status="in_progress",
        output=CheckRunOutput(title="", summary=""),
    )
    with pytest.raises(UpstreamError) as excinfo:
        await _client(github).create_check_run("octo", "reef", request)
    assert excinfo.value.operation == "creating check run"
