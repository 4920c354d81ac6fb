"""GitHub check-runs REST client."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
import pydantic

from checksummarizer.errors import UpstreamError
from checksummarizer.schemas import CheckRunList, CheckRunRecord, CreateCheckRunRequest
from checksummarizer.services.auth import TokenProvider

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "checksummarizer/1.0"
PER_PAGE = 100

JSONDict = dict[str, Any]


class ChecksClient:
    """
    The two check-run operations the aggregator needs: list a commit's check
    runs for one app, and create a check run.

    Neither retries; any failure surfaces as :class:`UpstreamError`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        tokens: TokenProvider,
        *,
        api_url: str = "https://api.github.com",
        check_run_filter: Optional[str] = None,
    ) -> None:
        self._client = client
        self._tokens = tokens
        self._api_url = api_url.rstrip("/")
        self._check_run_filter = check_run_filter

    async def _headers(self) -> dict[str, str]:
        token = await self._tokens.get_token()
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        }

    async def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        sha: str,
        expected: int,
        **kwargs: Any,
    ) -> JSONDict:
        headers = await self._headers()
        try:
            resp = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise UpstreamError.transport(operation, sha, exc) from exc
        if resp.status_code != expected:
            logger.error("%s %s -> %s: %s", method, url, resp.status_code, resp.text[:800])
            raise UpstreamError.unexpected_status(operation, sha, resp.status_code)
        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("%s %s returned a non-JSON body: %s", method, url, resp.text[:800])
            raise UpstreamError.malformed(operation, sha, exc) from exc
        if not isinstance(data, dict):
            logger.error("%s %s returned %s, expected an object", method, url, type(data).__name__)
            raise UpstreamError.malformed(operation, sha, TypeError("expected a JSON object"))
        return data

    async def list_check_runs_for_ref(
        self,
        owner: str,
        repo: str,
        sha: str,
        app_id: int,
    ) -> list[CheckRunRecord]:
        """
        Return every check run ``app_id`` has reported on ``sha``.

        Follows pagination until ``total_count`` records have been read, so the
        result is a complete snapshot as of the call.
        """
        url = f"{self._api_url}/repos/{owner}/{repo}/commits/{sha}/check-runs"
        params: JSONDict = {"app_id": app_id, "per_page": PER_PAGE}
        if self._check_run_filter:
            params["filter"] = self._check_run_filter

        records: list[CheckRunRecord] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                url,
                operation="listing check runs",
                sha=sha,
                expected=httpx.codes.OK,
                params={**params, "page": page},
            )
            try:
                batch = CheckRunList.model_validate(data)
            except pydantic.ValidationError as exc:
                logger.error("GET %s page %s does not list check runs: %s", url, page, exc)
                raise UpstreamError.malformed("listing check runs", sha, exc) from exc
            records.extend(batch.check_runs)
            if not batch.check_runs or len(records) >= batch.total_count:
                break
            page += 1
        return records

    async def create_check_run(
        self,
        owner: str,
        repo: str,
        request: CreateCheckRunRequest,
    ) -> JSONDict:
        """Create a new check run; returns GitHub's JSON for it."""
        url = f"{self._api_url}/repos/{owner}/{repo}/check-runs"
        created = await self._request(
            "POST",
            url,
            operation="creating check run",
            sha=request.head_sha,
            expected=httpx.codes.CREATED,
            json=request.to_payload(),
        )
        logger.info("POST %s -> Created: %s", url, created.get("html_url") or created.get("id"))
        return created
