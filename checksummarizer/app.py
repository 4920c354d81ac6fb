"""the beautiful world start from here."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI

from checksummarizer.config import Settings
from checksummarizer.routers import gh, info
from checksummarizer.services.aggregator import CheckRunAggregator
from checksummarizer.services.auth import (
    InstallationTokenProvider,
    StaticTokenProvider,
    TokenProvider,
)
from checksummarizer.services.github import ChecksClient

logger = logging.getLogger(__name__)


def build_token_provider(settings: Settings, client: httpx.AsyncClient) -> TokenProvider:
    if not settings.uses_app_auth:
        return StaticTokenProvider(settings.static_token)
    return InstallationTokenProvider(
        client,
        app_id=settings.app_id,
        installation_id=settings.installation_id,
        private_key=settings.private_key,
        api_url=settings.api_url,
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the webhook application.

    Everything the handlers need hangs off ``app.state``; pass ``settings``
    and ``http_client`` explicitly to run against something other than the
    environment and the real GitHub API.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("Observing check runs of %s", settings.observed_app.describe())
        yield
        if owns_client:
            await client.aclose()

    app = FastAPI(title="GitHub check run summarizer", lifespan=lifespan)
    app.state.settings = settings
    app.state.aggregator = CheckRunAggregator(
        ChecksClient(
            client,
            build_token_provider(settings, client),
            api_url=settings.api_url,
            check_run_filter=settings.check_run_filter,
        ),
        settings.observed_app,
        name_template=settings.check_name_template,
    )

    app.include_router(info.router)
    app.include_router(gh.router)
    return app


def main() -> None:
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
