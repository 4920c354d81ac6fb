"""Ruter Ingfo?"""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter()

HTTP_HELP_TEXT = dedent(
    """
Check Summarizer (HTTP Help)

Endpoints
---------
- GET  /         : Health check
- GET  /help     : This text
- POST /webhook  : GitHub App webhook (also accepted at POST /)

Environment
-----------
GITHUB_APP_ID, GITHUB_INSTALLATION_ID, PRIVATE_KEY_PATH (or GITHUB_APP_PRIVATE_KEY)
    Credentials used to mint installation tokens. GITHUB_TOKEN replaces all
    three with a fixed token.
GITHUB_APP_SECRET_TOKEN
    Webhook secret shared with GitHub.
OBSERVED_APP_ID or OBSERVED_APP_NAME
    The CI app whose check runs are summarized (exactly one).
CHECK_NAME_TEMPLATE, CHECK_RUN_FILTER, GITHUB_API_URL, HTTP_TIMEOUT_SECONDS, LOG_LEVEL
    Optional tuning.
"""
).strip()


@router.get("/", response_class=PlainTextResponse)
def health() -> str:
    """Health check."""
    return "ok"


@router.get("/help", response_class=PlainTextResponse)
def http_help(request: Request) -> str:
    observed = request.app.state.settings.observed_app
    return f"{HTTP_HELP_TEXT}\n\nObserving {observed.describe()}."
