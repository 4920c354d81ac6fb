"""Ruter GH: the GitHub webhook endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse

from checksummarizer.errors import DecodeError, UpstreamError, ValidationError
from checksummarizer.events import PingEvent, UnknownEvent, decode_event
from checksummarizer.schemas import CheckRunEvent
from checksummarizer.utils import validate_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["github"])


@router.post("/", response_class=PlainTextResponse, include_in_schema=False)
@router.post("/webhook", response_class=PlainTextResponse)
async def github_webhook(
    request: Request,
    x_hub_signature_256: str | None = Header(None),
    x_hub_signature: str | None = Header(None),
    x_github_event: str | None = Header(None),
    x_github_delivery: str | None = Header(None),
    content_type: str | None = Header(None),
):
    """
    GitHub App webhook endpoint.

    The payload signature is validated against `X-Hub-Signature-256` (or the
    legacy `X-Hub-Signature`) using the app's webhook secret. Only `check_run`
    deliveries do any work; every other event type is acknowledged and logged.
    """
    settings = request.app.state.settings
    aggregator = request.app.state.aggregator
    delivery = x_github_delivery or "-"

    body = await request.body()
    try:
        payload = validate_payload(
            settings.webhook_secret, body, x_hub_signature_256, x_hub_signature
        )
        event = decode_event(x_github_event, payload, content_type)
    except ValidationError as exc:
        logger.warning("Error validating payload of delivery %s: %s", delivery, exc)
        raise HTTPException(400, "Error validating payload") from exc
    except DecodeError as exc:
        logger.warning("Error parsing webhook delivery %s: %s", delivery, exc)
        raise HTTPException(400, "Error parsing webhook") from exc

    match event:
        case CheckRunEvent():
            try:
                report = await aggregator.handle(event)
            except UpstreamError as exc:
                logger.error("Error handling check run event (delivery %s): %s", delivery, exc)
                raise HTTPException(500, "Error handling check run event") from exc
            if report is None:
                return "skipped"
            return f"published {report.title}".rstrip()
        case PingEvent(zen=zen):
            logger.info("Received ping for hook %s: %s", event.hook_id, zen)
            return "pong"
        case UnknownEvent(event_type=event_type):
            logger.info("Received event of ignored type %r", event_type)
            return "ignored"
        case _:
            logger.info("Received event of unhandled kind %s", type(event).__name__)
            return "ignored"
