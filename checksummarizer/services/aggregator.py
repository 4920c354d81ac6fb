"""Filter check-run events and publish the synthetic roll-up check run."""

from __future__ import annotations

import logging
from typing import Optional

from checksummarizer.config import DEFAULT_CHECK_NAME_TEMPLATE, AppIdentity
from checksummarizer.schemas import (
    AggregateReport,
    CheckRunEvent,
    CheckRunOutput,
    CreateCheckRunRequest,
)
from checksummarizer.services.github import ChecksClient
from checksummarizer.services.summary import build_report, classify

logger = logging.getLogger(__name__)


def should_process(event: CheckRunEvent, observed: AppIdentity) -> bool:
    """
    Return True only for finished check runs that belong to the observed app.

    Logs one line either way.
    """
    check_run = event.check_run
    app = check_run.app
    if not observed.matches(app.id, app.name):
        logger.info("Received check run event for ignored app %r (#%s)", app.name, app.id)
        return False

    if check_run.conclusion is None:
        logger.info("No conclusion yet for %s check run %s", check_run.status, check_run.name)
        return False

    logger.info(
        "Received check run event for %s check run %s with conclusion %s",
        check_run.status,
        check_run.name,
        check_run.conclusion,
    )
    return True


class CheckRunAggregator:
    """
    Per-delivery pipeline: filter, fetch, classify, derive, render, publish.

    Holds only fixed configuration, so one instance serves every request.
    Overlapping deliveries for the same commit are not serialized and may
    each publish a synthetic check run.
    """

    def __init__(
        self,
        checks: ChecksClient,
        observed: AppIdentity,
        *,
        name_template: str = DEFAULT_CHECK_NAME_TEMPLATE,
    ) -> None:
        self.checks = checks
        self.observed = observed
        self.name_template = name_template

    def check_name(self, event: CheckRunEvent) -> str:
        display_name = self.observed.app_name or event.app.name
        return self.name_template.format(app=display_name)

    async def handle(self, event: CheckRunEvent) -> Optional[AggregateReport]:
        """
        Publish a synthetic check run for the event's commit.

        Returns the published report, or None when the event was filtered out.
        Raises :class:`UpstreamError` if either GitHub call fails; nothing is
        published when the listing fails.
        """
        if not should_process(event, self.observed):
            return None

        records = await self.checks.list_check_runs_for_ref(
            event.owner,
            event.repo_name,
            event.head_sha,
            event.app.id,
        )
        classification = classify(records)
        report = build_report(classification)
        logger.info(
            "Commit %s has %d check runs from %s: %s",
            event.head_sha,
            len(classification),
            event.app.name,
            report.title or "none",
        )

        await self.checks.create_check_run(
            event.owner,
            event.repo_name,
            CreateCheckRunRequest(
                name=self.check_name(event),
                head_sha=event.head_sha,
                status=report.status,
                conclusion=report.conclusion,
                output=CheckRunOutput(title=report.title, summary=report.summary),
            ),
        )
        logger.info(
            "Published %s/%s synthetic check run for %s",
            report.status,
            report.conclusion or "-",
            event.head_sha,
        )
        return report
