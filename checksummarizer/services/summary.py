"""Roll-up of an app's check runs into one status and a Markdown summary."""

from __future__ import annotations

from typing import Iterable, Optional

from checksummarizer.schemas import (
    AggregateReport,
    CheckConclusion,
    CheckRunRecord,
    CheckStatus,
    Classification,
)

FAILED_CONCLUSIONS = frozenset(
    {
        CheckConclusion.FAILURE.value,
        CheckConclusion.CANCELLED.value,
        CheckConclusion.STALE.value,
        CheckConclusion.TIMED_OUT.value,
    }
)

# (bucket, title fragment, section header), in rendering order.
SECTIONS = (
    ("success", "successful", "Successful checks"),
    ("failure", "failed", "Failed checks"),
    ("in_progress", "in progress", "In progress checks"),
)


def classify(records: Iterable[CheckRunRecord]) -> Classification:
    """
    Put every check run into exactly one of success / failure / in progress.

    ``action_required`` waits on a human, so it counts as still running.
    Completed runs with any conclusion not known to be a failure, including
    ones GitHub adds later, count as successful.
    """
    result = Classification()
    for record in records:
        if record.status != CheckStatus.COMPLETED.value:
            result.in_progress.append(record)
        elif record.conclusion in FAILED_CONCLUSIONS:
            result.failure.append(record)
        elif record.conclusion == CheckConclusion.ACTION_REQUIRED.value:
            result.in_progress.append(record)
        else:
            result.success.append(record)
    return result


def derive_overall(classification: Classification) -> tuple[str, Optional[str]]:
    """
    Return ``(status, conclusion)`` for the synthetic check run.

    Failure beats in progress, which beats success. A commit with no check
    runs at all is reported as a success.
    """
    if classification.failure:
        return CheckStatus.COMPLETED.value, CheckConclusion.FAILURE.value
    if classification.in_progress:
        return CheckStatus.IN_PROGRESS.value, None
    return CheckStatus.COMPLETED.value, CheckConclusion.SUCCESS.value


def _bullet(record: CheckRunRecord) -> str:
    if record.details_url:
        return f"- [{record.name}]({record.details_url});"
    return f"- {record.name};"


def render_summary(classification: Classification) -> tuple[str, str]:
    """Build the ``(title, summary)`` pair shown on the synthetic check run."""
    title_parts: list[str] = []
    summary_parts: list[str] = []

    for bucket, fragment, header in SECTIONS:
        records: list[CheckRunRecord] = getattr(classification, bucket)
        if not records:
            continue
        title_parts.append(f"{len(records)} {fragment}")
        summary_parts.append(f"## {header}:")
        summary_parts.extend(_bullet(record) for record in records)
        summary_parts.append("")

    return ", ".join(title_parts), "\n".join(summary_parts)


def build_report(classification: Classification) -> AggregateReport:
    status, conclusion = derive_overall(classification)
    title, summary = render_summary(classification)
    return AggregateReport(status=status, conclusion=conclusion, title=title, summary=summary)
