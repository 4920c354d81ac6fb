"""Schemas for GitHub check-run payloads and the synthetic report."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CheckConclusion(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"
    STALE = "stale"
    SKIPPED = "skipped"


def _empty_to_none(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class _GitHubModel(BaseModel):
    """
    GitHub adds fields to its payloads over time; only fields used by this
    app are declared and the rest is ignored.
    """

    model_config = ConfigDict(extra="ignore")


class GitHubApp(_GitHubModel):
    id: int
    name: str
    slug: Optional[str] = None


class RepositoryOwner(_GitHubModel):
    login: str


class Repository(_GitHubModel):
    name: str
    full_name: Optional[str] = None
    owner: RepositoryOwner


class Installation(_GitHubModel):
    id: int


class CheckRunPayload(_GitHubModel):
    """The ``check_run`` object of a check-run webhook delivery."""

    id: Optional[int] = None
    name: str
    status: str
    conclusion: Optional[str] = None
    head_sha: str
    details_url: Optional[str] = None
    html_url: Optional[str] = None
    app: GitHubApp

    @field_validator("conclusion", "details_url", mode="before")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _empty_to_none(value)


class CheckRunEvent(_GitHubModel):
    """A ``check_run`` webhook delivery."""

    action: Optional[str] = None
    check_run: CheckRunPayload
    repository: Repository
    installation: Optional[Installation] = None

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo_name(self) -> str:
        return self.repository.name

    @property
    def head_sha(self) -> str:
        return self.check_run.head_sha

    @property
    def app(self) -> GitHubApp:
        return self.check_run.app


class CheckRunRecord(_GitHubModel):
    """One check run as returned by the check-run listing API."""

    name: str
    status: str
    conclusion: Optional[str] = None
    details_url: Optional[str] = None

    @field_validator("conclusion", "details_url", mode="before")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _empty_to_none(value)


class CheckRunList(_GitHubModel):
    total_count: int = 0
    check_runs: list[CheckRunRecord] = Field(default_factory=list)


class CheckRunOutput(BaseModel):
    title: str
    summary: str


class CreateCheckRunRequest(BaseModel):
    """
    Body of ``POST /repos/{owner}/{repo}/check-runs``.

    ``conclusion`` is left out of the serialized body when unset; GitHub
    rejects ``null`` for a check run that is still in progress.
    """

    name: str
    head_sha: str
    status: str
    conclusion: Optional[str] = None
    output: CheckRunOutput

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class Classification(BaseModel):
    """Check runs split into three buckets, each in the order they were fetched."""

    success: list[CheckRunRecord] = Field(default_factory=list)
    failure: list[CheckRunRecord] = Field(default_factory=list)
    in_progress: list[CheckRunRecord] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.success) + len(self.failure) + len(self.in_progress)


class AggregateReport(BaseModel):
    status: str
    conclusion: Optional[str] = None
    title: str = ""
    summary: str = ""
