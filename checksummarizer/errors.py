"""Errors raised while handling webhook deliveries."""

from __future__ import annotations

from typing import Optional


class ChecksummarizerError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(ChecksummarizerError):
    """Raised at startup when the environment is missing or has bad values."""


class ValidationError(ChecksummarizerError):
    """Raised when a webhook delivery fails signature validation."""


class DecodeError(ChecksummarizerError):
    """Raised when a delivery body does not match a known event schema."""


class UpstreamError(ChecksummarizerError):
    """Raised when a GitHub API call fails or returns an unexpected status."""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        sha: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.operation = operation
        self.sha = sha
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def transport(cls, operation: str, sha: Optional[str], exc: Exception) -> UpstreamError:
        """Return an error for a request that never got a response."""
        target = f" for commit {sha}" if sha else ""
        return cls(f"error {operation}{target}: {exc}", operation=operation, sha=sha)

    @classmethod
    def unexpected_status(cls, operation: str, sha: Optional[str], status_code: int) -> UpstreamError:
        """Return an error for a response with a status other than the expected one."""
        target = f" for commit {sha}" if sha else ""
        return cls(
            f"error {operation}{target}: {status_code}",
            operation=operation,
            sha=sha,
            status_code=status_code,
        )

    @classmethod
    def malformed(cls, operation: str, sha: Optional[str], exc: Exception) -> UpstreamError:
        """Return an error for a response whose body could not be understood."""
        target = f" for commit {sha}" if sha else ""
        return cls(
            f"error {operation}{target}: malformed response ({exc})",
            operation=operation,
            sha=sha,
        )
