"""Settings loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from checksummarizer.errors import ConfigError

load_dotenv()

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CHECK_NAME_TEMPLATE = "Synthetic status for {app}"
CHECK_RUN_FILTERS = frozenset({"latest", "all"})


def _int_or_none(env: Mapping[str, str], key: str) -> Optional[int]:
    raw = (env.get(key) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Error parsing {key}: {raw!r} is not an integer") from exc


def _read_private_key(env: Mapping[str, str]) -> str:
    path = (env.get("PRIVATE_KEY_PATH") or "").strip()
    if path:
        try:
            return Path(path).read_text()
        except OSError as exc:
            raise ConfigError(f"Error reading PRIVATE_KEY_PATH {path!r}: {exc}") from exc
    return (env.get("GITHUB_APP_PRIVATE_KEY") or "").replace("\\n", "\n").strip()


@dataclass(frozen=True)
class AppIdentity:
    """
    The CI application whose check runs get summarized.

    Exactly one of ``app_id`` / ``app_name`` is set, depending on whether the
    deployment observes the app by numeric ID or by display name.
    """

    app_id: Optional[int] = None
    app_name: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.app_id is None) == (not self.app_name):
            raise ConfigError("Exactly one of OBSERVED_APP_ID / OBSERVED_APP_NAME must be set")

    def matches(self, app_id: int, app_name: str) -> bool:
        if self.app_id is not None:
            return app_id == self.app_id
        return app_name == self.app_name

    def describe(self) -> str:
        if self.app_id is not None:
            return f"app #{self.app_id}"
        return f"app {self.app_name!r}"


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    webhook_secret: str
    observed_app: AppIdentity
    app_id: Optional[int] = None
    installation_id: Optional[int] = None
    private_key: str = ""
    static_token: str = ""
    api_url: str = DEFAULT_API_URL
    check_name_template: str = DEFAULT_CHECK_NAME_TEMPLATE
    check_run_filter: str = "latest"
    http_timeout_seconds: float = 15.0
    log_level: str = "INFO"

    @property
    def uses_app_auth(self) -> bool:
        """True when tokens are minted from the GitHub App key, not a static token."""
        return not self.static_token

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """
        Build settings from environment variables (``.env`` is loaded on import).

        Raises
        ------
        ConfigError
            When a required variable is missing or malformed.
        """
        env = os.environ if env is None else env

        secret = env.get("GITHUB_APP_SECRET_TOKEN")
        if not secret:
            raise ConfigError("GITHUB_APP_SECRET_TOKEN not set")

        observed = AppIdentity(
            app_id=_int_or_none(env, "OBSERVED_APP_ID"),
            app_name=(env.get("OBSERVED_APP_NAME") or "").strip() or None,
        )

        static_token = (env.get("GITHUB_TOKEN") or "").strip()
        app_id = _int_or_none(env, "GITHUB_APP_ID")
        installation_id = _int_or_none(env, "GITHUB_INSTALLATION_ID")
        private_key = ""
        if not static_token:
            if app_id is None:
                raise ConfigError("GITHUB_APP_ID not set")
            if installation_id is None:
                raise ConfigError("GITHUB_INSTALLATION_ID not set")
            private_key = _read_private_key(env)
            if not private_key.startswith("-----BEGIN") or "PRIVATE KEY" not in private_key:
                raise ConfigError(
                    "PRIVATE_KEY_PATH / GITHUB_APP_PRIVATE_KEY is not a valid PEM private key"
                )

        check_run_filter = (env.get("CHECK_RUN_FILTER") or "latest").strip().lower()
        if check_run_filter not in CHECK_RUN_FILTERS:
            raise ConfigError(f"CHECK_RUN_FILTER must be one of {sorted(CHECK_RUN_FILTERS)}")

        try:
            timeout = float(env.get("HTTP_TIMEOUT_SECONDS") or "15")
        except ValueError as exc:
            raise ConfigError("Error parsing HTTP_TIMEOUT_SECONDS") from exc

        check_name_template = env.get("CHECK_NAME_TEMPLATE") or DEFAULT_CHECK_NAME_TEMPLATE
        try:
            check_name_template.format(app="app")
        except (AttributeError, KeyError, IndexError, ValueError) as exc:
            raise ConfigError(
                f"CHECK_NAME_TEMPLATE {check_name_template!r} may only use the {{app}} field"
            ) from exc

        return cls(
            webhook_secret=secret,
            observed_app=observed,
            app_id=app_id,
            installation_id=installation_id,
            private_key=private_key,
            static_token=static_token,
            api_url=(env.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
            check_name_template=check_name_template,
            check_run_filter=check_run_filter,
            http_timeout_seconds=timeout,
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )
