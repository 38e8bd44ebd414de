from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from sitegen.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

BASE_URL_VAR = "SITEGEN_API_BASE_URL"
TIMEOUT_VAR = "SITEGEN_TIMEOUT"
DEBUG_LOG_VAR = "SITEGEN_DEBUG_LOG"


class ConfigError(Exception):
    """Raised when configuration values can't be used. Caller decides how to display."""
    pass


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    debug_log: Path | None = None


def read_dotenv(dotenv_path: Path) -> dict[str, str]:
    """Read a .env file and return key=value pairs as a dict."""
    env = {}
    if not dotenv_path.exists():
        return env
    for line in dotenv_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()
        # Strip surrounding quotes
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        env[key] = value
    return env


def _lookup(name: str, dotenv_vars: dict[str, str]) -> str | None:
    """.env first, then the process environment. Empty values count as unset."""
    return dotenv_vars.get(name) or os.environ.get(name) or None


def load_client_config(
    project_dir: Path,
    base_url: str | None = None,
    timeout: float | None = None,
) -> ClientConfig:
    """Resolve client settings. Explicit arguments win over .env and environment."""
    dotenv_vars = read_dotenv(project_dir / ".env")

    url = base_url or _lookup(BASE_URL_VAR, dotenv_vars) or DEFAULT_BASE_URL
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"{BASE_URL_VAR} must be an http(s) URL, got '{url}'.")

    if timeout is None:
        raw = _lookup(TIMEOUT_VAR, dotenv_vars)
        if raw is None:
            timeout = DEFAULT_TIMEOUT
        else:
            try:
                timeout = float(raw)
            except ValueError:
                raise ConfigError(f"{TIMEOUT_VAR} must be a number of seconds, got '{raw}'.") from None
    if timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout}.")

    debug_log = _lookup(DEBUG_LOG_VAR, dotenv_vars)
    return ClientConfig(
        base_url=url.rstrip("/"),
        timeout=timeout,
        debug_log=(project_dir / debug_log) if debug_log else None,
    )
