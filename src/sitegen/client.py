from __future__ import annotations

import re
import sys
from typing import Iterator

import httpx

from sitegen.stream import decode_frames
from sitegen.types import GenerateRequest, WebsiteDict

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 600.0


class ApiError(Exception):
    """Backend answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        msg = f"HTTP error! status: {status_code}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


def _error_detail(resp: httpx.Response) -> str:
    """Best-effort error text from a failed response body."""
    try:
        error_data = resp.json()
    except ValueError:
        return resp.text.strip()[:200]
    if isinstance(error_data, dict):
        # FastAPI: {"detail": "..."}; generic: {"error": {"message": "..."}} or {"error": "..."}
        detail = error_data.get("detail")
        if isinstance(detail, str):
            return detail
        error = error_data.get("error")
        if isinstance(error, dict):
            return str(error.get("message", ""))
        if isinstance(error, str):
            return error
    return ""


def _check_response(resp: httpx.Response) -> None:
    if resp.status_code >= 400:
        raise ApiError(resp.status_code, _error_detail(resp))


def stream_generation(
    base_url: str,
    request: GenerateRequest,
    timeout: float = DEFAULT_TIMEOUT,
) -> Iterator[dict]:
    """POST a generation request and yield decoded progress events.

    The connection stays open until the server closes it or the caller
    stops iterating. Transport faults propagate as httpx exceptions,
    non-2xx responses as ApiError.
    """
    url = f"{base_url.rstrip('/')}/api/generate-website"
    headers = {"Accept": "text/event-stream"}
    with httpx.stream("POST", url, json=request, headers=headers, timeout=timeout) as resp:
        if resp.status_code >= 400:
            resp.read()
            _check_response(resp)
        yield from decode_frames(resp.iter_bytes())


def list_websites(base_url: str, timeout: float = 30.0) -> list[WebsiteDict]:
    """Previously generated sites. Returns [] when the backend can't be reached."""
    url = f"{base_url.rstrip('/')}/api/websites"
    try:
        resp = httpx.get(url, timeout=timeout)
        _check_response(resp)
        data = resp.json()
    except (httpx.HTTPError, ApiError, ValueError) as e:
        print(f"Warning: failed to fetch websites: {e}", file=sys.stderr)
        return []
    if not isinstance(data, dict):
        return []
    return data.get("websites") or []


def health_check(base_url: str, timeout: float = 5.0) -> bool:
    try:
        resp = httpx.get(f"{base_url.rstrip('/')}/health", timeout=timeout)
    except httpx.HTTPError as e:
        print(f"Warning: health check failed: {e}", file=sys.stderr)
        return False
    return resp.status_code < 400


# ── Result resolution ───────────────────────────────────────────


def site_name(folder_path: str) -> str:
    """Last segment of a storage path, either separator convention.

    A trailing separator is ignored: 'out/site_1/' → 'site_1'.
    """
    parts = re.split(r"[\\/]", folder_path)
    if parts[-1]:
        return parts[-1]
    return parts[-2] if len(parts) >= 2 else ""


def website_url(base_url: str, folder_path: str) -> str:
    return f"{base_url.rstrip('/')}/api/serve-website/{site_name(folder_path)}/index.html"
