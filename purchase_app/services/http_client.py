from __future__ import annotations

"""Lightweight HTTP client util for upstream JSON APIs.

Uses stdlib urllib; a single GET per call, no retries. Callers decide how a
failure is presented, so the error keeps the upstream status and body intact.
"""
import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Mapping, Optional

# Treasury filter/page syntax reads better unescaped and is accepted as-is.
_QUERY_SAFE = ":,()[]"
_BODY_PREVIEW = 2000


class UpstreamError(Exception):
    """Base class for failures talking to an upstream HTTP API."""


class UpstreamTransportError(UpstreamError):
    """Connectivity failure or non-2xx response.

    ``status`` is None when no HTTP response was received at all.
    """

    def __init__(self, message: str, *, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class UpstreamPayloadError(UpstreamError):
    """Response arrived but was not the JSON document we expected."""


def build_url(base_url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    if not params:
        return base_url
    query = urllib.parse.urlencode(
        [(k, str(v)) for k, v in params.items()], safe=_QUERY_SAFE
    )
    sep = "&" if urllib.parse.urlsplit(base_url).query else "?"
    return f"{base_url}{sep}{query}"


def get_json(
    url: str, *, params: Optional[Mapping[str, Any]] = None, timeout: float = 10.0
) -> Dict[str, Any]:
    full_url = build_url(url, params)
    request = urllib.request.Request(full_url, headers={"Accept": "application/json"})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
            status = getattr(resp, "status", 200)
            raw = resp.read()
    except urllib.error.HTTPError as e:
        body = _read_error_body(e)
        raise UpstreamTransportError(
            f"HTTP {e.code} for {full_url}", status=e.code, body=body
        ) from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise UpstreamTransportError(f"Failed to reach {full_url}: {e}") from e

    text = raw.decode("utf-8", errors="replace")
    if status >= 400:
        raise UpstreamTransportError(
            f"HTTP {status} for {full_url}", status=status, body=text[:_BODY_PREVIEW]
        )
    try:
        data = json.loads(text)
    except ValueError as e:
        raise UpstreamPayloadError(f"Invalid JSON from {full_url}: {e}") from e
    if not isinstance(data, dict):
        raise UpstreamPayloadError(
            f"Expected a JSON object from {full_url}, got {type(data).__name__}"
        )
    return data


def _read_error_body(err: urllib.error.HTTPError) -> str:
    try:
        return err.read().decode("utf-8", errors="replace")[:_BODY_PREVIEW]
    except (OSError, AttributeError):
        return ""
