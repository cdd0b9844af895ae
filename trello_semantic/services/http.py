"""Shared async HTTP helper for upstream calls.

Every Trello request goes through ``request_json`` so that failures surface
in one shape: a non-success status or a transport error raises
UpstreamError carrying the status text. Nothing here retries; the caller
owns retry policy.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from trello_semantic.core.errors import UpstreamError


logger = logging.getLogger("trello_semantic.http")

DEFAULT_TIMEOUT = 15.0


async def request_json(
    method: str,
    url: str,
    *,
    action: str,
    params: Optional[Dict[str, Any]] = None,
    json_body: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """Perform an HTTP request and return the decoded body.

    ``action`` describes the call for error messages, e.g. "fetch boards".
    """

    try:
        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
            resp = await client.request(method, url, params=params, json=json_body, headers=headers)
    except httpx.RequestError as exc:  # network or protocol error
        logger.warning("Request to %s failed: %r", action, exc)
        raise UpstreamError(f"Failed to {action}: {exc}", status_code=None, status_text=str(exc)) from exc

    if not resp.is_success:
        status_text = resp.reason_phrase or str(resp.status_code)
        logger.warning("Upstream %s returned %s %s", action, resp.status_code, status_text)
        raise UpstreamError(
            f"Failed to {action}: {status_text}",
            status_code=resp.status_code,
            status_text=status_text,
        )

    try:
        return resp.json()
    except ValueError:
        return resp.text
