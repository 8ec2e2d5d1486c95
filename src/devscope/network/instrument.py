"""Two-phase capture around an awaitable transport call.

record_call opens a pending NetworkRecord before the request goes out,
so in-flight calls are visible, then completes it with the response or
the raised exception. The exception is always re-raised; reading the
response for the record never raises over a successful call.
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from typing import TYPE_CHECKING, Any, NamedTuple, TypeVar

if TYPE_CHECKING:
    from devscope.network.recorder import NetworkRecorder

logger = logging.getLogger(__name__)

R = TypeVar("R")


class CapturedResponse(NamedTuple):
    status_code: int | None
    body: Any
    headers: dict[str, str] | None


async def _resolve(value: Any) -> Any:
    # aiohttp-style clients expose json()/text() as coroutines.
    if inspect.isawaitable(value):
        return await value
    return value


def _response_status(response: Any) -> int | None:
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(response, "status", None)
    return status if isinstance(status, int) else None


async def _response_body(response: Any) -> Any:
    """Best-effort body extraction: parsed JSON, then text, then bytes."""
    json_method = getattr(response, "json", None)
    if callable(json_method):
        try:
            return await _resolve(json_method())
        except ValueError:
            # Not JSON; fall back to text.
            pass
    text = getattr(response, "text", None)
    if callable(text):
        text = await _resolve(text())
    if isinstance(text, str):
        return text
    content = getattr(response, "content", None)
    if isinstance(content, (bytes, bytearray)):
        return content
    return None


def _response_headers(response: Any) -> dict[str, str] | None:
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    try:
        return {str(k): str(v) for k, v in dict(headers).items()}
    except (TypeError, ValueError):
        return None


async def capture_response(response: Any) -> CapturedResponse:
    """Read status, body, and headers from any HTTP client response.

    A body that cannot be read (an unread stream, a closed connection,
    a decoding failure) is recorded as absent rather than raised.
    """
    try:
        body = await _response_body(response)
    except Exception:
        logger.debug("Could not read response body for capture", exc_info=True)
        body = None
    return CapturedResponse(
        status_code=_response_status(response),
        body=body,
        headers=_response_headers(response),
    )


async def record_call(
    recorder: "NetworkRecorder",
    call: Callable[[], Awaitable[R]],
    *,
    method: str,
    url: str,
    headers: Mapping[str, Any] | None = None,
    body: Any = None,
) -> R:
    """Await call() and record it through begin/complete.

    The record is pending while call() is in flight. Response fields
    are read by attribute (status_code or status, json()/text/content,
    headers), and json()/text() may be sync or async, so any HTTP
    client response works.

    Args:
        recorder: Destination recorder.
        call: Zero-argument factory returning the awaitable request.
        method: HTTP method of the request.
        url: Full request URL.
        headers: Request headers (redacted by the recorder).
        body: Request body.

    Returns:
        Whatever call() resolved to.
    """
    correlation_id = recorder.begin_request(method, url, headers=headers, body=body)
    start = time.perf_counter()
    try:
        response = await call()
    except Exception as exc:
        elapsed = timedelta(seconds=time.perf_counter() - start)
        error_response = getattr(exc, "response", None)
        recorder.complete_request(
            correlation_id,
            status_code=_response_status(error_response),
            duration=elapsed,
            error=str(exc) or type(exc).__name__,
        )
        raise

    elapsed = timedelta(seconds=time.perf_counter() - start)
    captured = await capture_response(response)
    recorder.complete_request(
        correlation_id,
        status_code=captured.status_code,
        body=captured.body,
        headers=captured.headers,
        duration=elapsed,
    )
    return response
