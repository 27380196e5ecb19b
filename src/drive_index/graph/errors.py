"""Exception types for the Microsoft Graph client."""

from __future__ import annotations

import json
from dataclasses import dataclass

# Graph API error envelope field names
FIELD_ERROR = "error"
FIELD_CODE = "code"
FIELD_MESSAGE = "message"
FIELD_INNER_ERROR = "innerError"
FIELD_DATE = "date"
FIELD_REQUEST_ID = "request-id"
FIELD_CLIENT_REQUEST_ID = "client-request-id"

# Error code the front ends map to HTTP 404
CODE_ITEM_NOT_FOUND = "itemNotFound"


class GraphError(Exception):
    """Base class for every error raised by the Graph client."""


class GraphConfigError(GraphError, ValueError):
    """Raised when the client is constructed with missing credentials."""


class GraphAuthError(GraphError):
    """Raised when the client-credentials token exchange fails."""


class GraphTransportError(GraphError):
    """Raised on network failures, timeouts and malformed URLs."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"HTTP request to {url} failed: {cause}")
        self.url = url
        self.cause = cause


@dataclass(frozen=True)
class InnerError:
    """Server-side diagnostic identifiers attached to a Graph error."""

    date: str = ""
    request_id: str = ""
    client_request_id: str = ""


class GraphApiError(GraphError):
    """Raised when the Graph API returns a non-2xx response.

    A body that decodes as the Graph error envelope produces a structured
    error with ``code``, ``message`` and ``inner_error`` populated. Any other
    body produces a raw error: ``is_raw`` is True, the structured fields are
    empty and ``raw`` holds the body verbatim. Check ``is_raw`` before relying
    on ``code``.
    """

    def __init__(
        self,
        status_code: int,
        *,
        code: str = "",
        message: str = "",
        inner_error: InnerError | None = None,
        raw: str = "",
        is_raw: bool = False,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.inner_error = inner_error or InnerError()
        self.raw = raw
        self.is_raw = is_raw
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.is_raw:
            return f"StatusCode is not OK: {self.status_code}. Body: {self.raw}"
        return f"StatusCode is not OK: {self.status_code}({self.code})."

    @property
    def is_item_not_found(self) -> bool:
        return not self.is_raw and self.code == CODE_ITEM_NOT_FOUND


def classify(status_code: int, body: bytes) -> GraphApiError:
    """Map a non-2xx response into a GraphApiError.

    Args:
        status_code: HTTP status code of the response.
        body: Raw response body.

    Returns:
        A structured GraphApiError when the body is a Graph error envelope,
        otherwise a raw one preserving the body.
    """
    raw = body.decode("utf-8", errors="replace")
    try:
        envelope = json.loads(body)
    except ValueError:
        return GraphApiError(status_code, raw=raw, is_raw=True)

    error = envelope.get(FIELD_ERROR) if isinstance(envelope, dict) else None
    if not isinstance(error, dict):
        return GraphApiError(status_code, raw=raw, is_raw=True)

    inner = error.get(FIELD_INNER_ERROR)
    if not isinstance(inner, dict):
        inner = {}
    return GraphApiError(
        status_code,
        code=str(error.get(FIELD_CODE, "")),
        message=str(error.get(FIELD_MESSAGE, "")),
        inner_error=InnerError(
            date=str(inner.get(FIELD_DATE, "")),
            request_id=str(inner.get(FIELD_REQUEST_ID, "")),
            client_request_id=str(inner.get(FIELD_CLIENT_REQUEST_ID, "")),
        ),
        raw=raw,
    )
