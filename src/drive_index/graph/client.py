"""Microsoft Graph API client with client-credentials authentication."""

from __future__ import annotations

import http.client
import json
import logging
import threading
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode

from drive_index.graph.drive import Drive
from drive_index.graph.errors import (
    GraphAuthError,
    GraphConfigError,
    GraphError,
    GraphTransportError,
    classify,
)
from drive_index.graph.token import Token

if TYPE_CHECKING:
    from drive_index.config import AppConfig

logger = logging.getLogger(__name__)

LOGIN_BASE_URL = "https://login.microsoftonline.com"
GRAPH_BASE_URL = "https://graph.microsoft.com"
API_VERSION = "v1.0"

# Every GET is sent with $top set to this value. Larger result sets are
# truncated by the API; there is no paging.
MAX_PAGE_SIZE = 999

# Seconds allowed for each blocking socket operation (connect, each read).
# A peer that trickles bytes can keep one call open past this value.
REQUEST_TIMEOUT = 10

_RESOURCE_SAFE_CHARS = "/:!$"


class GraphClient:
    """Authenticated client for Microsoft Graph API.

    One lock per instance serializes every outbound call. ``get`` holds it
    across the staleness check, the token refresh and the request itself, so
    two callers never refresh concurrently and no request is sent with a
    token that was stale when the call started.
    """

    def __init__(self, tenant_id: str, application_id: str, client_secret: str) -> None:
        """Validate the credentials and acquire the first token.

        Args:
            tenant_id: Azure AD tenant ID.
            application_id: Azure AD application (client) ID.
            client_secret: Azure AD application client secret.

        Raises:
            GraphConfigError: If any credential is empty.
            GraphAuthError: If the initial token exchange fails.
        """
        if not tenant_id:
            raise GraphConfigError("tenant ID is empty")
        if not application_id:
            raise GraphConfigError("application ID is empty")
        if not client_secret:
            raise GraphConfigError("client secret is empty")

        self._tenant_id = tenant_id
        self._application_id = application_id
        self._client_secret = client_secret
        self._token = Token()
        self._lock = threading.Lock()

        with self._lock:
            self._refresh_token()

    def __repr__(self) -> str:
        secret = self._client_secret
        masked = f"{secret[:3]}...{secret[-3:]}" if len(secret) > 6 else "..."
        return (
            f"GraphClient(tenant_id={self._tenant_id!r}, application_id={self._application_id!r}, "
            f"client_secret={masked!r}, token_validity=[{self._token.not_before.isoformat()} - "
            f"{self._token.expires_on.isoformat()}])"
        )

    @classmethod
    def from_config(cls, config: AppConfig) -> GraphClient:
        """Construct a client from the credentials in ``config``."""
        return cls(
            tenant_id=config.tenant_id,
            application_id=config.application_id,
            client_secret=config.client_secret,
        )

    @property
    def token(self) -> Token:
        return self._token

    def _refresh_token(self) -> None:
        """Exchange the client credentials for a new token.

        The caller must hold ``self._lock``. On failure the current token is
        left in place.

        Raises:
            GraphAuthError: If the request, the response status or the
                response body is not usable.
        """
        url = f"{LOGIN_BASE_URL}/{self._tenant_id}/oauth2/token"
        form = urlencode(
            {
                "grant_type": "client_credentials",
                "client_id": self._application_id,
                "client_secret": self._client_secret,
                "resource": GRAPH_BASE_URL,
            }
        ).encode("ascii")
        try:
            body = self._perform_request(
                "POST",
                url,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data=form,
            )
            token = Token.from_response(json.loads(body))
        except (GraphError, KeyError, TypeError, ValueError) as exc:
            logger.error("[_refresh_token] token acquisition failed; tenant_id:%s", self._tenant_id)
            raise GraphAuthError(f"error on getting Graph token: {exc}") from exc

        self._token = token
        logger.info(
            "[_refresh_token] acquired token; not_before:%s;expires_on:%s",
            token.not_before.isoformat(),
            token.expires_on.isoformat(),
        )

    def get(self, resource_path: str, params: dict[str, str] | None = None) -> Any:
        """Perform an authenticated GET request to the Graph API.

        Args:
            resource_path: Path relative to the versioned base URL
                (must start with '/').
            params: Extra query parameters. ``$top`` is always overridden
                with MAX_PAGE_SIZE.

        Returns:
            Parsed JSON response body.

        Raises:
            GraphAuthError: If a needed token refresh fails.
            GraphApiError: If the API returns a non-2xx status code.
            GraphTransportError: On network failure or timeout.
            json.JSONDecodeError: If a 2xx body is not valid JSON.
        """
        with self._lock:
            if self._token.wants_refresh():
                logger.info("[get] token wants refresh")
                self._refresh_token()

            query = dict(params or {})
            query["$top"] = str(MAX_PAGE_SIZE)
            url = (
                f"{GRAPH_BASE_URL}/{API_VERSION}{quote(resource_path, safe=_RESOURCE_SAFE_CHARS)}"
                f"?{urlencode(query, safe='$')}"
            )
            logger.debug("[get] request; url:%s", url)
            body = self._perform_request(
                "GET",
                url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": self._token.authorization_header_value(),
                },
            )
            return json.loads(body)

    @staticmethod
    def _perform_request(
        method: str,
        url: str,
        headers: dict[str, str],
        data: bytes | None = None,
    ) -> bytes:
        """Send one request and return the full response body.

        Raises:
            GraphApiError: If the response status is outside 200-299.
            GraphTransportError: If the request could not be built or sent, or
                the response could not be read.
        """
        try:
            req = urllib_request.Request(url, data=data, headers=headers, method=method)
            with urllib_request.urlopen(req, timeout=REQUEST_TIMEOUT) as resp:
                body: bytes = resp.read()
        except HTTPError as exc:
            try:
                error_body = exc.read()
            except (OSError, http.client.HTTPException) as read_exc:
                raise GraphTransportError(url, read_exc) from read_exc
            error = classify(exc.code, error_body)
            logger.warning("[_perform_request] non-2xx response; status:%d;url:%s", exc.code, url)
            raise error from exc
        except (URLError, OSError, ValueError, http.client.HTTPException) as exc:
            raise GraphTransportError(url, exc) from exc
        return body

    def get_drive(self, drive_id: str) -> Drive:
        """Return a Drive accessor bound to this client."""
        return Drive(drive_id=drive_id, client=self)


def graph_client_from_config(config: AppConfig) -> GraphClient:
    """Construct a GraphClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        GraphClient holding a freshly acquired token.
    """
    return GraphClient.from_config(config)
