"""Bearer token returned by the client-credentials exchange."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Token endpoint JSON field names (v1 endpoint)
FIELD_ACCESS_TOKEN = "access_token"
FIELD_TOKEN_TYPE = "token_type"
FIELD_NOT_BEFORE = "not_before"
FIELD_EXPIRES_ON = "expires_on"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _from_unix(value: Any) -> datetime:
    """Decode a Unix-seconds timestamp, sent by the endpoint as a string."""
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


@dataclass(frozen=True)
class Token:
    """A time-bounded bearer credential.

    Tokens are never mutated; a refresh replaces the whole instance. The
    default instance is the zero token, which always wants a refresh.
    """

    access_token: str = field(default="", repr=False)
    token_type: str = ""
    not_before: datetime = EPOCH
    expires_on: datetime = EPOCH

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> Token:
        """Build a Token from the token endpoint's JSON response.

        Args:
            payload: Decoded JSON object returned by ``/oauth2/token``.

        Returns:
            The decoded Token.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a timestamp is malformed or the validity window
                is inverted.
        """
        token = cls(
            access_token=str(payload[FIELD_ACCESS_TOKEN]),
            token_type=str(payload.get(FIELD_TOKEN_TYPE, "")),
            not_before=_from_unix(payload[FIELD_NOT_BEFORE]),
            expires_on=_from_unix(payload[FIELD_EXPIRES_ON]),
        )
        if token.not_before > token.expires_on:
            raise ValueError(
                f"token not_before {token.not_before} is after expires_on {token.expires_on}"
            )
        return token

    def wants_refresh(self, now: datetime | None = None) -> bool:
        """Return True when ``now`` lies outside ``[not_before, expires_on)``."""
        if now is None:
            now = datetime.now(timezone.utc)
        return now < self.not_before or now >= self.expires_on

    def authorization_header_value(self) -> str:
        if self.token_type:
            return f"{self.token_type} {self.access_token}"
        return self.access_token
