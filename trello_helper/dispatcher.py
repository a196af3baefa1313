"""Authenticated request dispatch for the Trello REST API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from trello_helper.exceptions import TrelloCredentialsError, TrelloValidationError
from trello_helper.rate_limit import RateLimitPolicy, RateLimitRecovery
from trello_helper.transport import RequestTransport

logger = logging.getLogger(__name__)

TRELLO_API_URI = "https://api.trello.com"


@dataclass(frozen=True)
class Credentials:
    """Trello API key/token pair"""

    key: str
    token: str

    def __post_init__(self) -> None:
        for name in ("key", "token"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise TrelloCredentialsError(f"Trello {name} must be a non-empty string")

    def __repr__(self) -> str:
        return "Credentials(key=<hidden>, token=<hidden>)"

    def as_params(self) -> dict[str, str]:
        return {"key": self.key, "token": self.token}


def validate_request(path: Any, payload: Any, payload_name: str) -> None:
    """
    Validate a {path, options|body} request before anything is sent

    Raises:
        TrelloValidationError: If path is not a non-empty string starting with '/', or the
            payload is present but not a mapping
    """
    if not isinstance(path, str) or not path:
        raise TrelloValidationError(f"path must be a non-empty string, got {path!r}")
    if not path.startswith("/"):
        raise TrelloValidationError(
            f"path must start with '/', e.g. /1/cards/<id>, got {path!r}"
        )
    if payload is not None and not isinstance(payload, Mapping):
        raise TrelloValidationError(
            f"{payload_name} must be a mapping, got {type(payload).__name__}"
        )


class TrelloDispatcher:
    """Turn {path, options|body} requests into authenticated Trello calls

    GET and DELETE merge the caller's options with the key/token pair in the
    query string. PUT and POST send the body as JSON and pass the key/token
    pair only in the query string. GET requests recover transparently from
    rate limiting; the other verbs surface a 429 immediately.

    Full-response mode changes the shape of every return value: when enabled,
    calls return a TrelloResponse envelope (status, headers, body) instead of
    the decoded body. It can be set at construction, toggled with
    enable_full_response(), or overridden per call.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        transport: RequestTransport | None = None,
        policy: RateLimitPolicy | None = None,
        full_response: bool = False,
        base_uri: str = TRELLO_API_URI,
    ):
        if not isinstance(credentials, Credentials):
            raise TrelloCredentialsError(
                "TrelloDispatcher requires a Credentials instance. "
                "Use trello_helper.load_credentials() to build one."
            )
        self._credentials = credentials
        self.transport = transport if transport is not None else RequestTransport()
        self.recovery = RateLimitRecovery(policy)
        self.base_uri = base_uri.rstrip("/")
        self._full_response = bool(full_response)

    # ------------------------------------------------------------------
    # Full-response mode

    def enable_full_response(self, enable: bool) -> None:
        """Turn full responses on or off for every subsequent call (debugging aid)"""
        self._full_response = bool(enable)

    def is_in_full_response_mode(self) -> bool:
        return self._full_response

    @property
    def policy(self) -> RateLimitPolicy:
        return self.recovery.policy

    @property
    def rate_limit_error(self) -> int:
        return self.policy.error_code

    @property
    def rate_limit_delay_ms(self) -> int:
        return self.policy.delay_ms

    # ------------------------------------------------------------------
    # Verbs

    def get(
        self,
        path: str,
        options: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        """
        Send a GET command, retrying after a fixed delay while rate limited

        Args:
            path: API path, e.g. "/1/lists/123/cards"
            options: Query string parameters
            full_response: Per-call override of full-response mode

        Returns:
            Decoded JSON (or TrelloResponse in full-response mode)

        Example:
            >>> dispatcher.get("/1/lists/123/cards", {"limit": 10})
        """
        validate_request(path, options, "options")
        params = self._query_params(options)
        url = self._url(path)
        use_full = self._use_full_response(full_response)
        logger.debug("GET %s", path)

        return self.recovery.call(
            lambda: self.transport.request("GET", url, params=params, full_response=use_full),
            description=f"GET {path}",
        )

    def put(
        self,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        """
        Send a PUT command

        Example:
            >>> dispatcher.put("/1/cards/123", {"dueComplete": True})
        """
        return self._send_body("PUT", path, body, full_response)

    def post(
        self,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        """
        Send a POST command

        Example:
            >>> dispatcher.post("/1/cards", {"name": "card name", "idList": "456"})
        """
        return self._send_body("POST", path, body, full_response)

    def delete(
        self,
        path: str,
        options: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        """
        Send a DELETE command (no body is sent)

        Example:
            >>> dispatcher.delete("/1/cards/123")
        """
        validate_request(path, options, "options")
        params = self._query_params(options)
        logger.debug("DELETE %s", path)
        return self.transport.request(
            "DELETE",
            self._url(path),
            params=params,
            full_response=self._use_full_response(full_response),
        )

    # ------------------------------------------------------------------
    # Helpers

    def _send_body(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None,
        full_response: bool | None,
    ) -> Any:
        validate_request(path, body, "body")
        logger.debug("%s %s", method, path)
        return self.transport.request(
            method,
            self._url(path),
            params=self._credentials.as_params(),
            json_body=dict(body) if body is not None else {},
            full_response=self._use_full_response(full_response),
        )

    def _query_params(self, options: Mapping[str, Any] | None) -> dict[str, Any]:
        # Simple merge: caller-supplied keys win, including key/token
        params: dict[str, Any] = self._credentials.as_params()
        if options:
            params.update(options)
        return params

    def _url(self, path: str) -> str:
        return f"{self.base_uri}{path}"

    def _use_full_response(self, override: bool | None) -> bool:
        return self._full_response if override is None else bool(override)
