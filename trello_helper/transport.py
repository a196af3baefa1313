"""Single-call HTTP transport for the Trello REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests

from trello_helper.enums import RestCommand
from trello_helper.exceptions import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNetworkError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = {command.value.upper() for command in RestCommand}


@dataclass(frozen=True)
class TrelloResponse:
    """Full response envelope returned when full-response mode is enabled"""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    url: str = ""


def decode_body(response: requests.Response) -> Any:
    """Decode a response body as JSON, falling back to raw text.

    Returns None for an empty body.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def error_for_status(status_code: int, message: str, response_text: str) -> TrelloAPIError:
    """Build the TrelloAPIError subclass matching an HTTP status code"""
    if status_code in (401, 403):
        error_class: type[TrelloAPIError] = TrelloAuthenticationError
    elif status_code == 404:
        error_class = TrelloNotFoundError
    elif status_code == 429:
        error_class = TrelloRateLimitError
    elif 500 <= status_code < 600:
        error_class = TrelloServerError
    else:
        error_class = TrelloAPIError
    return error_class(message, status_code=status_code, response_text=response_text)


class RequestTransport:
    """Issue exactly one HTTP call against a fully-qualified Trello URL.

    The transport decodes JSON and maps non-2xx responses and network failures
    to TrelloAPIError subclasses. It never retries; retrying is the
    dispatcher's job.

    A transport wraps one requests.Session, which requests does not document
    as thread-safe. Give each thread its own transport (and so its own
    TrelloDispatcher) when issuing calls concurrently.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float | None = None,
        verify_ssl: bool = True,
    ):
        """
        Initialize transport

        Args:
            session: Optional requests session (one is created when omitted)
            timeout: Seconds to wait for a response. None waits indefinitely.
            verify_ssl: Verify TLS certificates (disable only for broken proxies)
        """
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def request(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None = None,
        json_body: Mapping[str, Any] | None = None,
        full_response: bool = False,
    ) -> Any:
        """
        Perform one HTTP call

        Args:
            method: One of GET, PUT, POST, DELETE
            url: Fully-qualified URL
            params: Query string parameters
            json_body: JSON payload (PUT/POST only)
            full_response: Return a TrelloResponse envelope instead of the decoded body

        Returns:
            Decoded JSON body, or TrelloResponse when full_response is True

        Raises:
            TrelloAPIError: On non-2xx responses (subclass chosen by status)
            TrelloNetworkError: On connection errors, timeouts, DNS failures
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        try:
            response = self.session.request(
                method,
                url,
                params=dict(params) if params else None,
                json=dict(json_body) if json_body is not None else None,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            # Response.__bool__ is False for error statuses, so compare to None
            status_code = e.response.status_code if e.response is not None else 0
            response_text = e.response.text if e.response is not None else ""
            logger.debug("%s %s failed with HTTP %s", method, _strip_query(url), status_code)
            raise error_for_status(
                status_code,
                f"HTTP {status_code} error for {method} {_strip_query(url)}: {response_text[:200]}",
                response_text,
            ) from e
        except requests.RequestException as e:
            logger.debug("%s %s network error: %s", method, _strip_query(url), e)
            raise TrelloNetworkError(
                f"Network error for {method} {_strip_query(url)}: {e}\n"
                "Check your internet connection and try again.",
                status_code=None,
                response_text=None,
            ) from e

        body = decode_body(response)
        if full_response:
            return TrelloResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=body,
                url=_strip_query(response.url or url),
            )
        return body

    def close(self) -> None:
        """Close the underlying session"""
        self.session.close()

    def __enter__(self) -> RequestTransport:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _strip_query(url: str) -> str:
    # Keep key/token out of messages and logs
    return url.split("?", 1)[0]
