"""Custom exception classes for trello_helper.

This module defines the exception hierarchy for request validation,
credential loading and Trello API (transport) errors.
"""

from __future__ import annotations


class TrelloHelperError(Exception):
    """Base exception for all trello_helper errors"""

    pass


class TrelloValidationError(TrelloHelperError, ValueError):
    """Raised when a caller supplies a malformed request shape.

    Raised synchronously, before any network call is attempted, e.g. when
    the path is missing or empty, or when options/body is not a mapping.
    Never retried.
    """

    pass


class TrelloCredentialsError(TrelloHelperError):
    """Raised when the Trello key/token pair cannot be loaded.

    Resolution:
        Point ``creds_path`` at a JSON file containing ``appKey`` and ``token``,
        or export TRELLO_API_KEY and TRELLO_TOKEN.
    """

    pass


class TrelloAPIError(TrelloHelperError):
    """Base exception for Trello API (transport) errors.

    Carries the upstream status code and response text unchanged so callers
    can inspect them.

    Attributes:
        status_code: HTTP status returned by Trello (None for network failures)
        response_text: Raw response body, if any

    Example:
        >>> try:
        ...     trello.get_card("ABC")
        ... except TrelloAPIError as e:
        ...     print(e.status_code, e.response_text)
    """

    def __init__(
        self, message: str, status_code: int | None = None, response_text: str | None = None
    ):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class TrelloAuthenticationError(TrelloAPIError):
    """Raised when API credentials are invalid or expired (401/403)"""

    pass


class TrelloNotFoundError(TrelloAPIError):
    """Raised when a board, card, or resource is not found (404)"""

    pass


class TrelloRateLimitError(TrelloAPIError):
    """Raised when Trello signals the rate limit was exceeded (429).

    GET requests recover from this transparently; PUT, POST and DELETE
    surface it immediately.
    """

    pass


class TrelloServerError(TrelloAPIError):
    """Raised when Trello's servers return an error (5xx)"""

    pass


class TrelloNetworkError(TrelloAPIError):
    """Raised on network-level failures (DNS, connection reset, timeout)"""

    pass
