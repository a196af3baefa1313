"""Trello REST API helper with authenticated dispatch and rate-limit recovery."""

from __future__ import annotations

# Import the verb catalog
from trello_helper.client import Trello, shift_datetime

# Import credential loading
from trello_helper.config import load_credentials

# Import dispatcher and transport
from trello_helper.dispatcher import Credentials, TrelloDispatcher
from trello_helper.enums import ActionType, CustomFieldType, RestCommand

# Import exceptions
from trello_helper.exceptions import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloCredentialsError,
    TrelloHelperError,
    TrelloNetworkError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
    TrelloValidationError,
)

# Import logging configuration
from trello_helper.logging_config import setup_logging
from trello_helper.rate_limit import RateLimitPolicy, RateLimitRecovery
from trello_helper.transport import RequestTransport, TrelloResponse

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "Trello",
    "TrelloDispatcher",
    "RequestTransport",
    "RateLimitRecovery",
    "RateLimitPolicy",
    "Credentials",
    "TrelloResponse",
    "load_credentials",
    "setup_logging",
    "shift_datetime",
    # Enumerations
    "ActionType",
    "CustomFieldType",
    "RestCommand",
    # Exceptions
    "TrelloHelperError",
    "TrelloValidationError",
    "TrelloCredentialsError",
    "TrelloAPIError",
    "TrelloAuthenticationError",
    "TrelloNotFoundError",
    "TrelloRateLimitError",
    "TrelloServerError",
    "TrelloNetworkError",
]
