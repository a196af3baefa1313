"""Enumerations so callers don't have to hard-code Trello's magic strings."""

from __future__ import annotations

from enum import Enum


class RestCommand(str, Enum):
    DELETE = "delete"
    GET = "get"
    POST = "post"
    PUT = "put"


class CustomFieldType(str, Enum):
    """Custom field value types

    LIST gets special handling: its value is the id of the selected option.
    NUMBER and DATE still take strings; CHECKBOX takes "true" or "false".
    """

    LIST = "list"
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    CHECKBOX = "checked"


class ActionType(str, Enum):
    """Commonly filtered action types (see Trello's action-types reference)"""

    ALL = "all"
    COMMENT_CARD = "commentCard"
    CREATE_CARD = "createCard"
    UPDATE_CARD = "updateCard"
    MOVE_CARD_TO_BOARD = "moveCardToBoard"
    MOVE_CARD_FROM_BOARD = "moveCardFromBoard"
