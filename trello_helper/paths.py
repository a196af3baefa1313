"""Path builders for Trello API commands.

Every path starts with the API version prefix ("/1") and is appended to the
API base URI by the dispatcher.
"""

from __future__ import annotations

from trello_helper.exceptions import TrelloValidationError

API_VERSION_PREFIX = "/1"


def _require_id(value: str, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise TrelloValidationError(f"{name} must be a non-empty string, got {value!r}")
    return value


def base_card_cmd() -> str:
    """'/1/cards'"""
    return f"{API_VERSION_PREFIX}/cards"


def card_prefix_with_id(card_id: str) -> str:
    """'/1/cards/<card_id>'"""
    return f"{base_card_cmd()}/{_require_id(card_id, 'card_id')}"


def card_due_cmd(card_id: str) -> str:
    """'/1/cards/<card_id>/due'"""
    return f"{card_prefix_with_id(card_id)}/due"


def list_prefix_with_id(list_id: str) -> str:
    """'/1/lists/<list_id>'"""
    return f"{API_VERSION_PREFIX}/lists/{_require_id(list_id, 'list_id')}"


def list_card_cmd(list_id: str) -> str:
    """'/1/lists/<list_id>/cards'"""
    return f"{list_prefix_with_id(list_id)}/cards"


def board_prefix_with_id(board_id: str) -> str:
    """'/1/boards/<board_id>'"""
    return f"{API_VERSION_PREFIX}/boards/{_require_id(board_id, 'board_id')}"


def custom_field_update_cmd(card_id: str, field_id: str) -> str:
    """'/1/cards/<card_id>/customField/<field_id>/item'"""
    return f"{card_prefix_with_id(card_id)}/customField/{_require_id(field_id, 'field_id')}/item"
