"""High-level Trello verbs (cards, lists, boards, members, custom fields, actions)."""

from __future__ import annotations

import calendar
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, cast

from trello_helper import paths
from trello_helper.config import load_credentials
from trello_helper.dispatcher import Credentials, TrelloDispatcher
from trello_helper.enums import ActionType, CustomFieldType
from trello_helper.exceptions import TrelloValidationError
from trello_helper.rate_limit import RateLimitPolicy

logger = logging.getLogger(__name__)

# Maximum number of actions Trello returns per request
MAX_ACTIONS_LIMIT = 1000

_TIMEDELTA_UNITS = {
    "second": "seconds",
    "minute": "minutes",
    "hour": "hours",
    "day": "days",
    "week": "weeks",
}
_MONTH_UNITS = {"month": 1, "quarter": 3, "year": 12}


def _normalize_unit(units: str) -> str:
    if not isinstance(units, str) or not units:
        raise TrelloValidationError(f"units must be a non-empty string, got {units!r}")
    unit = units.lower()
    return unit[:-1] if unit.endswith("s") else unit


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    # Clamp e.g. Jan 31 + 1 month to the last day of February
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _require_count(count: Any) -> None:
    # bool is an int subclass but never a meaningful offset
    if isinstance(count, bool) or not isinstance(count, (int, float)):
        raise TrelloValidationError(f"count must be a number, got {count!r}")


def shift_datetime(moment: datetime, count: int | float, units: str) -> datetime:
    """
    Shift ``moment`` by ``count`` units (negative counts move backwards)

    Supported units: seconds, minutes, hours, days, weeks, months, quarters,
    years (singular forms accepted). Month-based units require whole counts.

    Raises:
        TrelloValidationError: On unknown units or a non-numeric count
    """
    _require_count(count)
    unit = _normalize_unit(units)
    if unit in _TIMEDELTA_UNITS:
        return moment + timedelta(**{_TIMEDELTA_UNITS[unit]: count})
    if unit in _MONTH_UNITS:
        if int(count) != count:
            raise TrelloValidationError(f"{units} offsets need a whole count, got {count}")
        return _add_months(moment, int(count) * _MONTH_UNITS[unit])
    valid = sorted(f"{u}s" for u in list(_TIMEDELTA_UNITS) + list(_MONTH_UNITS))
    raise TrelloValidationError(f"Invalid units: '{units}'. Must be one of: {valid}")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _to_trello_iso(moment: datetime) -> str:
    """Format as Trello's UTC timestamp, e.g. 2019-03-25T17:00:00.000Z"""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value):
        raise TrelloValidationError(f"{name} is required")


def _require_mapping(options: Any, name: str = "options") -> None:
    if options is not None and not isinstance(options, Mapping):
        raise TrelloValidationError(f"{name} must be a mapping, got {type(options).__name__}")


def _require_keys(options: Any, required: Iterable[str], name: str = "options") -> None:
    if not isinstance(options, Mapping):
        raise TrelloValidationError(f"{name} must be a mapping, got {type(options).__name__}")
    missing = [key for key in required if key not in options]
    if missing:
        raise TrelloValidationError(f"{name} is missing required key(s): {', '.join(missing)}")


class Trello:
    """Higher-level verbs on top of an authenticated TrelloDispatcher

    Credentials are loaded once at construction; failure to load them aborts
    construction with TrelloCredentialsError. A ready-made dispatcher already
    carries its credentials, policy and full-response setting, so passing one
    together with any of those raises TrelloValidationError.

    Example:
        >>> trello = Trello(creds_path="~/trello.env.json")
        >>> cards = trello.get_cards_on_list("5c4b6f254a94846d2f0c65df", {"fields": "name"})
        >>> trello.archive_all_cards_on_list("5c4b6f254a94846d2f0c65df")
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        *,
        creds_path: str | Path | None = None,
        dispatcher: TrelloDispatcher | None = None,
        policy: RateLimitPolicy | None = None,
        full_response: bool = False,
    ):
        if dispatcher is not None:
            conflicting = [
                name
                for name, value in (
                    ("credentials", credentials),
                    ("creds_path", creds_path),
                    ("policy", policy),
                )
                if value is not None
            ]
            if full_response:
                conflicting.append("full_response")
            if conflicting:
                raise TrelloValidationError(
                    f"Cannot combine dispatcher with: {', '.join(conflicting)}. "
                    "Configure the dispatcher directly instead."
                )
        else:
            if credentials is None:
                credentials = load_credentials(creds_path)
            dispatcher = TrelloDispatcher(credentials, policy=policy, full_response=full_response)
        self.dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Pass-throughs to the dispatcher

    def enable_full_response(self, enable: bool) -> None:
        """Return full response envelopes from every call. Intended for debugging."""
        self.dispatcher.enable_full_response(enable)

    def is_in_full_response_mode(self) -> bool:
        return self.dispatcher.is_in_full_response_mode()

    @property
    def rate_limit_error(self) -> int:
        return self.dispatcher.rate_limit_error

    @property
    def rate_limit_delay_ms(self) -> int:
        return self.dispatcher.rate_limit_delay_ms

    def get(
        self,
        path: str,
        options: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        return self._dispatch("get", path, options, full_response)

    def put(
        self,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        return self._dispatch("put", path, body, full_response)

    def post(
        self,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        return self._dispatch("post", path, body, full_response)

    def delete(
        self,
        path: str,
        options: Mapping[str, Any] | None = None,
        *,
        full_response: bool | None = None,
    ) -> Any:
        return self._dispatch("delete", path, options, full_response)

    def _dispatch(
        self, verb: str, path: str, payload: Mapping[str, Any] | None, full_response: bool | None
    ) -> Any:
        send = getattr(self.dispatcher, verb)
        if full_response is None:
            return send(path, payload)
        return send(path, payload, full_response=full_response)

    # ------------------------------------------------------------------
    # Cards

    def get_card(self, card_id: str, options: Mapping[str, Any] | None = None) -> dict:
        """Get a single card, e.g. get_card("123", {"fields": "name,desc"})"""
        return cast(dict, self.get(paths.card_prefix_with_id(card_id), options))

    def get_actions_on_card(
        self, card_id: str, options: Mapping[str, Any] | None = None
    ) -> list[dict]:
        """Get the actions on a card

        Defaults to every action type (filter="all") and the maximum page size
        (limit=1000); pass your own filter/limit in options to narrow it.
        See https://developers.trello.com/reference/#action-types
        """
        _require_mapping(options)
        query = dict(options or {})
        query["filter"] = query.get("filter") or ActionType.ALL.value
        query["limit"] = query.get("limit") or MAX_ACTIONS_LIMIT
        path = f"{paths.card_prefix_with_id(card_id)}/actions"
        return cast(list, self.get(path, query))

    def add_card(self, options: Mapping[str, Any]) -> dict:
        """Add a card to a list

        Trello expects the list under the key 'idList'.

        Example:
            >>> trello.add_card({"idList": "456", "name": "my card", "desc": "details"})
        """
        _require_keys(options, ("idList", "name"))
        return cast(dict, self.post(paths.base_card_cmd(), options))

    def add_card_with_members(self, options: Mapping[str, Any]) -> dict:
        """Like add_card() but takes a comma separated string of member ids in 'idMembers'"""
        _require_keys(options, ("idList", "idMembers"))
        return cast(dict, self.post(paths.base_card_cmd(), options))

    def add_card_with_anything(self, options: Mapping[str, Any]) -> dict:
        """Add a card with any of the options Trello accepts

        For example idAttachmentCover, idLabels (comma separated), pos ('top',
        'bottom' or a positive float), due, dueComplete, subscribed. The caller
        is responsible for the API's parameter names; only idList is required.
        https://developers.trello.com/reference/#cardsid-1
        """
        _require_keys(options, ("idList",))
        return cast(dict, self.post(paths.base_card_cmd(), options))

    def delete_card(self, card_id: str) -> Any:
        return self.delete(paths.card_prefix_with_id(card_id))

    def archive_card(self, card_id: str) -> dict:
        return self.set_closed_state(card_id, True)

    def set_closed_state(self, card_id: str, is_closed: bool) -> dict:
        """Setting the closed state to True archives the card"""
        _require(is_closed, "is_closed")
        return cast(dict, self.put(paths.card_prefix_with_id(card_id), {"closed": is_closed}))

    def set_due_complete(self, card_id: str, is_complete: bool) -> dict:
        """Mark the card's due date complete (or clear it with False)"""
        _require(is_complete, "is_complete")
        return cast(
            dict, self.put(paths.card_prefix_with_id(card_id), {"dueComplete": is_complete})
        )

    def add_due_date_to_card_by_offset(
        self, card_id: str, count: int | float, units: str
    ) -> dict:
        """Set the due date relative to now

        Example:
            >>> trello.add_due_date_to_card_by_offset("123", 7, "days")
        """
        due_date = shift_datetime(datetime.now().astimezone(), count, units)
        path = paths.card_due_cmd(card_id)
        return cast(dict, self.put(path, {"value": due_date.isoformat(timespec="seconds")}))

    def add_comment_on_card(self, card_id: str, text: str) -> dict:
        _require(text, "text")
        path = f"{paths.card_prefix_with_id(card_id)}/actions/comments"
        return cast(dict, self.post(path, {"text": text}))

    def add_member_to_card(self, card_id: str, member_id: str) -> list[dict]:
        _require(member_id, "member_id")
        path = f"{paths.card_prefix_with_id(card_id)}/idMembers"
        return cast(list, self.post(path, {"value": member_id}))

    def remove_member_from_card(self, card_id: str, member_id: str) -> Any:
        _require(member_id, "member_id")
        path = f"{paths.card_prefix_with_id(card_id)}/idMembers/{member_id}"
        return self.delete(path)

    # ------------------------------------------------------------------
    # Custom fields

    def get_custom_field_items_on_card(self, card_id: str) -> list[dict]:
        path = f"{paths.card_prefix_with_id(card_id)}/customFieldItems"
        return cast(list, self.get(path, {}))

    def set_custom_field_value_on_card(
        self, card_id: str, field_id: str, field_type: CustomFieldType | str, value: Any
    ) -> dict:
        """Set the value of a custom field on a card

        A list field takes {"idValue": <option id>}; every other type takes
        {"value": {<type>: <value>}}, e.g. {"value": {"text": "hello"}}.

        Example:
            >>> trello.set_custom_field_value_on_card("123", "456", CustomFieldType.TEXT, "hi")
        """
        try:
            field_type = CustomFieldType(field_type)
        except ValueError as e:
            valid = [t.value for t in CustomFieldType]
            raise TrelloValidationError(
                f"Invalid custom field type: '{field_type}'. Must be one of: {valid}"
            ) from e
        _require(value, "value")

        path = paths.custom_field_update_cmd(card_id, field_id)
        if field_type is CustomFieldType.LIST:
            body: dict[str, Any] = {"idValue": value}
        else:
            body = {"value": {field_type.value: value}}
        return cast(dict, self.put(path, body))

    # ------------------------------------------------------------------
    # Lists

    def get_cards_on_list(
        self, list_id: str, options: Mapping[str, Any] | None = None
    ) -> list[dict]:
        """Get the cards on a list, e.g. get_cards_on_list("123", {"customFieldItems": True})"""
        return cast(list, self.get(paths.list_card_cmd(list_id), options))

    def get_archived_cards_on_list(
        self, list_id: str, options: Mapping[str, Any] | None = None
    ) -> list[dict]:
        _require_mapping(options)
        query = {**(options or {}), "filter": "closed"}
        return self.get_cards_on_list(list_id, query)

    def get_board_id_from_list_id(self, list_id: str) -> dict:
        """Find the board a list lives on. Resolves to {"id": <board id>}."""
        path = f"{paths.list_prefix_with_id(list_id)}/board"
        return cast(dict, self.get(path, {"fields": "id"}))

    def archive_all_cards_on_list(self, list_id: str) -> Any:
        path = f"{paths.list_prefix_with_id(list_id)}/archiveAllCards"
        return self.post(path)

    def unarchive_all_cards_on_list(self, list_id: str) -> int:
        """Unarchive every archived card on a list

        Cards are updated one at a time to stay clear of rate limiting.

        Returns:
            Number of cards unarchived
        """
        archived_cards = self.get_archived_cards_on_list(list_id, {"fields": "name"})
        for card in archived_cards:
            self.set_closed_state(card["id"], False)
        logger.info("Unarchived %d card(s) on list %s", len(archived_cards), list_id)
        return len(archived_cards)

    def archive_cards_older_than(self, list_id: str, count: int | float, units: str) -> int:
        """Archive cards on a list that are older than a relative cutoff

        Example:
            >>> trello.archive_cards_older_than("123", 2, "weeks")

        Returns:
            Number of cards archived
        """
        _require_count(count)
        cutoff = _to_trello_iso(shift_datetime(_now_utc(), -count, units))
        all_cards = self.get_cards_on_list(list_id, {})
        newer_cards = self.get_cards_on_list(list_id, {"since": cutoff})
        newer_ids = {card.get("id") for card in newer_cards}
        older_cards = [card for card in all_cards if card.get("id") not in newer_ids]

        for card in older_cards:
            self.archive_card(card["id"])
        logger.info(
            "Archived %d card(s) older than %s on list %s", len(older_cards), cutoff, list_id
        )
        return len(older_cards)

    # ------------------------------------------------------------------
    # Boards and members

    def get_cards_on_board(
        self, board_id: str, options: Mapping[str, Any] | None = None
    ) -> list[dict]:
        """Get the cards on a board

        Useful options: limit (1 to 1000) and fields, e.g. "name,desc".
        """
        path = f"{paths.board_prefix_with_id(board_id)}/cards"
        return cast(list, self.get(path, options))

    def get_archived_cards_on_board(
        self, board_id: str, options: Mapping[str, Any] | None = None
    ) -> list[dict]:
        _require_mapping(options)
        query = {**(options or {}), "filter": "closed"}
        return self.get_cards_on_board(board_id, query)

    def get_lists_on_board(
        self, board_id: str, options: Mapping[str, Any] | None = None
    ) -> list[dict]:
        path = f"{paths.board_prefix_with_id(board_id)}/lists"
        return cast(list, self.get(path, options))

    def get_members_on_board(self, board_id: str) -> list[dict]:
        """Members as [{"id", "fullName", "username"}, ...]"""
        path = f"{paths.board_prefix_with_id(board_id)}/members"
        return cast(list, self.get(path, {}))

    # ------------------------------------------------------------------
    # Action helpers

    @staticmethod
    def filter_actions_by_type(actions: Iterable[Mapping[str, Any]], filter_type: str) -> list:
        """Return the actions whose 'type' matches filter_type"""
        _require(actions, "actions")
        _require(filter_type, "filter_type")
        return [action for action in actions if action.get("type") == filter_type]

    @staticmethod
    def get_move_card_to_board_actions(actions: Iterable[Mapping[str, Any]]) -> list:
        """Return the actions recording a card moving onto a board"""
        return Trello.filter_actions_by_type(actions, ActionType.MOVE_CARD_TO_BOARD.value)

    @staticmethod
    def action_was_on_list(actions: Iterable[Mapping[str, Any]], filter_list: str) -> list:
        """Return the actions showing the card was previously on ``filter_list``

        Every action must carry a 'data' object; matching uses data.listBefore.
        """
        _require(actions, "actions")
        _require(filter_list, "filter_list")
        actions = list(actions)
        for action in actions:
            _require_keys(action, ("data",), name="action")
        return [action for action in actions if action["data"].get("listBefore") == filter_list]
