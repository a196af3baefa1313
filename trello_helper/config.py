"""Credential loading for trello_helper.

Credentials come from one of two sources:

- a JSON credentials file holding ``{"appKey": "...", "token": "..."}``,
  optionally nested under a ``"trelloHelper"`` key (as an object or a JSON
  string), or
- the TRELLO_API_KEY / TRELLO_TOKEN environment variables, optionally loaded
  from a .env file first.

Failing to load credentials is fatal: callers get a TrelloCredentialsError
rather than a client with empty credentials.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, MutableMapping

from trello_helper.dispatcher import Credentials
from trello_helper.exceptions import TrelloCredentialsError

logger = logging.getLogger(__name__)

NESTED_CREDENTIALS_KEY = "trelloHelper"
KEY_ENV_VAR = "TRELLO_API_KEY"
TOKEN_ENV_VAR = "TRELLO_TOKEN"
ENV_FILE_VAR = "TRELLO_ENV_FILE"


def load_env_file(
    env_file: str | Path, environ: MutableMapping[str, str] | None = None
) -> bool:
    """Load KEY=VALUE lines from a .env file without overriding existing variables.

    Returns:
        True if the file existed and was read
    """
    environ = os.environ if environ is None else environ
    path = Path(env_file)
    if not path.exists():
        return False

    with open(path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip("'\"")
                if key not in environ:  # Don't override existing env vars
                    environ[key] = value
    logger.debug("Loaded environment from %s", path)
    return True


def credentials_from_mapping(data: Any, source: str) -> Credentials:
    """Build Credentials from a parsed credentials document"""
    if not isinstance(data, dict):
        raise TrelloCredentialsError(f"Credentials in {source} must be a JSON object")

    nested = data.get(NESTED_CREDENTIALS_KEY)
    if nested is not None:
        if isinstance(nested, str):
            try:
                nested = json.loads(nested)
            except json.JSONDecodeError as e:
                raise TrelloCredentialsError(
                    f"'{NESTED_CREDENTIALS_KEY}' in {source} is not valid JSON: {e}"
                ) from e
        return credentials_from_mapping(nested, source)

    key = data.get("appKey", data.get("key"))
    token = data.get("token")
    missing = [name for name, value in (("appKey", key), ("token", token)) if not value]
    if missing:
        raise TrelloCredentialsError(
            f"Missing required credential field(s) in {source}: {', '.join(missing)}"
        )
    return Credentials(key=str(key), token=str(token))


def load_credentials_file(path: str | Path) -> Credentials:
    """Load credentials from a JSON file"""
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise TrelloCredentialsError(f"Credentials file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise TrelloCredentialsError(f"Credentials file {path} is not valid JSON: {e}") from e
    except OSError as e:
        raise TrelloCredentialsError(f"Cannot read credentials file {path}: {e}") from e
    return credentials_from_mapping(data, str(path))


def load_credentials_from_env(environ: MutableMapping[str, str] | None = None) -> Credentials:
    """Load credentials from TRELLO_API_KEY / TRELLO_TOKEN (after an optional .env file)"""
    environ = os.environ if environ is None else environ
    load_env_file(environ.get(ENV_FILE_VAR, ".env"), environ)

    key = environ.get(KEY_ENV_VAR)
    token = environ.get(TOKEN_ENV_VAR)
    if not key or not token:
        raise TrelloCredentialsError(
            "Missing required Trello credentials.\n"
            f"Set {KEY_ENV_VAR} and {TOKEN_ENV_VAR} in your environment or a .env file,\n"
            "or pass the path to a JSON credentials file.\n"
            "Get credentials at: https://trello.com/power-ups/admin"
        )
    return Credentials(key=key, token=token)


def load_credentials(
    path: str | Path | None = None, environ: MutableMapping[str, str] | None = None
) -> Credentials:
    """
    Load the Trello key/token pair

    Args:
        path: Optional JSON credentials file. Environment variables are used when omitted.
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Credentials

    Raises:
        TrelloCredentialsError: If credentials cannot be loaded

    Example:
        >>> creds = load_credentials("~/.config/trello.env.json")
    """
    try:
        if path is not None:
            return load_credentials_file(Path(path).expanduser())
        return load_credentials_from_env(environ)
    except TrelloCredentialsError as e:
        logger.error("FATAL ERROR reading credentials: %s", e)
        raise
