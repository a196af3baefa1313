"""CLI entry point for trello_helper."""

from __future__ import annotations

import json
import logging
import sys

from trello_helper.client import Trello
from trello_helper.config import load_credentials
from trello_helper.dispatcher import TrelloDispatcher
from trello_helper.exceptions import TrelloCredentialsError, TrelloHelperError
from trello_helper.logging_config import setup_logging
from trello_helper.transport import RequestTransport, TrelloResponse

logger = logging.getLogger("trello_helper.cli")

# Module docstring for --help
__doc__ = """
trello-helper - Call the Trello REST API with automatic rate-limit recovery

Usage:
    export TRELLO_API_KEY="your-key"
    export TRELLO_TOKEN="your-token"

    # Test connection and credentials
    trello-helper --test-connection

    # GET any API path, printing JSON
    trello-helper --get /1/lists/LIST_ID/cards --option fields=name --option limit=10

    # Read credentials from a JSON file ({"appKey": "...", "token": "..."})
    trello-helper --creds ~/trello.env.json --get /1/members/me

    # Print the full response envelope (status, headers, body)
    trello-helper --full-response --get /1/members/me

Logging:
    -v, --verbose        Debug output
    -q, --quiet          Errors only
    --log-level LEVEL    DEBUG, INFO, WARNING or ERROR
    --log-file PATH      Also write logs to PATH
    --http-log-level L   Level for urllib3/requests logs (credentials redacted)

Other:
    --no-verify-ssl      Disable TLS certificate verification
"""


def _flag_value(argv: list[str], flag: str) -> str | None:
    if flag not in argv:
        return None
    idx = argv.index(flag)
    if idx + 1 >= len(argv):
        logger.error(f"❌ Error: {flag} requires a value")
        sys.exit(1)
    return argv[idx + 1]


def _parse_options(argv: list[str]) -> dict[str, str]:
    options: dict[str, str] = {}
    for idx, arg in enumerate(argv):
        if arg != "--option":
            continue
        if idx + 1 >= len(argv) or "=" not in argv[idx + 1]:
            logger.error("❌ Error: --option requires KEY=VALUE")
            sys.exit(1)
        key, value = argv[idx + 1].split("=", 1)
        options[key] = value
    return options


def _print_result(result: object) -> None:
    if isinstance(result, TrelloResponse):
        result = {
            "status_code": result.status_code,
            "url": result.url,
            "headers": result.headers,
            "body": result.body,
        }
    print(json.dumps(result, indent=2, sort_keys=True))


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv

    if "--help" in argv or "-h" in argv:
        print(__doc__)
        sys.exit(0)

    # Parse logging flags
    log_level = "INFO"
    if "--verbose" in argv or "-v" in argv:
        log_level = "DEBUG"
    elif "--quiet" in argv or "-q" in argv:
        log_level = "ERROR"
    elif "--log-level" in argv:
        log_level = (_flag_value(argv, "--log-level") or "INFO").upper()
    setup_logging(
        log_level, _flag_value(argv, "--log-file"), _flag_value(argv, "--http-log-level")
    )

    creds_path = _flag_value(argv, "--creds")
    get_path = _flag_value(argv, "--get")
    test_connection = "--test-connection" in argv
    full_response = "--full-response" in argv
    no_verify_ssl = "--no-verify-ssl" in argv

    if not test_connection and get_path is None:
        logger.error("❌ Error: nothing to do. Use --test-connection or --get PATH")
        logger.error("Run trello-helper --help for usage")
        sys.exit(1)

    try:
        credentials = load_credentials(creds_path)
    except TrelloCredentialsError:
        # Already logged by load_credentials
        sys.exit(1)

    if no_verify_ssl:
        import urllib3

        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        logger.info("🔓 SSL verification disabled")

    dispatcher = TrelloDispatcher(
        credentials,
        transport=RequestTransport(verify_ssl=not no_verify_ssl),
        full_response=full_response,
    )
    trello = Trello(dispatcher=dispatcher)

    try:
        if test_connection:
            logger.info("🔍 Testing connection to Trello API...")
            member = trello.get("/1/members/me", {"fields": "id,username"})
            body = member.body if isinstance(member, TrelloResponse) else member
            username = body.get("username", "unknown") if isinstance(body, dict) else "unknown"
            logger.info(f"✅ Authenticated as: {username}")

        if get_path is not None:
            _print_result(trello.get(get_path, _parse_options(argv)))
    except TrelloHelperError as e:
        logger.error(f"❌ Request failed: {e}")
        sys.exit(1)
    finally:
        dispatcher.transport.close()

    sys.exit(0)


if __name__ == "__main__":
    main()
