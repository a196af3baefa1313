"""
Shared pytest fixtures for trello_helper tests
"""
import json
import logging
from unittest.mock import MagicMock

import pytest
import requests

from trello_helper import Credentials, RateLimitPolicy, TrelloDispatcher
from trello_helper.transport import RequestTransport


def build_response(status_code=200, payload=None, text=None, headers=None, url=""):
    """Build a mock requests.Response"""
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {"Content-Type": "application/json"}
    response.url = url
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    response.text = text
    response.content = text.encode()
    if payload is not None:
        response.json.return_value = payload
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def make_response():
    """Factory for mock requests.Response objects"""
    return build_response


@pytest.fixture
def credentials():
    return Credentials(key="test_key", token="test_token")


@pytest.fixture
def transport():
    """Transport stub: configure request.return_value / side_effect per test"""
    return MagicMock(spec=RequestTransport)


@pytest.fixture
def fast_policy():
    """Rate-limit policy with no delay so retry tests run instantly"""
    return RateLimitPolicy(delay_ms=0)


@pytest.fixture
def dispatcher(credentials, transport, fast_policy):
    return TrelloDispatcher(credentials, transport=transport, policy=fast_policy)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog keeps seeing trello_helper records"""
    yield
    for name in ("trello_helper", "urllib3", "requests"):
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
