"""
Unit tests for CLI entry point (main function)
"""

import json
import sys
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path to import trello_helper module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from trello_helper import TrelloNotFoundError, TrelloResponse
from trello_helper.cli import main

ENV = {
    "TRELLO_API_KEY": "test-key",
    "TRELLO_TOKEN": "test-token",
    "TRELLO_ENV_FILE": "/nonexistent.env",
}


class TestCLIEntryPoint:
    """Test main() CLI entry point"""

    @pytest.mark.parametrize("flag", ["--help", "-h"])
    def test_main_shows_help(self, capsys, flag):
        """Should show help and exit 0"""
        with pytest.raises(SystemExit) as exc_info:
            main([flag])
        assert exc_info.value.code == 0
        assert "trello-helper" in capsys.readouterr().out

    def test_main_requires_an_action(self):
        """Should exit 1 without --get or --test-connection"""
        with patch.dict("os.environ", ENV, clear=True), pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1

    def test_main_exits_with_missing_credentials(self):
        """Should exit 1 when credentials are missing"""
        with (
            patch.dict("os.environ", {"TRELLO_ENV_FILE": "/nonexistent.env"}, clear=True),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--get", "/1/members/me"])
        assert exc_info.value.code == 1

    def test_get_prints_json(self, capsys):
        """Should print the decoded body as JSON"""
        with (
            patch.dict("os.environ", ENV, clear=True),
            patch("trello_helper.cli.Trello.get", return_value={"id": "ABC"}) as mock_get,
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--get", "/1/cards/ABC", "--option", "fields=name", "--option", "limit=1"])

        assert exc_info.value.code == 0
        mock_get.assert_called_once_with("/1/cards/ABC", {"fields": "name", "limit": "1"})
        assert json.loads(capsys.readouterr().out) == {"id": "ABC"}

    def test_full_response_prints_envelope(self, capsys):
        envelope = TrelloResponse(status_code=200, headers={"a": "b"}, body={"id": "ABC"}, url="u")
        with (
            patch.dict("os.environ", ENV, clear=True),
            patch("trello_helper.cli.Trello.get", return_value=envelope),
            pytest.raises(SystemExit),
        ):
            main(["--full-response", "--get", "/1/cards/ABC"])

        output = json.loads(capsys.readouterr().out)
        assert output["status_code"] == 200
        assert output["body"] == {"id": "ABC"}

    def test_bad_option_format(self):
        with (
            patch.dict("os.environ", ENV, clear=True),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--get", "/1/cards/ABC", "--option", "fields"])
        assert exc_info.value.code == 1

    def test_api_error_exits_1(self):
        with (
            patch.dict("os.environ", ENV, clear=True),
            patch(
                "trello_helper.cli.Trello.get",
                side_effect=TrelloNotFoundError("missing", status_code=404),
            ),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--get", "/1/cards/NOPE"])
        assert exc_info.value.code == 1

    def test_test_connection(self):
        """Should GET /1/members/me and exit 0"""
        with (
            patch.dict("os.environ", ENV, clear=True),
            patch(
                "trello_helper.cli.Trello.get", return_value={"username": "tester"}
            ) as mock_get,
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--test-connection"])

        assert exc_info.value.code == 0
        mock_get.assert_called_once_with("/1/members/me", {"fields": "id,username"})

    def test_verbose_flag_sets_debug(self):
        """Should set DEBUG log level with --verbose flag"""
        with (
            patch.dict("os.environ", ENV, clear=True),
            patch("trello_helper.cli.setup_logging") as mock_setup,
            patch("trello_helper.cli.Trello.get", return_value={}),
            pytest.raises(SystemExit),
        ):
            main(["--verbose", "--get", "/1/members/me"])
        mock_setup.assert_called_once_with("DEBUG", None, None)

    def test_creds_file_flag(self, tmp_path):
        creds = tmp_path / "trello.env.json"
        creds.write_text('{"appKey": "k", "token": "t"}')
        with (
            patch.dict("os.environ", {}, clear=True),
            patch("trello_helper.cli.Trello.get", return_value={}),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--creds", str(creds), "--get", "/1/members/me"])
        assert exc_info.value.code == 0

    def test_get_path_without_leading_slash(self):
        """Should exit 1 without making a request when the path lacks '/'"""
        with (
            patch.dict("os.environ", ENV, clear=True),
            patch("trello_helper.transport.RequestTransport.request") as mock_request,
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--get", "1/cards/ABC"])

        assert exc_info.value.code == 1
        mock_request.assert_not_called()

    def test_http_log_level_flag(self):
        with (
            patch.dict("os.environ", ENV, clear=True),
            patch("trello_helper.cli.setup_logging") as mock_setup,
            patch("trello_helper.cli.Trello.get", return_value={}),
            pytest.raises(SystemExit),
        ):
            main(["--http-log-level", "DEBUG", "--get", "/1/members/me"])
        mock_setup.assert_called_once_with("INFO", None, "DEBUG")
