"""Tests for CrashApiClient using a mocked requests session."""

from unittest.mock import MagicMock

import pytest
import requests

from crashclient.core.errors import ApiConfigError, ApiError
from crashclient.core.types import ApiCategory
from crashclient.transport.api import CrashApiClient


def _make_client(payload=None, base_url="http://api.test/", session_id="sess-1"):
    http = MagicMock()
    resp = MagicMock()
    resp.json.return_value = payload if payload is not None else {"ok": True}
    http.request.return_value = resp
    client = CrashApiClient(base_url, session_id, timeout_s=3, http=http)
    return client, http, resp


class TestEndpoints:
    def test_player_history_body(self):
        client, http, _ = _make_client([{"betId": "b-1"}])
        assert client.player_history(limit=20, offset=40) == [{"betId": "b-1"}]
        http.request.assert_called_once_with(
            "POST",
            "http://api.test/history/",
            timeout=3,
            json={"session": "sess-1", "limit": 20, "offset": 40},
        )

    @pytest.mark.parametrize(
        "method, path",
        [
            ("top_cashouts", "/topCashouts/"),
            ("top_wins", "/topWins/"),
            ("top_rounds", "/topRounds/"),
        ],
    )
    def test_leaderboards(self, method, path):
        client, http, _ = _make_client()
        getattr(client, method)("monthly")
        args, kwargs = http.request.call_args
        assert args == ("POST", f"http://api.test{path}")
        assert kwargs["json"] == {"session": "sess-1", "period": "monthly"}

    def test_invalid_period(self):
        client, http, _ = _make_client()
        with pytest.raises(ValueError):
            client.top_wins("hourly")
        http.request.assert_not_called()

    def test_round_details_is_get(self):
        client, http, _ = _make_client()
        client.round_details("r-7")
        http.request.assert_called_once_with(
            "GET", "http://api.test/rounds/r-7", timeout=3, params={"session": "sess-1"}
        )

    def test_bet_details_explicit_session(self):
        client, http, _ = _make_client()
        client.bet_details("b-3", session="other")
        assert http.request.call_args.kwargs["json"] == {"session": "other"}

    def test_general_round_without_session(self):
        client, http, _ = _make_client(session_id=None)
        client.general_round()
        assert http.request.call_args.kwargs["json"] == {}


class TestConfiguration:
    def test_missing_base_url(self):
        client, http, _ = _make_client(base_url=None)
        with pytest.raises(ApiConfigError):
            client.general_round()
        http.request.assert_not_called()

    def test_missing_session(self):
        client, _, _ = _make_client(session_id=None)
        with pytest.raises(ApiConfigError):
            client.player_history()

    def test_config_error_is_api_error(self):
        client, _, _ = _make_client(session_id=None)
        with pytest.raises(ApiError) as exc_info:
            client.top_wins("daily")
        assert exc_info.value.error_type == "not_configured"

    def test_empty_url_keeps_previous(self):
        client, _, _ = _make_client()
        client.set_base_url("")
        assert client.base_url == "http://api.test"


class TestFailures:
    @pytest.mark.parametrize(
        "exc, kind",
        [
            (requests.exceptions.Timeout("slow"), "timeout"),
            (requests.exceptions.ConnectionError("refused"), "connection_error"),
        ],
    )
    def test_transport_errors(self, exc, kind):
        client, http, _ = _make_client()
        http.request.side_effect = exc
        with pytest.raises(ApiError) as exc_info:
            client.player_history()
        assert exc_info.value.error_type == kind
        assert exc_info.value.endpoint == "/history/"

    def test_http_error(self):
        client, _, resp = _make_client()
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
        with pytest.raises(ApiError) as exc_info:
            client.general_round()
        assert exc_info.value.error_type == "http_error"

    def test_bad_json(self):
        client, _, resp = _make_client()
        resp.json.side_effect = ValueError("Expecting value")
        with pytest.raises(ApiError) as exc_info:
            client.general_round()
        assert exc_info.value.error_type == "bad_response"


class TestFetch:
    def test_dispatches_by_category(self):
        client, http, _ = _make_client()
        client.fetch(ApiCategory.PLAYER_HISTORY, {"limit": 5})
        assert http.request.call_args.kwargs["json"]["limit"] == 5
        client.fetch(ApiCategory.BET_DETAILS, {"bet_id": "b-1"})
        assert http.request.call_args.args[1] == "http://api.test/details/b-1"
        client.fetch(ApiCategory.TOP_ROUNDS, {"period": "yearly"})
        assert http.request.call_args.args[1] == "http://api.test/topRounds/"

    def test_missing_param_raises_key_error(self):
        client, _, _ = _make_client()
        with pytest.raises(KeyError):
            client.fetch(ApiCategory.ROUND_DETAILS, {})
