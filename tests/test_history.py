"""Tests for statistics response normalisation."""

from crashclient.core.types import ApiCategory
from crashclient.session.history import CRASH_BUCKETS, crash_distribution, normalize


class TestCrashDistribution:
    def test_empty_rounds_give_zero_percent(self):
        charts = crash_distribution([])
        assert len(charts) == len(CRASH_BUCKETS)
        assert all(c["percent"] == "0.00" for c in charts)

    def test_bucket_percentages(self):
        rounds = [{"crash": 1.0}, {"crash": 1.5}, {"crash": 1.99}, {"crash": 2500}]
        charts = {c["range"]: c["percent"] for c in crash_distribution(rounds)}
        assert charts["1.00x"] == "25.00"
        assert charts["1.01x - 2.00x"] == "50.00"
        assert charts["> 1,000.00x"] == "25.00"
        assert charts["2.01x - 5.00x"] == "0.00"

    def test_rounds_without_crash_are_counted_in_total_only(self):
        charts = {c["range"]: c["percent"] for c in crash_distribution([{"crash": 3}, {}])}
        assert charts["2.01x - 5.00x"] == "50.00"


class TestNormalize:
    def test_player_history_from_list(self):
        result = normalize(ApiCategory.PLAYER_HISTORY, [{"id": 1}, {"id": 2}])
        assert result["bets"] == [{"id": 1}, {"id": 2}]
        assert result["total"] == 2

    def test_player_history_from_object(self):
        result = normalize(
            ApiCategory.PLAYER_HISTORY,
            {"status": "ok", "bets": [{"id": 1}], "total": 30, "more": True},
        )
        assert result["status"] == "ok"
        assert result["total"] == 30
        assert result["more"] is True

    def test_general_round_adds_charts(self):
        result = normalize(
            ApiCategory.GENERAL_ROUND,
            {"status": "ok", "rounds": [{"id": "r1", "crash": 1.0, "hash": "h"}]},
        )
        assert result["rounds"][0]["id"] == "r1"
        assert result["rounds"][0]["clientSeeds"] == []
        assert result["charts"][0] == {"range": "1.00x", "percent": "100.00"}

    def test_leaderboards_share_shape(self):
        for category in (ApiCategory.TOP_WINS, ApiCategory.TOP_CASHOUTS, ApiCategory.TOP_ROUNDS):
            result = normalize(category, {"status": "ok", "total": 1, "data": [{"u": "amy"}]})
            assert result == {"status": "ok", "total": 1, "data": [{"u": "amy"}]}

    def test_non_dict_response_is_tolerated(self):
        assert normalize(ApiCategory.ROUND_DETAILS, None) == {"status": None, "round": None}
        assert normalize(ApiCategory.GENERAL_ROUND, "oops")["rounds"] == []
