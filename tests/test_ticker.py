"""Tests for live-wager ticker ranking and update reconciliation."""

from crashclient.session.models import LiveWagerEntry
from crashclient.session.ticker import apply_updates, entry_from_wire, rank


def _entry(id: str, username: str, amount: float) -> LiveWagerEntry:
    return LiveWagerEntry(id=id, username=username, amount=amount)


class TestRank:
    def test_amount_descending(self):
        ranked = rank([_entry("1", "a", 5), _entry("2", "b", 50), _entry("3", "c", 10)], 10)
        assert [e.id for e in ranked] == ["2", "3", "1"]

    def test_ties_broken_by_username(self):
        ranked = rank([_entry("1", "zed", 10), _entry("2", "amy", 10), _entry("3", "kim", 10)], 10)
        assert [e.username for e in ranked] == ["amy", "kim", "zed"]

    def test_cap(self):
        ranked = rank([_entry(str(i), f"u{i}", i) for i in range(10)], 3)
        assert [e.amount for e in ranked] == [9, 8, 7]


class TestApplyUpdates:
    def test_missing_username_defaults(self):
        assert entry_from_wire({"id": 7, "a": 2.0}).username == "unknown"

    def test_null_fields_default(self):
        entry = entry_from_wire({"id": 7, "u": None, "a": None, "w": None, "m": None, "av": None})
        assert (entry.username, entry.amount, entry.win_amount) == ("unknown", 0.0, 0.0)
        assert (entry.multiplier, entry.avatar) == (1.0, 0)

    def test_null_amount_ranks_last(self):
        entries = apply_updates(
            [_entry("1", "amy", 3)], [{"t": "BET", "id": "2", "u": "bob", "a": None}], cap=50
        )
        assert [e.id for e in entries] == ["1", "2"]

    def test_bet_cashout_cancel(self):
        entries = apply_updates(
            [],
            [
                {"t": "BET", "id": "1", "u": "amy", "a": 10},
                {"t": "BET", "id": "2", "u": "bob", "a": 20},
                {"t": "CASHOUT", "id": "1", "w": 25.0, "m": 2.5},
                {"t": "CANCEL", "id": "2"},
            ],
            cap=50,
        )
        assert len(entries) == 1
        amy = entries[0]
        assert (amy.username, amy.amount, amy.win_amount, amy.multiplier) == ("amy", 10, 25.0, 2.5)

    def test_cashout_for_unknown_id_is_ignored(self):
        entries = apply_updates([_entry("1", "amy", 10)], [{"t": "CASHOUT", "id": "9", "w": 5}], 50)
        assert entries[0].win_amount == 0.0

    def test_input_not_mutated(self):
        original = [_entry("1", "amy", 10)]
        apply_updates(original, [{"t": "CANCEL", "id": "1"}], 50)
        assert len(original) == 1

    def test_result_is_ranked_and_capped(self):
        updates = [{"t": "BET", "id": str(i), "u": f"u{i}", "a": i} for i in range(5)]
        entries = apply_updates([], updates, cap=2)
        assert [e.amount for e in entries] == [4, 3]
