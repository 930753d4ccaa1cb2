"""Normalisation of statistics API responses, per category."""

from __future__ import annotations

from typing import Any, Callable

from crashclient.core.types import ApiCategory

# (label, lower bound inclusive, upper bound inclusive); None = open
CRASH_BUCKETS: tuple[tuple[str, float | None, float | None], ...] = (
    ("1.00x", 1.00, 1.00),
    ("1.01x - 2.00x", 1.01, 2.00),
    ("2.01x - 5.00x", 2.01, 5.00),
    ("5.01x - 10.00x", 5.01, 10.00),
    ("10.01x - 100.00x", 10.01, 100.00),
    ("100.01x - 1,000.00x", 100.01, 1000.00),
    ("> 1,000.00x", None, None),
)


def _in_bucket(crash: float, low: float | None, high: float | None) -> bool:
    if low is None:
        return crash > 1000.00
    return low <= crash <= high


def crash_distribution(rounds: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Share of rounds per crash-point bucket, as percentages with two decimals."""
    total = len(rounds)
    charts = []
    for label, low, high in CRASH_BUCKETS:
        count = sum(
            1
            for r in rounds
            if isinstance(r.get("crash"), (int, float)) and _in_bucket(r["crash"], low, high)
        )
        percent = (count / total) * 100 if total else 0.0
        charts.append({"range": label, "percent": f"{percent:.2f}"})
    return charts


def normalize_player_history(res: Any) -> dict[str, Any]:
    if isinstance(res, list):
        return {"status": None, "bets": res, "total": len(res), "more": None, "pagination": None}
    res = res if isinstance(res, dict) else {}
    return {
        "status": res.get("status"),
        "bets": res.get("bets") or [],
        "total": res.get("total", 0),
        "more": res.get("more"),
        "pagination": res.get("pagination"),
    }


def normalize_bet_details(res: Any) -> dict[str, Any]:
    res = res if isinstance(res, dict) else {}
    return {"status": res.get("status"), "bet": res.get("bet") or res}


def normalize_round_details(res: Any) -> dict[str, Any]:
    res = res if isinstance(res, dict) else {}
    return {"status": res.get("status"), "round": res.get("round")}


def normalize_general_round(res: Any) -> dict[str, Any]:
    res = res if isinstance(res, dict) else {}
    raw = res.get("rounds") if isinstance(res.get("rounds"), list) else []
    rounds = [
        {
            "id": r.get("id"),
            "crash": r.get("crash"),
            "clientSeeds": r.get("clientSeeds") or [],
            "createdAt": r.get("createdAt"),
            "betCount": r.get("betCount"),
            "hash": r.get("hash"),
            "sha": r.get("sha"),
        }
        for r in raw
    ]
    return {
        "status": res.get("status"),
        "rounds": rounds,
        "charts": crash_distribution(rounds),
    }


def normalize_leaderboard(res: Any) -> dict[str, Any]:
    res = res if isinstance(res, dict) else {}
    return {"status": res.get("status"), "total": res.get("total"), "data": res.get("data")}


_NORMALIZERS: dict[ApiCategory, Callable[[Any], dict[str, Any]]] = {
    ApiCategory.PLAYER_HISTORY: normalize_player_history,
    ApiCategory.BET_DETAILS: normalize_bet_details,
    ApiCategory.ROUND_DETAILS: normalize_round_details,
    ApiCategory.GENERAL_ROUND: normalize_general_round,
    ApiCategory.TOP_CASHOUTS: normalize_leaderboard,
    ApiCategory.TOP_WINS: normalize_leaderboard,
    ApiCategory.TOP_ROUNDS: normalize_leaderboard,
}


def normalize(category: ApiCategory, res: Any) -> dict[str, Any]:
    return _NORMALIZERS[category](res)
