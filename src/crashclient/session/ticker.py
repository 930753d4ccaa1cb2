"""Live-wager ticker reconciliation.

Wire entries use short keys: ``t`` (BET, CASHOUT or CANCEL), ``id``,
``a`` amount, ``w`` win amount, ``av`` avatar, ``m`` multiplier and
``u`` username.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable

from crashclient.session.models import LiveWagerEntry

_WIRE_FIELDS = {
    "a": "amount",
    "w": "win_amount",
    "av": "avatar",
    "m": "multiplier",
    "u": "username",
}


def entry_from_wire(raw: dict[str, Any]) -> LiveWagerEntry:
    return LiveWagerEntry(
        id=str(raw["id"]),
        username=raw.get("u") or "unknown",
        amount=raw.get("a") or 0.0,
        win_amount=raw.get("w") or 0.0,
        multiplier=raw.get("m") or 1.0,
        avatar=raw.get("av") or 0,
    )


def rank(entries: Iterable[LiveWagerEntry], cap: int) -> list[LiveWagerEntry]:
    """Amount descending, username ascending, truncated to ``cap``."""
    ordered = sorted(entries, key=lambda e: (-e.amount, e.username))
    return ordered[: max(cap, 0)]


def apply_updates(
    entries: list[LiveWagerEntry],
    updates: Iterable[dict[str, Any]],
    cap: int,
) -> list[LiveWagerEntry]:
    """Apply a batch of BET/CASHOUT/CANCEL updates and re-rank."""
    result = list(entries)
    for update in updates:
        kind = update.get("t")
        entry_id = str(update.get("id"))
        if kind == "BET":
            result.append(entry_from_wire(update))
        elif kind == "CASHOUT":
            for i, entry in enumerate(result):
                if entry.id == entry_id:
                    patch = {
                        attr: update[key]
                        for key, attr in _WIRE_FIELDS.items()
                        if update.get(key) is not None
                    }
                    result[i] = replace(entry, **patch)
                    break
        elif kind == "CANCEL":
            result = [e for e in result if e.id != entry_id]
    return rank(result, cap)
