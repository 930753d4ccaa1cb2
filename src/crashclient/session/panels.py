"""BetPanelManager — per-panel betting, auto-play and auto-cashout state.

Commands sent to the server are optimistic: the panel turns ``busy`` when
a bet/cancel/cashout goes out and the server acknowledgement (a ``notify``
BET/CANCEL/CASHOUT) reconciles it. Calls made at the wrong time are silent
no-ops; the UI races the round clock and losing that race is not a fault.

Auto-play timeline per round:

    PLAYING -> DISTRIBUTING   bets cleared, auto-bet panels queued (pre_bet)
    DISTRIBUTING -> BETTING   queued panels placed
    BETTING -> WAITING        busy flags cleared
    WAITING -> PLAYING        remaining auto-bet rounds decremented
"""

from __future__ import annotations

import logging
import math
from typing import Any

from crashclient.core.effects import Effect, Emit, StartTimer
from crashclient.core.events import LowBalanceThrottleElapsed
from crashclient.core.types import ORDER_VALUES, NotificationType, Phase, SocketEvent
from crashclient.session.models import BetPanel, BetSettings, SessionContext
from crashclient.session.notifications import NotificationQueue

logger = logging.getLogger(__name__)

LOW_BALANCE_TIMER = "low-balance-throttle"
LOW_BALANCE_MESSAGE = "low-balance"


class BetPanelManager:
    """View over ``ctx.panels`` that records outbound commands as effects."""

    def __init__(
        self,
        ctx: SessionContext,
        effects: list[Effect],
        notices: NotificationQueue,
    ):
        self._ctx = ctx
        self._effects = effects
        self._notices = notices

    # ------------------------------------------------------------------
    # Seeding and bounds
    # ------------------------------------------------------------------

    @property
    def max_panels(self) -> int:
        return min(max(self._ctx.config.ui.max_bet_panels, 1), len(ORDER_VALUES))

    def _settings(self) -> BetSettings:
        return self._ctx.bet_settings or BetSettings()

    def clamp_bet_amount(self, value: Any) -> float:
        settings = self._settings()
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return settings.min_bet
        if math.isnan(amount):
            return settings.min_bet
        return min(max(amount, settings.min_bet), settings.max_bet)

    def clamp_auto_cashout(self, value: Any) -> float:
        low, high = self._ctx.min_auto_cashout, self._ctx.max_auto_cashout
        try:
            multiplier = float(value)
        except (TypeError, ValueError):
            return low
        if math.isnan(multiplier):
            return low
        return min(max(multiplier, low), high)

    @staticmethod
    def clamp_auto_bet_count(value: Any) -> int:
        try:
            return max(int(value), 0)
        except (TypeError, ValueError, OverflowError):
            return 0

    def default_panel(self, order: str) -> BetPanel:
        settings = self._settings()
        initial = self._ctx.config.ui.initial_bet_value or settings.min_bet or 1
        return BetPanel(
            order=order,
            bet_amount=self.clamp_bet_amount(initial),
            auto_cashout=self.clamp_auto_cashout(self._ctx.min_auto_cashout),
            user_id=self._user_id(),
        )

    def seed(self) -> None:
        """Create default panels, or re-clamp surviving ones on a re-seed."""
        if self._ctx.panels:
            for panel in self._ctx.panels:
                panel.bet_amount = self.clamp_bet_amount(panel.bet_amount)
                panel.auto_cashout = self.clamp_auto_cashout(panel.auto_cashout)
                panel.user_id = self._user_id()
            return
        self._ctx.panels = [
            self.default_panel(order) for order in ORDER_VALUES[: self.max_panels]
        ]

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def add_panel(self) -> None:
        if len(self._ctx.panels) >= self.max_panels:
            return
        used = {p.order for p in self._ctx.panels}
        order = next(o for o in ORDER_VALUES if o not in used)
        self._ctx.panels.append(self.default_panel(order))

    def remove_panel(self, order: str) -> None:
        panel = self._ctx.panel(order)
        if panel is None or panel.is_active or panel.has_bet:
            return
        if len(self._ctx.panels) <= 1:
            return
        self._ctx.panels.remove(panel)

    def update_panel(self, order: str, field: str, value: Any) -> None:
        panel = self._ctx.panel(order)
        if panel is None:
            return

        if field == "bet_amount":
            panel.bet_amount = self.clamp_bet_amount(value)
        elif field == "auto_cashout":
            panel.auto_cashout = self.clamp_auto_cashout(value)
        elif field == "auto_cashout_enabled":
            if panel.pre_bet or panel.has_bet:
                return
            panel.auto_cashout_enabled = bool(value)
        elif field == "auto_bet":
            panel.auto_bet = bool(value)
        elif field == "total_auto_bet_count":
            count = self.clamp_auto_bet_count(value)
            panel.total_auto_bet_count = count
            panel.remaining_auto_bet_count = count
            if (
                count > 0
                and panel.auto_bet
                and not panel.has_bet
                and self._ctx.phase == Phase.BETTING
            ):
                self.place_bet(order)
        else:
            raise ValueError(f"Panel field '{field}' is not editable")

    def place_bet(self, order: str) -> bool:
        panel = self._ctx.panel(order)
        if panel is None:
            return False
        if self._ctx.phase != Phase.BETTING or panel.has_bet or panel.busy:
            return False
        if not self._ctx.connected:
            return False
        if not self.sufficient_balance(panel):
            return False

        panel.busy = True
        panel.is_active = True
        self._emit(SocketEvent.BET, self._bet_payload(panel))
        return True

    def queue_bet(self, order: str) -> None:
        """Bet now in BETTING, otherwise queue for the next window."""
        panel = self._ctx.panel(order)
        if panel is None:
            return
        if self._ctx.phase == Phase.BETTING:
            self.place_bet(order)
            return
        if panel.has_bet or panel.busy:
            return
        if self.sufficient_balance(panel):
            panel.pre_bet = True

    def cancel_pre_bet(self, order: str) -> None:
        panel = self._ctx.panel(order)
        if panel is not None:
            panel.pre_bet = False

    def cancel_bet(self, order: str) -> None:
        panel = self._ctx.panel(order)
        if panel is None or self._ctx.phase != Phase.BETTING:
            return
        if not panel.has_bet or panel.busy or not self._ctx.connected:
            return
        panel.busy = True
        self._emit(SocketEvent.CANCEL, self._command_payload(panel))

    def cashout_bet(self, order: str) -> None:
        panel = self._ctx.panel(order)
        if panel is None or self._ctx.phase != Phase.PLAYING:
            return
        if not panel.has_bet or panel.busy or not self._ctx.connected:
            return
        panel.busy = True
        self._emit(SocketEvent.CASHOUT, self._command_payload(panel))

    def select_autoplay(self, order: str, rounds: int) -> None:
        panel = self._ctx.panel(order)
        if panel is None or not self.sufficient_balance(panel):
            return
        panel.auto_bet = True
        panel.total_auto_bet_count = rounds
        panel.remaining_auto_bet_count = rounds

        if self._ctx.phase == Phase.BETTING:
            self._auto_bet_pass(in_distribution=False)
        elif self._ctx.phase in (Phase.PLAYING, Phase.DISTRIBUTING) and not panel.has_bet:
            panel.pre_bet = True

    def stop_autoplay(self, order: str) -> None:
        panel = self._ctx.panel(order)
        if panel is None:
            return
        panel.auto_bet = False
        panel.total_auto_bet_count = 0
        panel.remaining_auto_bet_count = 0

    def increase_auto_bet(self, order: str, amount: int) -> None:
        panel = self._ctx.panel(order)
        if panel is None:
            return
        panel.total_auto_bet_count += amount
        panel.remaining_auto_bet_count += amount

    # ------------------------------------------------------------------
    # Server acknowledgements and round edges
    # ------------------------------------------------------------------

    def apply_server_ack(
        self,
        order: str,
        bet_id: str | None,
        is_active: bool,
        from_cashout: bool = False,
    ) -> None:
        panel = self._ctx.panel(order)
        if panel is None:
            logger.warning("Acknowledgement for unknown panel %r", order)
            return
        panel.busy = False
        panel.bet_id = bet_id
        panel.is_active = is_active
        panel.pre_bet = bool(from_cashout and panel.auto_bet)

    def decrement_auto_bet(self, order: str) -> None:
        panel = self._ctx.panel(order)
        if panel is None:
            return
        if panel.auto_bet and panel.remaining_auto_bet_count > 0 and panel.has_bet:
            panel.remaining_auto_bet_count -= 1
            panel.auto_bet = panel.remaining_auto_bet_count > 0

    def on_phase_edge(self, previous: Phase | None, current: Phase) -> None:
        """Run the panel side effects of a phase transition. ``ctx.phase`` is already ``current``."""
        if current == Phase.BETTING:
            for panel in self._ctx.panels:
                panel.is_active = False
                panel.bet_id = None
            self._auto_bet_pass(in_distribution=False)
        elif previous == Phase.WAITING and current == Phase.PLAYING:
            for panel in self._ctx.panels:
                if panel.auto_bet and panel.has_bet:
                    self.decrement_auto_bet(panel.order)
        elif previous == Phase.PLAYING and current == Phase.DISTRIBUTING:
            for panel in self._ctx.panels:
                panel.bet_id = None
                panel.busy = False
            self._auto_bet_pass(in_distribution=True)
        elif previous == Phase.BETTING and current == Phase.WAITING:
            for panel in self._ctx.panels:
                panel.busy = False

    def _auto_bet_pass(self, in_distribution: bool) -> None:
        """Queue auto-bet panels; outside distribution, place everything queued."""
        for panel in self._ctx.panels:
            if not panel.auto_bet or panel.has_bet or panel.pre_bet:
                continue
            if not self.sufficient_balance(panel):
                self.stop_autoplay(panel.order)
                continue
            panel.pre_bet = True

        if in_distribution:
            return

        for panel in self._ctx.panels:
            if not panel.pre_bet or panel.has_bet or panel.busy:
                continue
            if not self.place_bet(panel.order) and not self._has_funds(panel):
                panel.pre_bet = False
                if panel.auto_bet:
                    self.stop_autoplay(panel.order)

    # ------------------------------------------------------------------
    # Balance guard
    # ------------------------------------------------------------------

    def sufficient_balance(self, panel: BetPanel) -> bool:
        if self._has_funds(panel):
            return True
        self._notify_low_balance()
        return False

    def release_low_balance_notice(self) -> None:
        self._ctx.low_balance_notice = False

    def _has_funds(self, panel: BetPanel) -> bool:
        return self._ctx.balance >= panel.bet_amount

    def _notify_low_balance(self) -> None:
        if self._ctx.low_balance_notice:
            return
        session = self._ctx.config.session
        self._ctx.low_balance_notice = True
        self._notices.add(
            NotificationType.ERROR,
            LOW_BALANCE_MESSAGE,
            duration=session.notification_duration_s,
        )
        self._effects.append(
            StartTimer(
                LOW_BALANCE_TIMER,
                session.low_balance_throttle_s,
                LowBalanceThrottleElapsed(),
            )
        )

    # ------------------------------------------------------------------
    # Wire payloads
    # ------------------------------------------------------------------

    def _user_id(self) -> str | None:
        return self._ctx.player.user_id if self._ctx.player else None

    def _bet_payload(self, panel: BetPanel) -> dict[str, Any]:
        return {
            "order": panel.order,
            "betAmount": panel.bet_amount,
            "autoCashout": panel.auto_cashout if panel.auto_cashout_enabled else 0,
            "userId": panel.user_id,
            "vendorBonusId": panel.vendor_bonus_id,
        }

    def _command_payload(self, panel: BetPanel) -> dict[str, Any]:
        return {
            "order": panel.order,
            "processBetId": panel.bet_id,
            "userId": panel.user_id,
            "vendorBonusId": panel.vendor_bonus_id,
        }

    def _emit(self, event: SocketEvent, payload: dict[str, Any]) -> None:
        self._effects.append(Emit(event.value, payload))
