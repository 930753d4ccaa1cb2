"""Terminal view of a running session, rendered with rich.

Pure functions from a SessionSnapshot to rich renderables; the CLI feeds
them to a Live display.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from crashclient.core.types import NotificationType, Phase, Screen
from crashclient.session.models import SessionContext, SessionSnapshot

PHASE_STYLES = {
    Phase.BETTING: "bold green",
    Phase.WAITING: "bold yellow",
    Phase.PLAYING: "bold cyan",
    Phase.DISTRIBUTING: "bold magenta",
}

NOTIFICATION_STYLES = {
    NotificationType.SUCCESS: "green",
    NotificationType.WIN: "bold green",
    NotificationType.INFO: "cyan",
    NotificationType.WARNING: "yellow",
    NotificationType.ERROR: "bold red",
}

TICKER_ROWS = 10


def format_amount(amount: float | None, currency: str | None = None) -> str:
    if amount is None:
        return "--"
    text = f"{amount:,.2f}"
    return f"{text} {currency}" if currency else text


def build_header(snapshot: SessionSnapshot) -> Panel:
    """Screen, phase, multiplier and balance."""
    ctx = snapshot.context
    title = Text()
    title.append("CRASH  ", style="bold white")
    title.append(snapshot.screen.value, style="bold")
    if ctx.phase is not None:
        title.append("  |  ", style="dim")
        title.append(ctx.phase.value, style=PHASE_STYLES.get(ctx.phase, "bold"))

    sub = Text()
    if ctx.phase == Phase.BETTING:
        sub.append(f"Next round in {ctx.countdown}s", style="bold green")
    else:
        sub.append(f"{ctx.multiplier:.2f}x", style="bold yellow")
    sub.append("  |  ", style="dim")
    currency = ctx.player.currency if ctx.player else ctx.provider.currency
    sub.append(f"Balance: {format_amount(ctx.balance, currency)}", style="bold white")
    sub.append("  |  ", style="dim")
    sub.append(f"Bets: {ctx.total_bet_count}", style="dim")
    if not ctx.connected:
        sub.append("  |  ", style="dim")
        sub.append("OFFLINE", style="bold red")

    return Panel(
        Group(Align.center(title), Align.center(sub)),
        border_style="bright_white" if ctx.connected else "red",
        padding=(0, 1),
    )


def build_panels(ctx: SessionContext) -> Panel:
    table = Table(expand=True, show_edge=False)
    table.add_column("Panel", no_wrap=True)
    table.add_column("Bet", justify="right")
    table.add_column("Auto cashout", justify="right")
    table.add_column("Autoplay", justify="right")
    table.add_column("State")

    for p in ctx.panels:
        auto_cashout = f"{p.auto_cashout:.2f}x" if p.auto_cashout_enabled else "off"
        autoplay = (
            f"{p.remaining_auto_bet_count}/{p.total_auto_bet_count}" if p.auto_bet else "-"
        )
        if p.busy:
            state = Text("pending", style="yellow")
        elif p.has_bet:
            state = Text("in round" if p.is_active else "placed", style="bold green")
        elif p.pre_bet:
            state = Text("queued", style="cyan")
        else:
            state = Text("idle", style="dim")
        table.add_row(p.order, f"{p.bet_amount:.2f}", auto_cashout, autoplay, state)

    return Panel(table, title="[bold]Bets[/bold]", border_style="green", padding=(0, 1))


def build_ticker(ctx: SessionContext) -> Panel:
    table = Table(show_header=False, show_edge=False, expand=True)
    table.add_column("user", ratio=1, no_wrap=True)
    table.add_column("amount", justify="right")
    table.add_column("cashout", justify="right")
    for entry in ctx.live_wagers[:TICKER_ROWS]:
        cashout = (
            Text(f"{entry.multiplier:.2f}x  {entry.win_amount:.2f}", style="green")
            if entry.win_amount
            else Text("-", style="dim")
        )
        table.add_row(entry.username, f"{entry.amount:.2f}", cashout)
    if not ctx.live_wagers:
        table.add_row(Text("No wagers yet", style="dim italic"), "", "")
    return Panel(table, title="[bold]Live wagers[/bold]", border_style="blue", padding=(0, 1))


def build_notifications(ctx: SessionContext) -> Panel | None:
    if not ctx.notifications:
        return None
    lines = Text()
    for n in ctx.notifications:
        lines.append(f"  {n.message}\n", style=NOTIFICATION_STYLES.get(n.type, "white"))
    return Panel(lines, title="[bold]Notifications[/bold]", border_style="yellow")


def build_fault(snapshot: SessionSnapshot) -> Panel:
    fault = snapshot.context.fault
    body = Text()
    if fault is None:
        body.append("\n    Under maintenance\n", style="bold yellow")
    else:
        body.append(f"\n    {fault.title}\n", style="bold red")
        body.append(f"    {fault.description}\n", style="bold")
        if fault.details:
            body.append(f"    {fault.details}\n", style="dim")
    return Panel(
        Align.center(body),
        title=f"[bold white on red] {snapshot.screen.value} [/bold white on red]",
        border_style="red",
    )


def build_footer(snapshot: SessionSnapshot) -> Text:
    footer = Text()
    if snapshot.screen == Screen.GAME:
        footer.append(" LIVE ", style="bold white on green")
    else:
        footer.append(f" {snapshot.screen.value.upper()} ", style="bold white on blue")
    footer.append(f"  v{snapshot.version}", style="dim")
    footer.append("  |  Ctrl+C to exit", style="dim")
    return footer


def render(snapshot: SessionSnapshot) -> Group:
    """Build the full display."""
    ctx = snapshot.context
    parts = [build_header(snapshot)]
    if snapshot.screen in (Screen.MAINTENANCE, Screen.CONNECTION_ERROR, Screen.ERROR):
        parts.append(build_fault(snapshot))
    elif snapshot.screen == Screen.GAME:
        parts.append(build_panels(ctx))
        parts.append(build_ticker(ctx))
    else:
        progress = Text(f"  Loading {ctx.loading_progress:.0%}", style="bold cyan")
        parts.append(progress)
    notices = build_notifications(ctx)
    if notices is not None:
        parts.append(notices)
    parts.append(build_footer(snapshot))
    return Group(*parts)
