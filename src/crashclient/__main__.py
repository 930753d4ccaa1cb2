"""CLI entry point: python -m crashclient <config.yaml> --url <launch-url>"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler

from crashclient.config import environment_flags, load_config, provider_from_url
from crashclient.console import render
from crashclient.core.errors import ConfigError
from crashclient.core.events import Reset, SelectAutoplayRounds, UpdatePanel
from crashclient.core.types import Screen
from crashclient.session.models import SessionSnapshot
from crashclient.session.runner import SessionRunner

REFRESH_RATE = 0.25
HALT_SCREENS = frozenset({Screen.MAINTENANCE, Screen.CONNECTION_ERROR, Screen.ERROR})

logger = logging.getLogger("crashclient")


class _StartupIntents:
    """Applies the command-line panel settings once the game screen opens."""

    def __init__(self, runner: SessionRunner, args: argparse.Namespace):
        self._runner = runner
        self._args = args
        self._done = False

    def __call__(self, snapshot: SessionSnapshot) -> None:
        if self._done or snapshot.screen != Screen.GAME or not snapshot.context.panels:
            return
        self._done = True
        order = snapshot.context.panels[0].order
        post = self._runner.post
        if self._args.bet is not None:
            post(UpdatePanel(order, "bet_amount", self._args.bet))
        if self._args.auto_cashout is not None:
            post(UpdatePanel(order, "auto_cashout", self._args.auto_cashout))
            post(UpdatePanel(order, "auto_cashout_enabled", True))
        if self._args.autoplay:
            post(SelectAutoplayRounds(order, self._args.autoplay))


class _HaltPolicy:
    """Decides when the CLI loop ends.

    ``maintenance`` and ``connectionError`` are retried with Reset while the
    retry budget lasts; ``error`` always ends the session.
    """

    def __init__(self, runner: SessionRunner, retries: int = 0):
        self._runner = runner
        self._retries = max(retries, 0)
        self._reset_at: int | None = None

    def finished(self) -> bool:
        snapshot = self._runner.snapshot()
        if snapshot.screen not in HALT_SCREENS:
            return False
        if snapshot.screen == Screen.ERROR:
            return True
        if snapshot.version == self._reset_at:
            return False
        if self._retries <= 0:
            return True
        self._retries -= 1
        self._reset_at = snapshot.version
        logger.info("Session halted on %s; resetting", snapshot.screen.value)
        self._runner.post(Reset())
        return False


def _configure_logging(console: Console, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    for noisy in ("socketio", "engineio", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="crashclient",
        description="Headless crash game client",
    )
    parser.add_argument(
        "config",
        type=Path,
        help="Path to client YAML config file",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Operator launch URL (default: $CRASH_LAUNCH_URL)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Server environment to use (overrides $CRASH_ENV)",
    )
    parser.add_argument(
        "--journal",
        type=Path,
        default=None,
        help="Write a JSONL session journal to this directory",
    )
    parser.add_argument("--bet", type=float, default=None, help="Bet amount for the first panel")
    parser.add_argument(
        "--auto-cashout",
        type=float,
        default=None,
        help="Enable auto cashout at this multiplier",
    )
    parser.add_argument(
        "--autoplay",
        type=int,
        default=0,
        help="Number of autoplay rounds on the first panel",
    )
    parser.add_argument(
        "--no-live",
        action="store_true",
        default=False,
        help="Log only; do not draw the live terminal view",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Reset this many times after maintenance or a connection error",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False)
    args = parser.parse_args()

    load_dotenv()
    console = Console()
    _configure_logging(console, args.verbose)

    if not args.config.exists():
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    environ = dict(os.environ)
    if args.env:
        environ["CRASH_ENV"] = args.env
    try:
        config = load_config(args.config)
        flags = environment_flags(environ)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if args.journal:
        config.journal_dir = args.journal

    url = args.url or environ.get("CRASH_LAUNCH_URL", "")
    provider = provider_from_url(url)
    if not provider.token:
        logger.warning("Launch URL carries no token; the server will likely reject the session")

    console.print(f"[bold]Client:[/bold] {config.name}")
    console.print(f"[dim]Game: {provider.game_id or '-'}  Currency: {provider.currency}[/dim]")

    with SessionRunner(config, provider, environment_flags=flags) as runner:
        runner.subscribe(_StartupIntents(runner, args))
        halt = _HaltPolicy(runner, args.retries)
        runner.start()
        try:
            if args.no_live:
                while not halt.finished():
                    time.sleep(REFRESH_RATE)
            else:
                with Live(render(runner.snapshot()), console=console, refresh_per_second=4) as live:
                    while not halt.finished():
                        live.update(render(runner.snapshot()))
                        time.sleep(REFRESH_RATE)
                    live.update(render(runner.snapshot()))
        except KeyboardInterrupt:
            pass

        snapshot = runner.snapshot()
        console.print()
        console.print(f"[bold]Session ended on[/bold] {snapshot.screen.value}")
        if snapshot.context.fault is not None:
            console.print(f"[red]{snapshot.context.fault.description}[/red]")
        if snapshot.screen in HALT_SCREENS:
            sys.exit(1)


if __name__ == "__main__":
    main()
