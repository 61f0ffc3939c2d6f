import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.live import Live

from tickchart.config import Config, parse_config
from tickchart.constants import QUIT_KEYS, REFRESH_KEYS, SCROLL_DOWN_KEYS, SCROLL_UP_KEYS
from tickchart.data import refresh_quotes, seed_history
from tickchart.events import AppEvent, EventChannelClosed, EventHandler, EventKind, TerminalKeySource
from tickchart.provider import BinanceClient
from tickchart.state import DashboardState
from tickchart.ui import build_layout

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    """Log to a rotating file; the terminal belongs to the dashboard."""
    os.makedirs(os.path.dirname(config.log_file), exist_ok=True)
    handler = RotatingFileHandler(config.log_file, maxBytes=2 * 1024 * 1024, backupCount=5)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s | %(levelname)-5s | %(threadName)s | %(message)s",
        handlers=[handler],
    )


def handle_event(event: AppEvent, client: BinanceClient, state: DashboardState) -> bool:
    """Apply one event to the state. Returns False when the app should quit."""
    if event.kind is EventKind.QUIT:
        return False
    if event.kind is EventKind.TICK:
        refresh_quotes(client, state)
    elif event.kind is EventKind.KEY:
        if event.key in QUIT_KEYS:
            return False
        if event.key in REFRESH_KEYS:
            refresh_quotes(client, state)
        elif event.key in SCROLL_UP_KEYS:
            state.scroll_up()
        elif event.key in SCROLL_DOWN_KEYS:
            state.scroll_down()
    return True


def run_loop(handler: EventHandler, client: BinanceClient, state: DashboardState, live: Live,
             console: Console):
    """Consume events until quit or the event channel closes, redrawing after each one."""
    while True:
        try:
            event = handler.next_event()
        except EventChannelClosed:
            logger.info("Event channel closed, leaving main loop")
            break
        if not handle_event(event, client, state):
            logger.info("Quit requested")
            break
        state.clamp_scroll()
        live.update(build_layout(state, console.size.height), refresh=True)


def main():
    config = parse_config()
    try:
        setup_logging(config)
    except OSError as e:
        print(f"[error] Cannot open log file {config.log_file}: {e}")
        sys.exit(1)

    try:
        client = BinanceClient(base_url=config.base_url, timeout=config.timeout)
    except Exception as e:
        print(f"[error] Cannot create HTTP client: {e}")
        sys.exit(1)

    print(f"[tickchart] Refresh: {config.refresh_interval}s, history: {config.history_size} samples")
    print(f"[tickchart] Watching {len(config.symbols)} symbols: {', '.join(config.symbols)}")
    logger.info("Starting with symbols %s", config.symbols)

    state = DashboardState.for_symbols(config.symbols, config.history_size)
    state.status_message = "Loading..."
    key_source = TerminalKeySource()
    handler = EventHandler(config.refresh_interval, key_source)
    console = Console()

    key_source.open()
    try:
        with Live(build_layout(state, console.size.height), console=console, screen=True,
                  auto_refresh=False) as live:
            if config.seed_history:
                seed_history(client, state)
            refresh_quotes(client, state)
            live.update(build_layout(state, console.size.height), refresh=True)

            handler.start()
            run_loop(handler, client, state, live, console)
    except KeyboardInterrupt:
        pass
    finally:
        handler.stop()
        key_source.close()
        client.close()
        console.clear()
        print("[tickchart] Goodbye.")
