import logging
import time
from typing import Callable, List

from tickchart.provider import BinanceClient, QuoteError
from tickchart.state import DashboardState

logger = logging.getLogger(__name__)

MAX_ERROR_LEN = 60


def _summarize(errors: List[QuoteError], ok_message: str) -> str:
    if not errors:
        return ok_message
    parts = [f"{e.symbol}: {e.message[:MAX_ERROR_LEN]}" for e in errors]
    return "Errors: " + "; ".join(parts)


def refresh_quotes(client: BinanceClient, state: DashboardState,
                   clock: Callable[[], float] = time.time):
    """Fetch a snapshot for every tracked symbol and fold it into the state.

    Symbols are fetched one after another. A failed symbol keeps its previous
    snapshot and history; the failure is listed in ``status_message``.
    """
    if not state.coins:
        state.status_message = "No symbols to refresh"
        return

    results = client.get_snapshots([coin.symbol for coin in state.coins])
    errors = []
    for coin, result in zip(state.coins, results):
        if not result.ok:
            logger.warning("Refresh failed for %s: %s", coin.symbol, result.error.message)
            errors.append(result.error)
            continue
        rec = result.record
        coin.price = rec.last_price
        coin.change_24h = rec.price_change_percent
        coin.high_24h = rec.high_price
        coin.low_24h = rec.low_price
        coin.volume_24h = rec.volume
        coin.append_sample(int(clock() * 1000), rec.last_price)

    state.last_update_time = clock()
    state.status_message = _summarize(errors, "Updated")
    logger.debug("Refresh done: %d ok, %d failed", len(results) - len(errors), len(errors))


def seed_history(client: BinanceClient, state: DashboardState):
    """Pre-fill empty histories with recent candles so charts start populated."""
    errors = []
    for coin in state.coins:
        if coin.price_history:
            continue
        try:
            samples = client.get_history(coin.symbol, coin.window)
        except QuoteError as e:
            logger.warning("History seed failed for %s: %s", coin.symbol, e.message)
            errors.append(e)
            continue
        coin.load_history(samples)
        if coin.price_history:
            coin.price = coin.price_history[-1].price
    state.status_message = _summarize(errors, "History loaded")
