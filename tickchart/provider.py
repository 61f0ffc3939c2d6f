"""Binance REST provider — the only module that imports from requests."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from tickchart.constants import BINANCE_BASE_URL, DEFAULT_TIMEOUT, KLINE_INTERVAL
from tickchart.history import Sample

logger = logging.getLogger(__name__)


class QuoteError(Exception):
    """A fetch for one symbol failed. Never fatal to a refresh cycle."""

    def __init__(self, symbol: str, message: str):
        super().__init__(f"{symbol}: {message}")
        self.symbol = symbol
        self.message = message


@dataclass(frozen=True)
class SnapshotRecord:
    symbol: str
    last_price: float
    price_change_percent: float
    high_price: float
    low_price: float
    volume: float


@dataclass(frozen=True)
class SnapshotResult:
    symbol: str
    record: Optional[SnapshotRecord] = None
    error: Optional[QuoteError] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


_SNAPSHOT_FIELDS = {
    "last_price": "lastPrice",
    "price_change_percent": "priceChangePercent",
    "high_price": "highPrice",
    "low_price": "lowPrice",
    "volume": "volume",
}


def normalize_symbol(symbol: str) -> str:
    """Return a Binance-compatible symbol, e.g. ``btc/usdt`` -> ``BTCUSDT``."""
    return symbol.upper().replace("/", "").replace("-", "").strip()


def _parse_decimal(symbol: str, payload: Dict[str, Any], key: str) -> float:
    """Binance sends numbers as decimal strings; anything else is out of contract."""
    raw = payload.get(key)
    if not isinstance(raw, str):
        raise QuoteError(symbol, f"field {key!r} missing or not a string")
    try:
        return float(raw)
    except ValueError:
        raise QuoteError(symbol, f"field {key!r} is not a number: {raw!r}") from None


def _parse_kline(row: Any) -> Optional[Sample]:
    """Reduce a kline row to (open_time, close). None if the row is malformed."""
    if not isinstance(row, list) or len(row) < 5:
        return None
    ts, close = row[0], row[4]
    if not isinstance(ts, int) or isinstance(ts, bool) or not isinstance(close, str):
        return None
    try:
        return Sample(ts, float(close))
    except ValueError:
        return None


class BinanceClient:
    """Stateless request/decode logic against the Binance public API."""

    def __init__(self, base_url: str = BINANCE_BASE_URL, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def close(self):
        self._session.close()

    def _get_json(self, symbol: str, path: str, params: Dict[str, Any]) -> Any:
        try:
            resp = self._session.get(f"{self._base_url}{path}", params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise QuoteError(symbol, f"request failed: {e}") from e
        if not resp.ok:
            raise QuoteError(symbol, f"API error {resp.status_code}")
        try:
            return resp.json()
        except ValueError as e:
            raise QuoteError(symbol, "invalid JSON response") from e

    # -- Snapshots -------------------------------------------------------

    def get_snapshot(self, symbol: str) -> SnapshotRecord:
        """Fetch 24h ticker stats for one symbol."""
        ticker = normalize_symbol(symbol)
        payload = self._get_json(symbol, "/api/v3/ticker/24hr", {"symbol": ticker})
        if not isinstance(payload, dict):
            raise QuoteError(symbol, "unexpected ticker payload")
        values = {attr: _parse_decimal(symbol, payload, key) for attr, key in _SNAPSHOT_FIELDS.items()}
        return SnapshotRecord(symbol=symbol, **values)

    def get_snapshots(self, symbols: List[str]) -> List[SnapshotResult]:
        """Fetch snapshots one symbol at a time; one result per symbol, in order."""
        results = []
        for symbol in symbols:
            try:
                results.append(SnapshotResult(symbol, record=self.get_snapshot(symbol)))
            except QuoteError as e:
                results.append(SnapshotResult(symbol, error=e))
        return results

    # -- History ---------------------------------------------------------

    def get_history(self, symbol: str, count: int) -> List[Sample]:
        """Fetch the last ``count`` 15-minute klines as (open_time, close) samples.

        Malformed rows are skipped; the result is whatever parsed.
        """
        ticker = normalize_symbol(symbol)
        params = {"symbol": ticker, "interval": KLINE_INTERVAL, "limit": count}
        payload = self._get_json(symbol, "/api/v3/klines", params)
        if not isinstance(payload, list):
            raise QuoteError(symbol, "unexpected klines payload")

        samples = []
        for row in payload:
            sample = _parse_kline(row)
            if sample is None:
                logger.debug("Skipping malformed kline for %s: %r", symbol, row)
                continue
            samples.append(sample)
        return samples
