"""Rolling per-symbol price history and the view helpers the charts read."""

from collections import deque
from datetime import datetime
from typing import Deque, Iterable, List, NamedTuple, Optional, Tuple

from tickchart.constants import TIME_LABEL_COUNT


class Sample(NamedTuple):
    timestamp: int  # milliseconds since epoch
    price: float


class SymbolSeries:
    """Latest snapshot stats plus a bounded window of samples for one symbol.

    ``price_history`` is a deque with ``maxlen`` set to the window size, so
    appending past capacity evicts the oldest sample.
    """

    def __init__(self, symbol: str, display_name: str, window: int):
        if window < 1:
            raise ValueError("history window must be at least 1")
        self.symbol = symbol
        self.display_name = display_name
        self.price_history: Deque[Sample] = deque(maxlen=window)
        # Snapshot stats stay None until the first successful fetch
        self.price: Optional[float] = None
        self.change_24h: Optional[float] = None
        self.high_24h: Optional[float] = None
        self.low_24h: Optional[float] = None
        self.volume_24h: Optional[float] = None

    @property
    def window(self) -> int:
        return self.price_history.maxlen

    def append_sample(self, timestamp: int, price: float) -> Sample:
        """Append a sample, never letting its timestamp go backwards."""
        if self.price_history and timestamp < self.price_history[-1].timestamp:
            timestamp = self.price_history[-1].timestamp
        sample = Sample(int(timestamp), float(price))
        self.price_history.append(sample)
        return sample

    def load_history(self, samples: Iterable[Sample]):
        """Bulk-load samples (oldest first) into an empty series."""
        for ts, price in sorted(samples, key=lambda s: s.timestamp):
            self.append_sample(ts, price)

    def history_points(self) -> List[Tuple[float, float]]:
        return [(float(i), s.price) for i, s in enumerate(self.price_history)]

    def price_bounds(self) -> Tuple[float, float]:
        """Return (min, max) price for the y axis, padded so the range is never empty."""
        if len(self.price_history) < 2:
            center = self.price_history[0].price if self.price_history else 0.0
            return _padded(center)
        prices = [s.price for s in self.price_history]
        lo, hi = min(prices), max(prices)
        if lo == hi:
            return _padded(lo)
        return lo, hi

    def time_labels(self, count: int = TIME_LABEL_COUNT, fmt: str = "%H:%M") -> List[str]:
        """Labels for ``count`` evenly spaced points across the history."""
        if not self.price_history:
            return ["--:--"] * count
        n = len(self.price_history)
        if count == 1:
            indices = [n - 1]
        else:
            indices = [round(i * (n - 1) / (count - 1)) for i in range(count)]
        return [_format_ts(self.price_history[i].timestamp, fmt) for i in indices]


def _padded(center: float) -> Tuple[float, float]:
    pad = max(abs(center) * 0.01, 1.0)
    return center - pad, center + pad


def _format_ts(ts_ms: int, fmt: str) -> str:
    return datetime.fromtimestamp(ts_ms / 1000).strftime(fmt)
