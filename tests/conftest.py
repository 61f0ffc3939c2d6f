import queue
import threading

import pytest

from tickchart.provider import QuoteError, SnapshotRecord, SnapshotResult


class FakeClient:
    """Stands in for BinanceClient. ``prices`` maps symbol -> list of prices or exceptions."""

    def __init__(self, prices=None, history=None):
        self.prices = {k: list(v) for k, v in (prices or {}).items()}
        self.history = history or {}
        self.calls = []

    def get_snapshot(self, symbol):
        self.calls.append(symbol)
        outcome = self.prices[symbol].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SnapshotRecord(symbol, outcome, 1.5, outcome + 1, outcome - 1, 1000.0)

    def get_snapshots(self, symbols):
        results = []
        for s in symbols:
            try:
                results.append(SnapshotResult(s, record=self.get_snapshot(s)))
            except QuoteError as e:
                results.append(SnapshotResult(s, error=e))
        return results

    def get_history(self, symbol, count):
        outcome = self.history[symbol]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome[-count:]


class FakeKeySource:
    """Key source fed from the test thread; ``end()`` simulates EOF."""

    _EOF = object()

    def __init__(self):
        self._keys = queue.Queue()
        self.closed = threading.Event()

    def push(self, key):
        self._keys.put(key)

    def end(self):
        self._keys.put(self._EOF)

    def fail(self, exc):
        self._keys.put(exc)

    def close(self):
        self.closed.set()
        self._keys.put(self._EOF)

    def keys(self):
        while True:
            item = self._keys.get()
            if item is self._EOF:
                return
            if isinstance(item, Exception):
                raise item
            yield item


@pytest.fixture
def key_source():
    return FakeKeySource()


class Clock:
    def __init__(self, start=1_700_000_000.0, step=5.0):
        self.now = start
        self.step = step

    def __call__(self):
        return self.now

    def advance(self):
        self.now += self.step


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def make_client():
    return FakeClient
