"""Event multiplexer: merges the refresh timer and terminal keys into one queue.

Each source runs in its own daemon thread and puts events on a single
``queue.Queue``; the main loop is the only consumer. Once the channel is
closed (quit chord, input EOF/error, or ``stop()``) a close marker is queued
behind any pending events and nothing else can be enqueued after it.
"""

import logging
import os
import queue
import select
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

INTERRUPT_KEY = "ctrl+c"

_ESCAPE_SEQUENCES = {
    b"\x1b[A": "up",
    b"\x1b[B": "down",
    b"\x1b[C": "right",
    b"\x1b[D": "left",
    b"\x1bOA": "up",
    b"\x1bOB": "down",
    b"\x1bOC": "right",
    b"\x1bOD": "left",
}


class EventKind(Enum):
    TICK = "tick"
    KEY = "key"
    QUIT = "quit"


@dataclass(frozen=True)
class AppEvent:
    kind: EventKind
    key: Optional[str] = None


TICK = AppEvent(EventKind.TICK)
QUIT = AppEvent(EventKind.QUIT)


class EventChannelClosed(Exception):
    """The event producers have terminated; no more events will arrive."""


_CLOSED = object()


def _utf8_width(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def split_keys(data: bytes, final: bool = False) -> Tuple[List[str], bytes]:
    """Decode raw terminal input into key names plus any incomplete tail.

    The tail (a partial escape sequence or UTF-8 character) is meant to be
    prefixed to the next read. With ``final`` nothing is held back: a lone
    ESC becomes ``"esc"`` and partial sequences are discarded.
    """
    keys = []
    i = 0
    while i < len(data):
        byte = data[i:i + 1]
        if byte == b"\x03":
            keys.append(INTERRUPT_KEY)
            i += 1
        elif byte == b"\x1b":
            seq = data[i:i + 3]
            if seq in _ESCAPE_SEQUENCES:
                keys.append(_ESCAPE_SEQUENCES[seq])
                i += 3
            elif len(seq) == 1:
                if not final:
                    return keys, data[i:]
                keys.append("esc")
                i += 1
            elif seq[1:2] not in (b"[", b"O"):
                keys.append("esc")
                i += 1
            else:
                # Unknown or incomplete CSI/SS3 sequence: skip through its final byte
                j = i + 2
                while j < len(data) and not (0x40 <= data[j] <= 0x7E):
                    j += 1
                if j >= len(data) and not final:
                    return keys, data[i:]
                i = j + 1
        else:
            width = _utf8_width(data[i])
            if i + width > len(data) and not final:
                return keys, data[i:]
            keys.append(data[i:i + width].decode("utf-8", errors="replace"))
            i += width
    return keys, b""


def decode_keys(data: bytes) -> List[str]:
    """Decode a complete chunk of raw terminal input into key names."""
    return split_keys(data, final=True)[0]


class TerminalKeySource:
    """Reads keys from stdin in cbreak mode with signal keys disabled.

    ISIG is cleared so Ctrl+C arrives as a byte and is handled as an event
    rather than a KeyboardInterrupt in whatever thread happens to be running.
    """

    def __init__(self, stream=None, poll_interval: float = 0.1):
        self._stream = stream or sys.stdin
        self._poll_interval = poll_interval
        self._closed = threading.Event()
        self._saved_attrs = None

    def open(self):
        try:
            import termios
            import tty

            fd = self._stream.fileno()
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)
            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~termios.ISIG
            termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        except Exception as e:
            # Not a TTY (or no termios): read input as-is
            logger.info("Terminal mode unchanged: %s", e)
            self._saved_attrs = None

    def close(self):
        self._closed.set()
        if self._saved_attrs is not None:
            try:
                import termios

                termios.tcsetattr(self._stream.fileno(), termios.TCSADRAIN, self._saved_attrs)
            except Exception as e:
                logger.warning("Could not restore terminal attributes: %s", e)
            self._saved_attrs = None

    def keys(self) -> Iterator[str]:
        """Yield keys until closed or stdin reaches EOF. OSError propagates."""
        fd = self._stream.fileno()
        pending = b""
        while not self._closed.is_set():
            ready, _, _ = select.select([fd], [], [], self._poll_interval)
            if not ready:
                # Nothing followed the held-back bytes within a poll: flush them
                if pending:
                    yield from decode_keys(pending)
                    pending = b""
                continue
            data = os.read(fd, 32)
            if not data:
                if pending:
                    yield from decode_keys(pending)
                logger.info("Terminal input reached EOF")
                return
            keys, pending = split_keys(pending + data)
            yield from keys


class EventHandler:
    def __init__(self, tick_interval: float, key_source):
        self._tick_interval = tick_interval
        self._key_source = key_source
        self._queue: "queue.Queue" = queue.Queue()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._closed = False
        self._threads: List[threading.Thread] = []

    def start(self):
        self._threads = [
            threading.Thread(target=self._run_timer, daemon=True, name="EventTimer"),
            threading.Thread(target=self._run_input, daemon=True, name="EventInput"),
        ]
        for t in self._threads:
            t.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def _send(self, event: AppEvent) -> bool:
        with self._lock:
            if self._closed:
                return False
            self._queue.put(event)
            return True

    def _close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._stop.set()
            self._queue.put(_CLOSED)

    def _run_timer(self):
        while not self._stop.wait(self._tick_interval):
            if not self._send(TICK):
                break

    def _run_input(self):
        try:
            for key in self._key_source.keys():
                if self._stop.is_set():
                    break
                if key == INTERRUPT_KEY:
                    self._send(QUIT)
                    break
                if not self._send(AppEvent(EventKind.KEY, key)):
                    break
        except Exception:
            logger.exception("Terminal input failed")
        finally:
            self._close()

    def next_event(self, timeout: Optional[float] = None) -> AppEvent:
        """Block for the next event. Raises EventChannelClosed after shutdown.

        With a ``timeout``, raises ``queue.Empty`` if nothing arrives in time.
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the marker in place so later calls fail the same way
            self._queue.put(_CLOSED)
            raise EventChannelClosed("Event channel closed")
        return item

    def stop(self, join_timeout: float = 1.0):
        self._close()
        self._key_source.close()
        for t in self._threads:
            t.join(join_timeout)
