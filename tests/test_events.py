import queue

import pytest

from tickchart.events import (
    AppEvent, EventChannelClosed, EventHandler, EventKind, QUIT, TICK, decode_keys,
)


def _key(k):
    return AppEvent(EventKind.KEY, k)


@pytest.fixture
def handler_factory(key_source):
    handlers = []

    def make(interval=60.0):
        h = EventHandler(interval, key_source)
        handlers.append(h)
        h.start()
        return h

    yield make
    for h in handlers:
        h.stop()


def test_decode_plain_and_arrow_keys():
    assert decode_keys(b"qr") == ["q", "r"]
    assert decode_keys(b"\x1b[A\x1b[B") == ["up", "down"]
    assert decode_keys(b"\x1bOA\x1bOB") == ["up", "down"]


def test_decode_interrupt_chord():
    assert decode_keys(b"a\x03") == ["a", "ctrl+c"]


def test_decode_lone_escape_and_unknown_sequence():
    assert decode_keys(b"\x1b") == ["esc"]
    assert decode_keys(b"\x1b[15~x") == ["x"]


def test_decode_utf8():
    assert decode_keys("é".encode("utf-8")) == ["é"]


def test_keypress_before_later_tick_is_delivered_first(handler_factory, key_source):
    handler = handler_factory(interval=0.3)
    key_source.push("r")
    assert handler.next_event(timeout=2) == _key("r")
    assert handler.next_event(timeout=2) == TICK


def test_ticks_repeat(handler_factory):
    handler = handler_factory(interval=0.05)
    assert handler.next_event(timeout=2) == TICK
    assert handler.next_event(timeout=2) == TICK


def test_events_keep_arrival_order(handler_factory, key_source):
    handler = handler_factory()
    for k in ("a", "up", "down", "q"):
        key_source.push(k)
    assert [handler.next_event(timeout=2) for _ in range(4)] == \
        [_key("a"), _key("up"), _key("down"), _key("q")]


def test_interrupt_chord_quits_and_closes(handler_factory, key_source):
    handler = handler_factory()
    key_source.push("a")
    key_source.push("ctrl+c")
    key_source.push("b")
    assert handler.next_event(timeout=2) == _key("a")
    assert handler.next_event(timeout=2) == QUIT
    with pytest.raises(EventChannelClosed):
        handler.next_event(timeout=2)
    with pytest.raises(EventChannelClosed):
        handler.next_event(timeout=2)
    assert handler.closed


def test_input_eof_closes_channel(handler_factory, key_source):
    handler = handler_factory()
    key_source.push("x")
    key_source.end()
    assert handler.next_event(timeout=2) == _key("x")
    with pytest.raises(EventChannelClosed):
        handler.next_event(timeout=2)


def test_input_error_closes_channel(handler_factory, key_source):
    handler = handler_factory()
    key_source.fail(OSError("tty gone"))
    with pytest.raises(EventChannelClosed):
        handler.next_event(timeout=2)


def test_stop_terminates_threads(key_source):
    handler = EventHandler(0.05, key_source)
    handler.start()
    handler.stop(join_timeout=2)
    assert key_source.closed.is_set()
    assert not any(t.is_alive() for t in handler._threads)
    # Anything queued before the close marker may still drain; then the channel reports closure
    with pytest.raises(EventChannelClosed):
        for _ in range(100):
            handler.next_event(timeout=2)


def test_next_event_timeout(handler_factory):
    handler = handler_factory(interval=60.0)
    with pytest.raises(queue.Empty):
        handler.next_event(timeout=0.05)
