from types import SimpleNamespace

from tickchart.app import handle_event, run_loop
from tickchart.events import AppEvent, EventHandler, EventKind, QUIT, TICK
from tickchart.state import DashboardState


class FakeLive:
    def __init__(self):
        self.updates = 0

    def update(self, renderable, refresh=False):
        self.updates += 1


def _key(k):
    return AppEvent(EventKind.KEY, k)


def _state():
    return DashboardState.for_symbols(["AUSDT", "BUSDT"], window=5)


def test_tick_triggers_refresh(make_client):
    state = _state()
    client = make_client({"AUSDT": [1.0], "BUSDT": [2.0]})
    assert handle_event(TICK, client, state)
    assert [len(c.price_history) for c in state.coins] == [1, 1]


def test_refresh_key_triggers_refresh(make_client):
    state = _state()
    client = make_client({"AUSDT": [1.0], "BUSDT": [2.0]})
    assert handle_event(_key("r"), client, state)
    assert client.calls == ["AUSDT", "BUSDT"]


def test_scroll_keys(make_client):
    state = _state()
    client = make_client()
    for _ in range(3):
        handle_event(_key("down"), client, state)
    assert state.scroll_offset == 1
    handle_event(_key("up"), client, state)
    assert state.scroll_offset == 0
    assert client.calls == []


def test_quit_events(make_client):
    state = _state()
    assert not handle_event(QUIT, make_client(), state)
    assert not handle_event(_key("q"), make_client(), state)
    assert handle_event(_key("x"), make_client(), state)


def test_run_loop_stops_on_channel_close(make_client, key_source):
    state = _state()
    client = make_client({"AUSDT": [1.0], "BUSDT": [2.0]})
    handler = EventHandler(60.0, key_source)
    handler.start()
    key_source.push("r")
    key_source.push("j")
    key_source.end()
    live = FakeLive()
    console = SimpleNamespace(size=SimpleNamespace(height=40))

    run_loop(handler, client, state, live, console)
    handler.stop()

    assert live.updates == 2
    assert state.scroll_offset == 1
    assert state.status_message == "Updated"


def test_run_loop_stops_on_quit_key(make_client, key_source):
    state = _state()
    handler = EventHandler(60.0, key_source)
    handler.start()
    key_source.push("q")
    key_source.push("r")
    live = FakeLive()
    console = SimpleNamespace(size=SimpleNamespace(height=40))

    run_loop(handler, make_client(), state, live, console)
    handler.stop()

    assert live.updates == 0
