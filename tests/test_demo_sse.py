import json

import pytest

from chronometer import sse
from chronometer.config import load_config
from chronometer.demo import build_demo_chronometer, reset_target, set_complete_notice
from chronometer.scheduler import ManualScheduler

BASE = 1_700_000_000_000


@pytest.fixture()
def subscriber():
    q = sse._subscribe()
    yield q
    sse._unsubscribe(q)


def drain(q):
    out = []
    while not q.empty():
        out.append(q.get_nowait())
    return out


def test_publish_and_format(subscriber):
    assert sse.publish({"type": "tick", "text": "00:05"}) >= 1
    wire = subscriber.get_nowait()
    assert wire["type"] == "tick"
    assert wire["data"]["text"] == "00:05"
    assert "ts" in wire["data"]
    lines = sse.format_event(wire).split("\n")
    assert lines[0] == f"id: {wire['id']}"
    assert lines[1] == "event: tick"
    assert json.loads(lines[2][len("data: "):])["text"] == "00:05"


def test_full_queue_drops_subscriber():
    q = sse._subscribe(maxsize=1)
    sse.publish({"type": "a"})
    before = sse.subscriber_count()
    sse.publish({"type": "b"})
    assert sse.subscriber_count() == before - 1


def test_demo_pushes_ticks_and_lift_off(tmp_path, subscriber):
    cfg = load_config(tmp_path / "config.json")
    sched = ManualScheduler(now_ms=BASE)
    chrono = build_demo_chronometer(cfg, scheduler=sched, clock=sched.now)
    assert chrono.base == BASE + 30_000
    set_complete_notice(chrono, True, cfg["complete_message"])
    chrono.start()
    sched.advance(30_000)
    events = drain(subscriber)
    ticks = [e["data"]["text"] for e in events if e["type"] == "tick"]
    assert ticks[0] == "00:30"
    assert ticks[-1] == "00:01"
    done = [e["data"] for e in events if e["type"] == "complete"]
    assert done == [dict(done[0], message="We have lift off!", text="00:00")]


def test_demo_autostart_and_formats(tmp_path):
    cfg = load_config(tmp_path / "config.json")
    cfg.update(autostart=True, format="Formatted time (%s)", start_offset_seconds=125)
    sched = ManualScheduler(now_ms=BASE)
    chrono = build_demo_chronometer(cfg, scheduler=sched, clock=sched.now)
    assert chrono.state == "ticking"
    assert chrono.text == "Formatted time (02:05)"
    assert chrono.on_complete is None
    reset_target(chrono, cfg)
    assert chrono.state == "stopped"
