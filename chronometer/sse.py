"""
Server-Sent Events for kronometer-demoen (tick/complete/state).
- Hver klient får sin egen bounded kø; full kø -> klienten droppes og
  reconnecter selv (EventSource).
- publish() kalles fra timer-tråder, så abonnentsettet er bak _sub_lock.
"""
from __future__ import annotations
import json
import queue
import threading
import time
from typing import Any, Dict, Iterator, Set
from flask import Response, stream_with_context
__all__ = ["publish", "sse_stream", "subscriber_count"]

_subscribers: Set["queue.Queue[Dict[str, Any]]"] = set()
_sub_lock = threading.Lock()
_event_id = 0


def _subscribe(maxsize: int = 100) -> "queue.Queue[Dict[str, Any]]":
    q: "queue.Queue[Dict[str, Any]]" = queue.Queue(maxsize=maxsize)
    with _sub_lock:
        _subscribers.add(q)
    return q


def _unsubscribe(q: "queue.Queue[Dict[str, Any]]") -> None:
    with _sub_lock:
        _subscribers.discard(q)


def subscriber_count() -> int:
    with _sub_lock:
        return len(_subscribers)


def publish(event: Dict[str, Any]) -> int:
    """
    Send en hendelse til alle abonnenter; returnerer antall som fikk den.
    'type' blir SSE-event-navnet; 'ts' og løpende 'id' legges på.
    """
    global _event_id
    payload = dict(event)
    payload.setdefault("ts", time.time())
    with _sub_lock:
        _event_id += 1
        wire = {"id": _event_id, "type": event.get("type") or "message", "data": payload}
        targets = list(_subscribers)
    delivered = 0
    for q in targets:
        try:
            q.put_nowait(wire)
            delivered += 1
        except queue.Full:
            _unsubscribe(q)
    return delivered


def format_event(wire: Dict[str, Any]) -> str:
    body = json.dumps(wire.get("data", {}), separators=(",", ":"), ensure_ascii=False)
    return f"id: {wire.get('id', 0)}\nevent: {wire.get('type', 'message')}\ndata: {body}\n\n"


def sse_stream(ping_interval: float = 15.0) -> Response:
    """Åpen SSE-respons: 'retry' først, deretter hendelser og periodisk 'ping'."""

    def generate() -> Iterator[str]:
        q = _subscribe()
        try:
            yield "retry: 5000\n\n"
            while True:
                try:
                    yield format_event(q.get(timeout=ping_interval))
                except queue.Empty:
                    yield format_event({"id": 0, "type": "ping", "data": {"ts": time.time()}})
        except (GeneratorExit, BrokenPipeError, ConnectionError):
            pass
        finally:
            _unsubscribe(q)

    return Response(
        stream_with_context(generate()),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            "Connection": "keep-alive",
        },
    )
