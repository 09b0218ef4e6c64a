"""
Sider + status + SSE-strøm. API-ansvar ligger i routes/api.py.
"""
from __future__ import annotations
from flask import Blueprint, current_app, jsonify, send_from_directory, Response
from ..settings import STATIC_DIR
from ..sse import sse_stream
bp = Blueprint("pages", __name__)


def _json_nostore(payload, status: int = 200) -> Response:
    """Status-svar skal ikke caches av klient/proxy."""
    resp = jsonify(payload)
    resp.status_code = status
    resp.headers["Cache-Control"] = "no-store"
    return resp


@bp.get("/")
def index():
    return send_from_directory(STATIC_DIR, "index.html")


@bp.get("/health")
def health():
    return _json_nostore({"ok": True})


@bp.get("/state")
def state_snapshot():
    chrono = current_app.extensions["chronometer"]
    return _json_nostore(chrono.snapshot())


@bp.get("/events")
def events():
    return sse_stream()
