# File: chronometer/routes/api.py
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict
from flask import Blueprint, request, jsonify, Response, current_app
from ..settings import TZ
from ..auth import require_password
from ..chronometer import CountdownChronometer
from ..countdown import optional_format, target_ms_from_iso
from ..demo import publish_state, reset_target, set_complete_notice

bp = Blueprint("api", __name__, url_prefix="/api")

# ── utils ──────────────────────────────────────────────────────────────────────
def _now_iso() -> str:
    return datetime.now(TZ).isoformat()

def _chrono() -> CountdownChronometer:
    return current_app.extensions["chronometer"]

def _json_ok(payload: Dict[str, Any], status: int = 200) -> Response:
    resp = jsonify({"ok": True, "server_time": _now_iso(), **payload})
    resp.status_code = status
    resp.headers["Cache-Control"] = "no-store"
    return resp

def _json_err(
    message: str,
    *,
    status: int = 400,
    code: str | None = None,
    extra: Dict[str, Any] | None = None,
) -> Response:
    data = {"ok": False, "error": message, "server_time": _now_iso()}
    if code:
        data["code"] = code
    if extra:
        data.update(extra)
    resp = jsonify(data)
    resp.status_code = status
    resp.headers["Cache-Control"] = "no-store"
    return resp

def _is_json_request() -> bool:
    ctype = (request.headers.get("Content-Type") or "").lower()
    return "application/json" in ctype or request.is_json

def _json_body() -> Dict[str, Any] | None:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None

def _coerce_int_or_none(v: Any) -> int | None:
    if v in (None, "") or isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None

def _state_response() -> Response:
    chrono = _chrono()
    publish_state(chrono)
    return _json_ok({"state": chrono.snapshot()})

# ── status ─────────────────────────────────────────────────────────────────────
@bp.get("/status")
def status() -> Response:
    try:
        return _json_ok({"state": _chrono().snapshot()})
    except Exception:
        current_app.logger.exception("GET /api/status failed")
        return _json_err("internal error", status=500, code="internal_error")

# ── run control ────────────────────────────────────────────────────────────────
@bp.post("/start")
@require_password
def start() -> Response:
    _chrono().start()
    return _state_response()

@bp.post("/stop")
@require_password
def stop() -> Response:
    _chrono().stop()
    return _state_response()

@bp.post("/started")
@require_password
def set_started() -> Response:
    data = _json_body()
    if data is None or not isinstance(data.get("started"), bool):
        return _json_err("'started' must be a boolean", code="validation_error")
    _chrono().set_started(data["started"])
    return _state_response()

@bp.post("/visibility")
@require_password
def visibility() -> Response:
    """Vertens synlighetssignal (document.visibilityState i demoen)."""
    data = _json_body()
    if data is None or not isinstance(data.get("visible"), bool):
        return _json_err("'visible' must be a boolean", code="validation_error")
    _chrono().set_visible(data["visible"])
    return _state_response()

# ── target ─────────────────────────────────────────────────────────────────────
@bp.post("/target")
@require_password
def set_target() -> Response:
    """
    Body (én av):
      {"target_ms": 1700000000000}
      {"at": "2030-01-01T12:00:00"}   (naiv = TZ)
      {"seconds": 90}                 (relativt til nå)
    """
    if not _is_json_request():
        return _json_err(
            "expected application/json", status=415, code="unsupported_media_type"
        )
    data = _json_body()
    if data is None:
        return _json_err("payload must be a JSON object", code="bad_request")
    try:
        if "target_ms" in data:
            target = _coerce_int_or_none(data.get("target_ms"))
            if target is None:
                raise ValueError("'target_ms' must be an integer")
        elif "at" in data:
            target = target_ms_from_iso(str(data.get("at") or ""))
        elif "seconds" in data:
            seconds = _coerce_int_or_none(data.get("seconds"))
            if seconds is None:
                raise ValueError("'seconds' must be an integer")
            target = _chrono().now() + seconds * 1000
        else:
            raise ValueError("expected one of 'target_ms', 'at', 'seconds'")
    except ValueError as e:
        return _json_err(str(e), code="validation_error")
    _chrono().set_base(target)
    return _state_response()

@bp.post("/reset")
@require_password
def reset() -> Response:
    try:
        reset_target(_chrono(), current_app.config["CHRONO"])
    except ValueError as e:
        return _json_err(str(e), code="validation_error")
    return _state_response()

# ── formats / listener ─────────────────────────────────────────────────────────
def _format_from_body(key: str) -> tuple[bool, str | None]:
    data = _json_body()
    if data is None or key not in data:
        return False, None
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        return False, None
    return True, optional_format(value)

@bp.post("/format")
@require_password
def set_format() -> Response:
    """{"format": "Formatted time (%s)"} eller {"format": null} for å fjerne."""
    ok, fmt = _format_from_body("format")
    if not ok:
        return _json_err("'format' must be a string or null", code="validation_error")
    _chrono().format = fmt
    return _state_response()

@bp.post("/custom-format")
@require_password
def set_custom_format() -> Response:
    ok, fmt = _format_from_body("custom_format")
    if not ok:
        return _json_err(
            "'custom_format' must be a string or null", code="validation_error"
        )
    _chrono().custom_format = fmt
    return _state_response()

@bp.post("/listener")
@require_password
def set_listener() -> Response:
    data = _json_body() or {}
    enabled = data.get("enabled", True)
    if not isinstance(enabled, bool):
        return _json_err("'enabled' must be a boolean", code="validation_error")
    set_complete_notice(
        _chrono(), enabled, current_app.config["CHRONO"].get("complete_message")
    )
    return _state_response()

# ── meta ───────────────────────────────────────────────────────────────────────
@bp.get("/_routes")
def api_routes():
    routes = []
    for r in current_app.url_map.iter_rules():
        meths = getattr(r, "methods", set()) or set()
        methods = sorted(
            m for m in meths if m in {"GET", "POST", "PUT", "DELETE", "PATCH"}
        )
        routes.append({"rule": str(r), "endpoint": r.endpoint, "methods": methods})
    return jsonify(ok=True, routes=routes)
