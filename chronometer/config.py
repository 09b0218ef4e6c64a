# File: chronometer/config.py
# Purpose: Lese-kun konfig for demoen. Defaults + valgfri JSON-fil; ingenting skrives.
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
from .settings import CONFIG_PATH, TICK_INTERVAL_MS
from .countdown import target_ms_from_iso

log = logging.getLogger(__name__)

# ── defaults ──────────────────────────────────────────────────────────────────
_DEFAULTS: Dict[str, Any] = {
    "start_offset_seconds": 30,  # mål = nå + N sekunder ved oppstart
    "reset_at": "2011-08-26T09:00:00",  # "Reset"-knappen
    "format": "",  # ytre mal, "" = ingen
    "custom_format": "",  # layout-mal, "" = innebygd
    "demo_format": "Formatted time (%s)",  # "Set format"-knappen
    "complete_message": "We have lift off!",
    "complete_listener": False,
    "autostart": False,
    "tick_interval_ms": TICK_INTERVAL_MS,
    "admin_password": None,
}


# ── utils ─────────────────────────────────────────────────────────────────────
def get_defaults() -> Dict[str, Any]:
    return json.loads(json.dumps(_DEFAULTS))  # dyp kopi


def _deep_merge(dst: Dict[str, Any], src: Dict[str, Any]) -> Dict[str, Any]:
    for k, v in (src or {}).items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _deep_merge(dst[k], v)
        else:
            dst[k] = v
    return dst


def _i(v, d=None):
    if v in (None, ""):
        return d
    try:
        return int(v)
    except (TypeError, ValueError):
        return d


def _b(v, d: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "y", "on"):
            return True
        if s in ("0", "false", "no", "n", "off"):
            return False
    return d


# ── coerce/validate ───────────────────────────────────────────────────────────
def _coerce(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for k in ("start_offset_seconds", "tick_interval_ms"):
        cfg[k] = _i(cfg.get(k), _DEFAULTS[k])
    for k in ("reset_at", "format", "custom_format", "demo_format", "complete_message"):
        v = cfg.get(k)
        cfg[k] = "" if v is None else str(v)
    for k in ("autostart", "complete_listener"):
        cfg[k] = _b(cfg.get(k), _DEFAULTS[k])
    pw = cfg.get("admin_password")
    cfg["admin_password"] = str(pw) if pw not in (None, "") else None
    return cfg


def _validate(cfg: Dict[str, Any]) -> Tuple[bool, str]:
    if cfg["start_offset_seconds"] < 0:
        return False, "start_offset_seconds må være >= 0"
    if cfg["tick_interval_ms"] <= 0:
        return False, "tick_interval_ms må være > 0"
    if cfg["reset_at"]:
        try:
            target_ms_from_iso(cfg["reset_at"])
        except ValueError:
            return False, f"ugyldig reset_at: {cfg['reset_at']!r}"
    return True, ""


# ── public API ────────────────────────────────────────────────────────────────
def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Defaults flettet med fila (hvis den finnes). Uleselig eller ugyldig fil
    gir defaults + advarsel i loggen.
    """
    p = str(path or CONFIG_PATH)
    data: Dict[str, Any] = {}
    if os.path.exists(p):
        try:
            with open(p, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("Could not read config %s: %s", p, e)
            data = {}
        if not isinstance(data, dict):
            log.warning("Config %s is not a JSON object; using defaults", p)
            data = {}
    cfg = _coerce(_deep_merge(get_defaults(), data))
    ok, msg = _validate(cfg)
    if not ok:
        log.warning("Invalid config %s (%s); using defaults", p, msg)
        cfg = _coerce(get_defaults())
    return cfg

