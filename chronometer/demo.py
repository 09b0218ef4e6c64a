"""
Demo-oppsettet: én kronometer-instans, knappene kobles til via routes/api.py.
Ticks og "ferdig" sendes videre til nettleserne som SSE.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Optional
from . import countdown as _cd
from .chronometer import CountdownChronometer
from .countdown import optional_format
from .scheduler import Scheduler
from .sse import publish

log = logging.getLogger(__name__)


def _publish_tick(chrono: CountdownChronometer) -> None:
    publish({"type": "tick", "text": chrono.text, "remaining": chrono.remaining.to_dict()})


def publish_state(chrono: CountdownChronometer) -> None:
    publish({"type": "state", **chrono.snapshot()})


def build_demo_chronometer(
    cfg: Dict[str, Any],
    *,
    scheduler: Optional[Scheduler] = None,
    clock: Optional[Callable[[], int]] = None,
) -> CountdownChronometer:
    now_ms = clock() if clock is not None else _cd._now_ms()
    chrono = CountdownChronometer(
        now_ms + int(cfg["start_offset_seconds"]) * 1000,
        scheduler=scheduler,
        clock=clock,
        interval_ms=int(cfg["tick_interval_ms"]),
    )
    chrono.format = optional_format(cfg.get("format"))
    chrono.custom_format = optional_format(cfg.get("custom_format"))
    chrono.on_tick = _publish_tick
    set_complete_notice(chrono, bool(cfg.get("complete_listener")), cfg.get("complete_message"))
    if cfg.get("autostart"):
        chrono.start()
    return chrono


def set_complete_notice(
    chrono: CountdownChronometer, enabled: bool, message: Optional[str] = None
) -> None:
    """Som demoens "Set listener": varsle når nedtellingen er ferdig."""
    if not enabled:
        chrono.on_complete = None
        return
    msg = message or "We have lift off!"

    def notify(c: CountdownChronometer) -> None:
        log.info("countdown complete: %s", msg)
        publish({"type": "complete", "message": msg, "text": c.text})

    chrono.on_complete = notify


def reset_target(chrono: CountdownChronometer, cfg: Dict[str, Any]) -> int:
    """Som demoens "Reset": sett målet til det konfigurerte tidspunktet."""
    target = _cd.target_ms_from_iso(cfg["reset_at"])
    chrono.set_base(target)
    return target
