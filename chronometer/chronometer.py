"""
CountdownChronometer: nedtellingsvisning med tick-løkke knyttet til synlighet.

Tilstander:
- stopped          ikke startet (eller ferdig)
- waiting_visible  startet, men flaten er skjult/frakoblet
- ticking          startet og synlig; neste tick er planlagt

Alle overganger skjer under én (re-entrant) lås. Hver planlagt tick bærer en
generasjon; stop() øker den, så en tick som allerede er på vei blir en no-op.
"""
from __future__ import annotations
import logging
import threading
from typing import Any, Callable, Dict, Optional
from . import countdown as _cd
from .models import Remaining
from .scheduler import Scheduler, ThreadingScheduler
from .settings import TICK_INTERVAL_MS

log = logging.getLogger(__name__)

STOPPED = "stopped"
WAITING_VISIBLE = "waiting_visible"
TICKING = "ticking"

Listener = Callable[["CountdownChronometer"], None]


class CountdownChronometer:
    def __init__(
        self,
        base_ms: int = 0,
        *,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], int]] = None,
        visible: bool = True,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        self._lock = threading.RLock()
        self._scheduler: Scheduler = (
            scheduler if scheduler is not None else ThreadingScheduler()
        )
        self._clock = clock
        self._interval_ms = int(interval_ms)
        self._base = int(base_ms)
        self._visible = bool(visible)
        self._detached = False
        self._started = False
        self._running = False
        self._generation = 0
        self._format: Optional[str] = None
        self._custom_format: Optional[str] = None
        self._on_tick: Optional[Listener] = None
        self._on_complete: Optional[Listener] = None
        self._renderer = _cd.TextRenderer()
        self._remaining = Remaining()
        self._pending = False
        self._text = ""
        self._update_text(self.now())

    # --- accessors ----------------------------------------------------------

    @property
    def base(self) -> int:
        return self._base

    @base.setter
    def base(self, base_ms: int) -> None:
        self.set_base(base_ms)

    def set_base(self, base_ms: int) -> None:
        """Nytt mål. Teksten oppdateres med en gang, uansett tilstand."""
        with self._lock:
            self._base = int(base_ms)
            pending = self._update_text(self.now())
            if not self._running:
                return
            if pending:
                self._dispatch_tick()
            else:
                self._complete()

    @property
    def format(self) -> Optional[str]:
        """Ytre mal; første "%s" erstattes med tiden. None = bare tiden."""
        return self._format

    @format.setter
    def format(self, fmt: Optional[str]) -> None:
        with self._lock:
            self._format = fmt
            self._update_text(self.now())

    @property
    def custom_format(self) -> Optional[str]:
        """Egen layout for nivået, f.eks. "%d dager, %d timer, %d min og %d s"."""
        return self._custom_format

    @custom_format.setter
    def custom_format(self, fmt: Optional[str]) -> None:
        with self._lock:
            self._custom_format = fmt
            self._update_text(self.now())

    @property
    def on_tick(self) -> Optional[Listener]:
        return self._on_tick

    @on_tick.setter
    def on_tick(self, listener: Optional[Listener]) -> None:
        with self._lock:
            self._on_tick = listener

    @property
    def on_complete(self) -> Optional[Listener]:
        return self._on_complete

    @on_complete.setter
    def on_complete(self, listener: Optional[Listener]) -> None:
        with self._lock:
            self._on_complete = listener

    @property
    def text(self) -> str:
        return self._text

    @property
    def remaining(self) -> Remaining:
        return self._remaining

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def started(self) -> bool:
        return self._started

    @property
    def running(self) -> bool:
        return self._running

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def detached(self) -> bool:
        return self._detached

    @property
    def state(self) -> str:
        with self._lock:
            if self._running:
                return TICKING
            if self._started:
                return WAITING_VISIBLE
            return STOPPED

    # --- run control --------------------------------------------------------

    def start(self) -> None:
        """Start nedtellingen. Målet endres ikke; hver start() bør få en stop()."""
        self.set_started(True)

    def stop(self) -> None:
        """Stopp. Idempotent; ingen tick kjører etter at kallet har returnert."""
        self.set_started(False)

    def set_started(self, started: bool) -> None:
        with self._lock:
            self._started = bool(started)
            self._update_running()

    def set_visible(self, visible: bool) -> None:
        with self._lock:
            if self._detached:
                log.debug("visibility change ignored after detach")
                return
            self._visible = bool(visible)
            self._update_running()

    def detach(self) -> None:
        """Flaten er revet ned for godt; tick-løkka slippes."""
        with self._lock:
            self._detached = True
            self._visible = False
            self._update_running()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            now_ms = self.now()
            return {
                "now_ms": now_ms,
                "target_ms": self._base,
                "signed_display_ms": self._base - now_ms,
                "remaining": self._remaining.to_dict(),
                "pending": self._pending,
                "text": self._text,
                "state": self.state,
                "started": self._started,
                "visible": self._visible,
                "format": self._format,
                "custom_format": self._custom_format,
                "has_complete_listener": self._on_complete is not None,
            }

    def now(self) -> int:
        """Klokka kronometeret regner mot (epoch ms)."""
        return self._clock() if self._clock is not None else _cd._now_ms()

    # --- internals ----------------------------------------------------------

    def _update_text(self, now_ms: int) -> bool:
        rem, pending = _cd.compute_remaining(self._base, now_ms=now_ms)
        self._remaining = rem
        self._pending = pending
        self._text = self._renderer.render(rem, self._custom_format, self._format)
        return pending

    def _update_running(self) -> None:
        running = self._visible and self._started
        if running == self._running:
            return
        if not running:
            self._cancel()
            self._running = False
            log.debug("countdown paused (started=%s)", self._started)
            return
        if self._update_text(self.now()):
            self._running = True
            log.debug("countdown ticking towards %d", self._base)
            self._dispatch_tick()
            self._schedule_next()
        else:
            self._complete()

    def _schedule_next(self) -> None:
        gen = self._generation
        self._scheduler.post_delayed(self._interval_ms, lambda: self._handle_tick(gen))

    def _cancel(self) -> None:
        self._generation += 1
        self._scheduler.cancel_all()

    def _handle_tick(self, gen: int) -> None:
        with self._lock:
            if not self._running or gen != self._generation:
                return
            if self._update_text(self.now()):
                self._dispatch_tick()
                self._schedule_next()
            else:
                self._complete()

    def _complete(self) -> None:
        # Stopp først, så lytteren kan starte på nytt med et nytt mål
        self._started = False
        self._running = False
        self._cancel()
        log.debug("countdown complete")
        self._dispatch_complete()

    def _dispatch_tick(self) -> None:
        cb = self._on_tick
        if cb is not None:
            cb(self)

    def _dispatch_complete(self) -> None:
        cb = self._on_complete
        if cb is not None:
            cb(self)
