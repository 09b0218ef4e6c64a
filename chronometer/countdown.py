"""
Nedtellingsmotor: gjenstående tid mot et mål + tekstformatering.
Rene funksjoner; tilstand og tick-løkke ligger i chronometer.py.

Maler er printf-stil (Python %-operator):
- layout-mal: får nivåets felt posisjonelt, f.eks. "%d t %02d min %02d s"
- ytre mal: ett "%s" som erstattes med ferdig tid, f.eks. "Igjen: %s"
"""
from __future__ import annotations
import logging
import time as _t
from datetime import datetime
from typing import Any, Optional, Tuple
from .models import Remaining, TIER_DAY, TIER_HOUR, TIER_MINUTE
from .settings import TZ

log = logging.getLogger(__name__)

FAST_FORMAT_DHHMMSS = "%d:%02d:%02d:%02d"
FAST_FORMAT_HMMSS = "%d:%02d:%02d"
FAST_FORMAT_MMSS = "%02d:%02d"

FAST_FORMATS = {
    TIER_DAY: FAST_FORMAT_DHHMMSS,
    TIER_HOUR: FAST_FORMAT_HMMSS,
    TIER_MINUTE: FAST_FORMAT_MMSS,
}

# Det %-operatoren kaster for feil antall/typer plassholdere
FORMAT_ERRORS = (TypeError, ValueError, KeyError)

_MONO0_NS = _t.monotonic_ns()
_WALL0_MS = int(_t.time() * 1000)


def _now_ms() -> int:
    return _WALL0_MS + (_t.monotonic_ns() - _MONO0_NS) // 1_000_000


def _ms_from_dt(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=TZ)
    return int(dt.astimezone(TZ).timestamp() * 1000)


def target_ms_from_iso(text: str) -> int:
    """ISO-8601 -> epoch ms. Naive tidspunkt tolkes i TZ."""
    s = (text or "").strip()
    if not s:
        raise ValueError("empty timestamp")
    return _ms_from_dt(datetime.fromisoformat(s))


def remaining_seconds(target_ms: int, now_ms: int) -> int:
    diff = int(target_ms) - int(now_ms)
    if diff <= 0:
        return 0
    return diff // 1000  # avkort, aldri rund opp


def compute_remaining(
    target_ms: int, *, now_ms: Optional[int] = None
) -> Tuple[Remaining, bool]:
    """
    Returnerer (oppdelt tid, fortsatt_igang).
    Ferdig så snart hele sekunder igjen er 0 – også når målet er passert.
    """
    now_ms = now_ms if now_ms is not None else _now_ms()
    seconds = remaining_seconds(target_ms, now_ms)
    return Remaining.from_seconds(seconds), seconds > 0


def layout_remaining(rem: Remaining, custom_format: Optional[str] = None) -> str:
    """Nivå velges alltid først; egen mal erstatter bare layouten for nivået."""
    fmt = custom_format if custom_format is not None else FAST_FORMATS[rem.tier]
    return fmt % rem.tier_fields()


class TextRenderer:
    """
    Formatterer uten å kaste. Ugyldig layout-mal -> innebygd layout for nivået;
    ytre mal brukes deretter på teksten uansett. Kun én advarsel per instans.
    """

    def __init__(self) -> None:
        self._logged = False

    @property
    def logged(self) -> bool:
        return self._logged

    def _warn(self, fmt: str, exc: Exception) -> None:
        if self._logged:
            return
        self._logged = True
        log.warning("Illegal format string: %r (%s)", fmt, exc)

    def render(
        self,
        rem: Remaining,
        custom_format: Optional[str] = None,
        outer_format: Optional[str] = None,
    ) -> str:
        try:
            text = layout_remaining(rem, custom_format)
        except FORMAT_ERRORS as e:
            self._warn(custom_format or "", e)
            text = layout_remaining(rem)
        if outer_format is not None:
            try:
                text = outer_format % (text,)
            except FORMAT_ERRORS as e:
                self._warn(outer_format, e)
        return text


def optional_format(value: Any) -> Optional[str]:
    """'' og None betyr 'ingen mal'."""
    if value is None:
        return None
    s = str(value)
    return s if s != "" else None
