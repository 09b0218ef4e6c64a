from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Tuple

SECONDS_PER_DAY = 86_400
SECONDS_PER_HOUR = 3_600
SECONDS_PER_MINUTE = 60

# Nivåer (tier) for visningen – valgt etter størrelse
TIER_DAY = "day"
TIER_HOUR = "hour"
TIER_MINUTE = "minute"


@dataclass(frozen=True)
class Remaining:
    # Gjenstående tid oppdelt grådig: dager, så timer, minutter og sekunder
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @classmethod
    def from_seconds(cls, total: int) -> "Remaining":
        total = max(0, int(total))
        days, rest = divmod(total, SECONDS_PER_DAY)
        hours, rest = divmod(rest, SECONDS_PER_HOUR)
        minutes, seconds = divmod(rest, SECONDS_PER_MINUTE)
        return cls(days=days, hours=hours, minutes=minutes, seconds=seconds)

    @property
    def total_seconds(self) -> int:
        return (
            self.days * SECONDS_PER_DAY
            + self.hours * SECONDS_PER_HOUR
            + self.minutes * SECONDS_PER_MINUTE
            + self.seconds
        )

    @property
    def tier(self) -> str:
        if self.days > 0:
            return TIER_DAY
        if self.hours > 0:
            return TIER_HOUR
        return TIER_MINUTE

    def tier_fields(self) -> Tuple[int, ...]:
        """Posisjonelle argumenter for malen til gjeldende nivå."""
        tier = self.tier
        if tier == TIER_DAY:
            return (self.days, self.hours, self.minutes, self.seconds)
        if tier == TIER_HOUR:
            return (self.hours, self.minutes, self.seconds)
        return (self.minutes, self.seconds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
            "total_seconds": self.total_seconds,
            "tier": self.tier,
        }
