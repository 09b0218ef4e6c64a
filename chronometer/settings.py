"""
Grunninnstillinger (baner, TZ og tick-intervall).
"""
from __future__ import annotations
import os
from pathlib import Path
from zoneinfo import ZoneInfo

PROJECT_ROOT = Path(__file__).resolve().parents[1]
STATIC_DIR = (PROJECT_ROOT / "static").resolve()
CONFIG_PATH = Path(os.environ.get("CHRONO_CONFIG") or PROJECT_ROOT / "config.json")
TZ = ZoneInfo(os.environ.get("CHRONO_TZ") or "Europe/Oslo")

# Én tick per sekund, som en vanlig kronometer-visning
TICK_INTERVAL_MS = 1000
