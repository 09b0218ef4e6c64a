import sys
from pathlib import Path

# Sørg for at pakken kan importeres uten installasjon
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
