"""Run the CryptoPulse API server from a source checkout."""

from __future__ import annotations

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from crypto_pulse.api import main


if __name__ == "__main__":
    main()
