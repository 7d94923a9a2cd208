from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "calkit"
APP_AUTHOR = "calkit"
DATA_DIR = Path(os.getenv("CALKIT_DATA_DIR") or user_data_dir(APP_NAME, APP_AUTHOR))
LOG_DIR = Path(os.getenv("CALKIT_LOG_DIR") or DATA_DIR / "logs")
TRANSITIONS_DIR = DATA_DIR / "transitions"


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
