from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "Google Calendar MCP"
APP_AUTHOR = "gcal-mcp"
APP_VERSION = "0.1.0"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))
LOG_FILE = DATA_DIR / "gcal_mcp.log"


def ensure_data_dir() -> Path:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DATA_DIR
