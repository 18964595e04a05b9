"""Process-wide constants and filesystem locations."""

from .config import APP_AUTHOR, APP_NAME, APP_VERSION, DATA_DIR, LOG_FILE, ensure_data_dir

__all__ = [
    "APP_AUTHOR",
    "APP_NAME",
    "APP_VERSION",
    "DATA_DIR",
    "LOG_FILE",
    "ensure_data_dir",
]
