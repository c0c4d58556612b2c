"""Debug log setup shared by the terminal app and the server."""

from __future__ import annotations

import logging
from pathlib import Path

from counter_pos.config import DEBUG_LOG_PATH

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(path: str | Path = DEBUG_LOG_PATH, level: int = logging.INFO, console: bool = False) -> None:
    """Send ``counter_pos`` logs to ``path``; optionally mirror them to stderr.

    The terminal app owns the screen, so by default nothing goes to the
    console. A log file that cannot be opened is skipped.
    """
    root = logging.getLogger("counter_pos")
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    try:
        log_file = Path(path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("log_file_unavailable path=%s error=%s", path, exc)
    else:
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)
