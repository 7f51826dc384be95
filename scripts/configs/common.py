"""Shared configuration: defaults and helpers used by every subcommand."""

import logging
import sys
from pathlib import Path

# Add src/ to Python path (needed before importing the pipeline dataclasses)
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "src"))

# --- Shared defaults ---
CHAPTERS_PER_VOLUME = 10
PDF_DPI = 150           # resolution for PDF pages that have to be rendered
MAX_WORKERS = 1         # volumes / comics processed in parallel

LOG_LEVELS = {
    "silent": logging.ERROR,
    "default": logging.INFO,
    "verbose": logging.DEBUG,
}


def fmt_time(seconds):
    """Format seconds as HH:MM:SS."""
    h, remainder = divmod(int(seconds), 3600)
    m, s = divmod(remainder, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def fmt_elapsed(seconds):
    """Format seconds as ``XmYY.ZZZs``."""
    m, s = divmod(seconds, 60)
    return f"{int(m)}m{s:06.3f}s"


class ElapsedFormatter(logging.Formatter):
    """Prefix records with the time elapsed since startup: ``[ 0m  1.234s] INFO: ...``"""

    def format(self, record):
        m, s = divmod(record.relativeCreated / 1000, 60)
        return f"[{int(m):2d}m {s:6.3f}s] {record.levelname}: {record.getMessage()}"


def setup_logging(level="default"):
    """Send log records to the current stdout. Returns the installed handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ElapsedFormatter())
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(LOG_LEVELS[level])
    logging.getLogger("PIL").setLevel(logging.WARNING)
    return handler


class TeeLogger:
    """Duplicate stdout to a log file."""
    def __init__(self, log_path):
        self.terminal = sys.stdout
        self.log = open(log_path, "a", buffering=1)  # noqa: SIM115
    def write(self, msg):
        self.terminal.write(msg)
        self.log.write(msg)
    def flush(self):
        self.terminal.flush()
        self.log.flush()
    def close(self):
        self.log.close()
