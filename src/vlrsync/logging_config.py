"""Console + file logging for the sync worker.

The console gets concise INFO lines for watching a run; each process
also writes a DEBUG log under ``{data_dir}/logs/`` that keeps logger
names, which is where per-tick tracker output ends up.
"""

import logging
from datetime import datetime
from pathlib import Path

CONSOLE_FORMAT = "%(asctime)s %(levelname)-5s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"

# Third-party loggers that log every request at INFO.
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(data_dir: str = "data", console_level: int = logging.INFO) -> Path:
    """Attach a console handler and a DEBUG file handler to the root logger.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Returns:
        Path of this run's log file, ``logs/sync-YYYY-MM-DD-HHMMSS.log``.
    """
    log_dir = Path(data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"sync-{datetime.now():%Y-%m-%d-%H%M%S}.log"

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()
    root.addHandler(console)
    root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
