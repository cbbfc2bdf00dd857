import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from tqdm import tqdm

# Default log directory
DEFAULT_LOG_DIR = Path("var/log")

PACKAGE_LOGGER = "genome_ranges"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class TqdmLoggingHandler(logging.StreamHandler):
    """
    Console handler that writes through `tqdm.write`.

    Log lines emitted while a progress bar is active (e.g. during batch
    sequence access) are printed above the bar instead of breaking it.
    """
    def __init__(self, stream=None):
        super().__init__(stream if stream is not None else sys.stderr)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


def get_log_file_path(
        module_name: str,
        log_dir: Optional[Path] = None,
        include_timestamp: bool = True
) -> Path:
    """
    Path of the log file for a logger, e.g. `var/log/genome_ranges_sequences_20240101_120000.log`.

    Parameters
    ----------
    module_name : str
        Logger name; dots become underscores.
    log_dir : Optional[Path], optional
        Target directory, created if missing. Defaults to `DEFAULT_LOG_DIR`.
    include_timestamp : bool, optional
        Append `_YYYYmmdd_HHMMSS` so runs do not overwrite each other, by default True.
    """
    log_dir = DEFAULT_LOG_DIR if log_dir is None else Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    stem = module_name.replace(".", "_")
    if include_timestamp:
        stem = f"{stem}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    return log_dir / f"{stem}.log"


def _console_handler(enable_tqdm: bool) -> logging.Handler:
    if enable_tqdm:
        return TqdmLoggingHandler(sys.stderr)
    return logging.StreamHandler(sys.stderr)


def _file_handler(path: Path) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a")


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = False,
    enable_tqdm: bool = True,
    console_level: Optional[int] = None,
    file_level: Optional[int] = None,
) -> logging.Logger:
    """
    Configure a logger with a stderr console handler and an optional file handler.

    Existing handlers on the logger are closed and removed first, so calling
    this again (e.g. from a CLI entry point run twice in one process) does not
    duplicate output.

    Parameters
    ----------
    name : str
        Logger name, typically `__name__` or "genome_ranges".
    level : int, optional
        Level of the logger and default level of its handlers, by default `logging.INFO`.
    log_file : Optional[str], optional
        Explicit log file. Takes precedence over `enable_file_logging`.
    log_dir : Optional[Path], optional
        Directory for the generated log file when `log_file` is not given.
    enable_file_logging : bool, optional
        Write a timestamped log file under `log_dir`, by default False.
    enable_tqdm : bool, optional
        Route console output through `tqdm.write`, by default True.
    console_level, file_level : Optional[int], optional
        Per-handler level overrides.

    Returns
    -------
    logging.Logger
        The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = _console_handler(enable_tqdm)
    console.setFormatter(formatter)
    console.setLevel(level if console_level is None else console_level)
    logger.addHandler(console)

    log_path = None
    if log_file:
        log_path = Path(log_file)
    elif enable_file_logging:
        log_path = get_log_file_path(name, log_dir=log_dir)

    if log_path is not None:
        file_handler = _file_handler(log_path)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level if file_level is None else file_level)
        logger.addHandler(file_handler)
        logger.debug(f"Logging to file: {log_path}")

    return logger


def configure_package_logging(
    level: int = logging.WARNING,
    log_file: Optional[str] = None,
    enable_file_logging: bool = False,
    extra_loggers: Iterable[str] = (),
) -> List[logging.Logger]:
    """
    Configure the `genome_ranges` package logger and any script loggers alike.

    Module loggers (`genome_ranges.algebra.set_ops`, ...) propagate to the
    package logger, so extra loggers inside the package get no handlers of
    their own; only outside names such as `__main__` are configured.
    """
    names = [PACKAGE_LOGGER]
    names += [name for name in extra_loggers if not name.startswith(f"{PACKAGE_LOGGER}.") and name not in names]
    return [
        setup_logger(
            name,
            level=level,
            log_file=log_file,
            enable_file_logging=enable_file_logging,
        )
        for name in names
    ]


def set_log_level(logger: logging.Logger, level: int) -> None:
    """Update the level of a logger and all its handlers."""
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def cleanup_old_logs(log_dir: Optional[Path] = None, days_to_keep: int = 7) -> int:
    """
    Remove `*.log` files older than `days_to_keep` days.

    Returns
    -------
    int
        Number of removed files; 0 if the directory does not exist.
    """
    log_dir = DEFAULT_LOG_DIR if log_dir is None else Path(log_dir)
    if not log_dir.exists():
        return 0

    cutoff_time = time.time() - days_to_keep * 86400
    stale = [path for path in log_dir.glob("*.log") if path.stat().st_mtime < cutoff_time]
    for path in stale:
        path.unlink()
        logging.getLogger(__name__).info(f"Removed old log: {path}")
    return len(stale)
