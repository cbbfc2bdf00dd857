from genome_ranges.utils.logging_utils import (
    TqdmLoggingHandler,
    cleanup_old_logs,
    configure_package_logging,
    set_log_level,
    setup_logger,
)

__all__ = [
    "TqdmLoggingHandler",
    "cleanup_old_logs",
    "configure_package_logging",
    "set_log_level",
    "setup_logger",
]
