"""
Unit tests for logger setup helpers.
"""
import io
import logging
import os
import time

import pytest

from genome_ranges.utils.logging_utils import (
    TqdmLoggingHandler,
    cleanup_old_logs,
    configure_package_logging,
    get_log_file_path,
    set_log_level,
    setup_logger,
)


@pytest.fixture
def fresh_logger_name(request):
    name = f"genome_ranges_test.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_console_only_logger(fresh_logger_name):
    logger = setup_logger(fresh_logger_name, level=logging.DEBUG)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], TqdmLoggingHandler)


def test_repeated_setup_does_not_duplicate_handlers(fresh_logger_name):
    setup_logger(fresh_logger_name)
    logger = setup_logger(fresh_logger_name, enable_tqdm=False)
    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0], TqdmLoggingHandler)


def test_file_logging_into_directory(fresh_logger_name, tmp_path):
    logger = setup_logger(fresh_logger_name, log_dir=tmp_path, enable_file_logging=True,
                          file_level=logging.WARNING)
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.WARNING
    assert len(list(tmp_path.glob("*.log"))) == 1


def test_explicit_log_file(fresh_logger_name, tmp_path):
    log_file = tmp_path / "nested" / "run.log"
    logger = setup_logger(fresh_logger_name, log_file=str(log_file))
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text()


def test_tqdm_handler_writes_formatted_lines():
    stream = io.StringIO()
    handler = TqdmLoggingHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s:%(message)s"))
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "fetch failed", None, None)
    handler.emit(record)
    assert stream.getvalue() == "WARNING:fetch failed\n"


def test_set_log_level_updates_handlers(fresh_logger_name):
    logger = setup_logger(fresh_logger_name, level=logging.INFO)
    set_log_level(logger, logging.ERROR)
    assert logger.level == logging.ERROR
    assert all(handler.level == logging.ERROR for handler in logger.handlers)


def test_get_log_file_path(tmp_path):
    path = get_log_file_path("genome_ranges.sequences", log_dir=tmp_path, include_timestamp=False)
    assert path == tmp_path / "genome_ranges_sequences.log"


def test_cleanup_old_logs(tmp_path):
    old = tmp_path / "old.log"
    new = tmp_path / "new.log"
    old.write_text("x")
    new.write_text("y")
    ten_days_ago = time.time() - 10 * 86400
    os.utime(old, (ten_days_ago, ten_days_ago))

    assert cleanup_old_logs(tmp_path, days_to_keep=7) == 1
    assert not old.exists()
    assert new.exists()
    assert cleanup_old_logs(tmp_path / "missing") == 0


def test_configure_package_logging_skips_package_children():
    try:
        loggers = configure_package_logging(
            level=logging.INFO,
            extra_loggers=("genome_ranges.scripts.range_walkthrough", "genome_ranges_test_script"),
        )
        assert [logger.name for logger in loggers] == ["genome_ranges", "genome_ranges_test_script"]
        assert not logging.getLogger("genome_ranges.scripts.range_walkthrough").handlers
        assert logging.getLogger("genome_ranges").level == logging.INFO
    finally:
        for name in ("genome_ranges", "genome_ranges_test_script"):
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
