import logging
import re
import warnings

import pytest

from rssterm.diagnostics import MAX_DIAGNOSTICS, DiagnosticsHandler, configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield root
    logging.captureWarnings(False)
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_warnings_reach_the_status_line(root_logger):
    diagnostics = configure_logging()
    logger = logging.getLogger("rssterm.tests")

    logger.info("quiet")
    logger.warning("Feed fetch error for %s: %s", "https://example.com", "boom")

    latest = diagnostics.latest()
    assert re.match(r"^\[\d{2}:\d{2}:\d{2}\] ", latest)
    assert latest.endswith("Feed fetch error for https://example.com: boom")
    assert len(diagnostics.entries()) == 1


def test_history_is_bounded():
    handler = DiagnosticsHandler()
    logger = logging.getLogger("rssterm.tests.bounded")
    logger.addHandler(handler)
    logger.propagate = False
    try:
        for index in range(MAX_DIAGNOSTICS + 5):
            logger.warning("message %d", index)
    finally:
        logger.removeHandler(handler)
        logger.propagate = True

    entries = handler.entries()
    assert len(entries) == MAX_DIAGNOSTICS
    assert entries[-1].endswith(f"message {MAX_DIAGNOSTICS + 4}")


def test_reconfigure_replaces_handler(root_logger):
    configure_logging()
    configure_logging()
    installed = [handler for handler in root_logger.handlers if isinstance(handler, DiagnosticsHandler)]
    assert len(installed) == 1


def test_log_file_receives_debug_records(root_logger, tmp_path):
    log_file = tmp_path / "rssterm.log"
    configure_logging("DEBUG", log_file)

    logging.getLogger("rssterm.tests").debug("details for the file")

    assert root_logger.level == logging.DEBUG
    assert "DEBUG rssterm.tests: details for the file" in log_file.read_text(encoding="utf-8")


def test_unknown_level_is_rejected(root_logger):
    with pytest.raises(ValueError):
        configure_logging("LOUD")


def test_python_warnings_go_to_the_status_line(root_logger):
    with warnings.catch_warnings():
        warnings.simplefilter("always")
        diagnostics = configure_logging()
        warnings.warn("parser fallback in use", UserWarning)

    assert "parser fallback in use" in diagnostics.latest()
