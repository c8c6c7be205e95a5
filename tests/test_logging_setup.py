import logging

import pytest

from guidebook_todo.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name, level):
    return logging.LogRecord(name, level, __file__, 1, "message", None, None)


def test_console_filter_passes_own_records_and_third_party_warnings():
    noise = _ConsoleNoiseFilter()

    assert noise.filter(_record("guidebook_todo.storage", logging.DEBUG))
    assert noise.filter(_record("guidebook_todo", logging.INFO))
    assert not noise.filter(_record("dulwich.porcelain", logging.INFO))
    assert noise.filter(_record("dulwich.porcelain", logging.WARNING))
    assert not noise.filter(_record("guidebook_todo_other", logging.INFO))


def test_setup_logging_writes_debug_records_to_file(tmp_path):
    log_file = tmp_path / "logs" / "todo.log"

    setup_logging(console_level=logging.ERROR, log_file=log_file)
    logging.getLogger("guidebook_todo.test").debug("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    root = logging.getLogger()
    assert len(root.handlers) == 2
    assert root.handlers[0].level == logging.ERROR
    assert "DEBUG guidebook_todo.test: hello from test" in log_file.read_text(encoding="utf-8")
