import logging

import pytest

from quosure import Symbol, call, config


def test_max_depth_default(monkeypatch):
    monkeypatch.delenv("QUOSURE_MAX_DEPTH", raising=False)
    assert config.get_max_depth() == 100


def test_max_depth_from_environment(monkeypatch):
    monkeypatch.setenv("QUOSURE_MAX_DEPTH", " 250 ")
    assert config.get_max_depth() == 250


@pytest.mark.parametrize("raw", ["deep", "0", "-3"])
def test_max_depth_rejects_bad_values(monkeypatch, raw):
    monkeypatch.setenv("QUOSURE_MAX_DEPTH", raw)
    with pytest.raises(ValueError):
        config.get_max_depth()


def test_log_level(monkeypatch):
    monkeypatch.delenv("QUOSURE_LOG_LEVEL", raising=False)
    assert config.get_log_level() is None
    monkeypatch.setenv("QUOSURE_LOG_LEVEL", "debug")
    assert config.get_log_level() == logging.DEBUG
    monkeypatch.setenv("QUOSURE_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        config.get_log_level()


def test_configure_logging_installs_one_handler():
    logger = logging.getLogger("quosure")
    saved_level, saved_handlers = logger.level, list(logger.handlers)
    try:
        config.configure_logging(logging.INFO)
        config.configure_logging(logging.DEBUG)
        streams = [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]
        assert len(streams) == 1
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(saved_level)
        logger.handlers[:] = saved_handlers


def test_debug_logging_of_capture(interp, define_function, caplog):
    define_function("capture_it", "p", call("enquo", Symbol("p")))
    with caplog.at_level(logging.DEBUG, logger="quosure"):
        interp.eval(call("capture_it", Symbol("anything")))
    assert any("captured p" in r.getMessage() for r in caplog.records)
