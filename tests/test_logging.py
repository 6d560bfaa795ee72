import logging
from logging.handlers import RotatingFileHandler

import pytest

from mealprep.orchestrator import logging as mealprep_logging


@pytest.fixture
def basic_config_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(mealprep_logging, "_configured", False)
    monkeypatch.setattr(
        mealprep_logging.logging, "basicConfig", lambda **kw: calls.append(kw)
    )
    return calls


def test_level_from_env(monkeypatch, basic_config_calls):
    monkeypatch.setenv("MEALPREP_LOG_LEVEL", "debug")
    mealprep_logging.get_logger("mealprep.test")
    assert basic_config_calls[0]["level"] == logging.DEBUG
    assert basic_config_calls[0]["format"] == mealprep_logging.LOG_FORMAT


def test_level_defaults_to_info(monkeypatch, basic_config_calls):
    monkeypatch.delenv("MEALPREP_LOG_LEVEL", raising=False)
    mealprep_logging.get_logger("mealprep.test")
    assert basic_config_calls[0]["level"] == logging.INFO


def test_unknown_level_falls_back_to_info(monkeypatch, basic_config_calls):
    monkeypatch.setenv("MEALPREP_LOG_LEVEL", "loud")
    mealprep_logging.get_logger("mealprep.test")
    assert basic_config_calls[0]["level"] == logging.INFO


def test_basic_config_runs_once(monkeypatch, basic_config_calls):
    mealprep_logging.get_logger("mealprep.a")
    mealprep_logging.get_logger("mealprep.b")
    assert len(basic_config_calls) == 1


def test_file_handler_not_duplicated(tmp_path):
    name = "mealprep.test.file"
    logger = mealprep_logging.get_logger(name, log_file=tmp_path / "a.log")
    try:
        mealprep_logging.get_logger(name, log_file=tmp_path / "a.log")
        handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(handlers) == 1
        assert (tmp_path / "a.log").exists()
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
