import sys

from loguru import logger

from shallwewalk.core.config import settings
from shallwewalk.core.logger import setup_logger


def read_log(log_file):
    # Removing the sinks drains the queue and closes the file
    logger.remove()
    logger.add(sys.stderr)
    return log_file.read_text(encoding="utf-8")


def test_setup_logger_writes_file_sink(tmp_path):
    log_file = tmp_path / "logs" / "engine.log"
    setup_logger(level="debug", log_file=str(log_file))
    logger.info("session started")

    text = read_log(log_file)
    assert "session started" in text
    assert "MainThread" in text


def test_setup_logger_defaults_come_from_settings(tmp_path, monkeypatch):
    log_file = tmp_path / "engine.log"
    monkeypatch.setattr(settings, "log_level", "WARNING")
    monkeypatch.setattr(settings, "log_file", str(log_file))
    setup_logger()
    logger.info("not written")
    logger.warning("route request failed")

    text = read_log(log_file)
    assert "route request failed" in text
    assert "not written" not in text
