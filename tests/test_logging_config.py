"""Tests for design_pipeline.logging_config."""

import logging

from design_pipeline import logging_config


class TestSetupLogger:

    def test_handlers_added_once(self, tmp_path, monkeypatch):
        monkeypatch.setattr(logging_config, "LOG_DIR", tmp_path)
        monkeypatch.setattr(logging_config, "_configured_loggers", set())
        name = "design_pipeline.test_once"
        logging.getLogger(name).handlers.clear()

        first = logging_config.setup_logger(name, "once.log")
        second = logging_config.setup_logger(name, "once.log")

        assert first is second
        assert len(first.handlers) == 2
        assert first.propagate is False
        assert (tmp_path / "once.log").exists()

    def test_console_only(self, tmp_path, monkeypatch):
        monkeypatch.setattr(logging_config, "LOG_DIR", tmp_path / "unused")
        monkeypatch.setattr(logging_config, "LOG_TO_FILE", False)
        monkeypatch.setattr(logging_config, "_configured_loggers", set())
        name = "design_pipeline.test_console"
        logging.getLogger(name).handlers.clear()

        logger = logging_config.setup_logger(name, "console.log")

        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]
        assert not (tmp_path / "unused").exists()
