"""Tests for settings and logging setup."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import pytest

from sarthi.config.logging_config import level_for, setup_logging
from sarthi.config.settings import CompletionSettings, LoggingSettings, RemoteSettings, Settings


class TestSettings:
    def test_defaults(self):
        remote = RemoteSettings()
        completion = CompletionSettings()
        assert remote.reconnect_delay == 5.0
        assert remote.connection_timeout == 45.0
        assert remote.max_reconnect_attempts == 5
        assert completion.min_prefix_length == 2
        assert completion.max_suggestions == 10
        assert completion.parse_interval == 2.0
        assert LoggingSettings().file_name == "sarthi.log"
        assert LoggingSettings().backup_count == 5

    def test_derived_dirs(self, tmp_path: Path):
        s = Settings(project_root=tmp_path)
        s.ensure_dirs()
        assert s.indexes_dir.is_dir()
        assert s.logs_dir == tmp_path / "data" / "logs"


class TestLogging:
    @pytest.fixture
    def sarthi_logger(self):
        logger = logging.getLogger("sarthi")
        saved = list(logger.handlers)
        logger.handlers.clear()
        yield logger
        for h in logger.handlers:
            h.close()
        logger.handlers[:] = saved

    def test_level_for(self):
        assert level_for(True) == logging.DEBUG
        assert level_for(False) == logging.INFO

    def test_setup_logging_writes_configured_file(self, tmp_path: Path, sarthi_logger):
        s = Settings(
            project_root=tmp_path,
            debug=True,
            logging=LoggingSettings(file_name="engine.log", max_bytes=1024, backup_count=2),
        )
        setup_logging(s)
        assert sarthi_logger.level == logging.DEBUG
        assert len(sarthi_logger.handlers) == 2
        setup_logging(s)
        assert len(sarthi_logger.handlers) == 2

        rotating = [h for h in sarthi_logger.handlers
                    if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert rotating[0].maxBytes == 1024
        assert rotating[0].backupCount == 2

        logging.getLogger("sarthi.test").info("hello")
        for h in sarthi_logger.handlers:
            h.flush()
        assert "hello" in (s.logs_dir / "engine.log").read_text(encoding="utf-8")

    def test_console_only(self, tmp_path: Path, sarthi_logger):
        setup_logging(Settings(project_root=tmp_path), log_to_file=False)
        assert sarthi_logger.level == logging.INFO
        assert len(sarthi_logger.handlers) == 1
        assert not (tmp_path / "data" / "logs").exists()

    def test_quiet_loggers_follow_debug(self, tmp_path: Path, sarthi_logger):
        quiet = LoggingSettings(quiet_loggers=("sarthi_test_noisy",))
        setup_logging(Settings(project_root=tmp_path, logging=quiet), log_to_file=False)
        assert logging.getLogger("sarthi_test_noisy").level == logging.WARNING

        sarthi_logger.handlers.clear()
        setup_logging(Settings(project_root=tmp_path, debug=True, logging=quiet), log_to_file=False)
        assert logging.getLogger("sarthi_test_noisy").level == logging.DEBUG
