"""Unit tests for logger setup and the optional rotating build log."""

import logging

import pytest

from assetpipe.orchestrator.logging import add_log_file, get_logger
from assetpipe.orchestrator.utils import log_file


@pytest.fixture
def attached():
    handlers = []
    yield handlers
    root = logging.getLogger()
    for h in handlers:
        root.removeHandler(h)
        h.close()


class TestLogFile:
    def test_records_written_to_file(self, tmp_path, attached):
        """Records from any assetpipe logger end up in the build log."""
        path = tmp_path / "logs" / "build.log"
        attached.append(add_log_file(path))
        logger = get_logger("assetpipe.test")
        logger.setLevel(logging.INFO)
        logger.info("hello from the build")
        attached[0].flush()
        assert "assetpipe.test | INFO | hello from the build" in path.read_text(encoding="utf-8")

    def test_same_file_attached_once(self, tmp_path, attached):
        path = tmp_path / "build.log"
        first = add_log_file(path)
        attached.append(first)
        assert add_log_file(path) is first


class TestLogFileOption:
    def test_unset_means_console_only(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ASSETPIPE_LOG_FILE", raising=False)
        assert log_file({"project": {"root": str(tmp_path)}}) is None

    def test_config_relative_to_root(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ASSETPIPE_LOG_FILE", raising=False)
        params = {"project": {"root": str(tmp_path)}, "logging": {"file": "logs/build.log"}}
        assert log_file(params) == tmp_path / "logs" / "build.log"

    def test_env_fallback(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ASSETPIPE_LOG_FILE", "env.log")
        assert log_file({"project": {"root": str(tmp_path)}}) == tmp_path / "env.log"
