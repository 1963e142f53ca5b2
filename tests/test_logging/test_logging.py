"""
Tests for the HUMAN logging pipeline: formatter texts, the handler and the
configured stderr pipelines.
"""

import io
import json
import logging

import click
import pytest
import structlog

from skillsync.config.loader import load_settings
from skillsync.config.schema import LoggingConfig
from skillsync.logging import HUMAN, HumanFormatter, HumanLog, HumanLogHandler, configure_logging
from skillsync.logging.setup import _console_level


@pytest.fixture
def fmt() -> HumanFormatter:
    return HumanFormatter()


def plain(fmt: HumanFormatter, event: str, **kw) -> str:
    return click.unstyle(fmt.format_event(event, **kw))


class TestHumanFormatter:
    def test_sync_complete(self, fmt):
        assert plain(fmt, "sync.complete", failures=0).strip() == "All skills synced successfully!"
        assert "2 item(s) skipped" in plain(fmt, "sync.complete", failures=2)

    def test_updates_listed(self, fmt):
        text = plain(
            fmt,
            "reconcile.updates",
            updates=[{"category": "flutter", "from": "flutter-v1.0.0", "to": "flutter-v2.0.0"}],
        )
        assert "1 update(s) available" in text
        assert "flutter: flutter-v1.0.0 -> flutter-v2.0.0" in text

    def test_overridden(self, fmt):
        text = plain(fmt, "write.overridden", path=".claude/skills/flutter/bloc/SKILL.md")
        assert text == "    ! Skipping overridden item: .claude/skills/flutter/bloc/SKILL.md"

    def test_init_written(self, fmt):
        text = plain(fmt, "init.written", filename=".skillsrc", framework="flutter", languages=["dart"])
        assert "Initialized .skillsrc" in text
        assert "Auto-enabled languages: dart" in text

    def test_unknown_event(self, fmt):
        assert fmt.format_event("something.else") is None


class TestHumanLogHandler:
    @pytest.fixture
    def stream(self):
        buf = io.StringIO()
        handler = HumanLogHandler(stream=buf)
        logging.root.addHandler(handler)
        yield buf
        logging.root.removeHandler(handler)

    def test_structlog_event_rendered(self, stream):
        HumanLog(structlog.get_logger()).skill_fetched("flutter", "bloc", 3)
        assert click.unstyle(stream.getvalue()) == "    + Fetched flutter/bloc (3 files)\n"

    def test_other_levels_ignored(self, stream):
        structlog.get_logger().warning("sync.start", registry="x")
        assert stream.getvalue() == ""

    def test_stdlib_record(self, stream):
        logging.getLogger("plain").log(HUMAN, "reconcile.declined")
        assert "Keeping current versions." in stream.getvalue()


class TestConfigureLogging:
    def test_json_file(self, tmp_path):
        log_file = tmp_path / "run.jsonl"
        configure_logging(LoggingConfig(file=log_file), quiet=True)

        HumanLog(structlog.get_logger()).sync_start("https://github.com/acme/skills")
        structlog.get_logger().info("write.complete", written=4)

        lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert [line["event"] for line in lines] == ["sync.start", "write.complete"]
        assert lines[0]["level"] == "human"
        assert lines[1]["written"] == 4

    def test_tokens_masked_in_file(self, tmp_path):
        log_file = tmp_path / "run.jsonl"
        configure_logging(LoggingConfig(file=log_file), quiet=True)

        structlog.get_logger().info("registry.request", token="ghp_secret", ref="main")

        content = log_file.read_text(encoding="utf-8")
        assert "ghp_secret" not in content
        assert json.loads(content)["token"] == "***"

    def test_reconfigure_replaces_handlers(self, tmp_path):
        configure_logging(LoggingConfig(file=tmp_path / "a.jsonl"))
        configure_logging(LoggingConfig(), quiet=True)
        assert len(logging.root.handlers) == 1

    def test_quiet_without_file_has_null_handler(self):
        configure_logging(LoggingConfig(), quiet=True)
        assert all(isinstance(h, logging.NullHandler) for h in logging.root.handlers)


class TestConsoleLevel:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("human", logging.WARNING),
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_configured_level(self, level, expected):
        assert _console_level(LoggingConfig(level=level)) == expected

    def test_verbose_lowers_threshold(self):
        assert _console_level(LoggingConfig(level="error", verbose=1)) == logging.INFO
        assert _console_level(LoggingConfig(level="debug", verbose=1)) == logging.DEBUG
        assert _console_level(LoggingConfig(level="error", verbose=2)) == logging.DEBUG

    def test_env_level_reaches_console(self, monkeypatch):
        monkeypatch.setenv("SKILLSYNC_LOG_LEVEL", "info")
        assert _console_level(load_settings().logging) == logging.INFO
