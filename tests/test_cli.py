"""Tests for the zippy CLI.

Covers --help/--version, input errors, config errors and the settings
handed to the player, with the live player patched out.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from zippy import __version__
from zippy.cli import app
from zippy.stream import EagerStream, LazyStream

# NO_COLOR=1 prevents Rich from injecting ANSI codes inside option names,
# which breaks substring matching in CI (headless, no TTY).
# COLUMNS=200 prevents wrapping that could split a flag across lines.
runner = CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})


@pytest.fixture(autouse=True)
def _no_user_config():
    with patch("zippy.settings.USER_CONFIG_FILE", Path("/nonexistent/config.toml")):
        yield


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "input.txt"
    path.write_text(text, encoding="utf-8")
    return path


# ── Help / version ───────────────────────────────────────────────


class TestHelp:
    def test_help_lists_options(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for flag in ("--file", "--start-wpm", "--wpm", "--lazy", "--eager", "--config", "--log-file"):
            assert flag in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"zippy {__version__}" in result.output


# ── Input errors ─────────────────────────────────────────────────


class TestInputErrors:
    def test_missing_file(self, tmp_path):
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, ["--file", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1
        assert "Provide input via --file or stdin." in result.output
        mock_run.assert_not_called()

    def test_missing_file_lazy(self, tmp_path):
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, ["--lazy", "--file", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1
        assert "Provide input via --file or stdin." in result.output
        mock_run.assert_not_called()

    def test_no_words(self, tmp_path):
        path = _write(tmp_path, "   \n\t ")
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, ["--file", str(path)])
        assert result.exit_code == 1
        assert "No words found in input." in result.output
        mock_run.assert_not_called()

    def test_empty_stdin(self):
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, [], input="")
        assert result.exit_code == 1
        assert "No words found in input." in result.output
        mock_run.assert_not_called()

    def test_invalid_wpm_rejected(self, tmp_path):
        path = _write(tmp_path, "a b")
        result = runner.invoke(app, ["--file", str(path), "--wpm", "0"])
        assert result.exit_code != 0


# ── Config errors ────────────────────────────────────────────────


class TestConfig:
    def test_missing_config_file(self, tmp_path):
        path = _write(tmp_path, "a b")
        result = runner.invoke(app, ["--file", str(path), "--config", str(tmp_path / "none.toml")])
        assert result.exit_code == 1
        assert "Error loading config" in result.output

    def test_config_file_values_used(self, tmp_path):
        path = _write(tmp_path, "a b")
        cfg = tmp_path / "zippy.toml"
        cfg.write_text("[player]\nstart_wpm = 222\nlazy = true\n")
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, ["--file", str(path), "--config", str(cfg)])
        assert result.exit_code == 0
        stream, settings = mock_run.call_args.args
        assert settings.start_wpm == 222
        assert isinstance(stream, LazyStream)
        stream.close()

    def test_eager_flag_overrides_lazy_config(self, tmp_path):
        path = _write(tmp_path, "a b c")
        cfg = tmp_path / "zippy.toml"
        cfg.write_text("[player]\nlazy = true\n")
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(
                app, ["--file", str(path), "--config", str(cfg), "--eager"]
            )
        assert result.exit_code == 0
        stream, settings = mock_run.call_args.args
        assert isinstance(stream, EagerStream)
        assert settings.lazy is False


# ── Player launch ────────────────────────────────────────────────


class TestPlay:
    def test_eager_file(self, tmp_path):
        path = _write(tmp_path, "alpha beta gamma")
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, ["--file", str(path)])
        assert result.exit_code == 0
        stream, settings = mock_run.call_args.args
        assert isinstance(stream, EagerStream)
        assert stream.total() == (True, 3)
        assert stream.restartable() is True
        assert settings.start_wpm == 500
        assert settings.lazy is False

    def test_eager_stdin_not_restartable(self):
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, [], input="piped words here")
        assert result.exit_code == 0
        stream, _ = mock_run.call_args.args
        assert stream.total() == (True, 3)
        assert stream.restartable() is False

    def test_lazy_file(self, tmp_path):
        path = _write(tmp_path, "alpha beta")
        with patch("zippy.cli.run_player") as mock_run:
            result = runner.invoke(app, ["--lazy", "--file", str(path)])
        assert result.exit_code == 0
        stream, settings = mock_run.call_args.args
        assert isinstance(stream, LazyStream)
        assert settings.lazy is True

    def test_start_wpm(self, tmp_path):
        path = _write(tmp_path, "a b")
        with patch("zippy.cli.run_player") as mock_run:
            runner.invoke(app, ["--file", str(path), "--start-wpm", "300"])
        assert mock_run.call_args.args[1].start_wpm == 300

    def test_wpm_alias_wins(self, tmp_path):
        path = _write(tmp_path, "a b")
        with patch("zippy.cli.run_player") as mock_run:
            runner.invoke(app, ["--file", str(path), "--start-wpm", "300", "--wpm", "700"])
        assert mock_run.call_args.args[1].start_wpm == 700

    def test_keyboard_interrupt_exits_cleanly(self, tmp_path):
        path = _write(tmp_path, "a b")
        with patch("zippy.cli.run_player", side_effect=KeyboardInterrupt):
            result = runner.invoke(app, ["--file", str(path)])
        assert result.exit_code == 0

    def test_log_file(self, tmp_path):
        path = _write(tmp_path, "a b")
        log_path = tmp_path / "zippy.log"
        package_logger = logging.getLogger("zippy")
        before = list(package_logger.handlers)
        try:
            with patch("zippy.cli.run_player"):
                result = runner.invoke(app, ["--file", str(path), "--log-file", str(log_path)])
            assert result.exit_code == 0
            assert "Starting eager playback" in log_path.read_text()
        finally:
            for handler in package_logger.handlers:
                if handler not in before:
                    package_logger.removeHandler(handler)
                    handler.close()
