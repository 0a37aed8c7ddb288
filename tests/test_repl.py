"""Tests for the REPL and the ``nanosh`` entry point.

Whole sessions are driven from a ``StringIO`` so the loop, prompt and
final exit status can be checked without a terminal.
"""

import io
import os
from pathlib import Path

import pytest

from nanosh.config import ShellConfig
from nanosh.logging import LogLevel
from nanosh.repl import build_parser, byte_transparent, load_config, main, run
from nanosh.shell import Shell


def _session(script: str, prompt: str = "") -> tuple[Shell, int]:
    """Run *script* through a fresh shell and return it with its status."""
    shell = Shell(config=ShellConfig(prompt=prompt))
    return shell, run(shell, io.StringIO(script))


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test from a scratch working directory."""
    monkeypatch.chdir(tmp_path)


class TestRun:
    """Verify the read-eval loop."""

    def test_prompt_before_each_line(self, capfd: pytest.CaptureFixture[str]) -> None:
        """The prompt is written before every read, including the last."""
        _session("echo a\necho b\n", prompt="> ")
        assert capfd.readouterr().out == "> a\n> b\n> "

    def test_end_of_input_ends_session(self) -> None:
        """EOF ends the session with the last status."""
        shell, status = _session("true\n")
        assert status == 0
        assert shell.running is True

    def test_exit_stops_reading(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Lines after exit are never executed."""
        _shell, status = _session("echo before\nexit\necho after\n")
        assert status == 0
        assert capfd.readouterr().out == "before\nGood Bye\n"

    def test_failure_sticks_to_session(self) -> None:
        """Exit status is 1 after any failure, even if later lines pass."""
        _shell, status = _session("nonexistentcmd123\necho ok\nexit\n")
        assert status == 1

    def test_failure_sticks_at_eof(self) -> None:
        """The same rule applies when input simply ends."""
        _shell, status = _session("cd\ntrue\n")
        assert status == 1

    def test_empty_session(self) -> None:
        """No input at all ends cleanly."""
        _shell, status = _session("")
        assert status == 0

    def test_last_line_without_newline(self, capfd: pytest.CaptureFixture[str]) -> None:
        """A final line without a newline is still run."""
        _session("echo tail")
        assert capfd.readouterr().out == "tail\n"

    def test_variables_persist_between_lines(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Assignments are visible to later lines of the session."""
        _session("NAME=world\necho hello $NAME\n")
        assert capfd.readouterr().out == "hello world\n"


class TestUndecodableInput:
    """Verify that input bytes which are not UTF-8 pass through."""

    def test_session_survives_invalid_utf8(
        self, capfdbinary: pytest.CaptureFixture[bytes]
    ) -> None:
        """A Latin-1 byte is echoed back and later lines still run."""
        shell = Shell(config=ShellConfig(prompt=""))
        raw = io.TextIOWrapper(io.BytesIO(b"echo caf\xe9\necho after\nexit\n"), encoding="utf-8")
        status = run(shell, byte_transparent(raw))
        assert capfdbinary.readouterr().out == b"caf\xe9\nafter\nGood Bye\n"
        assert status == 0

    def test_undecodable_file_name(self, tmp_path: Path) -> None:
        """Redirection targets keep their original bytes."""
        shell = Shell(config=ShellConfig(prompt=""))
        raw = io.TextIOWrapper(io.BytesIO(b"echo hi > f\xff\n"), encoding="utf-8")
        run(shell, byte_transparent(raw))
        assert b"f\xff" in os.listdir(os.fsencode(tmp_path))

    def test_other_streams_unchanged(self) -> None:
        """Streams without an encoding layer are returned as they are."""
        stream = io.StringIO("echo\n")
        assert byte_transparent(stream) is stream


class TestConfigLoading:
    """Verify command-line and environment configuration."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """No flags and no environment yields the default config."""
        monkeypatch.delenv("NANOSH_PROMPT", raising=False)
        monkeypatch.delenv("NANOSH_LOG_LEVEL", raising=False)
        config = load_config(build_parser().parse_args([]))
        assert config == ShellConfig()

    def test_flags_override_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Command-line flags win over environment variables."""
        monkeypatch.setenv("NANOSH_PROMPT", "env> ")
        monkeypatch.setenv("NANOSH_LOG_LEVEL", "error")
        args = build_parser().parse_args(["--prompt", "flag> ", "--log-level", "debug"])
        config = load_config(args)
        assert config.prompt == "flag> "
        assert config.log_level is LogLevel.DEBUG

    def test_environment_used_without_flags(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment settings apply when no flag is given."""
        monkeypatch.setenv("NANOSH_PROMPT", "env> ")
        config = load_config(build_parser().parse_args([]))
        assert config.prompt == "env> "


class TestMain:
    """Verify the console entry point."""

    def test_main_exit_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """main() exits with the session status."""
        monkeypatch.setattr("sys.stdin", io.StringIO("nonexistentcmd123\nexit\n"))
        with pytest.raises(SystemExit) as excinfo:
            main(["--prompt", ""])
        assert excinfo.value.code == 1

    def test_main_writes_log_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """--log-file receives the session log at exit."""
        log_file = tmp_path / "session.log"
        monkeypatch.setattr("sys.stdin", io.StringIO("cd /no/such/dir\nexit\n"))
        with pytest.raises(SystemExit):
            main(["--prompt", "", "--log-file", str(log_file)])
        text = log_file.read_text()
        assert "[ERROR] cd: cd: /no/such/dir: No such file or directory" in text

    def test_bad_log_level_is_usage_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An unknown level in the environment is rejected."""
        monkeypatch.setenv("NANOSH_LOG_LEVEL", "loud")
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2
