"""The shell — a per-line command interpreter.

``Shell.execute()`` takes one input line through a fixed sequence of
steps:

    assignment? ─yes─▶ store variable
        │no
        ▼
    expand ▶ tokenize ▶ parse ▶ builtin or external ▶ cleanup

- **Assignment** — ``NAME=value`` with no space anywhere on the line is
  stored as a shell-local variable.  It is not expanded or tokenized.
- **Builtins** — ``pwd``, ``echo``, ``cd``, ``export`` and ``exit`` run
  inside the interpreter.  ``pwd`` and ``echo`` honour redirections.
- **External commands** — everything else.  Redirections are validated
  here, then installed in the child by the ``ProcessLauncher``.
- **Cleanup** — the standard descriptors are saved before the command
  and restored afterwards no matter which branch ran, so a redirection
  never leaks into the next line.

Design choices:
    - **Errors are exceptions, caught once.**  Components raise a
      ``ShellError``; ``execute()`` is the only place that reports it.
      A failure aborts the current line, never the session.
    - **Output goes to raw descriptors.**  Builtins write to fds 1 and 2
      with ``os.write`` so that ``dup2``-based redirection captures
      their output exactly as it captures a child's.
    - **Command dispatch via a dict**, as the builtin set is fixed.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

from nanosh.config import ShellConfig
from nanosh.errors import ArgumentError, NotFoundError, ShellError
from nanosh.expander import expand
from nanosh.launcher import ProcessLauncher
from nanosh.logging import Logger, LogLevel
from nanosh.redirection import STDERR_FILENO, STDOUT_FILENO, RedirectionPlanner, SavedStreams
from nanosh.tokenizer import ParsedCommand, Token, parse_command, tokenize
from nanosh.variables import VariableStore

# Type alias for a builtin handler: takes argv and tokens, returns a status.
_Handler: TypeAlias = Callable[[list[str], list[Token]], int]


def write_fd(fd: int, text: str) -> None:
    """Write all of *text* to file descriptor *fd*.

    Lone surrogates left by undecodable input are written back as the
    original bytes.
    """
    data = text.encode(errors="surrogateescape")
    while data:
        written = os.write(fd, data)
        data = data[written:]


def split_assignment(line: str) -> tuple[str, str] | None:
    """Return ``(name, value)`` if *line* is a variable assignment.

    An assignment has an ``=`` somewhere after the first character and
    no space anywhere on the line.
    """
    eq = line.find("=")
    if eq <= 0 or " " in line:
        return None
    return line[:eq], line[eq + 1 :]


@dataclass
class SessionState:
    """Everything the shell remembers between lines.

    The working directory is not stored here: the operating system
    already tracks it for the process.

    Attributes:
        variables: The session's shell variables.
        last_status: Exit status of the most recent command.
        has_error: Whether any command in the session has failed.

    """

    variables: VariableStore = field(default_factory=VariableStore)
    last_status: int = 0
    has_error: bool = False

    def record(self, status: int) -> None:
        """Remember *status* as the latest result."""
        self.last_status = status
        if status != 0:
            self.has_error = True

    @property
    def exit_status(self) -> int:
        """Return the status the session ends with."""
        return 1 if self.has_error else self.last_status


class Shell:
    """Interpret command lines for one session."""

    def __init__(
        self,
        *,
        config: ShellConfig | None = None,
        state: SessionState | None = None,
        planner: RedirectionPlanner | None = None,
        launcher: ProcessLauncher | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a shell with a fresh session.

        Args:
            config: Prompt and farewell text, log level.
            state: Session state to continue from (a new one by default).
            planner: Validates and installs redirections.
            launcher: Runs external programs.
            logger: Receives the session's audit trail.

        """
        self.config = config or ShellConfig()
        self.state = state or SessionState()
        self.planner = planner or RedirectionPlanner()
        self.launcher = launcher or ProcessLauncher(self.planner)
        self.logger = logger or Logger(min_level=self.config.log_level)
        self.running = True

        self._builtins: dict[str, _Handler] = {
            "pwd": self._cmd_pwd,
            "echo": self._cmd_echo,
            "cd": self._cmd_cd,
            "export": self._cmd_export,
            "exit": self._cmd_exit,
        }

    @property
    def variables(self) -> VariableStore:
        """Return the session's variable store."""
        return self.state.variables

    @property
    def exit_status(self) -> int:
        """Return the status the session ends (or ended) with."""
        return self.state.exit_status

    def execute(self, line: str) -> int:
        """Run one input line.

        Args:
            line: The raw line, with or without its trailing newline.

        Returns:
            The session's ``last_status`` after the line.

        """
        line = line.split("\n", 1)[0]
        if not line:
            return self.state.last_status

        assignment = split_assignment(line)
        if assignment is not None:
            name, value = assignment
            self.variables.set(name, value)
            self.state.last_status = 0
            return 0

        tokens = tokenize(expand(line, self.variables))
        command = parse_command(tokens)
        if not command.argv:
            return self.state.last_status

        try:
            originals = SavedStreams.save()
        except ShellError as exc:
            self._report(exc, source="dispatcher")
            self.state.record(exc.status)
            return self.state.last_status

        with originals:
            self.state.record(self._dispatch(command, tokens))
        return self.state.last_status

    def _dispatch(self, command: ParsedCommand, tokens: list[Token]) -> int:
        """Route *command* to a builtin or an external program."""
        argv = command.argv
        name = argv[0]
        handler = self._builtins.get(name)
        try:
            route = "builtin" if handler is not None else "external"
            self.logger.log(LogLevel.DEBUG, f"{route} {name}", source="dispatcher")
            for spec in command.redirections:
                self.logger.log(LogLevel.DEBUG, f"{spec.kind} {spec.path}", source="redirection")
            if handler is not None:
                return handler(argv, tokens)
            return self._run_external(argv, tokens)
        except ShellError as exc:
            self._report(exc, source=name)
            return exc.status
        except OSError as exc:
            self._report(f"{name}: {exc.strerror}", source=name)
            return 1
        except UnicodeError as exc:
            self._report(f"{name}: {exc}", source=name)
            return 1

    def _report(self, error: ShellError | str, *, source: str) -> None:
        """Write a diagnostic to standard error and log it."""
        message = str(error)
        self.logger.log(LogLevel.ERROR, message, source=source)
        write_fd(STDERR_FILENO, f"{message}\n")

    def _run_external(self, argv: list[str], tokens: list[Token]) -> int:
        """Validate redirections, then run *argv* in a child process."""
        self.planner.validate(tokens)
        status = self.launcher.spawn(argv, self.variables.exported(), tokens)
        self.logger.log(
            LogLevel.INFO,
            f"pid {self.launcher.last_pid} ({argv[0]}) exited with status {status}",
            source="launcher",
        )
        return status

    def _with_redirections(self, tokens: list[Token], action: Callable[[], None]) -> int:
        """Validate and install redirections, then run *action*."""
        self.planner.validate(tokens)
        saved = self.planner.apply(tokens)
        try:
            action()
        finally:
            # The per-line guard in execute() restores the streams.
            saved.close()
        return 0

    # -- builtins ---------------------------------------------------------

    def _cmd_pwd(self, _argv: list[str], tokens: list[Token]) -> int:
        """Print the working directory."""
        return self._with_redirections(
            tokens, lambda: write_fd(STDOUT_FILENO, f"{os.getcwd()}\n")
        )

    def _cmd_echo(self, argv: list[str], tokens: list[Token]) -> int:
        """Print the arguments separated by single spaces."""
        text = " ".join(argv[1:])
        return self._with_redirections(tokens, lambda: write_fd(STDOUT_FILENO, f"{text}\n"))

    def _cmd_cd(self, argv: list[str], _tokens: list[Token]) -> int:
        """Change the working directory."""
        if len(argv) < 2:  # noqa: PLR2004
            msg = "cd: missing argument"
            raise ArgumentError(msg)
        target = argv[1]
        try:
            os.chdir(target)
        except OSError as exc:
            msg = f"cd: {target}: No such file or directory"
            raise NotFoundError(msg) from exc
        return 0

    def _cmd_export(self, argv: list[str], _tokens: list[Token]) -> int:
        """Mark a variable as exported."""
        if len(argv) < 2:  # noqa: PLR2004
            msg = "export: missing argument"
            raise ArgumentError(msg)
        self.variables.export(argv[1])
        return 0

    def _cmd_exit(self, _argv: list[str], _tokens: list[Token]) -> int:
        """Say goodbye and end the session."""
        write_fd(STDOUT_FILENO, f"{self.config.farewell}\n")
        self.running = False
        self.variables.clear()
        self.logger.log(
            LogLevel.INFO, f"session ended with status {self.exit_status}", source="dispatcher"
        )
        return self.state.last_status
