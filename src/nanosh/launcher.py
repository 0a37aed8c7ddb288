"""Process launcher — run an external program and wait for it.

Unix creates programs in two steps:

1. ``fork()`` — clone the shell.  Parent and child continue from the
   same point with independent (copy-on-write) memory.
2. ``exec()`` — the child replaces its own image with the program.

Between the two steps the child is still running shell code, which is
where per-command setup happens: redirections are installed, the
signals the interpreter ignores (``SIGPIPE``, ``SIGXFSZ``) get their
default action back, and the exported variables are copied into the
environment.  An ignored signal stays ignored across ``exec``, so
without the reset every program would start with ``SIGPIPE`` ignored.
Everything the child does there affects only the child, so the shell's
own streams and variables are never disturbed.

The parent blocks in ``waitpid`` until the child terminates and turns
the wait status into an exit status: a normal exit keeps its code, and
death by signal counts as failure (1).  If ``exec`` fails, the child
reports ``<cmd>: command not found`` and exits with 127.
"""

import os
import signal
from collections.abc import Mapping

from nanosh.errors import ChildExecError, ProcessCreationError, ShellError
from nanosh.redirection import STDERR_FILENO, RedirectionPlanner, flush_python_streams
from nanosh.tokenizer import Token

FAILURE_STATUS = 1

# Set to SIG_IGN by the interpreter at startup.
INHERITED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGPIPE", "SIGXFSZ") if hasattr(signal, name)
)


def wait_status_to_exit_code(status: int) -> int:
    """Map a raw ``waitpid`` status to the shell's notion of exit status."""
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    return FAILURE_STATUS


def restore_default_signals() -> None:
    """Reset the signals the interpreter ignores to their default action."""
    for signum in INHERITED_SIGNALS:
        signal.signal(signum, signal.SIG_DFL)


class ProcessLauncher:
    """Create, set up and wait for child processes."""

    def __init__(self, planner: RedirectionPlanner | None = None) -> None:
        """Create a launcher.

        Args:
            planner: Installs redirections inside the child.

        """
        self._planner = planner or RedirectionPlanner()
        self.last_pid: int | None = None

    def spawn(self, argv: list[str], env: Mapping[str, str], tokens: list[Token]) -> int:
        """Run *argv* in a new process and return its exit status.

        Args:
            argv: Program name followed by its arguments.
            env: Variables to copy into the child's environment.
            tokens: The command's tokens; their redirections are
                applied in the child before the program starts.

        Returns:
            The child's exit code, or 1 if it was killed by a signal.

        Raises:
            ProcessCreationError: If ``fork`` fails.

        """
        # Unflushed output would otherwise be written twice.
        flush_python_streams()
        try:
            pid = os.fork()
        except OSError as exc:
            msg = f"Fork failed: {exc.strerror}"
            raise ProcessCreationError(msg) from exc

        if pid == 0:
            self._run_child(argv, env, tokens)

        self.last_pid = pid
        _pid, status = os.waitpid(pid, 0)
        return wait_status_to_exit_code(status)

    def _run_child(self, argv: list[str], env: Mapping[str, str], tokens: list[Token]) -> None:
        """Set up the child and replace its image.  Never returns."""
        status = FAILURE_STATUS
        try:
            try:
                self._planner.apply(tokens)
            except ShellError as exc:
                _report(str(exc))
                return
            restore_default_signals()
            os.environ.update(env)
            try:
                os.execvp(argv[0], argv)
            except OSError:
                error = ChildExecError(argv[0])
                _report(str(error))
                status = error.status
        finally:
            os._exit(status)


def _report(message: str) -> None:
    """Write *message* to the child's standard error."""
    os.write(STDERR_FILENO, f"{message}\n".encode(errors="surrogateescape"))
