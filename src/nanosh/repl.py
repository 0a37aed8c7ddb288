"""Interactive REPL (Read-Eval-Print Loop) for the shell.

The REPL is the thin I/O wrapper around ``Shell``:

    1. **Read** — write the prompt and read one line.
    2. **Eval** — pass the line to ``shell.execute()``.
    3. **Loop** — repeat until ``exit`` or end of input.

The session's final status (``1`` if any command failed, otherwise the
last command's status) becomes the process exit status.

``run()`` takes its input stream as an argument so tests can drive a
whole session from a ``StringIO``; ``main()`` is the console entry
point.
"""

import argparse
import io
import os
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import TextIO

from nanosh.config import ShellConfig, parse_log_level
from nanosh.redirection import STDOUT_FILENO
from nanosh.shell import Shell, write_fd


def byte_transparent(stream: TextIO) -> TextIO:
    """Make *stream* decode invalid input bytes instead of failing.

    Undecodable bytes become lone surrogates, which ``write_fd`` and the
    ``os`` functions turn back into the same bytes.  Streams that are
    not ``TextIOWrapper`` objects are returned unchanged.
    """
    if isinstance(stream, io.TextIOWrapper):
        stream.reconfigure(errors="surrogateescape")
    return stream


def run(shell: Shell, stdin: TextIO) -> int:
    """Drive *shell* with lines from *stdin* until the session ends.

    Args:
        shell: The interpreter to feed.
        stdin: Where lines are read from.

    Returns:
        The session's final exit status.

    """
    try:
        while shell.running:
            if shell.config.prompt:
                write_fd(STDOUT_FILENO, shell.config.prompt)
            line = stdin.readline()
            if not line:
                # End of input ends the session like exit, minus the farewell.
                break
            shell.execute(line)
    except KeyboardInterrupt:
        write_fd(STDOUT_FILENO, "\nInterrupted.\n")
    return shell.exit_status


def build_parser() -> argparse.ArgumentParser:
    """Return the command-line parser for ``nanosh``."""
    parser = argparse.ArgumentParser(prog="nanosh", description="A minimal command interpreter.")
    parser.add_argument("--prompt", help="Prompt written before each line.")
    parser.add_argument(
        "--log-level",
        type=parse_log_level,
        help="Minimum level kept in the session log (debug, info, warning, error).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write the session log to this file when the session ends.",
    )
    return parser


def load_config(args: argparse.Namespace) -> ShellConfig:
    """Merge environment settings with command-line overrides."""
    config = ShellConfig.from_environ(os.environ)
    if args.prompt is not None:
        config = replace(config, prompt=args.prompt)
    if args.log_level is not None:
        config = replace(config, log_level=args.log_level)
    if args.log_file is not None:
        config = replace(config, log_file=args.log_file)
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """Run an interactive session and exit with its status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    shell = Shell(config=config)
    status = run(shell, byte_transparent(sys.stdin))

    if config.log_file is not None:
        with config.log_file.open("w") as fh:
            shell.logger.dump(fh)
    raise SystemExit(status)
