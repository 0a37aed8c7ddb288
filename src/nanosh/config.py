"""Shell configuration — the few knobs a session can be started with.

Values come from three places, later ones winning:

1. The defaults below.
2. Environment variables (``NANOSH_PROMPT``, ``NANOSH_LOG_LEVEL``).
3. Command-line flags parsed by the REPL.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from nanosh.logging import LogLevel

DEFAULT_PROMPT = "Nano Shell Prompt > "
DEFAULT_FAREWELL = "Good Bye"

PROMPT_ENV = "NANOSH_PROMPT"
LOG_LEVEL_ENV = "NANOSH_LOG_LEVEL"


def parse_log_level(name: str) -> LogLevel:
    """Return the ``LogLevel`` called *name* (case-insensitive).

    Raises:
        ValueError: If *name* is not a level.

    """
    try:
        return LogLevel[name.strip().upper()]
    except KeyError:
        choices = ", ".join(level.name.lower() for level in LogLevel)
        msg = f"unknown log level '{name}' (choose from {choices})"
        raise ValueError(msg) from None


@dataclass(frozen=True)
class ShellConfig:
    """Settings for one interpreter session.

    Attributes:
        prompt: Written before each line is read.
        farewell: Written by the ``exit`` builtin.
        log_level: Minimum level recorded in the session log.
        log_file: Where the session log is written at exit, if anywhere.

    """

    prompt: str = DEFAULT_PROMPT
    farewell: str = DEFAULT_FAREWELL
    log_level: LogLevel = LogLevel.INFO
    log_file: Path | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "ShellConfig":
        """Build a config from the defaults and *environ*.

        Raises:
            ValueError: If ``NANOSH_LOG_LEVEL`` is not a level name.

        """
        config = cls()
        if PROMPT_ENV in environ:
            config = replace(config, prompt=environ[PROMPT_ENV])
        if LOG_LEVEL_ENV in environ:
            config = replace(config, log_level=parse_log_level(environ[LOG_LEVEL_ENV]))
        return config
