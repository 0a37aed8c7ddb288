"""nanosh — a minimal interactive command interpreter.

Re-exports public symbols so callers can write::

    from nanosh import Shell, VariableStore
"""

from nanosh.config import ShellConfig
from nanosh.errors import (
    AccessError,
    ArgumentError,
    ChildExecError,
    NotFoundError,
    ParseError,
    ProcessCreationError,
    RedirectionError,
    RedirectionSyntaxError,
    ShellError,
    VariableNotFoundError,
)
from nanosh.expander import expand
from nanosh.launcher import ProcessLauncher
from nanosh.redirection import RedirectionPlanner, SavedStreams
from nanosh.shell import SessionState, Shell
from nanosh.tokenizer import (
    ParsedCommand,
    RedirectionSpec,
    RedirectKind,
    Token,
    TokenKind,
    extract_argv,
    parse_command,
    tokenize,
)
from nanosh.variables import ShellVariable, VariableStore

__version__ = "0.1.0"

__all__ = [
    "AccessError",
    "ArgumentError",
    "ChildExecError",
    "NotFoundError",
    "ParseError",
    "ParsedCommand",
    "ProcessCreationError",
    "ProcessLauncher",
    "RedirectKind",
    "RedirectionError",
    "RedirectionPlanner",
    "RedirectionSpec",
    "RedirectionSyntaxError",
    "SavedStreams",
    "SessionState",
    "Shell",
    "ShellConfig",
    "ShellError",
    "ShellVariable",
    "Token",
    "TokenKind",
    "VariableNotFoundError",
    "VariableStore",
    "__version__",
    "expand",
    "extract_argv",
    "parse_command",
    "tokenize",
]
