"""Shell errors — one hierarchy for everything that can abort a line.

A command line can fail in several distinct ways: the redirection
syntax is malformed, a target file cannot be opened, a variable or
command does not exist, or the operating system refuses to create a
process.  None of these should bring the interpreter down.  Instead
each failure is raised as a ``ShellError`` subclass, caught by the
dispatcher, reported on standard error, and reflected in the session's
exit status.

Design choices:
    - **Message is the diagnostic.**  ``str(exc)`` is exactly the line
      written to standard error, so handlers never re-format messages.
    - **Status lives on the class.**  Almost every failure maps to exit
      status 1; "command not found" in a child maps to 127.
"""

COMMAND_NOT_FOUND_STATUS = 127


class ShellError(Exception):
    """Base class for failures that abort only the current line."""

    status: int = 1


class ParseError(ShellError):
    """Raise when a line cannot be parsed into a command."""


class RedirectionSyntaxError(ParseError):
    """Raise when a redirection operator has no operand."""

    def __init__(self, operator: str) -> None:
        """Build the diagnostic naming the offending operator."""
        self.operator = operator
        super().__init__(f"syntax error near unexpected token `{operator}'")


class AccessError(ShellError):
    """Raise when a redirection target cannot be read or written."""


class RedirectionError(ShellError):
    """Raise when installing a redirection fails after validation."""


class NotFoundError(ShellError):
    """Raise when a named object (variable, directory, command) is missing."""


class VariableNotFoundError(NotFoundError):
    """Raise when exporting a variable that was never assigned."""

    def __init__(self, name: str) -> None:
        """Build the diagnostic naming the missing variable."""
        self.name = name
        super().__init__(f"export: variable '{name}' not found")


class ArgumentError(ShellError):
    """Raise when a builtin is called without a required argument."""


class ProcessCreationError(ShellError):
    """Raise when the operating system refuses to create a process."""


class ChildExecError(NotFoundError):
    """Describe a program that could not be executed in the child.

    This error never crosses the process boundary: the child formats it,
    writes it to its standard error, and exits with ``status``.
    """

    status = COMMAND_NOT_FOUND_STATUS

    def __init__(self, program: str) -> None:
        """Build the diagnostic naming the missing program."""
        self.program = program
        super().__init__(f"{program}: command not found")
