"""I/O redirection — rebinding standard streams to files.

Every process starts with three open file descriptors: 0 (standard
input), 1 (standard output) and 2 (standard error).  Redirection
replaces one of them with an open file using ``dup2``, so anything the
command reads or writes goes to that file instead of the terminal.

Redirection happens in two phases:

1. **Validate** — check every target (operand present, output directory
   writable, input file readable) without touching any descriptor.  A
   command with a bad target never runs.
2. **Apply** — save duplicates of fds 0/1/2, then install the
   redirections in a fixed order: error output, input, output.  If any
   step fails, all three streams are restored before the error is
   raised, so a half-applied redirection is never left behind.

Input readability is *not* checked once an output redirection has
already appeared earlier on the same line.  ``cat > out < missing``
therefore passes validation and only fails when applied.
"""

import errno
import os
import sys
from dataclasses import dataclass

from nanosh.errors import AccessError, RedirectionError, RedirectionSyntaxError, ShellError
from nanosh.tokenizer import Token, TokenKind

STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2
STANDARD_FDS: tuple[int, int, int] = (STDIN_FILENO, STDOUT_FILENO, STDERR_FILENO)

# Read+write for owner, group and other; the process umask narrows it.
OUTPUT_FILE_MODE = 0o666
_OUTPUT_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC

# Installation order: error output first, so later failures are captured.
_APPLY_ORDER: tuple[TokenKind, ...] = (
    TokenKind.REDIRECT_ERR,
    TokenKind.REDIRECT_IN,
    TokenKind.REDIRECT_OUT,
)

_TARGET_FD: dict[TokenKind, int] = {
    TokenKind.REDIRECT_IN: STDIN_FILENO,
    TokenKind.REDIRECT_OUT: STDOUT_FILENO,
    TokenKind.REDIRECT_ERR: STDERR_FILENO,
}


def flush_python_streams() -> None:
    """Push buffered Python-level output to the current descriptors."""
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()


@dataclass
class SavedStreams:
    """Duplicates of the standard descriptors taken before a change.

    Attributes:
        fds: Duplicates of fds 0, 1 and 2, in that order.

    """

    fds: tuple[int, int, int]

    @classmethod
    def save(cls) -> "SavedStreams":
        """Duplicate fds 0/1/2.

        Raises:
            RedirectionError: If a duplicate cannot be made (e.g. the
                process is out of descriptors).

        """
        saved: list[int] = []
        try:
            for fd in STANDARD_FDS:
                saved.append(os.dup(fd))
        except OSError as exc:
            for dup in saved:
                os.close(dup)
            msg = f"dup: {exc.strerror}"
            raise RedirectionError(msg) from exc
        return cls(fds=(saved[0], saved[1], saved[2]))

    def restore(self) -> None:
        """Rebind fds 0/1/2 to the saved originals."""
        flush_python_streams()
        for saved, fd in zip(self.fds, STANDARD_FDS, strict=True):
            os.dup2(saved, fd)

    def close(self) -> None:
        """Release the saved duplicates."""
        for saved in self.fds:
            os.close(saved)

    def __enter__(self) -> "SavedStreams":
        """Return self; streams are restored and released on exit."""
        return self

    def __exit__(self, *_exc: object) -> None:
        """Restore and release the saved descriptors."""
        try:
            self.restore()
        finally:
            self.close()


def output_directory(path: str) -> str:
    """Return the directory that must be writable to create *path*.

    That is the text before the last ``/``, or ``.`` when there is no
    slash or nothing precedes it.
    """
    head, sep, _tail = path.rpartition("/")
    return head if sep and head else "."


def _operand(tokens: list[Token], i: int) -> str:
    """Return the operand of the operator at *i*, or raise a syntax error."""
    if i + 1 >= len(tokens) or tokens[i + 1].kind is not TokenKind.WORD:
        raise RedirectionSyntaxError(tokens[i].kind.value)
    return tokens[i + 1].text


class RedirectionPlanner:
    """Validate and install the redirections of one command line."""

    def validate(self, tokens: list[Token]) -> None:
        """Check every redirection target without changing any stream.

        Safe to call any number of times.

        Raises:
            RedirectionSyntaxError: If an operator has no operand.
            AccessError: If an output directory is not writable, or an
                input file is not readable.
            RedirectionError: If the standard descriptors cannot be
                duplicated.

        """
        # Probe descriptor headroom; the live streams are left untouched.
        SavedStreams.save().close()

        seen_output = False
        i = 0
        while i < len(tokens):
            kind = tokens[i].kind
            if kind is TokenKind.REDIRECT_OUT:
                seen_output = True
            if kind in (TokenKind.REDIRECT_OUT, TokenKind.REDIRECT_ERR):
                path = _operand(tokens, i)
                if not os.access(output_directory(path), os.W_OK):
                    msg = f"{path}: Permission denied"
                    raise AccessError(msg)
                i += 1
            elif kind is TokenKind.REDIRECT_IN:
                path = _operand(tokens, i)
                if not seen_output and not os.access(path, os.R_OK):
                    msg = f"cannot access {path}: No such file or directory"
                    raise AccessError(msg)
                i += 1
            i += 1

    def apply(self, tokens: list[Token]) -> SavedStreams:
        """Install every redirection in *tokens*.

        Returns:
            The pre-redirection streams.  The caller closes them once
            the command has finished (or uses them to restore).

        Raises:
            RedirectionSyntaxError: If an operator has no operand.
            AccessError: If a target cannot be opened.
            RedirectionError: If a descriptor cannot be replaced.

        """
        saved = SavedStreams.save()
        flush_python_streams()
        try:
            for kind in _APPLY_ORDER:
                for i, token in enumerate(tokens):
                    if token.kind is kind:
                        self._install(kind, _operand(tokens, i))
        except ShellError:
            saved.restore()
            saved.close()
            raise
        return saved

    @staticmethod
    def _install(kind: TokenKind, path: str) -> None:
        """Open *path* and make it the standard stream for *kind*."""
        try:
            if kind is TokenKind.REDIRECT_IN:
                fd = os.open(path, os.O_RDONLY)
            else:
                fd = os.open(path, _OUTPUT_FLAGS, OUTPUT_FILE_MODE)
        except OSError as exc:
            if kind is TokenKind.REDIRECT_IN and exc.errno == errno.ENOENT:
                msg = f"cannot access {path}: No such file or directory"
            else:
                msg = f"{path}: {exc.strerror}"
            raise AccessError(msg) from exc

        try:
            os.dup2(fd, _TARGET_FD[kind])
        except OSError as exc:
            msg = f"dup2: {exc.strerror}"
            raise RedirectionError(msg) from exc
        finally:
            os.close(fd)
