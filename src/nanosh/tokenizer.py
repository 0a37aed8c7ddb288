"""Tokenizer — split an expanded line into words and operators.

The tokenizer scans one character at a time and recognises:

- **Quoted regions** — ``"..."`` or ``'...'`` taken verbatim (no escape
  processing, no nesting).  An unterminated quote runs to end of line.
- **Redirection operators** — ``<``, ``>`` and ``2>``.  They are atomic
  even when glued to surrounding text, so ``hi>out`` is three tokens.
- **Pipe** — ``|`` is recognised as a token but never executed.
- **Words** — everything else, separated by spaces.

Tokens are tagged values rather than bare strings, so a quoted ``">"``
stays a word and can never be mistaken for an operator.

This module also derives the argument vector from a token list
(``extract_argv``): redirection operators and their operands are not
part of the program's arguments.
"""

from dataclasses import dataclass, field
from enum import StrEnum

QUOTES: frozenset[str] = frozenset("\"'")


class TokenKind(StrEnum):
    """Kinds of token a line can contain."""

    WORD = "word"
    REDIRECT_IN = "<"
    REDIRECT_OUT = ">"
    REDIRECT_ERR = "2>"
    PIPE = "|"


REDIRECT_KINDS: frozenset[TokenKind] = frozenset(
    [TokenKind.REDIRECT_IN, TokenKind.REDIRECT_OUT, TokenKind.REDIRECT_ERR]
)


@dataclass(frozen=True)
class Token:
    """A single token.

    Attributes:
        kind: What the token is.
        text: The word text (empty for operators).

    """

    kind: TokenKind
    text: str = ""

    @property
    def is_redirect(self) -> bool:
        """Return True for ``<``, ``>`` and ``2>``."""
        return self.kind in REDIRECT_KINDS

    def __str__(self) -> str:
        """Show words as their text and operators as their symbol."""
        return self.text if self.kind is TokenKind.WORD else self.kind.value


def word(text: str) -> Token:
    """Build a ``WORD`` token."""
    return Token(TokenKind.WORD, text)


class RedirectKind(StrEnum):
    """Which standard stream a redirection rebinds."""

    INPUT = "<"
    OUTPUT = ">"
    ERROR_OUTPUT = "2>"


_REDIRECT_FOR_TOKEN: dict[TokenKind, RedirectKind] = {
    TokenKind.REDIRECT_IN: RedirectKind.INPUT,
    TokenKind.REDIRECT_OUT: RedirectKind.OUTPUT,
    TokenKind.REDIRECT_ERR: RedirectKind.ERROR_OUTPUT,
}


@dataclass(frozen=True)
class RedirectionSpec:
    """A redirection operator paired with its operand."""

    kind: RedirectKind
    path: str


@dataclass
class ParsedCommand:
    """The executable view of a token list.

    Attributes:
        argv: Program name and arguments, without any redirection.
        redirections: Every well-formed operator/operand pair, in order.

    """

    argv: list[str] = field(default_factory=list)
    redirections: list[RedirectionSpec] = field(default_factory=list)


class _Scanner:
    """Accumulate tokens while walking a line."""

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self._buf: list[str] | None = None

    def extend(self, text: str) -> None:
        if self._buf is None:
            self._buf = []
        self._buf.append(text)

    def end_word(self) -> None:
        if self._buf is not None:
            self.tokens.append(word("".join(self._buf)))
            self._buf = None

    def operator(self, kind: TokenKind) -> None:
        self.end_word()
        self.tokens.append(Token(kind))


def tokenize(line: str) -> list[Token]:
    """Split *line* into tokens.

    Args:
        line: An already-expanded command line.

    Returns:
        The tokens in order of appearance.

    """
    scanner = _Scanner()
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch in QUOTES:
            close = line.find(ch, i + 1)
            if close == -1:
                close = n
            scanner.extend(line[i + 1 : close])
            scanner.end_word()
            i = close + 1
            continue
        if ch == "2" and line.startswith(">", i + 1):
            scanner.operator(TokenKind.REDIRECT_ERR)
            i += 2
            continue
        if ch == "<":
            scanner.operator(TokenKind.REDIRECT_IN)
        elif ch == ">":
            scanner.operator(TokenKind.REDIRECT_OUT)
        elif ch == "|":
            scanner.operator(TokenKind.PIPE)
        elif ch == " ":
            scanner.end_word()
        else:
            scanner.extend(ch)
        i += 1
    scanner.end_word()
    return scanner.tokens


def _has_operand(tokens: list[Token], i: int) -> bool:
    return i + 1 < len(tokens) and tokens[i + 1].kind is TokenKind.WORD


def extract_argv(tokens: list[Token]) -> list[str]:
    """Return the program arguments found in *tokens*.

    Each redirection operator is skipped together with its operand.  An
    operator without an operand is skipped alone; reporting the syntax
    error is the redirection planner's job.  Pipe tokens are dropped.
    """
    argv: list[str] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.is_redirect:
            i += 2 if _has_operand(tokens, i) else 1
            continue
        if token.kind is TokenKind.WORD:
            argv.append(token.text)
        i += 1
    return argv


def parse_command(tokens: list[Token]) -> ParsedCommand:
    """Split *tokens* into an argument vector and redirection specs."""
    redirections = [
        RedirectionSpec(_REDIRECT_FOR_TOKEN[tok.kind], tokens[i + 1].text)
        for i, tok in enumerate(tokens)
        if tok.is_redirect and _has_operand(tokens, i)
    ]
    return ParsedCommand(argv=extract_argv(tokens), redirections=redirections)
