"""Variable expansion — replace ``$NAME`` references with their values.

Expansion runs on the raw line *before* tokenization, so a value that
contains spaces or operators is split and interpreted like text the user
typed.

Reference rules:
    - A reference starts at ``$`` followed by anything except a space or
      the end of the line.  A lone ``$`` is kept literally.
    - The name runs until a space, ``$``, ``/``, ``>``, ``<`` or the end
      of the line.  The delimiter itself is copied through unchanged.
    - A ``$`` that ends a name may start the next reference, so ``$A$B``
      expands both variables.
    - Undefined names expand to the empty string.

The scan is a single left-to-right pass into a list buffer, so the cost
is linear in the input plus the substituted text.
"""

from nanosh.variables import VariableStore

NAME_DELIMITERS: frozenset[str] = frozenset(" $/><")


def _starts_reference(line: str, i: int) -> bool:
    """Return True if ``line[i]`` is a ``$`` that opens a reference."""
    return line[i] == "$" and i + 1 < len(line) and line[i + 1] != " "


def expand(line: str, store: VariableStore) -> str:
    """Return *line* with every variable reference substituted.

    Args:
        line: The raw input line.
        store: Where variable values are looked up.

    Returns:
        The expanded line.

    """
    out: list[str] = []
    name: list[str] | None = None
    i = 0
    while i < len(line):
        ch = line[i]
        if name is not None:
            if ch in NAME_DELIMITERS:
                out.append(store.get("".join(name)) or "")
                name = None
                if ch == "$":
                    # Re-examine the "$" as the start of the next reference.
                    continue
                out.append(ch)
            else:
                name.append(ch)
        elif _starts_reference(line, i):
            name = []
        else:
            out.append(ch)
        i += 1

    if name is not None:
        out.append(store.get("".join(name)) or "")
    return "".join(out)
