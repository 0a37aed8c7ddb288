"""Shell variables — named values that may be exported to children.

A shell keeps two kinds of variables:

- **Shell-local** variables, created by ``NAME=value``.  Only the shell
  itself can see them (through ``$NAME`` expansion).
- **Exported** variables, promoted with ``export NAME``.  These are
  mirrored into the process environment, so every program the shell
  launches afterwards inherits them.

Key design properties:
    - **One entry per name** — assigning an existing name overwrites it.
    - **Export is sticky** — reassigning an exported variable keeps it
      exported and updates the environment immediately.
    - **Snapshot inheritance** — a child process receives the values as
      they were when it was created, never a live view.

The store owns no global state: the environment mapping it mirrors into
is passed in (``os.environ`` by default), which keeps it testable.
"""

import os
from collections.abc import MutableMapping
from dataclasses import dataclass

from nanosh.errors import VariableNotFoundError


@dataclass
class ShellVariable:
    """A single shell variable.

    Attributes:
        name: The variable name (the part before ``=``).
        value: The current string value.
        exported: Whether the value is mirrored into the environment.

    """

    name: str
    value: str
    exported: bool = False


class VariableStore:
    """Mapping from variable name to ``ShellVariable``."""

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        """Create an empty store.

        Args:
            environ: The environment that exported variables are
                mirrored into.  Defaults to ``os.environ``.

        """
        self._vars: dict[str, ShellVariable] = {}
        self._environ = os.environ if environ is None else environ

    def set(self, name: str, value: str, *, exported: bool = False) -> None:
        """Create or overwrite *name*, mirroring it if exported."""
        var = self._vars.get(name)
        if var is None:
            var = ShellVariable(name=name, value=value, exported=exported)
            self._vars[name] = var
        else:
            var.value = value
            var.exported = var.exported or exported
        if var.exported:
            self._environ[name] = value

    def get(self, name: str) -> str | None:
        """Return the value of *name*, or None if it was never set."""
        var = self._vars.get(name)
        return var.value if var is not None else None

    def export(self, name: str) -> None:
        """Mark *name* as exported and copy it into the environment.

        Raises:
            VariableNotFoundError: If *name* has never been assigned.

        """
        var = self._vars.get(name)
        if var is None:
            raise VariableNotFoundError(name)
        var.exported = True
        self._environ[name] = var.value

    def exported(self) -> dict[str, str]:
        """Return a snapshot of every exported variable."""
        return {v.name: v.value for v in self._vars.values() if v.exported}

    def clear(self) -> None:
        """Forget every variable (the environment is left as is)."""
        self._vars.clear()

    def __contains__(self, name: object) -> bool:
        """Return True if *name* has been assigned."""
        return name in self._vars

    def __len__(self) -> int:
        """Return the number of variables."""
        return len(self._vars)
