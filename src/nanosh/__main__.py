"""Allow ``python -m nanosh``."""

from nanosh.repl import main

main()
