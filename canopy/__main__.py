"""Module entrypoint for ``python -m canopy``.

Argument parsing and walk setup happen in ``canopy.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
