"""Module entrypoint for running the CLI as ``python -m vibevoice``."""

from __future__ import annotations

from vibevoice.cli import main


if __name__ == "__main__":
    main()
