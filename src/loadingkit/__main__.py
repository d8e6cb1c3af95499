"""Console entrypoint for loadingkit.

Running ``python -m loadingkit`` or the installed ``loadingkit`` console
script executes the same code path in :mod:`loadingkit.cli`.
"""

from __future__ import annotations

from loadingkit.cli import main as cli_main


def main() -> None:
    """Application entrypoint (delegates to :func:`loadingkit.cli.main`)."""
    cli_main()


if __name__ == "__main__":
    main()
