"""Entry point for ``python -m omnisearch``."""

from __future__ import annotations


def main() -> int:
    """Run the omnisearch CLI."""
    from omnisearch.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    raise SystemExit(main())
