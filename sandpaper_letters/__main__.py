from __future__ import annotations

from .app import run


def main() -> int:
    """Entry point for the letter-tracing window."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
