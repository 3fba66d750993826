"""
Entry point for running attachment_resolver as a module.

This file enables:
- `python -m attachment_resolver`
- `uv run python -m attachment_resolver`
"""

from __future__ import annotations

import sys

from attachment_resolver.cli import main

if __name__ == "__main__":
    sys.exit(main())
