"""
Entry point for running bios_manager as a module.

This file enables:
- `python -m bios_manager`
"""

from __future__ import annotations

from bios_manager import main

if __name__ == "__main__":
    main()
