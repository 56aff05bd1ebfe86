"""Dynamic BIOS update record management for MDT and Configuration Manager."""

from __future__ import annotations

__version__ = "0.1.0"


def main() -> None:
    from bios_manager.cli.main import main as cli_main

    cli_main()


__all__ = ["__version__", "main"]
