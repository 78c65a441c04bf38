"""
CLI layer for the Theia command-line client.

Provides a Typer application with sub-commands that delegate to the
operations layer (``theia.ops``).  This package handles only terminal
transport: argument parsing, table formatting and error reporting.

Entry point::

    theia --help
"""

from theia.cli.app import app

__all__ = ["app"]
