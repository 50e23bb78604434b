"""
CLI layer for declsite.

A Typer application that wires settings, logging and a symbol index
source into :class:`~declsite.site.generator.SiteGenerator`. All
generation logic lives in ``declsite.site``; this package only parses
arguments and formats terminal output.

Entry point::

    declsite --help
"""

from declsite.cli.app import app

__all__ = ["app"]
