"""
nbdeck - Notebook to presentation converter

Turns Jupyter notebooks into one remark-style markdown presentation, driven by
commands written in HTML comments inside the cells.
"""

__version__ = "1.0.0"

from .lib import CommandParser, CommandRegistry, Compiler, DocumentConverter, LOG, state_connectToLogger

__all__ = [
    "CommandParser",
    "CommandRegistry",
    "Compiler",
    "DocumentConverter",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
