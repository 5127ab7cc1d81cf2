"""
nbdeck - Notebook to presentation converter

Turns Jupyter notebooks into one remark-style markdown presentation, driven by
commands written in HTML comments inside the cells.
"""

__version__ = "1.0.0"

from .parser import CommandParser, commands_parse
from .registry import CommandRegistry
from .automaton import BlockProcessor
from .converter import DocumentConverter
from .compiler import Compiler
from .log import LOG, logger, state_connectToLogger

__all__ = [
    "CommandParser",
    "commands_parse",
    "CommandRegistry",
    "BlockProcessor",
    "DocumentConverter",
    "Compiler",
    "LOG",
    "logger",
    "state_connectToLogger",
    "__version__",
]
