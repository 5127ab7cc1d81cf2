"""
Models package for nbdeck

Contains data structures and type definitions for the conversion pipeline.
"""

from .state import ProgramState, pipeline
from .commands import (
    Command,
    CommandCategory,
    CommandSpec,
    COMMAND_KEYWORDS,
    NewPage,
    StartAppend,
    StopAppend,
    AddStream,
    AddError,
    Inject,
    WrapImage,
    SetPageClass,
)
from .pages import CommandSequenceState, ImageReference, PageState
from .notebook import Cell, Notebook, ErrorOutput, StreamOutput

__all__ = [
    "ProgramState",
    "pipeline",
    "Command",
    "CommandCategory",
    "CommandSpec",
    "COMMAND_KEYWORDS",
    "NewPage",
    "StartAppend",
    "StopAppend",
    "AddStream",
    "AddError",
    "Inject",
    "WrapImage",
    "SetPageClass",
    "CommandSequenceState",
    "ImageReference",
    "PageState",
    "Cell",
    "Notebook",
    "ErrorOutput",
    "StreamOutput",
]
