"""
Command definitions and metadata models

Defines the commands of the nbdeck command language, their categories and
the CommandSpec used by the CommandRegistry for parsing and execution.

A command region is an HTML comment inside a cell:

    <!--! new; class[center, middle]; start-add; -->
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Type, Union


class CommandCategory(Enum):
    """
    Categories of nbdeck commands

    Used for organization, documentation generation, and validation.
    """
    PAGE = "page"          # new, class
    APPEND = "append"      # start-add, stop-add
    CONTENT = "content"    # inject, image, add-stream, add-error


@dataclass(frozen=True)
class NewPage:
    """Finish the current page and start a new, empty one"""


@dataclass(frozen=True)
class StartAppend:
    """Append the following content lines of the cell to the last page"""


@dataclass(frozen=True)
class StopAppend:
    """Stop appending content lines of the cell"""


@dataclass(frozen=True)
class AddStream:
    """Append the stream output of the cell to the last page"""


@dataclass(frozen=True)
class AddError:
    """Append the error output of the cell to the last page"""


@dataclass(frozen=True)
class Inject:
    """Append literal text to the last page"""
    text: str


@dataclass(frozen=True)
class WrapImage:
    """Append a template filled with the image paths of the cell"""
    template: str


@dataclass(frozen=True)
class SetPageClass:
    """Set the class of the page that is finished by the next `new`"""
    text: str


Command = Union[
    NewPage, StartAppend, StopAppend, AddStream, AddError, Inject, WrapImage, SetPageClass
]


# Keywords of the command language, in registration order
NEW_PAGE = "new"
START_ADD = "start-add"
STOP_ADD = "stop-add"
ADD_STREAM = "add-stream"
ADD_ERROR = "add-error"
INJECT = "inject"
WRAP_IMAGE = "image"
PAGE_CLASS = "class"

COMMAND_KEYWORDS: Tuple[str, ...] = (
    NEW_PAGE,
    START_ADD,
    STOP_ADD,
    ADD_STREAM,
    ADD_ERROR,
    INJECT,
    WRAP_IMAGE,
    PAGE_CLASS,
)


@dataclass
class CommandSpec:
    """
    Specification for an nbdeck command

    Defines metadata, parsing and execution for one command keyword.
    Used by CommandRegistry to manage the command vocabulary.

    Attributes:
        name: Command keyword as written in a command region
        category: Category for organization
        description: Human-readable description
        command_type: Command class built for this keyword
        handler: Execution function (command, processor) -> None
        has_payload: Whether the keyword must be followed by a [payload]
        payload_transform: Applied to the unescaped payload before building
        examples: Example usage strings
    """
    name: str
    category: CommandCategory
    description: str
    command_type: Type
    handler: Callable
    has_payload: bool = False
    payload_transform: Optional[Callable[[str], str]] = None
    examples: List[str] = field(default_factory=list)

    def command_make(self, payload: Optional[str] = None) -> Command:
        """
        Build the command for this keyword

        Args:
            payload: Unescaped payload text (payload commands only)

        Returns:
            Immutable Command instance
        """
        if not self.has_payload:
            return self.command_type()

        text = payload if payload is not None else ""
        if self.payload_transform is not None:
            text = self.payload_transform(text)
        return self.command_type(text)

    def matches(self, command: Command) -> bool:
        """Check if this spec handles a parsed command"""
        return isinstance(command, self.command_type)
