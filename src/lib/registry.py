"""
Command implementations for nbdeck

Each command changes the pages of the document or the append mode of the
cell being processed. Uses CommandSpec for metadata and validation.

Handlers receive the parsed command and the BlockProcessor of the cell:

    handler(command, processor) -> None
"""

from typing import Any, Dict, List, Optional

from ..models.commands import (
    CommandSpec,
    CommandCategory,
    Command,
    NewPage,
    StartAppend,
    StopAppend,
    AddStream,
    AddError,
    Inject,
    WrapImage,
    SetPageClass,
    NEW_PAGE,
    START_ADD,
    STOP_ADD,
    ADD_STREAM,
    ADD_ERROR,
    INJECT,
    WRAP_IMAGE,
    PAGE_CLASS,
)
from .scanner import references_scan
from .wrap import template_apply


class MissingOutputError(Exception):
    """Raised when add-stream/add-error is used on a cell without that output"""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No {kind} output in cell.")


class CommandRegistry:
    """
    Registry of command specifications and handlers

    Maps command keywords to CommandSpec objects containing metadata,
    the command type and the execution handler.
    """

    def __init__(self) -> None:
        """Initialize the command registry and register all built-in commands"""
        self.specs: Dict[str, CommandSpec] = {}
        self.pageCommands_register()
        self.appendCommands_register()
        self.contentCommands_register()

    def register(self, spec: CommandSpec) -> None:
        """Register a command specification"""
        self.specs[spec.name] = spec

    def spec_get(self, name: str) -> Optional[CommandSpec]:
        """Get full command specification by keyword"""
        return self.specs.get(name)

    def spec_forCommand(self, command: Command) -> Optional[CommandSpec]:
        """Get the specification that handles a parsed command"""
        for spec in self.specs.values():
            if spec.matches(command):
                return spec
        return None

    def commands_listByCategory(self, category: CommandCategory) -> List[CommandSpec]:
        """Get all commands in a category"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def pageCommands_register(self) -> None:
        """Register page structure commands"""

        def new_handler(command: NewPage, processor: Any) -> None:
            """Handle new - finish the last page and start an empty one"""
            processor.pendingClass_apply()
            processor.state.page_new()

        def class_handler(command: SetPageClass, processor: Any) -> None:
            """Handle class[...] - remember the class until the page is finished"""
            processor.state.pending_class = command.text

        self.register(CommandSpec(
            name=NEW_PAGE,
            category=CommandCategory.PAGE,
            description="Start a new page",
            command_type=NewPage,
            handler=new_handler,
            examples=['<!--! new; -->'],
        ))

        self.register(CommandSpec(
            name=PAGE_CLASS,
            category=CommandCategory.PAGE,
            description="Set the class of the current page (applied by the next 'new')",
            command_type=SetPageClass,
            handler=class_handler,
            has_payload=True,
            payload_transform=str.strip,
            examples=['<!--! class[center, middle]; -->'],
        ))

    def appendCommands_register(self) -> None:
        """Register commands that control which cell lines reach the page"""

        def start_handler(command: StartAppend, processor: Any) -> None:
            """Handle start-add - following content lines are appended"""
            processor.append_mode = True

        def stop_handler(command: StopAppend, processor: Any) -> None:
            """Handle stop-add - following content lines are dropped"""
            processor.append_mode = False

        self.register(CommandSpec(
            name=START_ADD,
            category=CommandCategory.APPEND,
            description="Append the following lines of the cell to the last page",
            command_type=StartAppend,
            handler=start_handler,
            examples=['<!--! new; start-add; -->'],
        ))

        self.register(CommandSpec(
            name=STOP_ADD,
            category=CommandCategory.APPEND,
            description="Stop appending lines of the cell",
            command_type=StopAppend,
            handler=stop_handler,
            examples=['<!--! stop-add; -->'],
        ))

    def contentCommands_register(self) -> None:
        """Register commands that append generated content to the last page"""

        def stream_handler(command: AddStream, processor: Any) -> None:
            """Handle add-stream - append the stream output as fenced block"""
            processor.page_require(ADD_STREAM)
            stream = processor.cell.stream_get()
            if stream is None:
                raise MissingOutputError("stream")
            processor.page_append(processor.settings.fence_make(stream), ADD_STREAM)

        def error_handler(command: AddError, processor: Any) -> None:
            """Handle add-error - append '<ename>: <evalue>' as fenced block"""
            processor.page_require(ADD_ERROR)
            error = processor.cell.error_get()
            if error is None:
                raise MissingOutputError("error")
            processor.page_append(processor.settings.fence_make(error), ADD_ERROR)

        def inject_handler(command: Inject, processor: Any) -> None:
            """Handle inject[...] - append literal text"""
            processor.page_append(command.text, INJECT)

        def image_handler(command: WrapImage, processor: Any) -> None:
            """Handle image[...] - append the template filled with the cell's images"""
            processor.page_require(WRAP_IMAGE)
            references = references_scan(processor.content_get())
            processor.page_append(template_apply(command.template, references), WRAP_IMAGE)

        self.register(CommandSpec(
            name=ADD_STREAM,
            category=CommandCategory.CONTENT,
            description="Append the stream output of a code cell",
            command_type=AddStream,
            handler=stream_handler,
            examples=['# <!--! add-stream; -->'],
        ))

        self.register(CommandSpec(
            name=ADD_ERROR,
            category=CommandCategory.CONTENT,
            description="Append the error output of a code cell",
            command_type=AddError,
            handler=error_handler,
            examples=['# <!--! add-error; -->'],
        ))

        self.register(CommandSpec(
            name=INJECT,
            category=CommandCategory.CONTENT,
            description="Append literal text to the last page",
            command_type=Inject,
            handler=inject_handler,
            has_payload=True,
            examples=['<!--! inject[\\n.footnote\\[Source: survey\\]\\n]; -->'],
        ))

        self.register(CommandSpec(
            name=WRAP_IMAGE,
            category=CommandCategory.CONTENT,
            description="Append a template filled with the image paths of the cell",
            command_type=WrapImage,
            handler=image_handler,
            has_payload=True,
            examples=['<!--! image[<img src="{}" width="60%">]; -->'],
        ))
