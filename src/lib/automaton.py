"""
Block processing automaton

Scans the lines of one cell, executes the command regions it contains and
appends ordinary content lines to the last page while append mode is on.

    <!--! new; start-add; -->        <- command region (END on one line)
    # Headline                       <- content line, appended
    <!--! stop-add;                  <- region opens (WITHIN)
          inject[footer]; -->        <- region closes (END)
    hidden text                      <- content line, dropped

Each line is OUTSIDE (content), WITHIN (inside an open region) or END (closes
a region). Commands run when a region closes. Append mode and the command
buffer belong to one cell; pages and the pending class belong to the
document and live in the PageState.
"""

from typing import List, Optional, Tuple

from ..config import appsettings, AppSettings
from ..models.commands import Command
from ..models.notebook import Cell
from ..models.pages import CommandSequenceState, PageState
from .log import LOG, logger
from .parser import CommandParser, CommandParseError, UnknownCommandError
from .registry import CommandRegistry, MissingOutputError
from .wrap import WrapError


class BlockError(Exception):
    """Raised when a cell cannot be processed; aborts the cell"""
    pass


class UninitializedPageError(BlockError):
    """A command needs a page but no 'new' has been executed yet"""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Tried to use '{action}' on a page that was not initialized.")


class UnterminatedCommandRegionError(BlockError):
    """The cell ends inside a command region"""

    def __init__(self, line_number: int):
        self.line_number = line_number
        super().__init__(f"Command region opened at line {line_number} is not terminated.")


def line_uncomment(line: str, comment_prefix: str) -> str:
    """Remove a leading line comment prefix (e.g. '# ' in code cells)"""
    if comment_prefix:
        stripped = line.lstrip()
        if stripped.startswith(comment_prefix):
            return stripped[len(comment_prefix):]
    return line


def line_classify(
    line: str,
    sequence: CommandSequenceState,
    start: str,
    end: str,
    comment_prefix: str = "",
) -> Tuple[CommandSequenceState, str]:
    """
    Classify one line relative to the command regions

    Args:
        line: Source line (with or without line break)
        sequence: State after the previous line
        start: Command region start marker
        end: Command region end marker
        comment_prefix: Line comment prefix removed before marker detection

    Returns:
        (state of this line, command text the line contributes)

    Example:
        >>> line_classify("<!--! new; -->\\n", CommandSequenceState.OUTSIDE, "<!--!", "-->")
        (<CommandSequenceState.END: 'end'>, ' new; ')
    """
    raw = line_uncomment(line.rstrip("\r\n"), comment_prefix)
    trimmed = raw.strip()

    if sequence is not CommandSequenceState.WITHIN:
        if not trimmed.startswith(start):
            return CommandSequenceState.OUTSIDE, ""

        body = trimmed[len(start):]
        if body.endswith(end):
            return CommandSequenceState.END, body[:len(body) - len(end)]
        return CommandSequenceState.WITHIN, body + "\n"

    if trimmed.endswith(end):
        raw = raw.rstrip()
        return CommandSequenceState.END, raw[:len(raw) - len(end)]
    return CommandSequenceState.WITHIN, raw + "\n"


def commandRegions_strip(
    lines: List[str], start: str, end: str, comment_prefix: str = ""
) -> str:
    """
    Content of a cell with all command regions removed

    Args:
        lines: Source lines of the cell
        start: Command region start marker
        end: Command region end marker
        comment_prefix: Line comment prefix removed before marker detection

    Returns:
        The OUTSIDE lines joined, unchanged
    """
    kept = []
    sequence = CommandSequenceState.OUTSIDE

    for line in lines:
        sequence, _ = line_classify(line, sequence, start, end, comment_prefix)
        if sequence is CommandSequenceState.OUTSIDE:
            kept.append(line)

    return "".join(kept)


def pendingClass_apply(state: PageState, settings: AppSettings = appsettings) -> None:
    """
    Prefix the pending class onto the last page and clear it

    Raises:
        UninitializedPageError: A class is pending but no page exists
    """
    if state.pending_class is None:
        return

    if not state.page_has():
        raise UninitializedPageError("class")

    state.page_prefix(settings.pageClass_make(state.pending_class))
    state.pending_class = None


class BlockProcessor:
    """
    Processes the lines of one cell into a PageState

    Responsibilities:
    - Track the command region state line by line
    - Parse and execute command regions when they close
    - Append content lines to the last page in append mode (code cell
      lines as fenced blocks, closed before each command region and at the
      end of the cell)
    - Report grammar, template and output errors without aborting the cell
    """

    def __init__(
        self,
        cell: Cell,
        state: PageState,
        registry: Optional[CommandRegistry] = None,
        settings: AppSettings = appsettings,
        context: str = "",
    ) -> None:
        """
        Initialize processor

        Args:
            cell: Cell to process
            state: Pages of the document; mutated in place
            registry: CommandRegistry defining the commands
            settings: Markers and page formatting
            context: Location appended to log messages (e.g. "<Cell: 3 in File: 'a.ipynb'>")
        """
        self.cell = cell
        self.state = state
        self.registry = registry or CommandRegistry()
        self.settings = settings
        self.context = context

        self.is_code = cell.cell_type == "code"
        self.comment_prefix = settings.code_comment_prefix if self.is_code else ""
        self.append_mode = False
        self.sequence = CommandSequenceState.OUTSIDE
        self.buffer: List[str] = []
        self.region_line = 0

        # Appended lines of a code cell, fenced when the run of lines ends
        self.code_lines: List[str] = []

    def process(self) -> PageState:
        """
        Process every line of the cell

        Returns:
            The (mutated) PageState

        Raises:
            UninitializedPageError: A command or content line needs a page before 'new'
            UnterminatedCommandRegionError: The cell ends inside a command region
        """
        for line_number, line in enumerate(self.cell.source, start=1):
            self.line_process(line, line_number)

        if self.sequence is CommandSequenceState.WITHIN:
            raise UnterminatedCommandRegionError(self.region_line)

        self.code_flush()
        return self.state

    def line_process(self, line: str, line_number: int) -> None:
        """Advance the automaton by one line"""
        previous = self.sequence
        self.sequence, fragment = line_classify(
            line,
            previous,
            self.settings.command_start,
            self.settings.command_end,
            self.comment_prefix,
        )

        if self.sequence is CommandSequenceState.OUTSIDE:
            if self.append_mode:
                content = line.rstrip("\r\n") + "\n"
                if self.is_code:
                    self.page_require("start-add")
                    self.code_lines.append(content)
                else:
                    self.page_append(content, "start-add")
            return

        if previous is not CommandSequenceState.WITHIN:
            self.region_line = line_number
        self.buffer.append(fragment)

        if self.sequence is CommandSequenceState.END:
            text = "".join(self.buffer).strip()
            self.buffer = []
            self.sequence = CommandSequenceState.OUTSIDE
            if text:
                self.region_execute(text, line_number)

    def region_execute(self, text: str, line_number: int) -> None:
        """
        Parse and run the commands of a closed command region

        Grammar errors drop the whole region; unknown commands are reported
        at INFO level, all other grammar errors as warnings.
        """
        location = f"<Lines: {self.region_line}-{line_number}> {self.context}".rstrip()

        # Code appended so far precedes anything the region adds
        self.code_flush()

        try:
            commands = CommandParser(text, registry=self.registry).parse()
        except UnknownCommandError as e:
            logger.info(f"{e} {location}")
            return
        except CommandParseError as e:
            logger.warning(f"Unable to read command region '{text}'. {e} {location}")
            return

        LOG(f"Executing {len(commands)} command(s) {location}", level=3)

        for command in commands:
            self.command_apply(command, location)

    def command_apply(self, command: Command, location: str = "") -> None:
        """
        Execute one command

        Template and missing-output errors abort only this command.
        """
        spec = self.registry.spec_forCommand(command)
        if spec is None:
            logger.info(f"No handler for command {command!r}. {location}")
            return

        try:
            spec.handler(command, self)
        except (WrapError, MissingOutputError) as e:
            logger.warning(f"Command '{spec.name}' failed. {e} {location}")

    def page_require(self, action: str) -> None:
        """
        Ensure a page exists

        Raises:
            UninitializedPageError: No page yet
        """
        if not self.state.page_has():
            raise UninitializedPageError(action)

    def page_append(self, text: str, action: str) -> None:
        """Append text to the last page"""
        self.page_require(action)
        self.state.page_append(text)

    def code_flush(self) -> None:
        """Append the collected code cell lines to the last page as one fenced block"""
        text = "".join(self.code_lines)
        self.code_lines = []
        if text.strip():
            self.page_append(
                self.settings.fence_make(text, self.settings.code_language), "start-add"
            )

    def pendingClass_apply(self) -> None:
        """Prefix the pending class onto the last page"""
        pendingClass_apply(self.state, self.settings)

    def content_get(self) -> str:
        """Content of the cell with all command regions removed"""
        return commandRegions_strip(
            self.cell.source,
            self.settings.command_start,
            self.settings.command_end,
            self.comment_prefix,
        )
