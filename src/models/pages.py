"""
Page accumulation models

Type-safe structures for the block processing automaton: the per-document
page accumulator, the command region state, and located image references.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class CommandSequenceState(Enum):
    """
    Position of the current line relative to a command region

    OUTSIDE: ordinary content line
    WITHIN:  inside a command region that is not terminated yet
    END:     the line completes a command region
    """
    OUTSIDE = "outside"
    WITHIN = "within"
    END = "end"


@dataclass
class PageState:
    """
    Pages of one document under construction

    Owned by one DocumentConverter for the duration of one document. The
    page list only grows; the only rewrite is the class prefix of the last
    page, applied when the pending class is consumed.

    Attributes:
        pages: Page contents in presentation order
        pending_class: Class set by `class[...]`, applied to the last page
                       by the next `new` or at document end

    Example:
        >>> state = PageState()
        >>> state.page_new()
        >>> state.page_append("# Title\\n")
        >>> state.pages
        ['# Title\\n']
    """
    pages: List[str] = field(default_factory=list)
    pending_class: Optional[str] = None

    def page_new(self) -> None:
        """Start a new, empty page"""
        self.pages.append("")

    def page_has(self) -> bool:
        """Check if at least one page exists"""
        return bool(self.pages)

    def page_append(self, text: str) -> None:
        """Append text to the last page (caller guarantees a page exists)"""
        self.pages[-1] += text

    def page_prefix(self, text: str) -> None:
        """Prefix text onto the last page (caller guarantees a page exists)"""
        self.pages[-1] = text + self.pages[-1]

    def copy(self) -> "PageState":
        """
        Creates a copy of the page state.

        The page list is copied, so appending to the copy does not touch
        the original.
        """
        return PageState(pages=list(self.pages), pending_class=self.pending_class)


@dataclass(frozen=True)
class ImageReference:
    """
    An image path located in markdown or HTML text

    Attributes:
        content: Path or URL as written in the image reference
        start: Offset of the first character of the path in the scanned text
        end: Offset one past the last character of the path

    Example:
        For text "![x](a.png)":
        ImageReference(content="a.png", start=5, end=10)
    """
    content: str
    start: int
    end: int

    @property
    def span(self) -> Tuple[int, int]:
        """Half-open (start, end) range of the path in the scanned text"""
        return (self.start, self.end)
