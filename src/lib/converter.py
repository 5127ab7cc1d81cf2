"""
Conversion of one notebook into presentation pages

Runs the BlockProcessor over every cell, joins the pages and relocates the
image references for the presentation file.
"""

import os
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import appsettings, AppSettings
from ..models.notebook import Notebook
from ..models.pages import PageState
from .automaton import BlockError, BlockProcessor, UninitializedPageError, pendingClass_apply
from .log import LOG, logger
from .registry import CommandRegistry
from .relocate import PathLike, references_relocate


# Cell types that carry commands
PROCESSED_CELL_TYPES = ("markdown", "code")


class RelocationError(Exception):
    """Raised when image references cannot be relocated (no parent directory)"""
    pass


class DocumentConverter:
    """
    Converts one notebook into the text of its pages

    A cell that fails is reported and leaves the pages as they were before
    the cell; conversion continues with the next cell.
    """

    def __init__(
        self,
        notebook: Notebook,
        output_path: PathLike,
        source_path: Optional[PathLike] = None,
        registry: Optional[CommandRegistry] = None,
        settings: AppSettings = appsettings,
    ) -> None:
        """
        Initialize converter

        Args:
            notebook: Notebook to convert
            output_path: Location of the presentation file
            source_path: Location of the notebook as seen next to output_path
                         (defaults to notebook.path)
            registry: CommandRegistry defining the commands
            settings: Markers, separators and page formatting
        """
        self.notebook = notebook
        self.output_path = output_path
        self.source_path = source_path if source_path is not None else notebook.path
        self.registry = registry or CommandRegistry()
        self.settings = settings
        self.pages: List[str] = []

    def cell_context(self, index: int) -> str:
        """Location of a cell for log messages"""
        return f"<Cell: {index} in File: '{self.notebook.path}'>"

    def pages_build(self) -> List[str]:
        """
        Process all cells into pages

        Returns:
            Page contents in order (also stored in self.pages)
        """
        state = PageState()

        for index, cell in enumerate(self.notebook.cells):
            context = self.cell_context(index)

            if cell.cell_type not in PROCESSED_CELL_TYPES:
                logger.info(f"Cell type '{cell.cell_type}' is not supported. {context}")
                continue

            working = state.copy()
            try:
                BlockProcessor(
                    cell, working, registry=self.registry, settings=self.settings, context=context
                ).process()
            except BlockError as e:
                logger.error(f"{e} {context}")
                continue
            state = working

        try:
            pendingClass_apply(state, self.settings)
        except UninitializedPageError as e:
            logger.error(f"{e} <File: '{self.notebook.path}'>")

        LOG(f"{self.notebook.path}: {len(state.pages)} page(s)", level=2)
        self.pages = state.pages
        return self.pages

    def convert(self) -> str:
        """
        Convert the notebook into one document

        Returns:
            Pages joined with the page separator, image references relocated

        Raises:
            RelocationError: The output or notebook path has no parent directory
        """
        document = self.settings.page_separator.join(self.pages_build())

        relocated = references_relocate(self.output_path, self.source_path, document)
        if relocated is None:
            raise RelocationError(
                f"Either the output path '{self.output_path}' or the notebook path "
                f"'{self.source_path}' has no parent."
            )
        return relocated


def locations_relativize(output_path: Path, source_path: Path) -> Tuple[Path, Path]:
    """
    Express both locations relative to their common directory

    Example:
        >>> locations_relativize(Path("/w/out/talk.rmd"), Path("/w/nb/a.ipynb"))
        (PosixPath('out/talk.rmd'), PosixPath('nb/a.ipynb'))
    """
    output_abs = Path(os.path.abspath(output_path))
    source_abs = Path(os.path.abspath(source_path))
    base = os.path.commonpath([output_abs, source_abs])
    return output_abs.relative_to(base), source_abs.relative_to(base)
