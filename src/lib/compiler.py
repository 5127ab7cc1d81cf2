"""
Compiler for nbdeck presentations

Collects the documents of all sources and writes the presentation file.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import appsettings, AppSettings
from .converter import DocumentConverter, RelocationError, locations_relativize
from .log import LOG, logger
from .notebook import NotebookError, notebook_load
from .registry import CommandRegistry


class Compiler:
    """
    Compiles notebooks (and verbatim pages) into one presentation file

    Responsibilities:
    - Convert every notebook into its pages
    - Include any other source file (e.g. a title page) verbatim
    - Skip sources that fail, reporting them
    - Write the non-empty documents, each preceded by the document separator
    """

    def __init__(
        self,
        sources: List[Path],
        output_file: str,
        force: bool = False,
        verbosity: int = 1,
        registry: Optional[CommandRegistry] = None,
        settings: AppSettings = appsettings,
    ) -> None:
        """
        Initialize compiler

        Args:
            sources: Notebooks and verbatim files in presentation order
            output_file: Path of the presentation file
            force: Overwrite output_file if it exists
            verbosity: Output verbosity level (0-3)
            registry: CommandRegistry defining the commands
            settings: Separators and notebook extension
        """
        self.sources = sources
        self.output_path = Path(output_file)
        self.force = force
        self.verbosity = verbosity
        self.registry = registry or CommandRegistry()
        self.settings = settings

        self.page_count = 0
        self.failed: List[str] = []

    def compile(self) -> Dict[str, Any]:
        """
        Compile all sources to the presentation file

        Returns:
            dict with compilation results and statistics

        Raises:
            FileExistsError: output file exists and force is not set
        """
        if self.output_path.exists() and not self.force:
            raise FileExistsError(
                f"File already exists {self.output_path}. Use --force to override it."
            )

        LOG("Starting compilation...", level=2)

        documents = self.documents_build()
        presentation = self.presentation_build(documents)

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(presentation, encoding='utf-8')
        LOG(f"Wrote {self.output_path}", level=2)

        return {
            'status': True,
            'output_file': str(self.output_path),
            'document_count': sum(1 for document in documents if document),
            'page_count': self.page_count,
            'failed': self.failed,
        }

    def documents_build(self) -> List[str]:
        """Build the document text of every source, in order"""
        documents = []

        for source in self.sources:
            try:
                documents.append(self.document_build(source))
            except (NotebookError, RelocationError, OSError) as e:
                logger.error(f"Skipping {source}: {e}")
                self.failed.append(str(source))

        return documents

    def document_build(self, source: Path) -> str:
        """
        Build the document text of one source

        Notebooks are converted; any other file is included verbatim.
        """
        if source.suffix != self.settings.notebook_extension:
            LOG(f"Including {source} verbatim", level=2)
            return source.read_text(encoding='utf-8')

        notebook = notebook_load(source)
        output_relative, source_relative = locations_relativize(self.output_path, source)

        converter = DocumentConverter(
            notebook,
            output_relative,
            source_path=source_relative,
            registry=self.registry,
            settings=self.settings,
        )
        document = converter.convert()
        self.page_count += len(converter.pages)

        LOG(f"Converted {source}", level=1)
        return document

    def presentation_build(self, documents: List[str]) -> str:
        """Concatenate the non-empty documents, each preceded by the document separator"""
        separator = self.settings.document_separator
        return ''.join(separator + document for document in documents if document)
