"""
Notebook loading and input discovery
"""

from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from ..config import appsettings
from ..models.notebook import Notebook
from .log import LOG


class NotebookError(Exception):
    """Raised when a notebook file cannot be read or validated"""
    pass


def notebook_load(path: Path) -> Notebook:
    """
    Read a notebook file

    Args:
        path: Location of the .ipynb file

    Returns:
        Validated Notebook remembering its path

    Raises:
        NotebookError: File unreadable or not a notebook
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise NotebookError(f"Unable to read notebook {path}: {e}")

    try:
        notebook = Notebook.model_validate_json(text)
    except ValidationError as e:
        raise NotebookError(f"Unable to parse notebook {path}: {e}")

    notebook.path = path
    LOG(f"Loaded {path} ({len(notebook.cells)} cells)", level=2)
    return notebook


def sources_discover(paths: Iterable[Path], extension: str = appsettings.notebook_extension) -> List[Path]:
    """
    Expand directories into the notebooks they contain

    Files are kept in the given order. Directories are searched recursively
    for notebooks (sorted by path, checkpoint copies skipped).

    Raises:
        FileNotFoundError: A path does not exist
    """
    sources = []

    for path in paths:
        if path.is_dir():
            found = sorted(
                candidate for candidate in path.rglob(f"*{extension}")
                if candidate.is_file() and ".ipynb_checkpoints" not in candidate.parts
            )
            LOG(f"Found {len(found)} notebook(s) in {path}", level=2)
            sources.extend(found)
        elif path.exists():
            sources.append(path)
        else:
            raise FileNotFoundError(f"Input not found: {path}")

    return sources
