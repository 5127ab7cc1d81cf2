"""
Relocation of relative image references

Image paths in a notebook are relative to the notebook. Once the pages are
written to the presentation file they must be relative to that file instead.

For output "pres/out.rmd" and notebook "nb/talk.ipynb" the reference
"./img/x.png" becomes "../nb/./img/x.png": one '..' per component of the
output's directory, then the notebook's directory, then the original path.
"""

import os
from pathlib import PurePath
from typing import Optional, Union

from .scanner import references_scan

PathLike = Union[str, os.PathLike]

# References that already resolve from anywhere
_ABSOLUTE_PREFIXES = ('/', 'http://', 'https://')


def parent_get(path: PathLike) -> Optional[PurePath]:
    """
    Parent directory of a file path

    Returns:
        The parent (PurePath('.') for a bare file name), or None when the
        path names no file ("", ".", "/")
    """
    pure = PurePath(os.fspath(path))
    if not pure.name:
        return None
    return pure.parent


def reference_skip(reference: str) -> bool:
    """Check if a reference must be left untouched"""
    return not reference or reference.startswith(_ABSOLUTE_PREFIXES)


def path_generate(output_path: PathLike, source_path: PathLike, reference: str) -> Optional[str]:
    """
    Build the path of reference as seen from output_path

    The original reference text is kept as written (including './').

    Returns:
        New reference, or None when either location has no parent directory
    """
    output_parent = parent_get(output_path)
    source_parent = parent_get(source_path)
    if output_parent is None or source_parent is None:
        return None

    if source_parent.is_absolute():
        segments = [source_parent.as_posix()]
    else:
        segments = ['..'] * len(output_parent.parts)
        if source_parent.parts:
            segments.append(source_parent.as_posix())

    segments.append(reference)
    return '/'.join(segments)


def references_relocate(
    output_path: PathLike, source_path: PathLike, text: str
) -> Optional[str]:
    """
    Rewrite every relative image reference in text for output_path

    Absolute paths and http(s) URLs are kept. Replacements are applied from
    the last reference to the first so earlier spans stay valid.

    Args:
        output_path: Location of the document the text is written to
        source_path: Location of the document the text comes from
        text: Document text

    Returns:
        Rewritten text, or None when either location has no parent
        directory (a caller contract violation)

    Example:
        >>> references_relocate("pres/out.md", "nb/in.ipynb", "![](./x.png)")
        '![](../nb/./x.png)'
    """
    if parent_get(output_path) is None or parent_get(source_path) is None:
        return None

    for reference in reversed(references_scan(text)):
        if reference_skip(reference.content):
            continue

        # The span holds the path as written (escapes included)
        raw = text[reference.start:reference.end]
        new_path = path_generate(output_path, source_path, raw)
        if new_path is None:
            return None

        text = text[:reference.start] + new_path + text[reference.end:]

    return text
