"""
Template engine for the `image[...]` command

Fills a template with the image paths found in a cell:

    image[<img src="{}" width="45%"> <img src="{}" width="45%">];

`{}` takes the path whose index is the position of the placeholder among all
placeholders of the template, `{N}` takes path N. Indices are 0-based.
"""

import re
from typing import List

from ..models.pages import ImageReference
from .scanner import references_scan


class WrapError(Exception):
    """Raised when an image template cannot be applied"""
    pass


class InvalidIndexError(WrapError):
    """Explicit placeholder index is not a non-negative integer"""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid image index '{raw}'.")


class IndexOutOfRangeError(WrapError):
    """Placeholder refers to an image the cell does not have"""

    def __init__(self, index: int, available: int):
        self.index = index
        self.available = available
        super().__init__(f"Out of index. Len: {available} Index: {index}")


class MalformedTemplateError(WrapError):
    """A '{' without matching '}'"""

    def __init__(self, template: str):
        self.template = template
        super().__init__(f"Unterminated placeholder in '{template}'.")


_INDEX = re.compile(r'[0-9]+')


def index_parse(raw: str) -> int:
    """Parse the explicit index of a {N} placeholder"""
    if not _INDEX.fullmatch(raw):
        raise InvalidIndexError(raw)
    return int(raw)


def template_apply(template: str, references: List[ImageReference]) -> str:
    """
    Substitute the placeholders of template with image paths

    Args:
        template: Text with {} / {N} placeholders
        references: Image references of the cell, in document order

    Returns:
        Template with every placeholder replaced; surrounding text unchanged

    Raises:
        InvalidIndexError: {N} with N not a non-negative integer
        IndexOutOfRangeError: Index >= number of references
        MalformedTemplateError: '{' without a closing '}'

    Example:
        >>> refs = references_scan("![](a.png) ![](b.png)")
        >>> template_apply("{1} then {}", refs)
        'b.png then b.png'
    """
    parts = []
    pos = 0
    slot = 0

    while True:
        open_pos = template.find('{', pos)
        if open_pos == -1:
            break

        close_pos = template.find('}', open_pos + 1)
        if close_pos == -1:
            raise MalformedTemplateError(template)

        raw = template[open_pos + 1:close_pos]
        index = slot if raw == '' else index_parse(raw)
        if index >= len(references):
            raise IndexOutOfRangeError(index, len(references))

        parts.append(template[pos:open_pos])
        parts.append(references[index].content)

        pos = close_pos + 1
        slot += 1

    parts.append(template[pos:])
    return ''.join(parts)


def images_wrap(markdown: str, template: str) -> str:
    """Scan markdown for image references and fill template with them"""
    return template_apply(template, references_scan(markdown))
