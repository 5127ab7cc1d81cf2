"""
Image reference scanner

Locates the image paths of a markdown text so they can be wrapped into a
template (`image[...]` command) or rewritten for a new document location.

Two forms are recognized:
1. Markdown images:   ![alt text](path/to/image.png)
2. HTML src attributes: <img src="path/to/image.png" width="60%">
                        (single or double quotes, whitespace around '=')

Scanning is best-effort: malformed markup is skipped and scanning resumes
after it, so references_scan() never raises.

Example:
    >>> refs = references_scan('![](a.png)\\n<img src="b.png">')
    >>> [(r.content, r.span) for r in refs]
    [('a.png', (4, 9)), ('b.png', (21, 26))]
"""

import re
from typing import List

from ..models.pages import ImageReference


# ![alt](path) - alt must not contain ']', path ends at the next unescaped ')'
# on the same line
_MARKDOWN_IMAGE = r'!\[[^\]]*\]\((?P<markdown>(?:\\[^\n]|[^\\)\n])*)\)'

# <... src = "path" ...> - the path ends at the next unescaped identical quote
# and never crosses a tag boundary or a line break
_HTML_SRC = (
    r'<[^<>]*?src\s*=\s*'
    r'(?:"(?P<double>(?:\\[^\n]|[^"\\<>\n])*)"|\'(?P<single>(?:\\[^\n]|[^\'\\<>\n])*)\')'
    r'[^<>]*>'
)

_REFERENCE_PATTERN = re.compile(f'{_MARKDOWN_IMAGE}|{_HTML_SRC}', re.DOTALL)

_QUOTE_ESCAPE = re.compile(r'\\(["\'])')


def references_scan(text: str) -> List[ImageReference]:
    """
    Find all image references in text

    Args:
        text: Markdown (possibly with embedded HTML) to scan

    Returns:
        References in document order, non-overlapping. Each span is the
        half-open range of the path inside text, so text[start:end] is the
        path as written.
    """
    references = []

    for match in _REFERENCE_PATTERN.finditer(text):
        if match.group('markdown') is not None:
            group = 'markdown'
            content = match.group(group)
        else:
            group = 'double' if match.group('double') is not None else 'single'
            content = _QUOTE_ESCAPE.sub(r'\1', match.group(group))

        references.append(ImageReference(
            content=content,
            start=match.start(group),
            end=match.end(group),
        ))

    return references
