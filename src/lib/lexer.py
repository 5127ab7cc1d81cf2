"""
Pygments lexer for the nbdeck command language

Tokenizes the text of a command region (between `<!--!` and `-->`) for the
CommandParser.

Token types:
- Keyword: Known command keywords (e.g., new, start-add, image)
- Name: Any other identifier (reported as unknown command by the parser)
- Punctuation: Command separator ';' and payload brackets '[' ']'
- String: Payload text
- String.Escape: Backslash escapes inside a payload (e.g., \\] or \\n)
- Error: Unescaped '[' inside a payload, any other stray character
"""

import re

from pygments.lexer import RegexLexer, words
from pygments.token import Error, Keyword, Name, Punctuation, String, Whitespace

from ..models.commands import COMMAND_KEYWORDS


class CommandLexer(RegexLexer):
    """
    Lexer for nbdeck command regions

    Example:
        new; image[!\\[\\]({})];

    Tokens:
        new → Keyword
        ; → Punctuation
        image → Keyword
        [ → Punctuation
        ! → String
        \\[ → String.Escape
        \\] → String.Escape
        ({}) → String
        ] → Punctuation
        ; → Punctuation
    """

    name = 'nbdeck'
    aliases = ['nbdeck']
    filenames = []

    flags = re.MULTILINE | re.DOTALL

    tokens = {
        'root': [
            (r'\s+', Whitespace),
            (r';', Punctuation),

            # Known keywords; a longer identifier is lexed as a Name
            (words(COMMAND_KEYWORDS, suffix=r'(?![\w-])'), Keyword),
            (r'[A-Za-z_][\w-]*', Name),

            # Opening bracket of a payload
            (r'\[', Punctuation, 'payload'),

            (r'.', Error),
        ],

        'payload': [
            (r'\\.', String.Escape),
            (r'\]', Punctuation, '#pop'),

            # Nested brackets must be escaped
            (r'\[', Error),

            (r'[^\\\[\]]+', String),
            (r'\\', String),
        ],
    }
