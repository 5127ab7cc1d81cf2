r"""
Parser for the nbdeck command language

Transforms the text of a command region into a list of Commands.

Grammar:
    commands := (command ';')*
    command  := keyword | keyword '[' payload ']'
    payload  := any text; '[' and ']' must be escaped as \[ and \]

Whitespace (including line breaks) between tokens is insignificant. Inside a
payload it is kept verbatim; only the escapes \[ \] \n \" \' are replaced,
in one pass.

Example:
    >>> parser = CommandParser("new; class[center, middle]; start-add;")
    >>> parser.parse()
    [NewPage(), SetPageClass(text='center, middle'), StartAppend()]
"""

import re
from typing import Any, List, Optional, Tuple

from pygments.token import Keyword, Name, Punctuation, String, Whitespace

from ..models.commands import Command
from .lexer import CommandLexer


class CommandParseError(Exception):
    """Raised when a command region cannot be parsed"""
    pass


class UnknownCommandError(CommandParseError):
    """An identifier that is not a registered command keyword"""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unknown command '{token}'.")


class MissingPayloadError(CommandParseError):
    """A payload command without a well-formed [payload]"""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Content after '{command}' could not be parsed correctly.")


class MissingSeparatorError(CommandParseError):
    """A command that is not terminated by ';'"""

    def __init__(self, remaining: str):
        self.remaining = remaining
        super().__init__(f"Missing ';' before '{remaining}'.")


class TrailingInputError(CommandParseError):
    """Text after the last command that is not a command"""

    def __init__(self, remaining: str):
        self.remaining = remaining
        super().__init__(f"Unable to parse remaining '{remaining}'.")


_PAYLOAD_ESCAPE = re.compile(r'\\([\[\]"\'n])')


def payload_unescape(text: str) -> str:
    r"""
    Replace the payload escapes in a single pass

    Example:
        >>> payload_unescape(r'!\[\]({})\n')
        '![]({})\n'
    """
    return _PAYLOAD_ESCAPE.sub(
        lambda match: '\n' if match.group(1) == 'n' else match.group(1),
        text,
    )


class CommandParser:
    """
    Parser for the commands of one command region

    Handles:
    - Keywords with and without [payload]
    - Escaped brackets, quotes and line breaks in payloads
    - Precise errors for unknown commands, broken payloads, missing ';'
      and trailing text
    """

    def __init__(self, source: str, registry=None):
        """
        Initialize parser with the command region text

        Args:
            source: Text between the command region markers
            registry: Optional CommandRegistry defining the keywords

        Attributes:
            source: Source text being parsed
            tokens: Token stream (position, type, value) from CommandLexer
            index: Current token index
            registry: CommandRegistry used to resolve keywords
        """
        self.source = source
        self.tokens: List[Tuple[int, Any, str]] = []
        self.index = 0

        if registry is None:
            from .registry import CommandRegistry
            registry = CommandRegistry()
        self.registry = registry

    def parse(self) -> List[Command]:
        """
        Parse the whole source into commands

        Returns:
            Commands in source order; empty list for empty/whitespace-only source

        Raises:
            UnknownCommandError: Identifier that is not a keyword
            MissingPayloadError: Payload command without a closed [payload]
            MissingSeparatorError: Command not followed by ';'
            TrailingInputError: Non-command text after the last command
        """
        self.tokens = list(CommandLexer().get_tokens_unprocessed(self.source))
        self.index = 0

        commands = []

        while True:
            self.whitespace_skip()
            token = self.token_peek()
            if token is None or token[1] not in (Keyword, Name):
                break

            name = token[2]
            self.index += 1

            spec = self.registry.spec_get(name)
            if spec is None:
                raise UnknownCommandError(name)

            payload = self.payload_read(name) if spec.has_payload else None
            self.separator_expect()

            commands.append(spec.command_make(payload))

        remaining = self.remaining_get()
        if remaining:
            raise TrailingInputError(remaining)

        return commands

    def token_peek(self) -> Optional[Tuple[int, Any, str]]:
        """Current token, None at end of input"""
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def whitespace_skip(self) -> None:
        """Advance past whitespace tokens"""
        while self.index < len(self.tokens) and self.tokens[self.index][1] in Whitespace:
            self.index += 1

    def remaining_get(self) -> str:
        """Unparsed source from the current token on, stripped"""
        token = self.token_peek()
        if token is None:
            return ""
        return self.source[token[0]:].strip()

    def payload_read(self, name: str) -> str:
        """
        Read a [payload] following a payload keyword

        The payload ends at the first unescaped ']'. An unescaped '[' inside
        the payload, or a missing ']', makes the payload invalid.

        Args:
            name: Keyword the payload belongs to (for error reporting)

        Returns:
            Unescaped payload text

        Raises:
            MissingPayloadError: No '[' after the keyword, nested '[' or no closing ']'
        """
        self.whitespace_skip()
        token = self.token_peek()
        if token is None or token[1] is not Punctuation or token[2] != '[':
            raise MissingPayloadError(name)
        self.index += 1

        parts = []
        while self.index < len(self.tokens):
            _, token_type, value = self.tokens[self.index]
            self.index += 1

            if token_type is Punctuation and value == ']':
                return payload_unescape(''.join(parts))
            if token_type not in String:
                raise MissingPayloadError(name)
            parts.append(value)

        raise MissingPayloadError(name)

    def separator_expect(self) -> None:
        """
        Consume the ';' terminating a command

        Raises:
            MissingSeparatorError: Next token is not ';'
        """
        self.whitespace_skip()
        token = self.token_peek()
        if token is not None and token[1] is Punctuation and token[2] == ';':
            self.index += 1
            return
        raise MissingSeparatorError(self.remaining_get())


def commands_parse(stream: str, registry=None) -> List[Command]:
    """
    Parse the text of a command region

    Convenience wrapper around CommandParser(stream, registry).parse().
    """
    return CommandParser(stream, registry=registry).parse()
