"""
Lexical analyzer for templates.

Splits template text into TEXT runs and the expression tokens found
inside ``{{ ... }}`` and ``{% ... %}`` delimiters. Tracks line/column
for every token so parse errors point at the offending spot.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .tokens import Token, TokenType
from ..errors import ParseError

logger = logging.getLogger(__name__)


class TemplateLexer:
    """
    Delimiter-aware lexer.

    Outside delimiters everything is text. Inside delimiters whitespace
    is skipped and expression tokens are matched in priority order.
    """

    # Expression token specs: (regex_pattern, token_type); order matters
    TOKEN_SPECS: List[Tuple[str, TokenType]] = [
        (r'-?\d+(?:\.\d+)?(?![\w])', TokenType.NUMBER),
        (r'[A-Za-z_]\w*(?:-\w+)*\??', TokenType.IDENTIFIER),
        (r'==|!=|<>|<=|>=|<|>', TokenType.OPERATOR),
        (r'=', TokenType.EQUALS),
        (r'\.', TokenType.DOT),
        (r'\|', TokenType.PIPE),
        (r':', TokenType.COLON),
        (r',', TokenType.COMMA),
        (r'\[', TokenType.LBRACKET),
        (r'\]', TokenType.RBRACKET),
        (r'\(', TokenType.LPAREN),
        (r'\)', TokenType.RPAREN),
    ]

    _WHITESPACE = re.compile(r'\s+')
    _OPEN = re.compile(r'\{\{|\{%')

    # Tags whose body is kept as raw text up to the closing tag
    RAW_BLOCKS = ("comment",)

    def __init__(self):
        self._compiled = [(re.compile(p), t) for p, t in self.TOKEN_SPECS]

        # Positional state
        self.text = ""
        self.position = 0
        self.line = 1
        self.column = 1
        self.length = 0

    def tokenize(self, text: str) -> List[Token]:
        """
        Tokenizes template text.

        Args:
            text: Template source

        Returns:
            Token list terminated by EOF

        Raises:
            ParseError: On unclosed delimiters, unterminated strings
                        or unexpected characters
        """
        self._initialize(text)
        tokens: List[Token] = []

        while self.position < self.length:
            match = self._OPEN.search(self.text, self.position)
            end = match.start() if match else self.length

            if end > self.position:
                tokens.append(self._make(TokenType.TEXT, self.text[self.position:end]))

            if match is None:
                break

            delimited = self._tokenize_delimited(match.group(0))
            tokens.extend(delimited)

            raw_name = self._raw_block_name(delimited)
            if raw_name:
                raw = self._read_raw_body(raw_name)
                if raw is not None:
                    tokens.append(raw)

        tokens.append(Token(TokenType.EOF, "", self.position, self.line, self.column))
        logger.debug(f"Tokenized template into {len(tokens)} tokens")
        return tokens

    def _initialize(self, text: str) -> None:
        self.text = text
        self.position = 0
        self.line = 1
        self.column = 1
        self.length = len(text)

    def _tokenize_delimited(self, opener: str) -> List[Token]:
        """Tokenizes one ``{{ ... }}`` or ``{% ... %}`` region."""
        is_output = opener == "{{"
        start_type = TokenType.OUTPUT_START if is_output else TokenType.TAG_START
        end_type = TokenType.OUTPUT_END if is_output else TokenType.TAG_END
        closer = "}}" if is_output else "%}"

        start_line, start_column, start_position = self.line, self.column, self.position
        trim_left = self.text.startswith("-", self.position + 2)
        value = opener + ("-" if trim_left else "")
        tokens = [self._make(start_type, value, trim=trim_left)]

        while True:
            self._skip_whitespace()

            if self.position >= self.length:
                raise ParseError(
                    f"Unclosed '{opener}': expected '{closer}' before end of template",
                    start_position, start_line, start_column,
                )

            if self.text.startswith("-" + closer, self.position):
                tokens.append(self._make(end_type, "-" + closer, trim=True))
                return tokens
            if self.text.startswith(closer, self.position):
                tokens.append(self._make(end_type, closer))
                return tokens

            tokens.append(self._match_expression_token())

    def _raw_block_name(self, delimited: List[Token]) -> Optional[str]:
        """Name of the raw block opened by a bare ``{% name %}`` tag, if any."""
        if len(delimited) != 3 or delimited[0].type != TokenType.TAG_START:
            return None
        name = delimited[1].value.lower()
        if delimited[1].type == TokenType.IDENTIFIER and name in self.RAW_BLOCKS:
            return name
        return None

    def _read_raw_body(self, name: str) -> Optional[Token]:
        """
        Takes everything up to ``{% end<name> %}`` as one TEXT token.

        An unclosed block is left to the parser to report.
        """
        closing = re.compile(r'\{%-?\s*end' + name + r'\s*-?%\}', re.IGNORECASE)
        match = closing.search(self.text, self.position)
        end = match.start() if match else self.length
        if end == self.position:
            return None
        return self._make(TokenType.TEXT, self.text[self.position:end])

    def _match_expression_token(self) -> Token:
        char = self.text[self.position]

        if char in ("'", '"'):
            return self._read_string(char)

        for pattern, token_type in self._compiled:
            m = pattern.match(self.text, self.position)
            if m:
                return self._make(token_type, m.group(0))

        raise ParseError(f"Unexpected character {char!r}", self.position, self.line, self.column)

    def _read_string(self, quote: str) -> Token:
        """Reads a quoted literal; backslash escapes the next character."""
        start_line, start_column, start_position = self.line, self.column, self.position
        pos = self.position + 1
        chars: List[str] = []

        while pos < self.length:
            ch = self.text[pos]
            if ch == "\\" and pos + 1 < self.length:
                chars.append(self.text[pos + 1])
                pos += 2
                continue
            if ch == quote:
                raw_len = pos + 1 - self.position
                self._advance(raw_len)
                return Token(TokenType.STRING, "".join(chars), start_position, start_line, start_column)
            chars.append(ch)
            pos += 1

        raise ParseError("Unterminated string literal", start_position, start_line, start_column)

    def _skip_whitespace(self) -> None:
        m = self._WHITESPACE.match(self.text, self.position)
        if m:
            self._advance(len(m.group(0)))

    def _make(self, token_type: TokenType, value: str, trim: bool = False) -> Token:
        """Creates a token at the current position and advances past it."""
        token = Token(token_type, value, self.position, self.line, self.column, trim)
        self._advance(len(value))
        return token

    def _advance(self, count: int) -> None:
        """
        Moves the position forward, keeping line/column in sync.

        Args:
            count: Number of characters to advance
        """
        for _ in range(count):
            if self.position >= self.length:
                break

            if self.text[self.position] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1

            self.position += 1


def line_column(text: str, position: int) -> Tuple[int, int]:
    """
    Converts a character offset to 1-based line/column.

    Args:
        text: Source text
        position: Offset into the text

    Returns:
        (line, column)
    """
    line, column = 1, 1
    for ch in text[:max(0, position)]:
        if ch == "\n":
            line += 1
            column = 1
        else:
            column += 1
    return line, column


def tokenize(text: str, lexer: Optional[TemplateLexer] = None) -> List[Token]:
    """Convenience wrapper around TemplateLexer.tokenize."""
    return (lexer or TemplateLexer()).tokenize(text)


__all__ = ["TemplateLexer", "tokenize", "line_column"]
