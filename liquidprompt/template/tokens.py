"""
Lexical types for the template engine.

Defines the token kinds produced by the lexer and the positional token
record used for error diagnostics.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """Token kinds in a template."""

    # Plain text content between delimiters
    TEXT = "TEXT"

    # Delimiters
    OUTPUT_START = "OUTPUT_START"            # {{ or {{-
    OUTPUT_END = "OUTPUT_END"                # }} or -}}
    TAG_START = "TAG_START"                  # {% or {%-
    TAG_END = "TAG_END"                      # %} or -%}

    # Expression tokens (only inside delimiters)
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"
    OPERATOR = "OPERATOR"                    # == != <> < > <= >=
    DOT = "DOT"                              # .
    PIPE = "PIPE"                            # |
    COLON = "COLON"                          # :
    COMMA = "COMMA"                          # ,
    EQUALS = "EQUALS"                        # =
    LBRACKET = "LBRACKET"                    # [
    RBRACKET = "RBRACKET"                    # ]
    LPAREN = "LPAREN"                        # (
    RPAREN = "RPAREN"                        # )

    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """
    Token with positional information for precise error diagnostics.

    For delimiter tokens ``trim`` is True when the whitespace-control
    dash is present (``{{-``, ``-%}``).
    """
    type: TokenType
    value: str
    position: int        # Offset in the source text
    line: int            # Line number (1-based)
    column: int          # Column number (1-based)
    trim: bool = False

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.line}:{self.column})"


__all__ = ["TokenType", "Token"]
