"""Tokenizer for protobuf (.proto) files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


class ProtoTokenType(Enum):
    # Keywords
    SYNTAX = auto()
    EDITION = auto()
    PACKAGE = auto()
    IMPORT = auto()
    PUBLIC = auto()
    WEAK = auto()
    OPTION = auto()
    MESSAGE = auto()
    ENUM = auto()
    SERVICE = auto()
    RPC = auto()
    RETURNS = auto()
    STREAM = auto()
    REPEATED = auto()
    OPTIONAL = auto()
    REQUIRED = auto()
    MAP = auto()
    ONEOF = auto()
    RESERVED = auto()
    EXTENSIONS = auto()
    EXTEND = auto()

    # Delimiters
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACK = auto()
    RBRACK = auto()
    LANGLE = auto()
    RANGLE = auto()
    SEMICOLON = auto()
    EQUALS = auto()
    COMMA = auto()
    COLON = auto()

    # Literals
    IDENT = auto()
    NUMBER = auto()
    STRING_LIT = auto()

    # Comments
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()

    # Special
    EOF = auto()


_KEYWORDS = {
    "syntax": ProtoTokenType.SYNTAX,
    "edition": ProtoTokenType.EDITION,
    "package": ProtoTokenType.PACKAGE,
    "import": ProtoTokenType.IMPORT,
    "public": ProtoTokenType.PUBLIC,
    "weak": ProtoTokenType.WEAK,
    "option": ProtoTokenType.OPTION,
    "message": ProtoTokenType.MESSAGE,
    "enum": ProtoTokenType.ENUM,
    "service": ProtoTokenType.SERVICE,
    "rpc": ProtoTokenType.RPC,
    "returns": ProtoTokenType.RETURNS,
    "stream": ProtoTokenType.STREAM,
    "repeated": ProtoTokenType.REPEATED,
    "optional": ProtoTokenType.OPTIONAL,
    "required": ProtoTokenType.REQUIRED,
    "map": ProtoTokenType.MAP,
    "oneof": ProtoTokenType.ONEOF,
    "reserved": ProtoTokenType.RESERVED,
    "extensions": ProtoTokenType.EXTENSIONS,
    "extend": ProtoTokenType.EXTEND,
}

KEYWORD_TYPES = frozenset(_KEYWORDS.values())

_PUNCTUATION = {
    "{": ProtoTokenType.LBRACE,
    "}": ProtoTokenType.RBRACE,
    "(": ProtoTokenType.LPAREN,
    ")": ProtoTokenType.RPAREN,
    "[": ProtoTokenType.LBRACK,
    "]": ProtoTokenType.RBRACK,
    "<": ProtoTokenType.LANGLE,
    ">": ProtoTokenType.RANGLE,
    ";": ProtoTokenType.SEMICOLON,
    "=": ProtoTokenType.EQUALS,
    ",": ProtoTokenType.COMMA,
    ":": ProtoTokenType.COLON,
}

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}


@dataclass
class ProtoToken:
    type: ProtoTokenType
    value: str
    line: int
    col: int
    end_line: int = 0

    def __post_init__(self):
        if not self.end_line:
            self.end_line = self.line

    @property
    def is_comment(self) -> bool:
        return self.type in (ProtoTokenType.LINE_COMMENT, ProtoTokenType.BLOCK_COMMENT)


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def tokenize_proto(text: str) -> List[ProtoToken]:
    """Tokenize a protobuf source string into a list of tokens.

    Comments are kept as tokens so the parser can attach them to the
    declarations that follow them.
    """
    tokens: List[ProtoToken] = []
    i = 0
    line = 1
    col = 1
    n = len(text)

    while i < n:
        ch = text[i]

        # Whitespace
        if ch in (" ", "\t", "\r", "\f", "\v"):
            i += 1
            col += 1
            continue

        if ch == "\n":
            i += 1
            line += 1
            col = 1
            continue

        # Single-line comment
        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            start = i + 2
            while i < n and text[i] != "\n":
                i += 1
            value = text[start:i].rstrip("\r")
            tokens.append(ProtoToken(ProtoTokenType.LINE_COMMENT, value, line, col))
            col += i - start + 2
            continue

        # Multi-line comment
        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            start_line = line
            start_col = col
            i += 2
            col += 2
            start = i
            end = n
            while i < n:
                if text[i] == "\n":
                    line += 1
                    col = 1
                elif text[i] == "*" and i + 1 < n and text[i + 1] == "/":
                    end = i
                    i += 2
                    col += 2
                    break
                else:
                    col += 1
                i += 1
            tokens.append(
                ProtoToken(ProtoTokenType.BLOCK_COMMENT, text[start:end], start_line, start_col, line)
            )
            continue

        # Single-character tokens
        if ch in _PUNCTUATION:
            tokens.append(ProtoToken(_PUNCTUATION[ch], ch, line, col))
            i += 1
            col += 1
            continue

        # String literal, either quote style
        if ch in ('"', "'"):
            quote = ch
            start_col = col
            i += 1
            col += 1
            chars: List[str] = []
            while i < n and text[i] != quote and text[i] != "\n":
                if text[i] == "\\" and i + 1 < n:
                    chars.append(_ESCAPES.get(text[i + 1], "\\" + text[i + 1]))
                    i += 2
                    col += 2
                    continue
                chars.append(text[i])
                i += 1
                col += 1
            if i < n and text[i] == quote:
                i += 1  # consume closing quote
                col += 1
            tokens.append(ProtoToken(ProtoTokenType.STRING_LIT, "".join(chars), line, start_col))
            continue

        # Number, optionally signed
        signed = ch in ("-", "+") and i + 1 < n
        if ch.isdigit() or (signed and (text[i + 1].isdigit() or text[i + 1] == ".")) or (
            ch == "." and i + 1 < n and text[i + 1].isdigit()
        ):
            start = i
            start_col = col
            i += 1
            col += 1
            while i < n and (text[i].isalnum() or text[i] == "." or (
                text[i] in ("-", "+") and text[i - 1] in ("e", "E") and not text[start:i].lower().startswith(("0x", "-0x", "+0x"))
            )):
                i += 1
                col += 1
            tokens.append(ProtoToken(ProtoTokenType.NUMBER, text[start:i], line, start_col))
            continue

        # Identifier / keyword. Dotted names are a single token, and a name
        # may start with a dot (".pkg.Type", or ".sub" after "(ext)").
        if _is_ident_start(ch) or (
            ch in (".", "-", "+") and i + 1 < n and _is_ident_start(text[i + 1])
        ):
            start = i
            start_col = col
            i += 1
            col += 1
            while i < n and (text[i].isalnum() or text[i] in ("_", ".")):
                i += 1
                col += 1
            word = text[start:i]
            tok_type = _KEYWORDS.get(word, ProtoTokenType.IDENT)
            tokens.append(ProtoToken(tok_type, word, line, start_col))
            continue

        # Skip any other character
        i += 1
        col += 1

    tokens.append(ProtoToken(ProtoTokenType.EOF, "", line, col))
    return tokens
