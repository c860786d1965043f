"""Recursive descent parser for protobuf (.proto) files.

Consumes a token stream from proto_tokenizer and produces proto AST nodes.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .proto_ast import (
    RPC,
    Comment,
    Element,
    Enum,
    EnumField,
    Extend,
    Extensions,
    Import,
    Literal,
    MapField,
    Message,
    NamedLiteral,
    NormalField,
    Oneof,
    Option,
    Package,
    Position,
    ProtoFile,
    Reserved,
    Service,
    Syntax,
)
from .proto_tokenizer import KEYWORD_TYPES, ProtoToken, ProtoTokenType


class ProtoParseError(Exception):
    """Raised when the parser encounters unexpected input."""

    def __init__(self, message: str, token: ProtoToken | None = None):
        if token:
            super().__init__(f"Line {token.line}:{token.col}: {message}")
        else:
            super().__init__(message)


def _position(tok: ProtoToken) -> Position:
    return Position(line=tok.line, column=tok.col)


def _parse_int(tok: ProtoToken) -> int:
    text = tok.value
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    try:
        if text.lower().startswith("0x"):
            return sign * int(text[2:], 16)
        if len(text) > 1 and text.startswith("0"):
            return sign * int(text[1:], 8)
        return sign * int(text)
    except ValueError:
        raise ProtoParseError(f"Expected integer, got {tok.value!r}", tok) from None


class ProtoParser:
    """Recursive descent parser for .proto files."""

    def __init__(self, tokens: List[ProtoToken], filename: str = ""):
        self._tokens = tokens
        self._filename = filename
        self._pos = 0
        self._last_line = 0

    # -- public API --

    def parse(self) -> ProtoFile:
        """Parse the full token stream into a ProtoFile AST."""
        elements: List[Element] = []

        while True:
            comment = self._collect_comments(elements)
            if self._at_end():
                break

            tt = self._peek().type
            if tt in (ProtoTokenType.SYNTAX, ProtoTokenType.EDITION):
                elements.append(self._parse_syntax(comment))
            elif tt == ProtoTokenType.PACKAGE:
                elements.append(self._parse_package(comment))
            elif tt == ProtoTokenType.IMPORT:
                elements.append(self._parse_import(comment))
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement(comment))
            elif tt == ProtoTokenType.MESSAGE:
                elements.append(self._parse_message(comment))
            elif tt == ProtoTokenType.ENUM:
                elements.append(self._parse_enum(comment))
            elif tt == ProtoTokenType.SERVICE:
                elements.append(self._parse_service(comment))
            elif tt == ProtoTokenType.EXTEND:
                elements.append(self._parse_extend(comment))
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                tok = self._peek()
                raise ProtoParseError(f"Unexpected {tok.type.name} ({tok.value!r}) at top level", tok)

        return ProtoFile(filename=self._filename, elements=elements)

    # -- comments --

    def _collect_comments(self, body: List[Element]) -> Optional[Comment]:
        """Consume comment tokens ahead of the next declaration.

        Returns the comment that ends on the line directly above the next
        declaration; every other comment is appended to ``body`` as a
        standalone element. Comments on the same line as the previous token
        are inline comments and are dropped.
        """
        groups: List[Tuple[Comment, int, bool]] = []
        while self._tokens[self._pos].is_comment:
            tok = self._tokens[self._pos]
            self._pos += 1
            if tok.line == self._last_line:
                continue
            is_line = tok.type == ProtoTokenType.LINE_COMMENT
            if is_line and groups and groups[-1][2] and groups[-1][1] + 1 == tok.line:
                comment, _, _ = groups[-1]
                comment.lines.append(tok.value)
                groups[-1] = (comment, tok.end_line, True)
                continue
            lines = [tok.value] if is_line else tok.value.split("\n")
            groups.append((Comment(lines=lines, position=_position(tok)), tok.end_line, is_line))

        leading = None
        nxt = self._tokens[self._pos]
        if (
            groups
            and nxt.type not in (ProtoTokenType.RBRACE, ProtoTokenType.EOF)
            and groups[-1][1] + 1 == nxt.line
        ):
            leading = groups.pop()[0]
        body.extend(comment for comment, _, _ in groups)
        return leading

    # -- top-level statements --

    def _parse_syntax(self, comment: Optional[Comment]) -> Syntax:
        """Parse: (SYNTAX | EDITION) EQUALS STRING_LIT SEMICOLON"""
        tok = self._advance()
        self._expect(ProtoTokenType.EQUALS)
        value = self._expect(ProtoTokenType.STRING_LIT)
        self._expect(ProtoTokenType.SEMICOLON)
        return Syntax(value=value.value, position=_position(tok), comment=comment)

    def _parse_package(self, comment: Optional[Comment]) -> Package:
        """Parse: PACKAGE IDENT SEMICOLON"""
        tok = self._expect(ProtoTokenType.PACKAGE)
        name = self._expect_name()
        self._expect(ProtoTokenType.SEMICOLON)
        return Package(name=name.value, position=_position(tok), comment=comment)

    def _parse_import(self, comment: Optional[Comment]) -> Import:
        """Parse: IMPORT [PUBLIC | WEAK] STRING_LIT SEMICOLON"""
        tok = self._expect(ProtoTokenType.IMPORT)
        kind = ""
        if self._peek().type in (ProtoTokenType.PUBLIC, ProtoTokenType.WEAK):
            kind = self._advance().value
        filename = self._expect(ProtoTokenType.STRING_LIT)
        self._expect(ProtoTokenType.SEMICOLON)
        return Import(filename=filename.value, kind=kind, position=_position(tok), comment=comment)

    # -- options --

    def _parse_option_statement(self, comment: Optional[Comment]) -> Option:
        """Parse: OPTION name EQUALS constant SEMICOLON"""
        tok = self._expect(ProtoTokenType.OPTION)
        name = self._parse_option_name()
        self._expect(ProtoTokenType.EQUALS)
        constant = self._parse_literal()
        self._expect(ProtoTokenType.SEMICOLON)
        return Option(name=name, constant=constant, position=_position(tok), comment=comment)

    def _parse_option_name(self) -> str:
        """Parse an option name: ``ident``, ``(full.ident)`` or ``(ext).sub``."""
        if self._peek().type == ProtoTokenType.LPAREN:
            self._advance()
            name = "(" + self._expect_name().value + ")"
            self._expect(ProtoTokenType.RPAREN)
        else:
            name = self._expect_name().value
        while self._peek().type == ProtoTokenType.IDENT and self._peek().value.startswith("."):
            name += self._advance().value
        return name

    def _parse_field_options(self) -> List[Option]:
        """Parse: LBRACK name EQUALS constant (COMMA name EQUALS constant)* RBRACK"""
        options: List[Option] = []
        if self._peek().type != ProtoTokenType.LBRACK:
            return options
        self._advance()
        while True:
            tok = self._peek()
            name = self._parse_option_name()
            self._expect(ProtoTokenType.EQUALS)
            constant = self._parse_literal()
            options.append(Option(name=name, constant=constant, position=_position(tok)))
            if self._peek().type != ProtoTokenType.COMMA:
                break
            self._advance()
        self._expect(ProtoTokenType.RBRACK)
        return options

    def _parse_literal(self) -> Literal:
        """Parse an option value: string, number, identifier, aggregate or array."""
        tok = self._peek()
        pos = _position(tok)
        tt = tok.type

        if tt == ProtoTokenType.STRING_LIT:
            parts = []
            while self._peek().type == ProtoTokenType.STRING_LIT:
                parts.append(self._advance().value)
            return Literal(source="".join(parts), is_string=True, position=pos)
        if tt == ProtoTokenType.NUMBER or self._is_name(tok):
            self._advance()
            return Literal(source=tok.value, position=pos)
        if tt == ProtoTokenType.LBRACE:
            return self._parse_aggregate()
        if tt == ProtoTokenType.LBRACK:
            self._advance()
            items: List[Literal] = []
            while self._peek().type != ProtoTokenType.RBRACK:
                items.append(self._parse_literal())
                if self._peek().type != ProtoTokenType.COMMA:
                    break
                self._advance()
            self._expect(ProtoTokenType.RBRACK)
            return Literal(array=items, position=pos)

        raise ProtoParseError(f"Expected constant, got {tt.name} ({tok.value!r})", tok)

    def _parse_aggregate(self) -> Literal:
        """Parse: LBRACE (name [COLON] literal [COMMA | SEMICOLON])* RBRACE"""
        tok = self._expect(ProtoTokenType.LBRACE)
        entries: List[NamedLiteral] = []
        while not self._at_end() and self._peek().type != ProtoTokenType.RBRACE:
            name_tok = self._peek()
            if name_tok.type == ProtoTokenType.LBRACK:
                # Extension field name: [pkg.ext]
                self._advance()
                name = "[" + self._expect_name().value + "]"
                self._expect(ProtoTokenType.RBRACK)
            else:
                name = self._expect_name().value
            if self._peek().type == ProtoTokenType.COLON:
                self._advance()
            value = self._parse_literal()
            entries.append(NamedLiteral(name=name, literal=value, position=_position(name_tok)))
            if self._peek().type in (ProtoTokenType.COMMA, ProtoTokenType.SEMICOLON):
                self._advance()
        self._expect(ProtoTokenType.RBRACE)
        return Literal(ordered_map=entries, position=_position(tok))

    # -- message parsing --

    def _parse_message(self, comment: Optional[Comment]) -> Message:
        """Parse: MESSAGE IDENT LBRACE body RBRACE"""
        tok = self._expect(ProtoTokenType.MESSAGE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        elements = self._parse_message_body()
        self._expect(ProtoTokenType.RBRACE)
        return Message(name=name_tok.value, elements=elements, position=_position(tok), comment=comment)

    def _parse_extend(self, comment: Optional[Comment]) -> Extend:
        """Parse: EXTEND IDENT LBRACE body RBRACE"""
        tok = self._expect(ProtoTokenType.EXTEND)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        elements = self._parse_message_body()
        self._expect(ProtoTokenType.RBRACE)
        return Extend(name=name_tok.value, elements=elements, position=_position(tok), comment=comment)

    def _parse_message_body(self) -> List[Element]:
        """Parse the contents between { and } of a message."""
        elements: List[Element] = []

        while True:
            comment = self._collect_comments(elements)
            if self._at_end() or self._peek().type == ProtoTokenType.RBRACE:
                break
            tt = self._peek().type

            if tt == ProtoTokenType.MESSAGE:
                elements.append(self._parse_message(comment))
            elif tt == ProtoTokenType.ENUM:
                elements.append(self._parse_enum(comment))
            elif tt == ProtoTokenType.EXTEND:
                elements.append(self._parse_extend(comment))
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement(comment))
            elif tt == ProtoTokenType.ONEOF:
                elements.append(self._parse_oneof(comment))
            elif tt == ProtoTokenType.MAP and self._peek(1).type == ProtoTokenType.LANGLE:
                elements.append(self._parse_map_field(comment))
            elif tt == ProtoTokenType.RESERVED:
                tok = self._advance()
                source = self._skip_statement()
                elements.append(Reserved(source=source, position=_position(tok), comment=comment))
            elif tt == ProtoTokenType.EXTENSIONS:
                tok = self._advance()
                source = self._skip_statement()
                elements.append(Extensions(source=source, position=_position(tok), comment=comment))
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                elements.append(self._parse_field(comment))

        return elements

    def _parse_field(self, comment: Optional[Comment]) -> NormalField:
        """Parse: [label] IDENT(type) IDENT(name) EQUALS NUMBER [options] SEMICOLON"""
        first = self._peek()
        labels = {"repeated": False, "optional": False, "required": False}
        if first.type in (ProtoTokenType.REPEATED, ProtoTokenType.OPTIONAL, ProtoTokenType.REQUIRED) and (
            self._is_name(self._peek(1)) and self._peek(2).type != ProtoTokenType.EQUALS
        ):
            labels[self._advance().value] = True

        type_tok = self._expect_name()
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.EQUALS)
        num_tok = self._expect(ProtoTokenType.NUMBER)
        options = self._parse_field_options()
        self._expect(ProtoTokenType.SEMICOLON)

        return NormalField(
            name=name_tok.value,
            type=type_tok.value,
            sequence=_parse_int(num_tok),
            repeated=labels["repeated"],
            optional=labels["optional"],
            required=labels["required"],
            options=options,
            position=_position(first),
            comment=comment,
        )

    def _parse_map_field(self, comment: Optional[Comment]) -> MapField:
        """Parse: MAP LANGLE type COMMA type RANGLE IDENT EQUALS NUMBER [options] SEMICOLON"""
        tok = self._expect(ProtoTokenType.MAP)
        self._expect(ProtoTokenType.LANGLE)
        key_type = self._expect_name()
        self._expect(ProtoTokenType.COMMA)
        value_type = self._expect_name()
        self._expect(ProtoTokenType.RANGLE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.EQUALS)
        num_tok = self._expect(ProtoTokenType.NUMBER)
        options = self._parse_field_options()
        self._expect(ProtoTokenType.SEMICOLON)

        return MapField(
            name=name_tok.value,
            key_type=key_type.value,
            type=value_type.value,
            sequence=_parse_int(num_tok),
            options=options,
            position=_position(tok),
            comment=comment,
        )

    def _parse_oneof(self, comment: Optional[Comment]) -> Oneof:
        """Parse: ONEOF IDENT LBRACE (field | option)* RBRACE"""
        tok = self._expect(ProtoTokenType.ONEOF)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        elements: List[Element] = []
        while True:
            field_comment = self._collect_comments(elements)
            if self._at_end() or self._peek().type == ProtoTokenType.RBRACE:
                break
            if self._peek().type == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement(field_comment))
            elif self._peek().type == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                elements.append(self._parse_field(field_comment))
        self._expect(ProtoTokenType.RBRACE)
        return Oneof(name=name_tok.value, elements=elements, position=_position(tok), comment=comment)

    # -- enum parsing --

    def _parse_enum(self, comment: Optional[Comment]) -> Enum:
        """Parse: ENUM IDENT LBRACE (value | option | reserved)* RBRACE"""
        tok = self._expect(ProtoTokenType.ENUM)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        elements: List[Element] = []

        while True:
            value_comment = self._collect_comments(elements)
            if self._at_end() or self._peek().type == ProtoTokenType.RBRACE:
                break
            tt = self._peek().type
            if tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement(value_comment))
            elif tt == ProtoTokenType.RESERVED:
                res_tok = self._advance()
                source = self._skip_statement()
                elements.append(Reserved(source=source, position=_position(res_tok), comment=value_comment))
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                elements.append(self._parse_enum_field(value_comment))

        self._expect(ProtoTokenType.RBRACE)
        return Enum(name=name_tok.value, elements=elements, position=_position(tok), comment=comment)

    def _parse_enum_field(self, comment: Optional[Comment]) -> EnumField:
        """Parse: IDENT EQUALS NUMBER [options] SEMICOLON"""
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.EQUALS)
        num_tok = self._expect(ProtoTokenType.NUMBER)
        options = self._parse_field_options()
        self._expect(ProtoTokenType.SEMICOLON)
        return EnumField(
            name=name_tok.value,
            integer=_parse_int(num_tok),
            elements=list(options),
            position=_position(name_tok),
            comment=comment,
        )

    # -- service parsing --

    def _parse_service(self, comment: Optional[Comment]) -> Service:
        """Parse: SERVICE IDENT LBRACE (rpc | option)* RBRACE"""
        tok = self._expect(ProtoTokenType.SERVICE)
        name_tok = self._expect_name()
        self._expect(ProtoTokenType.LBRACE)
        elements: List[Element] = []

        while True:
            rpc_comment = self._collect_comments(elements)
            if self._at_end() or self._peek().type == ProtoTokenType.RBRACE:
                break
            tt = self._peek().type
            if tt == ProtoTokenType.RPC:
                elements.append(self._parse_rpc(rpc_comment))
            elif tt == ProtoTokenType.OPTION:
                elements.append(self._parse_option_statement(rpc_comment))
            elif tt == ProtoTokenType.SEMICOLON:
                self._advance()
            else:
                bad = self._peek()
                raise ProtoParseError(f"Unexpected {bad.type.name} ({bad.value!r}) in service", bad)

        self._expect(ProtoTokenType.RBRACE)
        return Service(name=name_tok.value, elements=elements, position=_position(tok), comment=comment)

    def _parse_rpc(self, comment: Optional[Comment]) -> RPC:
        """Parse: RPC IDENT LPAREN [STREAM] type RPAREN RETURNS LPAREN [STREAM] type RPAREN (body | SEMICOLON)"""
        tok = self._expect(ProtoTokenType.RPC)
        name_tok = self._expect_name()
        streams_request, request_type = self._parse_rpc_type()
        self._expect(ProtoTokenType.RETURNS)
        streams_returns, returns_type = self._parse_rpc_type()

        elements: List[Element] = []
        if self._peek().type == ProtoTokenType.LBRACE:
            self._advance()
            discarded: List[Element] = []
            while True:
                opt_comment = self._collect_comments(discarded)
                if self._at_end() or self._peek().type == ProtoTokenType.RBRACE:
                    break
                if self._peek().type == ProtoTokenType.SEMICOLON:
                    self._advance()
                    continue
                elements.append(self._parse_option_statement(opt_comment))
            self._expect(ProtoTokenType.RBRACE)
            if self._tokens[self._pos].type == ProtoTokenType.SEMICOLON:
                self._advance()
        else:
            self._expect(ProtoTokenType.SEMICOLON)

        return RPC(
            name=name_tok.value,
            request_type=request_type,
            returns_type=returns_type,
            streams_request=streams_request,
            streams_returns=streams_returns,
            elements=elements,
            position=_position(tok),
            comment=comment,
        )

    def _parse_rpc_type(self) -> Tuple[bool, str]:
        """Parse: LPAREN [STREAM] type RPAREN"""
        self._expect(ProtoTokenType.LPAREN)
        stream = False
        if self._peek().type == ProtoTokenType.STREAM and self._peek(1).type != ProtoTokenType.RPAREN:
            self._advance()
            stream = True
        type_tok = self._expect_name()
        self._expect(ProtoTokenType.RPAREN)
        return stream, type_tok.value

    # -- skip helpers --

    def _skip_statement(self) -> str:
        """Skip tokens until (and including) the next semicolon, returning their text."""
        parts: List[str] = []
        while not self._at_end():
            tok = self._advance()
            if tok.type == ProtoTokenType.SEMICOLON:
                break
            parts.append(f'"{tok.value}"' if tok.type == ProtoTokenType.STRING_LIT else tok.value)
        return " ".join(parts)

    # -- token helpers --

    def _skip_comments(self) -> None:
        while self._tokens[self._pos].is_comment:
            self._pos += 1

    def _peek(self, offset: int = 0) -> ProtoToken:
        self._skip_comments()
        pos = self._pos
        for _ in range(offset):
            if self._tokens[pos].type == ProtoTokenType.EOF:
                break
            pos += 1
            while self._tokens[pos].is_comment:
                pos += 1
        return self._tokens[pos]

    def _advance(self) -> ProtoToken:
        tok = self._peek()
        if tok.type != ProtoTokenType.EOF:
            self._pos += 1
            self._last_line = tok.end_line
        return tok

    def _expect(self, expected: ProtoTokenType) -> ProtoToken:
        tok = self._peek()
        if tok.type != expected:
            raise ProtoParseError(
                f"Expected {expected.name}, got {tok.type.name} ({tok.value!r})",
                tok,
            )
        return self._advance()

    @staticmethod
    def _is_name(tok: ProtoToken) -> bool:
        return tok.type == ProtoTokenType.IDENT or tok.type in KEYWORD_TYPES

    def _expect_name(self) -> ProtoToken:
        """Expect an identifier; keywords are valid names in most positions."""
        tok = self._peek()
        if not self._is_name(tok):
            raise ProtoParseError(f"Expected IDENT, got {tok.type.name} ({tok.value!r})", tok)
        return self._advance()

    def _at_end(self) -> bool:
        return self._peek().type == ProtoTokenType.EOF
