"""AST node definitions for protobuf (.proto) files.

Every declaration carries its source position and an optional leading
comment. Bodies (``elements``) keep declaration order, including standalone
comments, so translators can walk them as written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class Position:
    line: int = 0
    column: int = 0


@dataclass
class Comment:
    """A comment; ``lines`` hold the text with the comment markers removed."""

    lines: List[str] = field(default_factory=list)
    position: Position = field(default_factory=Position)


@dataclass
class NamedLiteral:
    """One ``key: value`` entry of an aggregate option value."""

    name: str
    literal: Literal
    position: Position = field(default_factory=Position)


@dataclass
class Literal:
    """An option value: scalar, aggregate (``{...}``) or array (``[...]``)."""

    source: str = ""
    is_string: bool = False
    ordered_map: Optional[List[NamedLiteral]] = None
    array: Optional[List[Literal]] = None
    position: Position = field(default_factory=Position)


@dataclass
class Option:
    name: str
    constant: Literal = field(default_factory=Literal)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Syntax:
    value: str
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Package:
    name: str
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Import:
    filename: str
    kind: str = ""
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class NormalField:
    """A field declaration: [label] type name = sequence [options];"""

    name: str
    type: str
    sequence: int
    repeated: bool = False
    optional: bool = False
    required: bool = False
    options: List[Option] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class MapField:
    """A field declaration: map<key_type, type> name = sequence [options];"""

    name: str
    key_type: str
    type: str
    sequence: int
    options: List[Option] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Oneof:
    name: str
    elements: List[Element] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Reserved:
    source: str
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Extensions:
    source: str
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class EnumField:
    """An enum value: NAME = integer [options];"""

    name: str
    integer: int
    elements: List[Option] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Enum:
    name: str
    elements: List[Element] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Message:
    """A message definition, possibly containing nested declarations."""

    name: str
    elements: List[Element] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Extend:
    name: str
    elements: List[Element] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class RPC:
    name: str
    request_type: str
    returns_type: str
    streams_request: bool = False
    streams_returns: bool = False
    elements: List[Element] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


@dataclass
class Service:
    name: str
    elements: List[Element] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    comment: Optional[Comment] = None


Element = Union[
    Comment,
    Option,
    Syntax,
    Package,
    Import,
    NormalField,
    MapField,
    Oneof,
    Reserved,
    Extensions,
    EnumField,
    Enum,
    Message,
    Extend,
    RPC,
    Service,
]


@dataclass
class ProtoFile:
    """Top-level parsed representation of a .proto file."""

    filename: str = ""
    elements: List[Element] = field(default_factory=list)
