from __future__ import annotations

from typing import List, Union

from protoc_gunk.models import Builder, kind_name
from protoc_gunk.naming import camel_to_snake, force_camel_identifier
from protoc_gunk.parser.proto_ast import Comment, Enum, MapField, Message, NormalField, Option
from protoc_gunk.translator.enums import handle_enum
from protoc_gunk.translator.types import go_type


def field_type(field: Union[NormalField, MapField]) -> str:
    """Return the Go type of a message field.

    Map fields are never repeated in proto, so the repeated flag only
    applies to normal fields.
    """
    if isinstance(field, MapField):
        return f"map[{go_type(field.key_type)}]{go_type(field.type)}"
    typ = go_type(field.type)
    if field.repeated:
        typ = "[]" + typ
    return typ


def handle_message_field(b: Builder, w: List[str], field: Union[NormalField, MapField]) -> None:
    """Write one message field as a Gunk struct member."""
    typ = field_type(field)

    for o in field.options:
        b.warn_option("field", o)

    b.format(w, 1, field.comment, f"{force_camel_identifier(field.name)} {typ}")
    b.format(w, 0, None, f' `pb:"{field.sequence}" json:"{camel_to_snake(field.name)}"`\n')


def handle_message(b: Builder, m: Message) -> None:
    """Convert a proto message to a Gunk struct.

    Gunk has no nested declarations, so a nested enum is converted to a
    top-level enum as soon as it is found.
    """
    w: List[str] = []
    b.format(w, 0, m.comment, f"type {m.name} struct {{\n")
    for e in m.elements:
        if isinstance(e, (NormalField, MapField)):
            handle_message_field(b, w, e)
        elif isinstance(e, Enum):
            handle_enum(b, e)
        elif isinstance(e, Comment):
            b.format(w, 1, e)
        elif isinstance(e, Option):
            b.warn_option("message", e)
        else:
            raise b.error(m.position, f"unexpected type {kind_name(e)} in message")
    b.format(w, 0, None, "}")
    b.translated_declarations.append("".join(w))
