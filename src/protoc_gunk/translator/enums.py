from __future__ import annotations

from typing import List

from protoc_gunk.models import Builder, kind_name
from protoc_gunk.parser.proto_ast import Comment, Enum, EnumField, Option


def can_use_iota(e: Enum) -> bool:
    """Report whether the enum values are exactly 0, 1, 2, ... in order."""
    values = [c for c in e.elements if isinstance(c, EnumField)]
    return all(i == v.integer for i, v in enumerate(values))


def handle_enum(b: Builder, e: Enum) -> None:
    """Convert a proto enum to a Go typed constant block.

    The values are written with iota when they count up from 0 in steps of
    1, otherwise every value gets its explicit integer.
    """
    w: List[str] = []
    b.format(w, 0, e.comment, f"type {e.name} int\n")
    b.format(w, 0, None, "\nconst (\n")

    for c in e.elements:
        if isinstance(c, Option):
            b.warn_option("enum", c)
        elif not isinstance(c, (EnumField, Comment)):
            raise b.error(e.position, f"unexpected type {kind_name(c)} in enum, expected enum field")
    output_iota = can_use_iota(e)

    index = 0
    for c in e.elements:
        if isinstance(c, Comment):
            b.format(w, 1, c)
            continue
        if not isinstance(c, EnumField):
            continue

        for o in c.elements:
            if isinstance(o, Option):
                b.warn_option("enumvalue", o)

        if not output_iota:
            b.format(w, 1, c.comment, f"{c.name} {e.name} = {c.integer}\n")
        elif index == 0:
            b.format(w, 1, c.comment, f"{c.name} {e.name} = iota\n")
        else:
            b.format(w, 1, c.comment, f"{c.name}\n")
        index += 1

    b.format(w, 0, None, ")")
    b.translated_declarations.append("".join(w))
