import io

import pytest

from protoc_gunk.models import Builder, ConvertError
from protoc_gunk.parser.proto_ast import (
    Comment,
    Enum,
    EnumField,
    MapField,
    Message,
    NormalField,
    Oneof,
    Option,
    Position,
)
from protoc_gunk.translator.messages import handle_message


def _builder() -> Builder:
    return Builder(filename="test.proto", warnings=io.StringIO())


class TestHandleMessage:
    def test_fields(self):
        b = _builder()
        m = Message(name="OrderInfo", elements=[
            NormalField(name="order_id", type="int32", sequence=1),
            NormalField(name="customerName", type="string", sequence=2),
            NormalField(name="tags", type="string", sequence=3, repeated=True),
            MapField(name="counts", key_type="string", type="int64", sequence=4),
        ])
        handle_message(b, m)
        assert b.translated_declarations == [
            "type OrderInfo struct {\n"
            '\tOrderID int `pb:"1" json:"order_id"`\n'
            '\tCustomerName string `pb:"2" json:"customer_name"`\n'
            '\tTags []string `pb:"3" json:"tags"`\n'
            '\tCounts map[string]int64 `pb:"4" json:"counts"`\n'
            "}"
        ]

    def test_comments(self):
        b = _builder()
        m = Message(
            name="Item",
            comment=Comment(lines=[" Item is a thing.", " Really."]),
            elements=[
                NormalField(name="id", type="uint64", sequence=1, comment=Comment(lines=[" The id."])),
                Comment(lines=[" Detached."]),
            ],
        )
        handle_message(b, m)
        assert b.translated_declarations == [
            "// Item is a thing.\n"
            "// Really.\n"
            "type Item struct {\n"
            "\t// The id.\n"
            '\tID uint64 `pb:"1" json:"id"`\n'
            "\t// Detached.\n"
            "}"
        ]

    def test_empty_message(self):
        b = _builder()
        handle_message(b, Message(name="Empty"))
        assert b.translated_declarations == ["type Empty struct {\n}"]

    def test_nested_enum_is_hoisted(self):
        b = _builder()
        m = Message(name="Outer", elements=[
            Enum(name="Kind", elements=[EnumField(name="KIND_A", integer=0)]),
            NormalField(name="kind", type="Kind", sequence=1),
        ])
        handle_message(b, m)
        assert len(b.translated_declarations) == 2
        assert b.translated_declarations[0].startswith("type Kind int\n")
        assert b.translated_declarations[1].startswith("type Outer struct {\n")
        assert "\tKind Kind `pb:\"1\" json:\"kind\"`\n" in b.translated_declarations[1]

    def test_field_and_message_options_warn(self):
        b = _builder()
        m = Message(name="M", elements=[
            Option(name="deprecated", position=Position(2, 3)),
            NormalField(
                name="old", type="string", sequence=1,
                options=[Option(name="deprecated", position=Position(3, 22))],
            ),
            MapField(
                name="m", key_type="string", type="string", sequence=2,
                options=[Option(name="(validate.rules)", position=Position(4, 40))],
            ),
        ])
        handle_message(b, m)
        assert b.warnings.getvalue().splitlines() == [
            'test.proto:2:3: unhandled message option "deprecated"',
            'test.proto:3:22: unhandled field option "deprecated"',
            'test.proto:4:40: unhandled field option "(validate.rules)"',
        ]
        # The fields are still converted.
        assert '\tOld string `pb:"1" json:"old"`\n' in b.translated_declarations[0]
        assert '\tM map[string]string `pb:"2" json:"m"`\n' in b.translated_declarations[0]

    @pytest.mark.parametrize("element", [
        Message(name="Inner"),
        Oneof(name="choice"),
    ])
    def test_unexpected_element(self, element):
        b = _builder()
        m = Message(name="M", position=Position(5, 1), elements=[element])
        with pytest.raises(ConvertError, match=r"^test\.proto:5:1: unexpected type \w+ in message$"):
            handle_message(b, m)
