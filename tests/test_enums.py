import io

import pytest

from protoc_gunk.models import Builder, ConvertError
from protoc_gunk.parser.proto_ast import Comment, Enum, EnumField, Option, Position, Reserved
from protoc_gunk.translator.enums import can_use_iota, handle_enum


def _make_enum(name: str, values: list, **kwargs) -> Enum:
    elements = [EnumField(name=n, integer=i) for n, i in values]
    return Enum(name=name, elements=elements, **kwargs)


def _builder() -> Builder:
    return Builder(filename="test.proto", warnings=io.StringIO())


class TestStrategy:
    @pytest.mark.parametrize("integers", [[0], [0, 1], [0, 1, 2, 3]])
    def test_sequential_from_zero_uses_iota(self, integers):
        e = _make_enum("E", [(f"V{i}", v) for i, v in enumerate(integers)])
        assert can_use_iota(e) is True

    @pytest.mark.parametrize("integers", [[0, 2, 3], [1, 2, 3], [1], [0, 0], [0, 1, 3]])
    def test_anything_else_is_explicit(self, integers):
        e = _make_enum("E", [(f"V{i}", v) for i, v in enumerate(integers)])
        assert can_use_iota(e) is False

    def test_options_do_not_count_as_positions(self):
        e = _make_enum("E", [("A", 0), ("B", 1)])
        e.elements.insert(0, Option(name="allow_alias"))
        assert can_use_iota(e) is True


class TestHandleEnum:
    def test_iota(self):
        b = _builder()
        handle_enum(b, _make_enum("Status", [("UNKNOWN", 0), ("OK", 1), ("FAILED", 2)]))
        assert b.translated_declarations == [
            "type Status int\n"
            "\n"
            "const (\n"
            "\tUNKNOWN Status = iota\n"
            "\tOK\n"
            "\tFAILED\n"
            ")"
        ]

    def test_explicit(self):
        b = _builder()
        handle_enum(b, _make_enum("Code", [("A", 1), ("B", 2), ("C", 4)]))
        assert b.translated_declarations == [
            "type Code int\n"
            "\n"
            "const (\n"
            "\tA Code = 1\n"
            "\tB Code = 2\n"
            "\tC Code = 4\n"
            ")"
        ]

    def test_comments(self):
        b = _builder()
        e = Enum(
            name="Kind",
            comment=Comment(lines=[" Kind of thing."]),
            elements=[
                EnumField(name="KIND_UNKNOWN", integer=0, comment=Comment(lines=[" Not set."])),
                Comment(lines=[" Detached."]),
                EnumField(name="KIND_BIG", integer=1),
            ],
        )
        handle_enum(b, e)
        assert b.translated_declarations == [
            "// Kind of thing.\n"
            "type Kind int\n"
            "\n"
            "const (\n"
            "\t// Not set.\n"
            "\tKIND_UNKNOWN Kind = iota\n"
            "\t// Detached.\n"
            "\tKIND_BIG\n"
            ")"
        ]

    def test_options_are_warned_and_skipped(self):
        b = _builder()
        e = _make_enum("E", [("A", 0)])
        e.elements.insert(0, Option(name="allow_alias", position=Position(2, 3)))
        e.elements[1].elements.append(Option(name="(custom)", position=Position(3, 9)))
        handle_enum(b, e)

        warnings = b.warnings.getvalue().splitlines()
        assert warnings == [
            'test.proto:2:3: unhandled enum option "allow_alias"',
            'test.proto:3:9: unhandled enumvalue option "(custom)"',
        ]
        assert "allow_alias" not in b.translated_declarations[0]
        assert "\tA E = iota\n" in b.translated_declarations[0]

    def test_unexpected_element(self):
        b = _builder()
        e = _make_enum("E", [("A", 0)], position=Position(7, 1))
        e.elements.append(Reserved(source="2"))
        with pytest.raises(ConvertError) as exc:
            handle_enum(b, e)
        assert str(exc.value) == "test.proto:7:1: unexpected type Reserved in enum, expected enum field"
        assert b.translated_declarations == []
