"""Convert a parsed proto document into Gunk source."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO

from jinja2 import Environment, FileSystemLoader

from protoc_gunk.models import Builder, kind_name
from protoc_gunk.parser.proto_ast import (
    Comment,
    Element,
    Enum,
    Import,
    Message,
    Option,
    Package,
    ProtoFile,
    Service,
    Syntax,
)
from protoc_gunk.parser.proto_parser import parse_proto
from protoc_gunk.translator.enums import handle_enum
from protoc_gunk.translator.messages import handle_message
from protoc_gunk.translator.package import handle_imports, handle_package
from protoc_gunk.translator.services import handle_service


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
    )


def handle_proto_type(b: Builder, typ: Element) -> None:
    if isinstance(typ, Syntax):
        pass
    elif isinstance(typ, Package):
        # Converted at the very end, together with the go_package option.
        b.pkg = typ
    elif isinstance(typ, Import):
        # All imports are grouped and written out together at the end.
        b.imports.append(typ)
    elif isinstance(typ, Message):
        handle_message(b, typ)
    elif isinstance(typ, Enum):
        handle_enum(b, typ)
    elif isinstance(typ, Service):
        handle_service(b, typ)
    elif isinstance(typ, Option):
        b.pkg_opts.append(typ)
    elif isinstance(typ, Comment):
        w = []
        b.format(w, 0, typ)
        b.translated_declarations.append("".join(w).rstrip("\n"))
    else:
        raise b.error(getattr(typ, "position", None), f"unhandled proto type {kind_name(typ)}")


def translate(proto_file: ProtoFile, warnings: Optional[TextIO] = None) -> str:
    """Translate a parsed proto document to Gunk source.

    Unhandled options are reported on ``warnings`` (stderr by default) and
    skipped. Raises ConvertError when the document cannot be converted.
    """
    b = Builder(filename=proto_file.filename)
    if warnings is not None:
        b.warnings = warnings

    for e in proto_file.elements:
        handle_proto_type(b, e)

    # The package and imports are converted last, and written out before
    # the declarations, which keep the order they were declared in.
    translated_pkg = handle_package(b)
    translated_imports = handle_imports(b)

    template = _get_template_env().get_template("file.gunk.j2")
    return template.render(
        package=translated_pkg,
        imports=translated_imports,
        declarations=b.translated_declarations,
    )


def convert_source(text: str, filename: str = "<input>", warnings: Optional[TextIO] = None) -> str:
    """Parse proto source text and translate it to Gunk."""
    return translate(parse_proto(text, filename=filename), warnings=warnings)
