from __future__ import annotations

import posixpath
from typing import Callable, Dict, List, Optional, Tuple

from protoc_gunk.models import Builder, go_quote
from protoc_gunk.parser.proto_ast import Option, Position

GO_PACKAGE_OPTION = "go_package"


def gen_annotation(name: str, value: str) -> str:
    return f"{name}({value})"


def gen_annotation_string(name: str, value: str) -> str:
    return f"{name}({go_quote(value)})"


_FILE = "github.com/gunk/opt/file"
_JAVA = "github.com/gunk/opt/file/java"
_SWIFT = "github.com/gunk/opt/file/swift"
_CSHARP = "github.com/gunk/opt/file/csharp"
_OBJC = "github.com/gunk/opt/file/objc"
_PHP = "github.com/gunk/opt/file/php"
_CC = "github.com/gunk/opt/file/cc"

# Proto file option -> (gunk import, annotation name, annotation renderer)
FILE_OPTIONS: Dict[str, Tuple[str, str, Callable[[str, str], str]]] = {
    "deprecated": (_FILE, "Deprecated", gen_annotation),
    "optimize_for": (_FILE, "OptimizeFor", gen_annotation),
    "java_package": (_JAVA, "Package", gen_annotation_string),
    "java_outer_classname": (_JAVA, "OuterClassname", gen_annotation_string),
    "java_multiple_files": (_JAVA, "MultipleFiles", gen_annotation),
    "java_string_check_utf8": (_JAVA, "StringCheckUtf8", gen_annotation),
    "java_generic_services": (_JAVA, "GenericServices", gen_annotation),
    "swift_prefix": (_SWIFT, "Prefix", gen_annotation_string),
    "csharp_namespace": (_CSHARP, "Namespace", gen_annotation_string),
    "objc_class_prefix": (_OBJC, "ClassPrefix", gen_annotation_string),
    "php_generic_services": (_PHP, "GenericServices", gen_annotation),
    "cc_generic_services": (_CC, "GenericServices", gen_annotation),
    "cc_enable_arenas": (_CC, "EnableArenas", gen_annotation),
}


def file_annotation(b: Builder, o: Option) -> str:
    """Return the gunk annotation for a file option, marking its import as used."""
    if o.name not in FILE_OPTIONS:
        raise b.error(o.position, f"{go_quote(o.name)} is an unhandled proto file option")
    impt, name, render = FILE_OPTIONS[o.name]
    b.imports_used[impt] = True
    return f"{posixpath.basename(impt)}.{render(name, o.constant.source)}"


def handle_package(b: Builder) -> str:
    """Convert the proto package and file options to the Gunk file header.

    File options become +gunk annotations above the package clause, except
    go_package which is kept as a trailing comment on the package clause.
    """
    go_package: Optional[Option] = None
    annotations: List[str] = []
    for o in b.pkg_opts:
        if o.name == GO_PACKAGE_OPTION:
            go_package = o
            continue
        annotations.append(file_annotation(b, o))

    p = b.pkg
    if p is None:
        raise b.error(Position(line=1, column=1), "missing package declaration")

    w: List[str] = []
    # The annotations should be the first lines in the file.
    for a in annotations:
        b.format(w, 0, None, f"// +gunk {a}\n")

    b.format(w, 0, p.comment)
    if go_package is not None:
        b.format(w, 0, go_package.comment)
    b.format(w, 0, None, f"package {p.name}")
    if go_package is not None and go_package.constant.source:
        b.format(w, 0, None, f" // proto {go_package.constant.source}")
    return "".join(w)


def handle_imports(b: Builder) -> str:
    """Return the Gunk import block, or "" when nothing is imported.

    Proto imports are kept as comments since their types are not resolved.
    """
    if not b.imports_used and not b.imports:
        return ""

    w: List[str] = []
    b.format(w, 0, None, "import (")
    for impt in b.imports_used:
        b.format(w, 0, None, "\n")
        b.format(w, 1, None, go_quote(impt))
    for i in b.imports:
        b.format(w, 0, None, "\n")
        b.format(w, 1, None, f"// {go_quote(i.filename)}")
    b.format(w, 0, None, "\n)")
    return "".join(w)
