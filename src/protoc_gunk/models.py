from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TextIO

from protoc_gunk.parser.proto_ast import Comment, Import, Option, Package, Position


class ConvertError(Exception):
    """Raised when a proto document cannot be converted to Gunk."""

    def __init__(self, message: str, filename: str = "", position: Optional[Position] = None):
        self.message = message
        self.filename = filename
        self.position = position
        if position is not None:
            super().__init__(f"{filename}:{position.line}:{position.column}: {message}")
        else:
            super().__init__(message)


_GO_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def go_quote(value: str) -> str:
    """Quote a string the way Go's %q verb does.

    Printable characters are kept as they are; other characters use the
    shortest of the ``\\xNN``, ``\\uNNNN`` and ``\\UNNNNNNNN`` escapes.
    """
    out = []
    for ch in value:
        if ch in _GO_ESCAPES:
            out.append(_GO_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x80:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) <= 0xFFFF:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    return '"' + "".join(out) + '"'


def kind_name(element: object) -> str:
    return type(element).__name__


@dataclass
class Builder:
    """Conversion state for a single proto document.

    Messages, enums and services are translated as they are found and
    stored in ``translated_declarations``. The package, file options and
    imports are collected and only converted once every declaration has
    been seen, because ``go_package`` and the annotation imports affect the
    file header.
    """

    filename: str = ""
    warnings: TextIO = field(default_factory=lambda: sys.stderr)

    translated_declarations: List[str] = field(default_factory=list)

    pkg: Optional[Package] = None
    pkg_opts: List[Option] = field(default_factory=list)
    imports: List[Import] = field(default_factory=list)

    # Gunk imports required by the annotations written so far, in first-use order.
    imports_used: Dict[str, bool] = field(default_factory=dict)

    def format(self, w: List[str], indent: int, comment: Optional[Comment], text: str = "") -> None:
        """Append ``text`` to ``w``, preceded by the comment lines, all indented."""
        if comment is not None:
            for line in comment.lines:
                w.append("\t" * indent + f"//{line}\n")
        # Only writing a comment.
        if not text:
            return
        w.append("\t" * indent + text)

    def error(self, position: Optional[Position], message: str) -> ConvertError:
        return ConvertError(message, filename=self.filename, position=position)

    def warn(self, position: Position, message: str) -> None:
        print(self.error(position, message), file=self.warnings)

    def warn_option(self, kind: str, option: Option) -> None:
        self.warn(option.position, f"unhandled {kind} option {go_quote(option.name)}")
