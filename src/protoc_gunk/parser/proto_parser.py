from __future__ import annotations

from pathlib import Path

from .proto_ast import ProtoFile
from .proto_ast_parser import ProtoParser
from .proto_tokenizer import tokenize_proto


def parse_proto(text: str, filename: str = "") -> ProtoFile:
    """Parse protobuf source text into a ProtoFile AST."""
    tokens = tokenize_proto(text)
    return ProtoParser(tokens, filename=filename).parse()


def parse_proto_file(file_path: str) -> ProtoFile:
    """Parse a .proto file. The AST is labelled with the file's base name."""
    path = Path(file_path)
    text = path.read_text(encoding="utf-8")
    return parse_proto(text, filename=path.name)
