from __future__ import annotations

from typing import Dict

# Proto scalar type -> Go type.
# https://developers.google.com/protocol-buffers/docs/proto3#scalar
GO_TYPE_MAP: Dict[str, str] = {
    "bool": "bool",
    "string": "string",
    "bytes": "[]byte",
    "double": "float64",
    "float": "float32",
    "int32": "int",
    "sint32": "int32",
    "sfixed32": "int32",
    "int64": "int64",
    "sint64": "int64",
    "sfixed64": "int64",
    "uint32": "uint32",
    "fixed32": "uint32",
    "uint64": "uint64",
    "fixed64": "uint64",
}

# The well-known message meaning "no payload" in an rpc signature.
EMPTY_MESSAGE_TYPE = "google.protobuf.Empty"


def go_type(field_type: str) -> str:
    """Map a proto type to its Go type.

    Anything that is not a proto scalar is assumed to be a custom type and
    is returned unchanged.
    """
    return GO_TYPE_MAP.get(field_type, field_type)
