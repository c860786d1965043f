from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from protoc_gunk.models import ConvertError
from protoc_gunk.parser.proto_ast_parser import ProtoParseError
from protoc_gunk.parser.proto_parser import parse_proto_file
from protoc_gunk.translator.declarations import translate


def convert_file(path: str, overwrite: bool = False) -> str:
    """Convert one .proto file, writing the .gunk file next to it.

    Returns the path of the written file.
    """
    src = Path(path)
    if src.suffix != ".proto":
        raise ConvertError("convert requires a .proto file")

    try:
        ast = parse_proto_file(str(src))
    except (OSError, UnicodeDecodeError) as e:
        raise ConvertError(f'unable to read file "{src}": {e}') from e
    except ProtoParseError as e:
        raise ConvertError(f'unable to parse proto file "{src}": {e}') from e

    dest = src.with_suffix(".gunk")
    if dest.exists() and not overwrite:
        raise ConvertError(f'path already exists "{dest}", use --overwrite')

    result = translate(ast)

    try:
        dest.write_text(result, encoding="utf-8")
    except OSError as e:
        raise ConvertError(f'unable to write to file "{dest}": {e}') from e
    return str(dest)


def _convert_and_report(path: str, overwrite: bool) -> str:
    dest = convert_file(path, overwrite)
    print(f"Converted {path} -> {dest}")
    return dest


def _run_path(path: str, overwrite: bool) -> List[str]:
    p = Path(path)
    if not p.exists():
        raise ConvertError(f"{path}: no such file or directory")
    if not p.is_dir():
        return [_convert_and_report(path, overwrite)]
    if p.suffix == ".proto":
        raise ConvertError(f"{path} is a directory, should be a proto file.")

    # Only the .proto files directly inside the directory are converted.
    written: List[str] = []
    for f in sorted(p.iterdir()):
        if f.is_dir() or f.suffix != ".proto":
            continue
        written.append(_convert_and_report(str(f), overwrite))
    return written


def run(paths: List[str], overwrite: bool = False) -> List[str]:
    """Convert proto files, or the proto files in directories, to Gunk.

    Stops at the first file that fails to convert.
    """
    written: List[str] = []
    for path in paths:
        written.extend(_run_path(path, overwrite))
    return written


def main():
    parser = argparse.ArgumentParser(
        description="Convert Protocol Buffers files to Gunk",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        metavar="PATH",
        help="A .proto file, or a directory containing .proto files",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite existing .gunk files",
    )

    args = parser.parse_args()
    try:
        run(args.paths, args.overwrite)
    except ConvertError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)
