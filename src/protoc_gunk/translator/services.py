from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from protoc_gunk.models import Builder, go_quote, kind_name
from protoc_gunk.parser.proto_ast import RPC, Comment, Literal, Option, Service
from protoc_gunk.translator.types import EMPTY_MESSAGE_TYPE

HTTP_OPTION = "(google.api.http)"
HTTP_IMPORT = "github.com/gunk/opt/http"


@dataclass
class HTTPRule:
    method: str = ""
    path: str = ""
    body: str = ""


def _literal_string(b: Builder, opt: Option, lit: Literal, message: str) -> str:
    if not lit.is_string:
        raise b.error(opt.position, message)
    return lit.source


def parse_http_rule(b: Builder, rpc: RPC, opt: Option) -> HTTPRule:
    """Read the verb, path and body out of a google.api.http option.

    Every key other than ``body`` is taken as the HTTP verb; when several
    are present the last one wins.
    """
    entries = opt.constant.ordered_map
    if not entries:
        raise b.error(opt.position, "expected option to be a map")

    rule = HTTPRule()
    verbs: List[str] = []
    for entry in entries:
        if entry.name == "body":
            rule.body = _literal_string(b, opt, entry.literal, "option for body should be a string")
            continue
        rule.method = entry.name
        rule.path = _literal_string(
            b, opt, entry.literal, f"option for {go_quote(entry.name)} should be a string (url)"
        )
        verbs.append(entry.name)

    if len(verbs) > 1:
        b.warn(opt.position, f"multiple http methods on rpc {go_quote(rpc.name)}, using {go_quote(rule.method)}")
    return rule


def write_http_match(b: Builder, w: List[str], rule: HTTPRule) -> None:
    """Write an HTTP rule as a +gunk http.Match annotation."""
    b.format(w, 1, None, "// +gunk http.Match{\n")
    b.format(w, 1, None, f"//     Method: {go_quote(rule.method.upper())},\n")
    b.format(w, 1, None, f"//     Path: {go_quote(rule.path)},\n")
    if rule.body:
        b.format(w, 1, None, f"//     Body: {go_quote(rule.body)},\n")
    b.format(w, 1, None, "// }\n")
    b.imports_used[HTTP_IMPORT] = True


def handle_rpc(b: Builder, w: List[str], r: RPC) -> None:
    # The rpc comment is written above the gunk annotation when there is
    # one, and must then not be written again above the method.
    comment: Optional[Comment] = r.comment
    for o in r.elements:
        if not isinstance(o, Option):
            raise b.error(r.position, f"unexpected type {kind_name(o)} in service rpc, expected option")
        if o.name != HTTP_OPTION:
            b.warn_option("method", o)
            continue

        rule = parse_http_rule(b, r, o)
        if rule.method and rule.path:
            if comment is not None:
                b.format(w, 1, comment, "//\n")
                comment = None
            write_http_match(b, w, rule)

    request_type = r.request_type
    returns_type = r.returns_type
    if request_type == EMPTY_MESSAGE_TYPE:
        request_type = ""
    if returns_type == EMPTY_MESSAGE_TYPE:
        returns_type = ""
    b.format(w, 1, comment, f"{r.name}({request_type}) {returns_type}\n")


def handle_service(b: Builder, s: Service) -> None:
    """Convert a proto service to a Go interface."""
    w: List[str] = []
    b.format(w, 0, s.comment, f"type {s.name} interface {{\n")
    seen_rpc = False
    for e in s.elements:
        if isinstance(e, Option):
            b.warn_option("service", e)
            continue
        if isinstance(e, Comment):
            b.format(w, 1, e)
            continue
        if not isinstance(e, RPC):
            raise b.error(s.position, f"unexpected type {kind_name(e)} in service, expected rpc")

        # Methods are separated by a blank line only when comments or
        # annotations sit between them.
        if seen_rpc and (e.comment is not None or e.elements):
            b.format(w, 0, None, "\n")
        handle_rpc(b, w, e)
        seen_rpc = True
    b.format(w, 0, None, "}")
    b.translated_declarations.append("".join(w))
