"""Parse loosely-typed TypeScript literals (strings, numbers, arrays) with tree-sitter."""

from typing import Any

from tree_sitter import Node
from tree_sitter_language_pack import get_parser

from subql_migrate.errors import UnsupportedLiteralError

_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def parse_loose_literal(text: str) -> Any:
    """Return the Python value of a JSON5-like literal such as ``['a', "b",]`` or ``'a'``."""
    parser = get_parser("typescript")
    tree = parser.parse(f"({text});".encode())
    root = tree.root_node
    if root.has_error:
        raise UnsupportedLiteralError(f"Unable to parse literal: {text}")

    statements = [c for c in root.named_children if c.type != "comment"]
    if len(statements) != 1 or statements[0].type != "expression_statement":
        raise UnsupportedLiteralError(f"Unable to parse literal: {text}")

    expression = _named(statements[0])[0]
    if expression.type == "parenthesized_expression":
        inner = _named(expression)
        if len(inner) != 1:
            raise UnsupportedLiteralError(f"Unable to parse literal: {text}")
        expression = inner[0]
    return _to_value(expression)


def _named(node: Node) -> list[Node]:
    return [c for c in node.named_children if c.type != "comment"]


def _text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""


def _to_value(node: Node) -> Any:
    kind = node.type
    if kind == "array":
        return [_to_value(child) for child in _named(node)]
    if kind == "string":
        return _string_value(node)
    if kind == "number":
        return _number_value(_text(node))
    if kind == "unary_expression":
        operand = _named(node)
        sign = _text(node).lstrip()[:1]
        if len(operand) == 1 and operand[0].type == "number" and sign in ("-", "+"):
            value = _number_value(_text(operand[0]))
            return -value if sign == "-" else value
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind in ("null", "undefined"):
        return None
    raise UnsupportedLiteralError(f"Unsupported literal value '{_text(node)}' ({kind})")


def _string_value(node: Node) -> str:
    parts: list[str] = []
    for child in node.named_children:
        raw = _text(child)
        if child.type == "escape_sequence":
            parts.append(_escape_value(raw[1:]))
        else:
            parts.append(raw)
    # \uXXXX surrogate pairs combine into one character
    return "".join(parts).encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def _escape_value(body: str) -> str:
    if body.startswith("u{") and body.endswith("}"):
        return chr(int(body[2:-1], 16))
    if body[:1] in ("u", "x") and len(body) > 1:
        return chr(int(body[1:], 16))
    if body != "0" and set(body) <= set("01234567"):
        return chr(int(body, 8))
    if body in ("\n", "\r\n", "\r"):
        return ""
    return _ESCAPES.get(body, body)


def _number_value(raw: str) -> int | float:
    cleaned = raw.replace("_", "")
    try:
        return int(cleaned, 0)
    except ValueError:
        return float(cleaned)
