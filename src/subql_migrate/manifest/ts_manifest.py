"""Text surgery on hand-written ``project.ts`` manifests.

There is no TypeScript parser here: fields are found by their literal
``"<key>:"`` text and array values by bracket matching, so everything outside
the touched span is preserved byte for byte.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from subql_migrate.config import DEFAULT_HANDLER_BUILD_PATH
from subql_migrate.errors import FieldNotFoundError, StructuralParseError
from subql_migrate.manifest.brackets import IndexPair, find_matching_indices
from subql_migrate.manifest.literals import parse_loose_literal
from subql_migrate.manifest.patterns import (
    ADDRESS_REG,
    CAPTURE_CHAIN_ID_REG,
    ETHEREUM_NODE_REG,
    ETHEREUM_TYPES_REG,
    FUNCTION_REG,
    TOPICS_REG,
    FieldKind,
    FieldSpec,
)

logger = logging.getLogger(__name__)

ExtractionResult = dict[str, Any]

_WHITESPACE_RUN = re.compile(r"\s+")
_ENUM_REFERENCE = re.compile(r"^Ethereum(?:HandlerKind|DatasourceKind)\.\w+$")


# ---------------------------------------------------------------------------
# Locate / replace / extract
# ---------------------------------------------------------------------------


def locate_array_field(content: str, field_key: str) -> IndexPair:
    """Return the span of the ``[...]`` value that follows the first ``<field_key>:``."""
    start = content.find(f"{field_key}:")
    if start == -1:
        raise FieldNotFoundError(field_key)
    pairs = find_matching_indices(content, "[", "]", start)
    if not pairs:
        raise StructuralParseError(f"{field_key} contains unbalanced brackets")
    return pairs[0]


def replace_array_field(content: str, field_key: str, new_literal: str) -> str:
    start, end = locate_array_field(content, field_key)
    return content[:start] + new_literal + content[end + 1 :]


def extract_array_field(content: str, field_key: str) -> str:
    start, end = locate_array_field(content, field_key)
    return content[start : end + 1]


def extract_fields(content: str, field_specs: Mapping[str, re.Pattern[str] | None]) -> ExtractionResult:
    """Pull the named fields out of *content*.

    Bracketed fields (``dataSources``, ``handlers``) come back as the raw
    ``[...]`` text. ``endpoint`` and ``topics`` come back as lists. Any other
    field is the first capture group of its pattern. Unmatched fields are ``None``.
    """
    result: ExtractionResult = {}
    for key, pattern in field_specs.items():
        spec = FieldSpec.for_field(key, pattern)
        if spec.kind is FieldKind.BRACKETED:
            result[key] = extract_array_field(content, key)
            continue

        if spec.pattern is None:
            raise ValueError(f"Pattern for {key} is not defined")
        match = spec.pattern.search(content)
        if match is None:
            result[key] = None
        elif spec.kind is FieldKind.ARRAY_SCALAR:
            value = parse_loose_literal(match.group(1).replace("`", '"'))
            result[key] = value if isinstance(value, list) else [value]
        else:
            result[key] = match.group(1)
    return result


def extract_chain_id(content: str) -> str | None:
    match = CAPTURE_CHAIN_ID_REG.search(content)
    if match is None:
        return None
    return match.group(2) if match.group(2) is not None else match.group(3)


def split_array_string(array_str: str) -> list[str]:
    """Split an array of object literals into one whitespace-collapsed string per object."""
    inner = array_str.strip()[1:-1].strip()
    pairs: list[IndexPair] = []
    last_end = 0
    while last_end < len(inner):
        found = find_matching_indices(inner, "{", "}", last_end)
        if not found:
            break
        pairs.append(found[0])
        last_end = found[0][1] + 1
    return [_WHITESPACE_RUN.sub(" ", inner[start : end + 1].strip()) for start, end in pairs]


def validate_ethereum_ts_manifest(content: str) -> bool:
    return bool(ETHEREUM_TYPES_REG.search(content)) and bool(ETHEREUM_NODE_REG.search(content))


# ---------------------------------------------------------------------------
# Datasource generation
# ---------------------------------------------------------------------------


class TsExpression(str):
    """A string that ``ts_stringify`` emits verbatim instead of quoting."""


def ts_stringify(obj: Any, indent: int = 2, current_indent: int = 0) -> str:
    """Render *obj* as a TypeScript object literal with unquoted keys.

    ``TsExpression`` values and strings naming an Ethereum kind enum member are
    emitted bare.
    """
    if isinstance(obj, (dict, list, tuple)) and not obj:
        return "{}" if isinstance(obj, dict) else "[]"
    if isinstance(obj, dict):
        pad = " " * (current_indent + indent)
        entries = [f"{pad}{key}: {ts_stringify(value, indent, current_indent + indent)}" for key, value in obj.items()]
        return "{\n" + ",\n".join(entries) + "\n" + " " * current_indent + "}"
    if isinstance(obj, (list, tuple)):
        pad = " " * (current_indent + indent)
        items = [pad + ts_stringify(item, indent, current_indent + indent) for item in obj]
        return "[\n" + ",\n".join(items) + "\n" + " " * current_indent + "]"
    if isinstance(obj, TsExpression) or (isinstance(obj, str) and _ENUM_REFERENCE.match(obj)):
        return str(obj)
    return json.dumps(obj)


def prepend_datasources(ds_array_str: str, new_ds: str) -> str:
    stripped = ds_array_str.strip()
    if not (stripped.startswith("[") and stripped.endswith("]")):
        raise StructuralParseError("Input string is not a valid array string")
    return stripped.replace("[", f"[{new_ds},", 1)


def add_datasource(content: str, datasource_literal: str) -> str:
    """Insert *datasource_literal* at the front of the manifest's ``dataSources`` array."""
    existing = extract_fields(content, {"dataSources": None})["dataSources"]
    updated = replace_array_field(content, "dataSources", prepend_datasources(existing, datasource_literal))
    logger.debug("Prepended datasource to dataSources array")
    return updated


def generate_handler_name(name: str, abi_name: str, suffix: str) -> str:
    return f"handle{_upper_first(name)}{_upper_first(abi_name)}{_upper_first(suffix)}"


def build_handlers(abi_name: str, events: list[str], functions: list[str]) -> list[dict[str, Any]]:
    """Build handler entries for function signatures (calls) then event signatures (logs)."""
    handlers: list[dict[str, Any]] = []
    for method in functions:
        handlers.append(
            {
                "handler": generate_handler_name(_method_name(method), abi_name, "tx"),
                "kind": "EthereumHandlerKind.Call",
                "filter": {"function": method},
            }
        )
    for method in events:
        handlers.append(
            {
                "handler": generate_handler_name(_method_name(method), abi_name, "log"),
                "kind": "EthereumHandlerKind.Event",
                "filter": {"topics": [method]},
            }
        )
    return handlers


def render_datasource_ts(
    abi_name: str,
    abi_path: str,
    start_block: int,
    address: str | None = None,
    events: list[str] | None = None,
    functions: list[str] | None = None,
) -> str:
    handlers = ts_stringify(build_handlers(abi_name, events or [], functions or []), 2, 4)
    address_line = f"\n      address: '{address}'," if address else ""
    return (
        "{\n"
        "    kind: EthereumDatasourceKind.Runtime,\n"
        f"    startBlock: {start_block},\n"
        "    options: {\n"
        f"      abi: '{abi_name}',{address_line}\n"
        "    },\n"
        f"    assets: new Map([['{abi_name}', {{file: '{abi_path}'}}]]),\n"
        "    mapping: {\n"
        f"      file: '{DEFAULT_HANDLER_BUILD_PATH}',\n"
        f"      handlers: {handlers}\n"
        "    }\n"
        "  }"
    )


def extract_existing_methods(data_sources: str, address: str | None) -> tuple[list[str], list[str]]:
    """Return the event topics and function filters already handled for *address*.

    Datasources without an address match when *address* is empty.
    """
    cased_address = address.lower() if address else None
    existing_events: list[str] = []
    existing_functions: list[str] = []
    for ds in split_array_string(data_sources):
        match = ADDRESS_REG.search(ds)
        ds_address = match.group(1).lower() if match else None
        if ds_address != cased_address:
            continue
        handlers = extract_fields(ds, {"handlers": None})["handlers"]
        for handler in split_array_string(handlers):
            found = extract_fields(handler, {"topics": TOPICS_REG, "function": FUNCTION_REG})
            if found["topics"]:
                existing_events.append(found["topics"][0])
            if found["function"] is not None:
                existing_functions.append(found["function"])
    return existing_events, existing_functions


def _upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def _method_name(signature: str) -> str:
    return signature.split("(", 1)[0].strip()
