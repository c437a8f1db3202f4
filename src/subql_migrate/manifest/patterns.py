import re
from dataclasses import dataclass
from enum import Enum

# Field patterns for reading values out of a project.ts manifest without parsing it.
ENDPOINT_REG = re.compile(r"endpoint:\s*(\[[^\]]+\]|['\"`][^'\"`]+['\"`])")
ADDRESS_REG = re.compile(r"address\s*:\s*['\"]([^'\"]+)['\"]")
TOPICS_REG = re.compile(r"topics:\s*(\[[^\]]+\]|['\"`][^'\"`]+['\"`])")
FUNCTION_REG = re.compile(r"function\s*:\s*['\"]([^'\"]+)['\"]")
CHAIN_ID_REG = re.compile(r"chainId:\s*(\[[^\]]+\]|['\"`][^'\"`]+['\"`])")
CAPTURE_CHAIN_ID_REG = re.compile(r"chainId:\s*(\"([^\"]*)\"|(?<!\")(\d+))")

ETHEREUM_TYPES_REG = re.compile(r"@subql/types-ethereum")
ETHEREUM_NODE_REG = re.compile(r"@subql/node-ethereum")


class FieldKind(Enum):
    SCALAR = "scalar"
    ARRAY_SCALAR = "array-scalar"
    BRACKETED = "bracketed"


# Fields whose value is a balanced [...] span located by bracket matching.
BRACKETED_FIELDS: frozenset[str] = frozenset({"dataSources", "handlers"})
# Fields whose captured value is a literal that may be a list or a single item.
ARRAY_SCALAR_FIELDS: frozenset[str] = frozenset({"endpoint", "topics"})


def classify_field(name: str) -> FieldKind:
    if name in BRACKETED_FIELDS:
        return FieldKind.BRACKETED
    if name in ARRAY_SCALAR_FIELDS:
        return FieldKind.ARRAY_SCALAR
    return FieldKind.SCALAR


@dataclass(frozen=True)
class FieldSpec:
    name: str
    pattern: re.Pattern[str] | None
    kind: FieldKind

    @classmethod
    def for_field(cls, name: str, pattern: re.Pattern[str] | None = None) -> "FieldSpec":
        return cls(name=name, pattern=pattern, kind=classify_field(name))


DEFAULT_FIELD_PATTERNS: dict[str, re.Pattern[str] | None] = {
    "endpoint": ENDPOINT_REG,
    "chainId": CHAIN_ID_REG,
    "address": ADDRESS_REG,
    "topics": TOPICS_REG,
    "function": FUNCTION_REG,
    "dataSources": None,
    "handlers": None,
}
