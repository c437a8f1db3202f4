class MigrationError(Exception):
    """Base class for every failure raised by manifest patching and migration."""


class StructuralParseError(MigrationError, ValueError):
    """Input text or AST does not have the shape the operation needs."""


class UnbalancedDelimitersError(StructuralParseError):
    def __init__(self, open_char: str, close_char: str) -> None:
        super().__init__(f"Unbalanced {open_char} and {close_char}")
        self.open_char = open_char
        self.close_char = close_char


class FieldNotFoundError(StructuralParseError):
    def __init__(self, field_key: str) -> None:
        super().__init__(f"{field_key} not found")
        self.field_key = field_key


class SemanticMismatchError(MigrationError, ValueError):
    """Input is well formed but its values disagree or cannot be resolved."""


class CallerContractViolation(MigrationError, ValueError):
    """The caller handed over a value the operation does not accept."""


class UnsupportedLiteralError(CallerContractViolation):
    pass
