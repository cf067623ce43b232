"""Error taxonomy shared by every generation stage."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .schema_model import TypeKey


class GenerationError(RuntimeError):
    """Base class for failures that abort a generation run."""


class UnreachableResourceError(GenerationError):
    """Raised when the entry document or an imported schema cannot be fetched."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"Unable to fetch {location}: {reason}")
        self.location = location
        self.reason = reason


class MalformedDocumentError(GenerationError):
    """Raised when a document is not well-formed XML or misses required structure."""

    def __init__(self, location: str, reason: str, *, line: Optional[int] = None) -> None:
        where = f"{location}:{line}" if line is not None else location
        super().__init__(f"Malformed document {where}: {reason}")
        self.location = location
        self.line = line
        self.reason = reason


class DuplicateTypeDeclarationError(GenerationError):
    """Raised when two schema fragments declare the same (namespace, name) key."""

    def __init__(self, key: TypeKey, kind: str, first_location: str, second_location: str) -> None:
        super().__init__(
            f"Duplicate {kind} declaration {key}: declared at {first_location} "
            f"and again at {second_location}"
        )
        self.key = key
        self.kind = kind
        self.first_location = first_location
        self.second_location = second_location


class UnresolvableReferenceError(GenerationError):
    """Raised when a type, element, attribute or message reference has no declaration."""

    def __init__(self, key: TypeKey, kind: str, referenced_from: str) -> None:
        super().__init__(f"Unresolvable {kind} reference {key} (referenced from {referenced_from})")
        self.key = key
        self.kind = kind
        self.referenced_from = referenced_from


class EnumNameCollisionError(GenerationError):
    """Raised when sanitized enumeration constant names collide."""

    def __init__(self, constant_name: str, value: str, existing: str) -> None:
        super().__init__(
            f"Enumeration value {value!r} maps to constant {constant_name}, "
            f"which is already taken by {existing}"
        )
        self.constant_name = constant_name
        self.value = value
        self.existing = existing


class InvalidEnumerationValueError(GenerationError):
    """Raised when an enumeration value cannot be spelled as a constant of its Go type."""

    def __init__(self, type_name: str, value: str, go_type: str, reason: str) -> None:
        super().__init__(
            f"Enumeration value {value!r} of {type_name} is not a valid {go_type} constant: "
            f"{reason}"
        )
        self.type_name = type_name
        self.value = value
        self.go_type = go_type
        self.reason = reason
