"""Naming helpers for Go identifiers derived from schema names."""

from __future__ import annotations

from collections.abc import Container, Iterable, Mapping
import re
from typing import Optional
import unicodedata

_GO_KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)

_GO_PREDECLARED = frozenset(
    {
        "any",
        "append",
        "bool",
        "byte",
        "cap",
        "clear",
        "close",
        "comparable",
        "complex",
        "complex64",
        "complex128",
        "copy",
        "delete",
        "error",
        "false",
        "float32",
        "float64",
        "imag",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "iota",
        "len",
        "make",
        "max",
        "min",
        "new",
        "nil",
        "panic",
        "print",
        "println",
        "real",
        "recover",
        "rune",
        "string",
        "true",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    }
)

RESERVED_WORDS = _GO_KEYWORDS | _GO_PREDECLARED

_IDENTIFIER_SANITIZE_RE = re.compile(r"[^0-9a-zA-Z]+")


def sanitize_identifier(raw: str) -> str:
    """Transliterate to ASCII and collapse characters invalid in Go identifiers to ``_``."""
    text = unicodedata.normalize("NFKD", raw).encode("ascii", "ignore").decode("ascii")
    return _IDENTIFIER_SANITIZE_RE.sub("_", text).strip("_")


def pascal_case(text: str) -> str:
    """Join ``_``-separated parts, upper-casing the first letter of each part."""
    return "".join(part[0].upper() + part[1:] for part in text.split("_") if part)


def apply_casing(name: str, *, make_public: bool) -> str:
    """Apply the exported (upper first letter) or unexported casing policy."""
    if not name:
        return name
    if make_public:
        return name[0].upper() + name[1:]
    return name[0].lower() + name[1:]


def go_identifier(raw: str, *, make_public: bool, fallback: str = "Value") -> str:
    """Convert a schema name into a Go identifier under the casing policy.

    Args:
        raw (str): Name as written in the schema or WSDL document.
        make_public (bool): Whether the identifier is exported.
        fallback (str): Name used when nothing survives sanitization.

    Returns:
        str: Valid, non-reserved Go identifier.
    """
    text = sanitize_identifier(raw) or fallback
    collides = text in RESERVED_WORDS
    name = pascal_case(text)
    if name[0].isdigit():
        name = f"X{name}"
    name = apply_casing(name, make_public=make_public)
    if collides or name in RESERVED_WORDS:
        name = f"{name}_"
    return name


def namespaced_identifier(
    raw: str,
    namespace: str,
    aliases: Mapping[str, str],
    *,
    make_public: bool,
) -> str:
    """Derive a type name, prefixing the caller's alias when the namespace has one."""
    alias = aliases.get(namespace)
    if alias:
        return go_identifier(f"{alias}_{raw}", make_public=make_public)
    return go_identifier(raw, make_public=make_public)


def enum_suffix(value: str) -> str:
    """Identifier fragment appended to a type name for one enumeration value."""
    return pascal_case(sanitize_identifier(value)) or "Empty"


class NameRegistry:
    """Package-level identifier allocator recording which declaration owns each name."""

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._owners: dict[str, str] = {name: "a reserved identifier" for name in reserved}

    def __contains__(self, name: object) -> bool:
        return name in self._owners

    def owner_of(self, name: str) -> Optional[str]:
        return self._owners.get(name)

    def claim(self, base_name: str, owner: str) -> str:
        """Register ``base_name`` or, when taken, the first free ``base_name2``, ``3``..."""
        name = unique_name(base_name, self._owners)
        self._owners[name] = owner
        return name

    def claim_exact(self, name: str, owner: str) -> Optional[str]:
        """Register ``name`` as is; return the current owner instead when it is taken."""
        existing = self._owners.get(name)
        if existing is not None:
            return existing
        self._owners[name] = owner
        return None

    def fork(self) -> NameRegistry:
        """Return an independent copy for a downstream stage."""
        forked = NameRegistry()
        forked._owners = dict(self._owners)
        return forked


def unique_name(base_name: str, used_names: Container[str]) -> str:
    """Return ``base_name`` or the first numerically suffixed variant not in ``used_names``."""
    if base_name not in used_names:
        return base_name
    suffix = 2
    while f"{base_name}{suffix}" in used_names:
        suffix += 1
    return f"{base_name}{suffix}"
