"""Mapping of XML Schema built-in types to Go types."""

from __future__ import annotations

import json
import re
from typing import Optional

from .namespaces import SOAP_ENCODING_NS, XSD_NS
from .schema_model import TypeKey

# Keys are lower-cased local names in the XML Schema namespace.
_XSD_TO_GO: dict[str, str] = {
    "string": "string",
    "normalizedstring": "string",
    "token": "string",
    "language": "string",
    "name": "string",
    "ncname": "string",
    "nmtoken": "string",
    "nmtokens": "string",
    "id": "string",
    "idref": "string",
    "idrefs": "string",
    "entity": "string",
    "entities": "string",
    "qname": "string",
    "notation": "string",
    "anyuri": "string",
    "duration": "string",
    "gyear": "string",
    "gyearmonth": "string",
    "gmonth": "string",
    "gmonthday": "string",
    "gday": "string",
    "boolean": "bool",
    "float": "float32",
    "double": "float64",
    "decimal": "float64",
    "int": "int32",
    "integer": "int64",
    "long": "int64",
    "short": "int16",
    "byte": "int8",
    "negativeinteger": "int64",
    "nonpositiveinteger": "int64",
    "positiveinteger": "uint64",
    "nonnegativeinteger": "uint64",
    "unsignedlong": "uint64",
    "unsignedint": "uint32",
    "unsignedshort": "uint16",
    "unsignedbyte": "byte",
    "datetime": "soap.XSDDateTime",
    "date": "soap.XSDDate",
    "time": "soap.XSDTime",
    "base64binary": "[]byte",
    "hexbinary": "[]byte",
}

BYTE_SEQUENCE = "[]byte"

# SOAP encoding re-declares the XML Schema built-ins under its own namespace.
_BUILTIN_NAMESPACES = frozenset({XSD_NS, SOAP_ENCODING_NS})


def is_builtin(key: TypeKey) -> bool:
    """Return whether a key names a built-in of XML Schema or SOAP encoding."""
    return key.namespace in _BUILTIN_NAMESPACES


def builtin_go_type(key: TypeKey) -> Optional[str]:
    """Return the Go type for a built-in, or ``None`` for unmodeled ones such as ``anyType``."""
    if not is_builtin(key):
        return None
    return _XSD_TO_GO.get(key.name.lower())


_INTEGER_RANGES: dict[str, tuple[int, int]] = {
    "int8": (-(2**7), 2**7 - 1),
    "int16": (-(2**15), 2**15 - 1),
    "int32": (-(2**31), 2**31 - 1),
    "int64": (-(2**63), 2**63 - 1),
    "byte": (0, 2**8 - 1),
    "uint16": (0, 2**16 - 1),
    "uint32": (0, 2**32 - 1),
    "uint64": (0, 2**64 - 1),
}
_FLOAT_TYPES = frozenset({"float32", "float64"})
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")
_BOOLEAN_LITERALS = {"true": "true", "1": "true", "false": "false", "0": "false"}


def go_string_literal(value: str) -> str:
    """Return ``value`` as a Go interpreted string literal."""
    # JSON string escapes are a subset of Go interpreted string literal escapes.
    return json.dumps(value, ensure_ascii=False)


def is_constant_type(go_type: str) -> bool:
    """Return whether Go can declare constants of the given built-in type."""
    return (
        go_type == "string"
        or go_type == "bool"
        or go_type in _INTEGER_RANGES
        or go_type in _FLOAT_TYPES
    )


def go_constant_literal(value: str, go_type: str) -> str:
    """Spell an enumeration facet value as a Go constant of ``go_type``.

    Args:
        value (str): Lexical value from the schema facet.
        go_type (str): Built-in Go type the enumeration aliases.

    Returns:
        str: Go literal: quoted for strings, bare for numbers and booleans.

    Raises:
        ValueError: If the value is not in the lexical space of the type.
    """
    if go_type == "string":
        return go_string_literal(value)
    text = value.strip()
    if go_type == "bool":
        if text not in _BOOLEAN_LITERALS:
            raise ValueError(f"{value!r} is not a boolean")
        return _BOOLEAN_LITERALS[text]
    if go_type in _INTEGER_RANGES:
        if not _INTEGER_RE.fullmatch(text):
            raise ValueError(f"{value!r} is not an integer")
        number = int(text)
        low, high = _INTEGER_RANGES[go_type]
        if not low <= number <= high:
            raise ValueError(f"{value!r} is out of range for {go_type}")
        return str(number)
    if go_type in _FLOAT_TYPES:
        if not _DECIMAL_RE.fullmatch(text):
            raise ValueError(f"{value!r} is not a finite decimal number")
        return text.lstrip("+")
    raise ValueError(f"{go_type} has no Go constant form")
