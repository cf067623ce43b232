"""Shared helpers for fixture-driven tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import ParamSpec, TypeVar

import pytest

_FIXTURE_ROOT = Path(__file__).resolve().parent / "fixtures"
_FIXTURE_DIR = _FIXTURE_ROOT / "wsdl"
_INVALID_FIXTURE_DIR = _FIXTURE_ROOT / "invalid"
_P = ParamSpec("_P")
_R = TypeVar("_R")


def fixture_dir() -> Path:
    """Return the WSDL fixtures directory."""
    return _FIXTURE_DIR


def fixture_path(name: str) -> Path:
    """Return the path of a valid WSDL or XSD fixture."""
    return _FIXTURE_DIR / name


def invalid_fixture_path(name: str) -> Path:
    """Return the path of a fixture that must fail generation."""
    return _INVALID_FIXTURE_DIR / name


def iter_fixture_paths() -> list[Path]:
    """Return all entry documents (top-level WSDL and XSD files) sorted by name."""
    paths = sorted(_FIXTURE_DIR.glob("*.wsdl")) + sorted(_FIXTURE_DIR.glob("*.xsd"))
    return [path for path in paths if path.is_file()]


def write_document(directory: Path, name: str, content: str) -> Path:
    """Write an inline WSDL or XSD document for a single test."""
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


def parametrize_fixtures() -> Callable[[Callable[_P, _R]], Callable[_P, _R]]:
    """Parametrize a test over all fixture paths."""

    def _decorator(func: Callable[_P, _R]) -> Callable[_P, _R]:
        decorator: Callable[[Callable[_P, _R]], Callable[_P, _R]]
        decorator = pytest.mark.parametrize(
            "fixture_path",
            iter_fixture_paths(),
            ids=lambda path: path.name,
        )
        return decorator(func)

    return _decorator


def write_chameleon_pair(directory: Path) -> Path:
    """Write ``a.xsd`` and ``b.xsd`` that both include the namespace-less ``cham.xsd``.

    ``a.xsd`` imports ``b.xsd`` and refers to ``Shared`` from both namespaces.
    """
    write_document(
        directory,
        "cham.xsd",
        '<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema">'
        '<xsd:simpleType name="Shared"><xsd:restriction base="xsd:string"/></xsd:simpleType>'
        "</xsd:schema>",
    )
    write_document(
        directory,
        "b.xsd",
        '<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" targetNamespace="urn:b">'
        '<xsd:include schemaLocation="cham.xsd"/>'
        "</xsd:schema>",
    )
    return write_document(
        directory,
        "a.xsd",
        '<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" targetNamespace="urn:a" '
        'xmlns:a="urn:a" xmlns:b="urn:b">'
        '<xsd:import namespace="urn:b" schemaLocation="b.xsd"/>'
        '<xsd:include schemaLocation="cham.xsd"/>'
        '<xsd:complexType name="Holder"><xsd:sequence>'
        '<xsd:element name="own" type="a:Shared"/>'
        '<xsd:element name="other" type="b:Shared"/>'
        "</xsd:sequence></xsd:complexType>"
        "</xsd:schema>",
    )
