"""Tests for generation options and namespace alias loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from wsdl_to_go_generator.config import (
    DEFAULT_NAMESPACE_ALIASES,
    ConfigError,
    GeneratorOptions,
    load_namespace_aliases,
)
from .fixture_helpers import write_document


def test_default_options() -> None:
    """Defaults generate an exported ``myservice`` package with the built-in aliases."""
    options = GeneratorOptions()

    assert options.package_name == "myservice"
    assert options.make_public is True
    assert options.namespace_aliases == DEFAULT_NAMESPACE_ALIASES
    assert options.import_failure == "warn"
    assert options.max_workers == 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"package_name": "my-service"},
        {"package_name": "1service"},
        {"max_workers": 0},
        {"import_failure": "ignore"},
        {"namespace_aliases": {"urn:x": "not valid"}},
        {"unknown": True},
    ],
    ids=["dash", "digit", "workers", "policy", "alias", "extra"],
)
def test_invalid_options_are_rejected(overrides: dict[str, object]) -> None:
    """Invalid option values fail model validation."""
    with pytest.raises(ValidationError):
        GeneratorOptions(**overrides)  # type: ignore[arg-type]


def test_load_namespace_aliases(tmp_path: Path) -> None:
    """A YAML mapping of namespace URI to identifier is returned as a dict."""
    path = write_document(
        tmp_path,
        "aliases.yaml",
        '"urn:one": One\n"http://example.com/two": Two_\n',
    )

    assert load_namespace_aliases(path) == {"urn:one": "One", "http://example.com/two": "Two_"}


def test_empty_alias_file_is_an_empty_table(tmp_path: Path) -> None:
    """An empty YAML document means no aliases."""
    path = write_document(tmp_path, "aliases.yaml", "")

    assert load_namespace_aliases(path) == {}


@pytest.mark.parametrize(
    "content",
    [
        '"urn:one": "has space"\n',
        "- urn:one\n- urn:two\n",
        '"urn:one": [unclosed\n',
    ],
    ids=["bad-alias", "not-a-mapping", "bad-yaml"],
)
def test_invalid_alias_file_is_config_error(tmp_path: Path, content: str) -> None:
    """Malformed YAML or an invalid alias table raises ConfigError."""
    path = write_document(tmp_path, "aliases.yaml", content)

    with pytest.raises(ConfigError):
        load_namespace_aliases(path)


def test_missing_alias_file_is_config_error(tmp_path: Path) -> None:
    """An unreadable alias file raises ConfigError."""
    with pytest.raises(ConfigError, match="Failed to read"):
        load_namespace_aliases(tmp_path / "absent.yaml")
