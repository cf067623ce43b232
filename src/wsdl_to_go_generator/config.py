"""Generation options and namespace alias configuration."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError, field_validator

from .namespaces import SOAP12_NS

_GO_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_NAMESPACE_ALIASES: dict[str, str] = {
    SOAP12_NS: "Soap",
    "http://www.onvif.org/ver10/media/wsdl": "Media",
    "http://www.onvif.org/ver10/schema": "Onvif",
    "http://docs.oasis-open.org/wsn/b-2": "B2",
}


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be loaded."""


def _check_alias_table(value: dict[str, str]) -> dict[str, str]:
    for namespace, alias in value.items():
        if not namespace:
            raise ValueError("namespace URI keys must not be empty")
        if not _GO_IDENTIFIER_RE.match(alias):
            raise ValueError(f"alias {alias!r} for {namespace} is not a valid Go identifier")
    return value


class NamespaceAliases(RootModel[dict[str, str]]):
    """Mapping of namespace URI to the short alias prefixed onto its type names."""

    @field_validator("root")
    @classmethod
    def _validate_aliases(cls, value: dict[str, str]) -> dict[str, str]:
        return _check_alias_table(value)


class GeneratorOptions(BaseModel):
    """Caller-supplied knobs for one generation run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    package_name: str = "myservice"
    make_public: bool = True
    namespace_aliases: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_NAMESPACE_ALIASES)
    )
    insecure: bool = False
    import_failure: Literal["warn", "error"] = "warn"
    max_workers: int = Field(default=1, ge=1)

    @field_validator("package_name")
    @classmethod
    def _validate_package_name(cls, value: str) -> str:
        if not _GO_IDENTIFIER_RE.match(value):
            raise ValueError(f"package name {value!r} is not a valid Go identifier")
        return value

    @field_validator("namespace_aliases")
    @classmethod
    def _validate_aliases(cls, value: dict[str, str]) -> dict[str, str]:
        return _check_alias_table(value)


def load_namespace_aliases(path: Path) -> dict[str, str]:
    """Load a namespace alias table from a YAML mapping file.

    Args:
        path (Path): YAML file mapping namespace URIs to alias identifiers.

    Returns:
        dict[str, str]: Validated alias table.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"Failed to read namespace alias file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML in {path}: {exc}") from exc

    if payload is None:
        return {}
    try:
        aliases = NamespaceAliases.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid namespace alias table in {path}: {exc}") from exc
    return dict(aliases.root)
