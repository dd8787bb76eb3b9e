"""
Operation catalog - Typed declarations of every callable operation.

Terminology:
- ParameterSpec: one named, typed parameter with an optional default
- OperationDescriptor: a named capability with its ordered parameters
- Catalog: read-only registry of descriptors, built once at startup

Descriptors describe WHAT an operation accepts, not HOW it runs.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import CatalogError, UnknownOperationError


class ParamType(Enum):
    """Declared parameter types (values are JSON-schema type names)."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"  # array of strings


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class ParameterSpec:
    """A single operation parameter."""

    name: str
    type: ParamType
    description: str = ""
    default: Any = NO_DEFAULT
    # Allowed values, documentation hint only
    choices: tuple[str, ...] | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def to_schema(self) -> dict[str, Any]:
        """Render as a JSON-schema property."""
        schema: dict[str, Any] = {"type": self.type.value}
        if self.type == ParamType.ARRAY:
            schema["items"] = {"type": "string"}
        if self.description:
            schema["description"] = self.description
        if self.has_default:
            schema["default"] = self.default
        if self.choices:
            schema["enum"] = list(self.choices)
        return schema


@dataclass(frozen=True)
class OperationDescriptor:
    """
    Static declaration of one callable operation.

    Invariants (checked on construction):
    - parameter names are unique
    - required names are a subset of the declared parameters
    - required parameters carry no default
    """

    name: str
    description: str
    parameters: tuple[ParameterSpec, ...]
    required: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise CatalogError(f"{self.name}: duplicate parameter names")

        undeclared = set(self.required) - set(names)
        if undeclared:
            raise CatalogError(f"{self.name}: required parameters not declared: {', '.join(sorted(undeclared))}")

        for param in self.parameters:
            if param.name in self.required and param.has_default:
                raise CatalogError(f"{self.name}: required parameter '{param.name}' must not have a default")

    def declares(self, name: str) -> bool:
        """Whether a parameter with this name is declared."""
        return any(p.name == name for p in self.parameters)

    def parameter(self, name: str) -> ParameterSpec | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    @property
    def required_names(self) -> list[str]:
        """Required parameter names in declaration order."""
        return [p.name for p in self.parameters if p.name in self.required]

    def input_schema(self) -> dict[str, Any]:
        """Render the parameters as a JSON-schema object."""
        return {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.parameters},
            "required": self.required_names,
        }


def operation(
    name: str, description: str, *parameters: ParameterSpec, required: Iterable[str] = ()
) -> OperationDescriptor:
    """Shorthand used by the static operation table."""
    return OperationDescriptor(
        name=name,
        description=description,
        parameters=tuple(parameters),
        required=frozenset(required),
    )


class Catalog(Mapping[str, OperationDescriptor]):
    """
    Read-only registry of operation descriptors.

    Preserves table order for discovery. Never mutated after construction,
    so it can be shared freely between concurrent requests.
    """

    def __init__(self, descriptors: Iterable[OperationDescriptor]):
        entries: dict[str, OperationDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in entries:
                raise CatalogError(f"Duplicate operation: {descriptor.name}")
            entries[descriptor.name] = descriptor
        self._entries = MappingProxyType(entries)

    def __getitem__(self, name: str) -> OperationDescriptor:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, name: str) -> OperationDescriptor:
        """Get a descriptor by name, raising UnknownOperationError if absent."""
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def list(self) -> list[OperationDescriptor]:
        """All descriptors in table order."""
        return list(self._entries.values())

    def names(self) -> list[str]:
        return list(self._entries)
