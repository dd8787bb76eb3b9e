"""
Argument validator - Structural checks of caller arguments against a descriptor.

Validation is structural only: presence of required parameters, type
conformance (with lenient coercion of loosely-typed transport values) and
default substitution. Whether "00:01:00" is a legal timestamp or "blur=5" a
legal filter is left to the external tool.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .catalog import OperationDescriptor, ParameterSpec, ParamType
from .errors import ValidationError, ValidationReason

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


class ValidatedArgs(Mapping[str, Any]):
    """
    Caller arguments after validation and default substitution.

    Declared parameters hold values of their declared type. Undeclared keys
    supplied by the caller are carried through unchanged and listed in
    ``extras``.
    """

    def __init__(self, operation: str, values: dict[str, Any], extras: frozenset[str] = frozenset()):
        self.operation = operation
        self.extras = extras
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ValidatedArgs({self.operation!r}, {dict(self._values)!r})"


class _Mismatch(Exception):
    """Raised by coercers; turned into a ValidationError by validate()."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if _is_number(value):
        return str(value)
    raise _Mismatch(f"expected string, got {type(value).__name__}")


def _coerce_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise _Mismatch("expected integer, got boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise _Mismatch(f"expected integer, got {value!r}")


def _coerce_number(value: Any) -> int | float:
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            pass
    if isinstance(value, float) and not math.isfinite(value):
        raise _Mismatch(f"expected finite number, got {value!r}")
    if _is_number(value):
        return value
    raise _Mismatch(f"expected number, got {value!r}")


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise _Mismatch(f"expected boolean, got {value!r}")


def _coerce_array(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        raise _Mismatch(f"expected array of strings, got {type(value).__name__}")
    items = []
    for index, item in enumerate(value):
        try:
            items.append(_coerce_string(item))
        except _Mismatch as e:
            raise _Mismatch(f"item {index}: {e}") from None
    return items


_COERCERS = {
    ParamType.STRING: _coerce_string,
    ParamType.INTEGER: _coerce_integer,
    ParamType.NUMBER: _coerce_number,
    ParamType.BOOLEAN: _coerce_boolean,
    ParamType.ARRAY: _coerce_array,
}


def coerce(param: ParameterSpec, value: Any) -> Any:
    """Coerce a single value to the parameter's declared type."""
    return _COERCERS[param.type](value)


def validate(descriptor: OperationDescriptor, raw: Mapping[str, Any] | None) -> ValidatedArgs:
    """
    Validate raw caller arguments against an operation descriptor.

    Args:
        descriptor: Operation being called
        raw: Caller-supplied arguments (None is treated as empty)

    Returns:
        ValidatedArgs with defaults filled in and unknown keys passed through

    Raises:
        ValidationError: naming the first offending parameter and the reason
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValidationError(
            descriptor.name, "arguments", ValidationReason.TYPE_MISMATCH, f"expected object, got {type(raw).__name__}"
        )

    values: dict[str, Any] = {}
    for param in descriptor.parameters:
        supplied = raw.get(param.name)
        if supplied is not None:
            try:
                values[param.name] = coerce(param, supplied)
            except _Mismatch as e:
                raise ValidationError(descriptor.name, param.name, ValidationReason.TYPE_MISMATCH, str(e)) from None
        elif param.has_default:
            values[param.name] = copy.deepcopy(param.default)
        elif param.name in descriptor.required:
            raise ValidationError(descriptor.name, param.name, ValidationReason.MISSING_REQUIRED)

    extras = frozenset(key for key in raw if not descriptor.declares(key))
    for key in extras:
        values[key] = raw[key]

    return ValidatedArgs(descriptor.name, values, extras)
