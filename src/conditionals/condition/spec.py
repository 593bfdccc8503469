"""Rule specs: parse raw rule attributes into validated, immutable specs."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from conditionals.condition.comparators import NumberMatchType, StringMatchType, normalize_string

if TYPE_CHECKING:
    from collections.abc import Mapping

V = TypeVar("V")
M = TypeVar("M", StringMatchType, NumberMatchType)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STRING_CONDITION = "OnStringProperty"
INTEGER_CONDITION = "OnIntegerProperty"
FLOAT_CONDITION = "OnFloatProperty"
DOUBLE_CONDITION = "OnDoubleProperty"
ENUM_CONDITION = "OnEnumProperty"
OS_CONDITION = "OnOs"

_BASE_KEYS: frozenset[str] = frozenset(
    {"value", "name", "prefix", "having_value", "match_if_missing"}
)
_NUMBER_KEYS: frozenset[str] = _BASE_KEYS | {"negate", "not", "match_type"}
_STRING_KEYS: frozenset[str] = _NUMBER_KEYS | {"ignore_case", "trim"}
_ENUM_KEYS: frozenset[str] = _BASE_KEYS | {"enum_type"}
_OS_KEYS: frozenset[str] = frozenset({"value"})

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConditionConfigError(ValueError):
    """Raised when a rule is declared incorrectly.

    These are authoring mistakes (conflicting name sources, unknown match
    types, invalid patterns) and are never downgraded to a no-match.
    """


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropertySpec(Generic[V]):
    """One parsed rule instance: which keys to read and what to compare against."""

    condition: str
    prefix: str
    names: tuple[str, ...]
    having_value: V
    match_if_missing: bool = False
    negate: bool = False

    def key(self, name: str) -> str:
        return self.prefix + name

    def __str__(self) -> str:
        if len(self.names) == 1:
            names = self.names[0]
        else:
            names = "[" + ",".join(self.names) + "]"
        return f"({self.prefix}{names}={self.having_value})"


@dataclass(frozen=True)
class StringPropertySpec(PropertySpec[str]):
    match_type: StringMatchType = StringMatchType.EQUALS
    ignore_case: bool = False
    trim: bool = False
    pattern: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    def compiled_pattern(self) -> re.Pattern[str]:
        """Return the ``MATCHES`` pattern; raise if none was compiled."""
        if self.pattern is None:
            msg = (
                f"{self.condition} {self}: no pattern compiled "
                f"for match type {self.match_type.name}"
            )
            raise ConditionConfigError(msg)
        return self.pattern


@dataclass(frozen=True)
class IntegerPropertySpec(PropertySpec[int]):
    match_type: NumberMatchType = NumberMatchType.EQUALS


@dataclass(frozen=True)
class FloatPropertySpec(PropertySpec[float]):
    match_type: NumberMatchType = NumberMatchType.EQUALS


@dataclass(frozen=True)
class DoublePropertySpec(PropertySpec[float]):
    match_type: NumberMatchType = NumberMatchType.EQUALS


@dataclass(frozen=True)
class EnumPropertySpec(PropertySpec[str]):
    enum_type: type[enum.Enum] = field(default=enum.Enum, compare=False)


@dataclass(frozen=True)
class OsSpec:
    """Tokens matched as substrings of the host OS name."""

    tokens: tuple[str, ...]


# ---------------------------------------------------------------------------
# Attribute parsing helpers
# ---------------------------------------------------------------------------


def _check_keys(attributes: Mapping[str, object], allowed: frozenset[str], condition: str) -> None:
    unknown = sorted(set(attributes) - allowed)
    if unknown:
        msg = (
            f"{condition}: unknown attribute(s) {unknown}, "
            f"must be one of {sorted(allowed)}"
        )
        raise ConditionConfigError(msg)


def _string_list(raw: object, attr: str, condition: str) -> tuple[str, ...]:
    """Normalize a string-or-list attribute into a tuple of strings."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,) if raw else ()
    if isinstance(raw, (list, tuple)):
        for item in raw:
            if not isinstance(item, str):
                msg = f"{condition}: '{attr}' entries must be strings, got {item!r}"
                raise ConditionConfigError(msg)
        return tuple(raw)
    msg = f"{condition}: '{attr}' must be a string or a list of strings"
    raise ConditionConfigError(msg)


def resolve_prefix(attributes: Mapping[str, object], condition: str) -> str:
    """Return the trimmed prefix, dot-terminated when non-empty."""
    raw = attributes.get("prefix", "")
    if raw is None:
        return ""
    if not isinstance(raw, str):
        msg = f"{condition}: 'prefix' must be a string"
        raise ConditionConfigError(msg)
    prefix = raw.strip()
    if prefix and not prefix.endswith("."):
        prefix += "."
    return prefix


def resolve_names(attributes: Mapping[str, object], condition: str) -> tuple[str, ...]:
    """Return the property names from exactly one of ``value`` / ``name``."""
    value = _string_list(attributes.get("value"), "value", condition)
    name = _string_list(attributes.get("name"), "name", condition)
    if not value and not name:
        msg = f"The name or value attribute of {condition} must be specified"
        raise ConditionConfigError(msg)
    if value and name:
        msg = f"The name and value attributes of {condition} are exclusive"
        raise ConditionConfigError(msg)
    return value or name


def _flag(attributes: Mapping[str, object], key: str, condition: str) -> bool:
    raw = attributes.get(key, False)
    if not isinstance(raw, bool):
        msg = f"{condition}: '{key}' must be a boolean, got {raw!r}"
        raise ConditionConfigError(msg)
    return raw


def _negate(attributes: Mapping[str, object], condition: str) -> bool:
    if "negate" in attributes and "not" in attributes:
        msg = f"The negate and not attributes of {condition} are exclusive"
        raise ConditionConfigError(msg)
    key = "negate" if "negate" in attributes else "not"
    return _flag(attributes, key, condition)


def _match_type(attributes: Mapping[str, object], enum_cls: type[M], condition: str) -> M:
    raw = attributes.get("match_type")
    if raw is None:
        return enum_cls["EQUALS"]
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str):
        member = enum_cls.__members__.get(raw.strip().upper().replace("-", "_"))
        if member is not None:
            return member
    msg = (
        f"{condition}: invalid match_type {raw!r}, "
        f"must be one of {[m.name for m in enum_cls]}"
    )
    raise ConditionConfigError(msg)


def _having_int(attributes: Mapping[str, object], condition: str) -> int:
    raw = attributes.get("having_value", 0)
    if isinstance(raw, bool):
        msg = f"{condition}: 'having_value' must be an integer, got {raw!r}"
        raise ConditionConfigError(msg)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass
    msg = f"{condition}: 'having_value' must be an integer, got {raw!r}"
    raise ConditionConfigError(msg)


def _having_float(attributes: Mapping[str, object], condition: str) -> float:
    raw = attributes.get("having_value", 0.0)
    if isinstance(raw, bool):
        msg = f"{condition}: 'having_value' must be a number, got {raw!r}"
        raise ConditionConfigError(msg)
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError:
            pass
    msg = f"{condition}: 'having_value' must be a number, got {raw!r}"
    raise ConditionConfigError(msg)


def _having_str(attributes: Mapping[str, object], condition: str) -> str:
    raw = attributes.get("having_value", "")
    if raw is None or isinstance(raw, (dict, list)):
        msg = f"{condition}: 'having_value' must be a scalar, got {raw!r}"
        raise ConditionConfigError(msg)
    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw)


def _enum_type(attributes: Mapping[str, object], condition: str) -> type[enum.Enum]:
    """Accept an ``Enum`` subclass or an inline list of symbol names."""
    raw = attributes.get("enum_type")
    if raw is None:
        msg = f"{condition}: 'enum_type' is required"
        raise ConditionConfigError(msg)

    if isinstance(raw, type) and issubclass(raw, enum.Enum):
        enum_type = raw
    elif isinstance(raw, (list, tuple)):
        # Comparator lookups are upper-cased.
        symbols = tuple(s.upper() for s in _string_list(raw, "enum_type", condition))
        if not symbols:
            msg = f"{condition}: 'enum_type' has no symbols"
            raise ConditionConfigError(msg)
        if len(set(symbols)) != len(symbols):
            msg = f"{condition}: 'enum_type' has duplicate symbols {list(symbols)}"
            raise ConditionConfigError(msg)
        try:
            enum_type = enum.Enum("Symbols", list(symbols))  # type: ignore[misc]
        except ValueError as exc:
            msg = f"{condition}: invalid 'enum_type' symbols: {exc}"
            raise ConditionConfigError(msg) from exc
    else:
        msg = f"{condition}: 'enum_type' must be an Enum subclass or a list of symbol names"
        raise ConditionConfigError(msg)

    if not enum_type.__members__:
        msg = f"{condition}: enum type {enum_type.__name__} has no symbols"
        raise ConditionConfigError(msg)
    return enum_type


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_string_spec(
    attributes: Mapping[str, object], *, condition: str = STRING_CONDITION
) -> StringPropertySpec:
    """Parse string-property attributes.

    For ``MATCHES`` the candidate is normalized like the resolved values will
    be and compiled here, so an invalid pattern fails before evaluation.
    """
    _check_keys(attributes, _STRING_KEYS, condition)
    prefix = resolve_prefix(attributes, condition)
    names = resolve_names(attributes, condition)
    having_value = _having_str(attributes, condition)
    ignore_case = _flag(attributes, "ignore_case", condition)
    trim = _flag(attributes, "trim", condition)
    match_type = _match_type(attributes, StringMatchType, condition)

    pattern: re.Pattern[str] | None = None
    if match_type is StringMatchType.MATCHES:
        source = normalize_string(having_value, ignore_case=ignore_case, trim=trim)
        try:
            pattern = re.compile(source)
        except re.error as exc:
            msg = f"{condition}: invalid pattern {having_value!r}: {exc}"
            raise ConditionConfigError(msg) from exc

    return StringPropertySpec(
        condition=condition,
        prefix=prefix,
        names=names,
        having_value=having_value,
        match_if_missing=_flag(attributes, "match_if_missing", condition),
        negate=_negate(attributes, condition),
        match_type=match_type,
        ignore_case=ignore_case,
        trim=trim,
        pattern=pattern,
    )


def parse_integer_spec(
    attributes: Mapping[str, object], *, condition: str = INTEGER_CONDITION
) -> IntegerPropertySpec:
    """Parse integer-property attributes."""
    _check_keys(attributes, _NUMBER_KEYS, condition)
    return IntegerPropertySpec(
        condition=condition,
        prefix=resolve_prefix(attributes, condition),
        names=resolve_names(attributes, condition),
        having_value=_having_int(attributes, condition),
        match_if_missing=_flag(attributes, "match_if_missing", condition),
        negate=_negate(attributes, condition),
        match_type=_match_type(attributes, NumberMatchType, condition),
    )


def parse_float_spec(
    attributes: Mapping[str, object], *, condition: str = FLOAT_CONDITION
) -> FloatPropertySpec:
    """Parse single-precision float-property attributes."""
    _check_keys(attributes, _NUMBER_KEYS, condition)
    return FloatPropertySpec(
        condition=condition,
        prefix=resolve_prefix(attributes, condition),
        names=resolve_names(attributes, condition),
        having_value=_having_float(attributes, condition),
        match_if_missing=_flag(attributes, "match_if_missing", condition),
        negate=_negate(attributes, condition),
        match_type=_match_type(attributes, NumberMatchType, condition),
    )


def parse_double_spec(
    attributes: Mapping[str, object], *, condition: str = DOUBLE_CONDITION
) -> DoublePropertySpec:
    """Parse double-precision float-property attributes."""
    _check_keys(attributes, _NUMBER_KEYS, condition)
    return DoublePropertySpec(
        condition=condition,
        prefix=resolve_prefix(attributes, condition),
        names=resolve_names(attributes, condition),
        having_value=_having_float(attributes, condition),
        match_if_missing=_flag(attributes, "match_if_missing", condition),
        negate=_negate(attributes, condition),
        match_type=_match_type(attributes, NumberMatchType, condition),
    )


def parse_enum_spec(
    attributes: Mapping[str, object], *, condition: str = ENUM_CONDITION
) -> EnumPropertySpec:
    """Parse enum-property attributes; ``enum_type`` is required."""
    _check_keys(attributes, _ENUM_KEYS, condition)
    return EnumPropertySpec(
        condition=condition,
        prefix=resolve_prefix(attributes, condition),
        names=resolve_names(attributes, condition),
        having_value=_having_str(attributes, condition),
        match_if_missing=_flag(attributes, "match_if_missing", condition),
        enum_type=_enum_type(attributes, condition),
    )


def parse_os_spec(attributes: Mapping[str, object], *, condition: str = OS_CONDITION) -> OsSpec:
    """Parse OS attributes.  An empty token list is allowed and never matches."""
    _check_keys(attributes, _OS_KEYS, condition)
    return OsSpec(tokens=_string_list(attributes.get("value"), "value", condition))
