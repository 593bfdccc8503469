"""Condition kinds: wire each value type's parser and comparator into the evaluator."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from conditionals.condition.aggregator import evaluate_conditions, merged_instances
from conditionals.condition.comparators import (
    compare_double,
    compare_enum,
    compare_float,
    compare_integer,
    compare_string,
)
from conditionals.condition.evaluator import Outcome, evaluate_os, evaluate_spec
from conditionals.condition.spec import (
    DOUBLE_CONDITION,
    ENUM_CONDITION,
    FLOAT_CONDITION,
    INTEGER_CONDITION,
    OS_CONDITION,
    STRING_CONDITION,
    ConditionConfigError,
    PropertySpec,
    parse_double_spec,
    parse_enum_spec,
    parse_float_spec,
    parse_integer_spec,
    parse_os_spec,
    parse_string_spec,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from conditionals.resolver import PropertyResolver

Attributes = Mapping[str, object]

OS_KIND = "os"

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConditionKind:
    """A property condition type: how to parse it and how to compare values."""

    key: str
    label: str
    parse: Callable[..., PropertySpec[Any]]
    comparator: Callable[..., bool | None]
    target_type: type
    repeatable: bool = True

    def parse_instance(self, attributes: Attributes) -> PropertySpec[Any]:
        return self.parse(attributes, condition=self.label)

    def evaluate_instance(self, attributes: Attributes, resolver: PropertyResolver) -> Outcome:
        spec = self.parse_instance(attributes)
        return evaluate_spec(spec, resolver, self.comparator, self.target_type)


CONDITION_KINDS: dict[str, ConditionKind] = {
    kind.key: kind
    for kind in (
        ConditionKind("string_property", STRING_CONDITION, parse_string_spec, compare_string, str),
        ConditionKind(
            "integer_property", INTEGER_CONDITION, parse_integer_spec, compare_integer, int
        ),
        ConditionKind("float_property", FLOAT_CONDITION, parse_float_spec, compare_float, float),
        ConditionKind(
            "double_property", DOUBLE_CONDITION, parse_double_spec, compare_double, float
        ),
        ConditionKind("enum_property", ENUM_CONDITION, parse_enum_spec, compare_enum, str),
    )
}

VALID_KINDS: frozenset[str] = frozenset(CONDITION_KINDS) | {OS_KIND}

# ---------------------------------------------------------------------------
# Generic entry points
# ---------------------------------------------------------------------------


def get_kind(kind: str) -> ConditionKind:
    """Look up a property condition kind by key."""
    try:
        return CONDITION_KINDS[kind]
    except KeyError:
        msg = f"Unknown condition kind '{kind}', must be one of {sorted(VALID_KINDS)}"
        raise ConditionConfigError(msg) from None


def is_repeatable(kind: str) -> bool:
    """Return whether *kind* accepts repeated rule instances."""
    if kind == OS_KIND:
        return False
    return get_kind(kind).repeatable


def validate_instance(kind: str, attributes: Attributes) -> None:
    """Parse *attributes* for *kind*, raising on any authoring error."""
    if kind == OS_KIND:
        parse_os_spec(attributes)
    else:
        get_kind(kind).parse_instance(attributes)


def evaluate_kind(
    kind: str,
    resolver: PropertyResolver,
    direct: Attributes | None = None,
    repeated: Iterable[Attributes | None] = (),
) -> Outcome:
    """Evaluate the direct instance and the repeated ones for *kind*.

    ``os`` conditions are not repeatable and accept only *direct*.
    """
    repeated_rules = tuple(repeated)
    if repeated_rules and not is_repeatable(kind):
        label = OS_CONDITION if kind == OS_KIND else get_kind(kind).label
        msg = f"{label} is not repeatable"
        raise ConditionConfigError(msg)
    if kind == OS_KIND:
        return evaluate_os(direct, resolver)

    condition_kind = get_kind(kind)
    instances = merged_instances(direct, repeated_rules)
    return evaluate_conditions(
        condition_kind.label,
        instances,
        lambda attributes: condition_kind.evaluate_instance(attributes, resolver),
    )


# ---------------------------------------------------------------------------
# Per-type shortcuts
# ---------------------------------------------------------------------------


def on_string_property(
    resolver: PropertyResolver,
    direct: Attributes | None = None,
    repeated: Iterable[Attributes | None] = (),
) -> Outcome:
    return evaluate_kind("string_property", resolver, direct, repeated)


def on_integer_property(
    resolver: PropertyResolver,
    direct: Attributes | None = None,
    repeated: Iterable[Attributes | None] = (),
) -> Outcome:
    return evaluate_kind("integer_property", resolver, direct, repeated)


def on_float_property(
    resolver: PropertyResolver,
    direct: Attributes | None = None,
    repeated: Iterable[Attributes | None] = (),
) -> Outcome:
    return evaluate_kind("float_property", resolver, direct, repeated)


def on_double_property(
    resolver: PropertyResolver,
    direct: Attributes | None = None,
    repeated: Iterable[Attributes | None] = (),
) -> Outcome:
    return evaluate_kind("double_property", resolver, direct, repeated)


def on_enum_property(
    resolver: PropertyResolver,
    direct: Attributes | None = None,
    repeated: Iterable[Attributes | None] = (),
) -> Outcome:
    return evaluate_kind("enum_property", resolver, direct, repeated)


def on_os(resolver: PropertyResolver, attributes: Attributes | None) -> Outcome:
    return evaluate_os(attributes, resolver)
