"""Evaluate one parsed rule instance against a property resolver."""

from __future__ import annotations

import logging
import platform
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from conditionals.condition import messages
from conditionals.condition.comparators import compare_os
from conditionals.condition.spec import OS_CONDITION, PropertySpec, parse_os_spec
from conditionals.resolver import ConversionError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from conditionals.resolver import PropertyResolver

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=PropertySpec[Any])

Comparator = Callable[[S, Any, Any], bool | None]

OS_NAME_PROPERTY = "os.name"

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Outcome:
    """Match verdict plus the ordered reasons that explain it."""

    matched: bool
    reasons: tuple[str, ...] = ()

    @classmethod
    def match(cls, *reasons: str) -> Outcome:
        return cls(matched=True, reasons=reasons)

    @classmethod
    def no_match(cls, *reasons: str) -> Outcome:
        return cls(matched=False, reasons=reasons)

    @property
    def message(self) -> str:
        return "; ".join(self.reasons)


# ---------------------------------------------------------------------------
# Property evaluation
# ---------------------------------------------------------------------------


def collect_properties(
    spec: S,
    resolver: PropertyResolver,
    comparator: Comparator[S],
    target_type: type,
) -> tuple[list[str], list[str]]:
    """Classify every configured name as missing or non-matching.

    Returns ``(missing, non_matching)``; names that satisfy the rule appear in
    neither list.  Conversion failures and incomparable operands count as
    non-matching, they never abort the walk over the remaining names.
    """
    missing: list[str] = []
    non_matching: list[str] = []

    for name in spec.names:
        key = spec.key(name)
        if not resolver.contains_key(key):
            if not spec.match_if_missing:
                missing.append(name)
            logger.debug("%s: property '%s' not present", spec.condition, key)
            continue

        try:
            value = resolver.get(key, target_type)
        except ConversionError as exc:
            logger.debug("%s: %s", spec.condition, exc)
            non_matching.append(name)
            continue

        result = comparator(spec, value, spec.having_value)
        if result is None or result == spec.negate:
            non_matching.append(name)
        logger.debug(
            "%s: property '%s'=%r compared to %r -> %s",
            spec.condition,
            key,
            value,
            spec.having_value,
            result,
        )

    return missing, non_matching


def evaluate_spec(
    spec: S,
    resolver: PropertyResolver,
    comparator: Comparator[S],
    target_type: type,
) -> Outcome:
    """Evaluate one rule instance.

    Missing properties take precedence over non-matching ones in the reason
    text; only one of the two lists is reported.
    """
    missing, non_matching = collect_properties(spec, resolver, comparator, target_type)
    subject = messages.for_condition(spec.condition, spec)

    if missing:
        return Outcome.no_match(
            messages.did_not_find(subject, "property", "properties", missing)
        )
    if non_matching:
        return Outcome.no_match(
            messages.found(
                subject,
                "different value in property",
                "different value in properties",
                non_matching,
            )
        )
    return Outcome.match(messages.because(subject, "matched"))


# ---------------------------------------------------------------------------
# OS evaluation
# ---------------------------------------------------------------------------


def host_os_name() -> str:
    """Return the running OS name in the ``Linux`` / ``Windows 11`` / ``Mac OS X`` style."""
    system = platform.system()
    if system == "Darwin":
        return "Mac OS X"
    if system == "Windows":
        release = platform.release()
        return f"Windows {release}" if release else system
    return system


def resolve_os_name(resolver: PropertyResolver) -> str:
    """Read ``os.name`` from the resolver, falling back to the host OS name."""
    if resolver.contains_key(OS_NAME_PROPERTY):
        try:
            return resolver.get(OS_NAME_PROPERTY, str)
        except ConversionError as exc:
            logger.debug("%s: %s, using host OS name", OS_CONDITION, exc)
    return host_os_name()


def evaluate_os(attributes: Mapping[str, object] | None, resolver: PropertyResolver) -> Outcome:
    """Match when any configured token is a substring of the OS name (case-insensitive)."""
    if attributes is None:
        return Outcome.no_match(messages.no_attributes_found(OS_CONDITION))

    spec = parse_os_spec(attributes)
    os_name = resolve_os_name(resolver).lower()
    if compare_os(os_name, spec.tokens):
        return Outcome.match(messages.found(OS_CONDITION, "OS", "OS", [os_name], quote=False))
    tokens = "[" + ", ".join(spec.tokens) + "]"
    return Outcome.no_match(
        messages.because(OS_CONDITION, f"OS '{os_name}' did not match any of {tokens}")
    )
