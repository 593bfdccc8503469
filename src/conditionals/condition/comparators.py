"""Per-type comparison rules for property conditions.

Every comparator has the shape ``compare(spec, resolved, candidate)`` and
returns the raw (pre-negation) result.  ``None`` means the operands could not
be compared at all (null value, NaN, unknown enum symbol); the evaluator
always treats that as non-matching, whatever the negation flag says.
"""

from __future__ import annotations

import enum
import math
import struct
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from conditionals.condition.spec import (
        DoublePropertySpec,
        EnumPropertySpec,
        FloatPropertySpec,
        IntegerPropertySpec,
        StringPropertySpec,
    )

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FLOAT_PRECISION: float = 0.00001
DOUBLE_PRECISION: float = 0.000000001

# ---------------------------------------------------------------------------
# Match types
# ---------------------------------------------------------------------------


class StringMatchType(enum.Enum):
    """How a resolved string is compared against the candidate."""

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    MATCHES = "matches"


class NumberMatchType(enum.Enum):
    """Ordering relation between a resolved number and the candidate."""

    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_float32(value: float) -> float:
    """Round a Python float to IEEE-754 single precision."""
    if math.isnan(value) or math.isinf(value):
        return value
    try:
        return float(struct.unpack("f", struct.pack("f", value))[0])
    except OverflowError:
        return math.copysign(math.inf, value)


def normalize_string(value: str, *, ignore_case: bool, trim: bool) -> str:
    """Apply case folding first, then whitespace trimming."""
    if ignore_case:
        value = value.lower()
    if trim:
        value = value.strip()
    return value


def _compare_numbers(
    match_type: NumberMatchType, resolved: float, candidate: float, precision: float | None
) -> bool:
    if match_type is NumberMatchType.EQUALS:
        if precision is None:
            return resolved == candidate
        return abs(resolved - candidate) < precision
    if match_type is NumberMatchType.GREATER_THAN:
        return resolved > candidate
    if match_type is NumberMatchType.LESS_THAN:
        return resolved < candidate
    if match_type is NumberMatchType.GREATER_THAN_OR_EQUAL:
        return resolved >= candidate
    return resolved <= candidate


# ---------------------------------------------------------------------------
# Comparators
# ---------------------------------------------------------------------------


def compare_string(spec: StringPropertySpec, resolved: str | None, candidate: str) -> bool | None:
    """Compare strings after ``ignore_case`` / ``trim`` normalization.

    ``MATCHES`` uses the pattern compiled from the normalized candidate at
    parse time and requires the whole resolved value to match.
    """
    if resolved is None:
        return None
    resolved = normalize_string(resolved, ignore_case=spec.ignore_case, trim=spec.trim)
    candidate = normalize_string(candidate, ignore_case=spec.ignore_case, trim=spec.trim)

    match_type = spec.match_type
    if match_type is StringMatchType.EQUALS:
        return resolved == candidate
    if match_type is StringMatchType.CONTAINS:
        return candidate in resolved
    if match_type is StringMatchType.STARTS_WITH:
        return resolved.startswith(candidate)
    if match_type is StringMatchType.ENDS_WITH:
        return resolved.endswith(candidate)
    return spec.compiled_pattern().fullmatch(resolved) is not None


def compare_integer(spec: IntegerPropertySpec, resolved: int | None, candidate: int) -> bool | None:
    if resolved is None:
        return None
    return _compare_numbers(spec.match_type, resolved, candidate, None)


def compare_float(spec: FloatPropertySpec, resolved: float | None, candidate: float) -> bool | None:
    """Single-precision comparison; ``EQUALS`` tolerates differences below 1e-5."""
    if resolved is None or math.isnan(resolved) or math.isnan(candidate):
        return None
    resolved = to_float32(resolved)
    candidate = to_float32(candidate)
    if spec.match_type is NumberMatchType.EQUALS:
        # the difference is narrowed too, so it is compared in single precision
        return abs(to_float32(resolved - candidate)) < to_float32(FLOAT_PRECISION)
    return _compare_numbers(spec.match_type, resolved, candidate, None)


def compare_double(
    spec: DoublePropertySpec, resolved: float | None, candidate: float
) -> bool | None:
    """Double-precision comparison; ``EQUALS`` tolerates differences below 1e-9."""
    if resolved is None or math.isnan(resolved) or math.isnan(candidate):
        return None
    return _compare_numbers(spec.match_type, resolved, candidate, DOUBLE_PRECISION)


def compare_enum(spec: EnumPropertySpec, resolved: str | None, candidate: str) -> bool | None:
    """Look both values up as upper-cased symbol names and compare members."""
    if resolved is None:
        return None
    members = spec.enum_type.__members__
    resolved_member = members.get(resolved.upper())
    candidate_member = members.get(candidate.upper())
    if resolved_member is None or candidate_member is None:
        return None
    return resolved_member is candidate_member


def compare_os(os_name: str, tokens: tuple[str, ...]) -> bool:
    """Return True if any lower-cased token is a substring of the OS name."""
    os_name = os_name.lower()
    return any(token.lower() in os_name for token in tokens)
