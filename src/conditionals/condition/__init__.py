"""Condition core: comparators, rule specs, evaluator, aggregator, kinds."""

from conditionals.condition.aggregator import (
    check_attributes,
    evaluate_conditions,
    merged_instances,
)
from conditionals.condition.comparators import (
    DOUBLE_PRECISION,
    FLOAT_PRECISION,
    NumberMatchType,
    StringMatchType,
)
from conditionals.condition.evaluator import (
    OS_NAME_PROPERTY,
    Outcome,
    collect_properties,
    evaluate_os,
    evaluate_spec,
)
from conditionals.condition.kinds import (
    CONDITION_KINDS,
    OS_KIND,
    VALID_KINDS,
    ConditionKind,
    evaluate_kind,
    is_repeatable,
    on_double_property,
    on_enum_property,
    on_float_property,
    on_integer_property,
    on_os,
    on_string_property,
    validate_instance,
)
from conditionals.condition.spec import (
    ConditionConfigError,
    DoublePropertySpec,
    EnumPropertySpec,
    FloatPropertySpec,
    IntegerPropertySpec,
    OsSpec,
    PropertySpec,
    StringPropertySpec,
    parse_double_spec,
    parse_enum_spec,
    parse_float_spec,
    parse_integer_spec,
    parse_os_spec,
    parse_string_spec,
)

__all__ = [
    "CONDITION_KINDS",
    "DOUBLE_PRECISION",
    "FLOAT_PRECISION",
    "OS_KIND",
    "OS_NAME_PROPERTY",
    "VALID_KINDS",
    "ConditionConfigError",
    "ConditionKind",
    "DoublePropertySpec",
    "EnumPropertySpec",
    "FloatPropertySpec",
    "IntegerPropertySpec",
    "NumberMatchType",
    "OsSpec",
    "Outcome",
    "PropertySpec",
    "StringMatchType",
    "StringPropertySpec",
    "check_attributes",
    "collect_properties",
    "evaluate_conditions",
    "evaluate_kind",
    "evaluate_os",
    "evaluate_spec",
    "is_repeatable",
    "merged_instances",
    "on_double_property",
    "on_enum_property",
    "on_float_property",
    "on_integer_property",
    "on_os",
    "on_string_property",
    "parse_double_spec",
    "parse_enum_spec",
    "parse_float_spec",
    "parse_integer_spec",
    "parse_os_spec",
    "parse_string_spec",
    "validate_instance",
]
