"""Condition declarations: parse conditions.yml and evaluate each declaration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import yaml

from conditionals.condition import (
    VALID_KINDS,
    ConditionConfigError,
    Outcome,
    evaluate_kind,
    is_repeatable,
    validate_instance,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from conditionals.resolver import PropertyResolver

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConditionDecl:
    """A named condition: one kind, a direct rule and/or repeated rules."""

    name: str
    description: str
    kind: str
    rule: Mapping[str, object] | None
    repeated: tuple[Mapping[str, object], ...] = ()


# ---------------------------------------------------------------------------
# YAML parsing
# ---------------------------------------------------------------------------


def _parse_declaration(idx: int, data: object, seen_names: set[str]) -> ConditionDecl:
    if not isinstance(data, dict):
        msg = f"conditions.yml: condition at index {idx} must be a mapping"
        raise ConditionConfigError(msg)

    name = data.get("name")
    if name is None or not isinstance(name, str) or not name.strip():
        msg = f"conditions.yml: condition at index {idx} missing required 'name' field"
        raise ConditionConfigError(msg)
    if name in seen_names:
        msg = f"conditions.yml: Duplicate condition name '{name}'"
        raise ConditionConfigError(msg)
    seen_names.add(name)

    description = str(data.get("description", ""))

    kind = data.get("kind")
    if not isinstance(kind, str) or kind not in VALID_KINDS:
        msg = (
            f"Condition '{name}': invalid kind {kind!r}, "
            f"must be one of {sorted(VALID_KINDS)}"
        )
        raise ConditionConfigError(msg)

    rule = data.get("rule")
    if rule is not None and not isinstance(rule, dict):
        msg = f"Condition '{name}': 'rule' must be a mapping"
        raise ConditionConfigError(msg)

    repeated_raw = data.get("repeated", [])
    if not isinstance(repeated_raw, list):
        msg = f"Condition '{name}': 'repeated' must be a list"
        raise ConditionConfigError(msg)
    for r_idx, item in enumerate(repeated_raw):
        if not isinstance(item, dict):
            msg = f"Condition '{name}': repeated rule at index {r_idx} must be a mapping"
            raise ConditionConfigError(msg)

    if rule is None and not repeated_raw:
        msg = f"Condition '{name}': must have 'rule' and/or a non-empty 'repeated' list"
        raise ConditionConfigError(msg)
    if repeated_raw and not is_repeatable(kind):
        msg = f"Condition '{name}': kind '{kind}' does not support 'repeated'"
        raise ConditionConfigError(msg)

    # Parse every instance now so authoring errors surface at load time.
    for attributes in ([rule] if rule is not None else []) + repeated_raw:
        try:
            validate_instance(kind, attributes)
        except ConditionConfigError as exc:
            msg = f"Condition '{name}': {exc}"
            raise ConditionConfigError(msg) from exc

    return ConditionDecl(
        name=name,
        description=description,
        kind=kind,
        rule=rule,
        repeated=tuple(repeated_raw),
    )


def parse_conditions(data: object) -> list[ConditionDecl]:
    """Validate an already-loaded conditions document.

    Raises :class:`ConditionConfigError` on schema errors.
    """
    if not isinstance(data, dict):
        msg = "conditions.yml must be a YAML mapping"
        raise ConditionConfigError(msg)

    version = data.get("version")
    if version is None:
        msg = "conditions.yml: missing required 'version' field"
        raise ConditionConfigError(msg)
    if (
        not isinstance(version, int)
        or isinstance(version, bool)
        or version not in SUPPORTED_SCHEMA_VERSIONS
    ):
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"conditions.yml: unsupported version {version!r}, expected one of {expected}"
        raise ConditionConfigError(msg)

    conditions_data = data.get("conditions", [])
    if not isinstance(conditions_data, list):
        msg = "conditions.yml: 'conditions' must be a list"
        raise ConditionConfigError(msg)

    seen_names: set[str] = set()
    return [
        _parse_declaration(idx, item, seen_names) for idx, item in enumerate(conditions_data)
    ]


def load_conditions(path: Path) -> list[ConditionDecl]:
    """Parse conditions.yml and return validated declarations."""
    with path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            msg = f"{path.name}: invalid YAML: {exc}"
            raise ConditionConfigError(msg) from exc

    declarations = parse_conditions(data)
    logger.info("Loaded %d condition(s) from %s", len(declarations), path)
    return declarations


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def evaluate_declaration(decl: ConditionDecl, resolver: PropertyResolver) -> Outcome:
    """Evaluate one declaration against *resolver*."""
    return evaluate_kind(decl.kind, resolver, decl.rule, decl.repeated)
