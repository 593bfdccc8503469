"""Check orchestrator: build the resolver, load conditions, evaluate, format results."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from conditionals.resolver import (
    ChainedPropertyResolver,
    EnvironmentPropertyResolver,
    MappingPropertyResolver,
    PropertyResolver,
    load_properties,
)
from conditionals.rules_file import evaluate_declaration, load_conditions

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from conditionals.condition import Outcome


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CheckError(Exception):
    """Raised when a check encounters a configuration error."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConditionResult:
    """Outcome of one named condition."""

    name: str
    description: str
    kind: str
    outcome: Outcome

    @property
    def matched(self) -> bool:
        return self.outcome.matched


@dataclass
class CheckResult:
    """Result of a check run."""

    results: list[ConditionResult] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def all_matched(self) -> bool:
        return all(r.matched for r in self.results)

    @property
    def failed(self) -> list[ConditionResult]:
        return [r for r in self.results if not r.matched]


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def build_resolver(
    properties: Sequence[Path] = (),
    *,
    use_environ: bool = False,
    overrides: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> PropertyResolver:
    """Chain overrides, then property files in order, then the environment."""
    resolvers: list[PropertyResolver] = []
    if overrides:
        resolvers.append(MappingPropertyResolver(overrides))
    resolvers.extend(load_properties(path) for path in properties)
    if use_environ:
        resolvers.append(EnvironmentPropertyResolver(environ))
    return ChainedPropertyResolver(*resolvers)


def check(
    rules_path: Path,
    *,
    properties: Sequence[Path] = (),
    use_environ: bool = False,
    overrides: Mapping[str, str] | None = None,
    only: Sequence[str] = (),
) -> CheckResult:
    """Evaluate every condition in *rules_path* against the configured properties.

    Parameters
    ----------
    rules_path:
        Path to ``conditions.yml``.
    properties:
        YAML property files; earlier files win over later ones.
    use_environ:
        When *True*, environment variables are consulted after the files.
    overrides:
        ``key -> value`` pairs that take precedence over everything else.
    only:
        When non-empty, evaluate only the conditions with these names.

    Raises
    ------
    CheckError
        When the conditions file or a properties file is invalid, or when
        *only* names an unknown condition.
    """
    start = time.monotonic()

    try:
        declarations = load_conditions(rules_path)
        resolver = build_resolver(properties, use_environ=use_environ, overrides=overrides)
    except (OSError, ValueError) as exc:
        msg = f"Invalid conditions configuration: {exc}"
        raise CheckError(msg) from exc

    if only:
        known = {d.name for d in declarations}
        unknown = [name for name in only if name not in known]
        if unknown:
            msg = f"Unknown condition(s): {', '.join(unknown)}"
            raise CheckError(msg)
        declarations = [d for d in declarations if d.name in only]

    results = [
        ConditionResult(
            name=decl.name,
            description=decl.description,
            kind=decl.kind,
            outcome=evaluate_declaration(decl, resolver),
        )
        for decl in declarations
    ]

    elapsed = (time.monotonic() - start) * 1000
    return CheckResult(results=results, elapsed_ms=elapsed)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_rich(result: CheckResult) -> str:
    """Format a CheckResult as human-readable text.

    Example output::

        ✓ prod-mode
          OnStringProperty (app.mode=prod) matched

        ✗ ratio-set
          Ratio must be configured
          OnDoubleProperty (app.ratio=0.5) did not find property 'ratio'

        1 of 2 conditions did not match (0.0s)
    """
    lines: list[str] = []

    for r in result.results:
        mark = "✓" if r.matched else "✗"
        lines.append(f"{mark} {r.name}")
        if r.description:
            lines.append(f"  {r.description}")
        for reason in r.outcome.reasons:
            lines.append(f"  {reason}")
        lines.append("")

    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"
    total = len(result.results)
    failed = len(result.failed)
    if failed:
        lines.append(f"{failed} of {total} conditions did not match ({elapsed_str})")
    else:
        lines.append(f"✓ All {total} conditions matched ({elapsed_str})")

    return "\n".join(lines)


def format_json(result: CheckResult) -> str:
    """Format a CheckResult as structured JSON with ``conditions`` and ``summary``."""
    conditions: list[dict[str, object]] = [
        {
            "name": r.name,
            "kind": r.kind,
            "matched": r.matched,
            "reasons": list(r.outcome.reasons),
        }
        for r in result.results
    ]
    output: dict[str, object] = {
        "conditions": conditions,
        "summary": {
            "conditions_evaluated": len(result.results),
            "matched_count": len(result.results) - len(result.failed),
            "all_matched": result.all_matched,
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_porcelain(result: CheckResult) -> str:
    """One line per condition: ``name:kind:match|no-match:message``."""
    lines: list[str] = []
    for r in result.results:
        status = "match" if r.matched else "no-match"
        lines.append(f"{r.name}:{r.kind}:{status}:{r.outcome.message}")
    return "\n".join(lines)
