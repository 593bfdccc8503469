"""Aggregate several rule instances of one condition kind with AND semantics."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from conditionals.condition import messages
from conditionals.condition.evaluator import Outcome

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

logger = logging.getLogger(__name__)

A = TypeVar("A")


def merged_instances(direct: A | None, container: Iterable[A | None] = ()) -> list[A | None]:
    """Return the direct instance (when present) followed by the repeated ones.

    ``None`` entries inside *container* are kept: they are reported as
    no-match by :func:`evaluate_conditions` rather than dropped.
    """
    instances: list[A | None] = []
    if direct is not None:
        instances.append(direct)
    instances.extend(container)
    return instances


def check_attributes(
    condition: str, attributes: A | None, evaluate: Callable[[A], Outcome]
) -> Outcome:
    """Evaluate *attributes*, or report a no-match when there are none."""
    if attributes is None:
        return Outcome.no_match(messages.no_attributes_found(condition))
    return evaluate(attributes)


def evaluate_conditions(
    condition: str,
    instances: Sequence[A | None],
    evaluate: Callable[[A], Outcome],
) -> Outcome:
    """AND-combine the outcomes of every instance.

    An empty sequence is a no-match.  Each instance is evaluated on its own;
    matching and non-matching reasons are buffered separately and only the
    buffer that explains the overall verdict is returned, in encounter order.
    """
    if not instances:
        logger.debug("%s: no rule instances", condition)
        return Outcome.no_match(messages.no_attributes_found(condition))

    match_reasons: list[str] = []
    no_match_reasons: list[str] = []
    all_matched = True
    for attributes in instances:
        outcome = check_attributes(condition, attributes, evaluate)
        if outcome.matched:
            match_reasons.extend(outcome.reasons)
        else:
            all_matched = False
            no_match_reasons.extend(outcome.reasons)

    if not all_matched:
        logger.debug("%s: no match (%d reasons)", condition, len(no_match_reasons))
        return Outcome.no_match(*no_match_reasons)
    logger.debug("%s: matched %d instance(s)", condition, len(instances))
    return Outcome.match(*match_reasons)
