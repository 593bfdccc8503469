"""Reason-text composition for condition outcomes.

Messages read ``<condition> [<details>] <verb phrase> <items>``, for example::

    OnStringProperty (app.mode=prod) did not find property 'mode'
    OnIntegerProperty (app.[a,b]=3) found different value in properties 'a', 'b'
    OnOs found OS linux
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

NO_ATTRIBUTES_REASON = "no rule attributes were found"


def for_condition(condition: str, details: object | None = None) -> str:
    """Return the message subject: the condition label plus optional details."""
    if details is None:
        return condition
    return f"{condition} {details}"


def _items(singular: str, plural: str, items: Sequence[object], *, quote: bool) -> str:
    noun = singular if len(items) == 1 else plural
    rendered = [f"'{item}'" if quote else str(item) for item in items]
    if not rendered:
        return noun
    return f"{noun} {', '.join(rendered)}"


def did_not_find(
    subject: str, singular: str, plural: str, items: Sequence[object], *, quote: bool = True
) -> str:
    return f"{subject} did not find {_items(singular, plural, items, quote=quote)}"


def found(
    subject: str, singular: str, plural: str, items: Sequence[object], *, quote: bool = True
) -> str:
    return f"{subject} found {_items(singular, plural, items, quote=quote)}"


def because(subject: str, reason: str) -> str:
    return f"{subject} {reason}"


def no_attributes_found(condition: str) -> str:
    return because(condition, NO_ATTRIBUTES_REASON)
