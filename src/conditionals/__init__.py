"""Conditionals - configuration predicate evaluation engine."""

__version__ = "1.0.0"
