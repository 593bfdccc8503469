"""Property resolvers: typed, possibly-failing key lookup over configuration sources."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import yaml

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConversionError(ValueError):
    """Raised when a stored value cannot be coerced to the requested type."""

    def __init__(self, key: str, value: object, target_type: type) -> None:
        self.key = key
        self.value = value
        self.target_type = target_type
        super().__init__(
            f"Cannot convert property '{key}' value {value!r} to {target_type.__name__}"
        )


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class PropertyResolver(Protocol):
    """Abstract key-value lookup used by the condition evaluator."""

    def contains_key(self, key: str) -> bool: ...

    def get(self, key: str, target_type: type[T]) -> T: ...


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def convert(key: str, value: object, target_type: type[T]) -> T:
    """Coerce *value* to *target_type* (``str``, ``int`` or ``float``).

    Raises :class:`ConversionError` for ``None`` values, booleans read as
    numbers, and strings that do not parse.
    """
    if value is None:
        raise ConversionError(key, value, target_type)

    if target_type is str:
        if isinstance(value, (dict, list)):
            raise ConversionError(key, value, target_type)
        if isinstance(value, bool):
            return "true" if value else "false"  # type: ignore[return-value]
        return str(value)  # type: ignore[return-value]

    if isinstance(value, bool):
        raise ConversionError(key, value, target_type)

    if target_type is int:
        if isinstance(value, int):
            return value  # type: ignore[return-value]
        if isinstance(value, str):
            try:
                return int(value.strip())  # type: ignore[return-value]
            except ValueError:
                raise ConversionError(key, value, target_type) from None
        raise ConversionError(key, value, target_type)

    if target_type is float:
        if isinstance(value, (int, float)):
            try:
                return float(value)  # type: ignore[return-value]
            except OverflowError:
                raise ConversionError(key, value, target_type) from None
        if isinstance(value, str):
            try:
                return float(value.strip())  # type: ignore[return-value]
            except ValueError:
                raise ConversionError(key, value, target_type) from None
        raise ConversionError(key, value, target_type)

    if isinstance(value, target_type):
        return value
    raise ConversionError(key, value, target_type)


def flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys.

    Lists become indexed keys (``servers[0]``) and are also kept whole under
    their own key so ``contains_key("servers")`` holds.
    """
    flat: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = f"{prefix}{raw_key}"
        if isinstance(value, dict):
            flat.update(flatten(value, prefix=f"{key}."))
        elif isinstance(value, list):
            flat[key] = value
            for idx, item in enumerate(value):
                item_key = f"{key}[{idx}]"
                if isinstance(item, dict):
                    flat.update(flatten(item, prefix=f"{item_key}."))
                else:
                    flat[item_key] = item
        else:
            flat[key] = value
    return flat


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------


class MappingPropertyResolver:
    """Resolve properties from an in-memory (possibly nested) mapping."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = flatten(data or {})

    def __repr__(self) -> str:
        return f"MappingPropertyResolver({len(self._values)} keys)"

    def contains_key(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, target_type: type[T]) -> T:
        if key not in self._values:
            raise KeyError(key)
        return convert(key, self._values[key], target_type)

    def keys(self) -> list[str]:
        return list(self._values)


class EnvironmentPropertyResolver:
    """Resolve properties from environment variables with relaxed names.

    ``app.max-size`` is looked up verbatim first, then as ``APP_MAX_SIZE``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = dict(os.environ if environ is None else environ)

    @staticmethod
    def _env_name(key: str) -> str:
        return key.replace(".", "_").replace("-", "_").upper()

    def _lookup(self, key: str) -> str | None:
        if key in self._environ:
            return key
        env_name = self._env_name(key)
        if env_name in self._environ:
            return env_name
        return None

    def contains_key(self, key: str) -> bool:
        return self._lookup(key) is not None

    def get(self, key: str, target_type: type[T]) -> T:
        name = self._lookup(key)
        if name is None:
            raise KeyError(key)
        return convert(key, self._environ[name], target_type)


class ChainedPropertyResolver:
    """Delegate to several resolvers; the first one holding a key wins."""

    def __init__(self, *resolvers: PropertyResolver) -> None:
        self._resolvers: tuple[PropertyResolver, ...] = resolvers

    def contains_key(self, key: str) -> bool:
        return any(r.contains_key(key) for r in self._resolvers)

    def get(self, key: str, target_type: type[T]) -> T:
        for resolver in self._resolvers:
            if resolver.contains_key(key):
                return resolver.get(key, target_type)
        raise KeyError(key)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_properties(path: Path) -> MappingPropertyResolver:
    """Read a YAML properties file into a :class:`MappingPropertyResolver`.

    An empty file yields an empty resolver.  Raises ``ValueError`` when the
    file is not valid YAML or its root is not a mapping.
    """
    with path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            msg = f"{path.name}: invalid YAML: {exc}"
            raise ValueError(msg) from exc

    if data is None:
        return MappingPropertyResolver()
    if not isinstance(data, dict):
        msg = f"{path.name}: properties file must be a YAML mapping"
        raise ValueError(msg)

    resolver = MappingPropertyResolver(data)
    logger.debug("Loaded %d properties from %s", len(resolver.keys()), path)
    return resolver


def parse_overrides(pairs: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings into a flat mapping.

    Raises ``ValueError`` for entries without ``=`` or with an empty key.
    """
    overrides: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            msg = f"Invalid override '{pair}', expected KEY=VALUE"
            raise ValueError(msg)
        overrides[key] = value
    return overrides
