"""
Accessor registry - per-type tables of getters, setters and decode hooks.

Each type is scanned once per naming convention. The resulting table maps
method names to the raw class attributes, which are bound to an instance
through the descriptor protocol when called. Traversal never composes a
name and probes the instance for it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from .naming import SNAKE, NamingConvention

logger = logging.getLogger("ripple.decoding.accessors")


def _is_accessor(attr: Any) -> bool:
    if isinstance(attr, (staticmethod, classmethod)):
        return True
    # Data descriptors (fields, properties) are state, not accessors
    if hasattr(attr, "__set__"):
        return False
    return callable(attr)


class AccessorTable:
    """
    Accessors one type exposes under a naming convention.

    Attributes:
        owner: The scanned type
        convention: Naming convention used for the scan
        getters: ``{method_name: attribute}`` for getter-prefixed methods
        setters: ``{method_name: attribute}`` for setter-prefixed methods
        hooks: ``{method_name: attribute}`` for decode-hook methods
    """

    __slots__ = ("owner", "convention", "getters", "setters", "hooks")

    _cache: Dict[Tuple[type, str], "AccessorTable"] = {}

    def __init__(self, owner: type, convention: NamingConvention = SNAKE):
        self.owner = owner
        self.convention = convention
        self.getters: Dict[str, Any] = {}
        self.setters: Dict[str, Any] = {}
        self.hooks: Dict[str, Any] = {}
        self._scan()

    @classmethod
    def for_type(cls, owner: type, convention: NamingConvention = SNAKE) -> AccessorTable:
        """Return the cached table for ``owner``, building it on first use."""
        key = (owner, convention.name)
        table = cls._cache.get(key)
        if table is None:
            table = cls(owner, convention)
            cls._cache[key] = table
            logger.debug(
                "Built accessor table for %s (%s): %d getters, %d setters, %d hooks",
                owner.__qualname__, convention.name,
                len(table.getters), len(table.setters), len(table.hooks),
            )
        return table

    @classmethod
    def clear_cache(cls) -> None:
        cls._cache.clear()

    def _scan(self) -> None:
        conv = self.convention
        buckets = (
            (conv.hook_prefix, self.hooks),
            (conv.getter_prefix, self.getters),
            (conv.setter_prefix, self.setters),
        )
        # Base classes first so overrides in subclasses win
        for klass in reversed(self.owner.__mro__):
            if klass is object:
                continue
            for attr_name, attr in vars(klass).items():
                for prefix, bucket in buckets:
                    if conv.split(attr_name, prefix) is None:
                        continue
                    if _is_accessor(attr):
                        bucket[attr_name] = attr
                    else:
                        bucket.pop(attr_name, None)
                    break

    # ── Lookup ───────────────────────────────────────────────────────────

    @staticmethod
    def _bind(attr: Any, instance: Any) -> Callable[..., Any]:
        binder = getattr(type(attr), "__get__", None)
        if binder is None:
            return attr
        return binder(attr, instance, type(instance))

    def getter(self, instance: Any, name: str) -> Optional[Callable[..., Any]]:
        """Bound getter for ``name`` on ``instance``, or None."""
        attr = self.getters.get(self.convention.getter(name))
        return None if attr is None else self._bind(attr, instance)

    def setter(self, instance: Any, name: str) -> Optional[Callable[..., Any]]:
        """Bound setter for ``name`` on ``instance``, or None."""
        attr = self.setters.get(self.convention.setter(name))
        return None if attr is None else self._bind(attr, instance)

    def hook(self, instance: Any, field_name: str) -> Optional[Callable[[], Any]]:
        """Bound per-field decode hook for ``field_name``, or None."""
        attr = self.hooks.get(self.convention.hook(field_name))
        return None if attr is None else self._bind(attr, instance)

    # ── Introspection ────────────────────────────────────────────────────

    def describe(self) -> Iterator[Tuple[str, str, str]]:
        """Yield ``(kind, base_name, method_name)`` for every accessor."""
        conv = self.convention
        for kind, prefix, bucket in (
            ("getter", conv.getter_prefix, self.getters),
            ("setter", conv.setter_prefix, self.setters),
            ("hook", conv.hook_prefix, self.hooks),
        ):
            for method_name in sorted(bucket):
                yield kind, conv.split(method_name, prefix), method_name

    def __repr__(self) -> str:
        return (
            f"<AccessorTable {self.owner.__qualname__} ({self.convention.name}) "
            f"getters={len(self.getters)} setters={len(self.setters)} hooks={len(self.hooks)}>"
        )
