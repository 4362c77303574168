"""
Declared decode fields.

Decodable types list the fields the engine walks, in order, by declaring
``DecodeField`` attributes in the class body::

    class Post(Decodable):
        author = DecodeField()
        comments = DecodeField(default_factory=list)
        caption = DecodeField(default="")

Plain dataclasses are supported as well; their field order is used.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Iterator, Optional, Tuple

from ..faults import UndeclaredFieldsFault


# ============================================================================
# DecodeField
# ============================================================================

class DecodeField:
    """
    A named slot on a decodable object.

    Holds a scalar, a single child object or a collection of children.
    The value lives in the instance ``__dict__``; until assigned, reads
    return the default (``default_factory`` results are stored so each
    instance gets its own).
    """

    _creation_counter: int = 0

    def __init__(
        self,
        *,
        default: Any = None,
        default_factory: Optional[Callable[[], Any]] = None,
        help_text: str = "",
    ):
        if default is not None and default_factory is not None:
            raise ValueError("DecodeField accepts default or default_factory, not both")

        self.default = default
        self.default_factory = default_factory
        self.help_text = help_text

        # Set by __set_name__
        self.name: str = ""
        self.owner: Optional[type] = None

        # Ordering
        self._order = DecodeField._creation_counter
        DecodeField._creation_counter += 1

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.owner = owner

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        try:
            return instance.__dict__[self.name]
        except KeyError:
            value = self.get_default()
            if self.default_factory is not None:
                instance.__dict__[self.name] = value
            return value

    def __set__(self, instance: Any, value: Any) -> None:
        instance.__dict__[self.name] = value

    def get_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name or '?'}>"


# ============================================================================
# Field enumeration
# ============================================================================

def class_fields(cls: type) -> Optional[Tuple[str, ...]]:
    """Ordered field names ``cls`` declares, or None if it declares none."""
    declared = getattr(cls, "_declared_fields", None)
    if declared is not None:
        return tuple(declared)
    if dataclasses.is_dataclass(cls):
        return tuple(f.name for f in dataclasses.fields(cls))
    return None


def declared_fields(obj: Any) -> Tuple[str, ...]:
    """
    Ordered field names the engine walks for ``obj``.

    Raises:
        UndeclaredFieldsFault: ``obj`` neither declares ``DecodeField``
            attributes nor is a dataclass instance.
    """
    names = class_fields(type(obj))
    if names is None:
        raise UndeclaredFieldsFault(type(obj).__qualname__)
    return names


def iter_field_values(obj: Any) -> Iterator[Tuple[str, Any]]:
    """Yield ``(name, current_value)`` for each declared field, read lazily."""
    for name in declared_fields(obj):
        yield name, getattr(obj, name)
