"""
Decodable base class.

Architecture:
    DecodableMeta (metaclass)
    └── Decodable (base)
        └── your response objects

``DecodableMeta`` collects ``DecodeField`` declarations into the ordered
``_declared_fields`` mapping. ``Decodable`` supplies the default
``on_decode``, which hands the object to the shared ``Propagator``.

Usage::

    class Media(Decodable):
        media_id = DecodeField()

        def requirements(self):
            return ["owner_name(media_id)"]

        def get_media_id(self):
            return self.media_id

        def set_owner_name(self, value):
            self.owner_name = value

    class Feed(Decodable):
        items = DecodeField(default_factory=list)

        def get_owner_name(self, media_id):
            return self.owners[media_id]
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Mapping, Optional

from .engine import Propagator, current_propagator
from .fields import DecodeField
from .protocols import Container


# ============================================================================
# Metaclass
# ============================================================================

class DecodableMeta(type):
    """
    Metaclass for Decodable classes.

    Collects declared ``DecodeField`` instances from the class body and
    parent classes into ``_declared_fields`` (ordered dict). Parent fields
    come first; a redeclared name keeps its inherited position.
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any,
    ) -> DecodableMeta:
        declared: list[tuple[str, DecodeField]] = [
            (key, value) for key, value in namespace.items() if isinstance(value, DecodeField)
        ]

        # Sort by creation order
        declared.sort(key=lambda pair: pair[1]._order)

        # Inherit parent fields
        parent_fields: dict[str, DecodeField] = {}
        for base in reversed(bases):
            if hasattr(base, "_declared_fields"):
                parent_fields.update(base._declared_fields)

        all_fields = dict(parent_fields)
        for field_name, field_obj in declared:
            all_fields[field_name] = field_obj

        # A plain attribute in the body hides an inherited field
        for key, value in namespace.items():
            if key in all_fields and not isinstance(value, DecodeField):
                del all_fields[key]

        namespace["_declared_fields"] = all_fields

        return super().__new__(mcs, name, bases, namespace, **kwargs)


# ============================================================================
# Decodable
# ============================================================================

class Decodable(metaclass=DecodableMeta):
    """
    Base class for objects that react to the decoded payload.

    Override ``on_decode`` to consume the requirements handed down by the
    parent before delegating to ``propagate``. Set ``propagator`` on a
    subclass to pin its traversal settings; otherwise the propagator of
    the running ``DecodeEngine`` is used.
    """

    _declared_fields: ClassVar[Dict[str, DecodeField]]
    propagator: ClassVar[Optional[Propagator]] = None

    def __init__(self, **values: Any):
        for key, value in values.items():
            if key not in self._declared_fields:
                raise TypeError(f"{type(self).__name__}() got an unexpected field '{key}'")
            setattr(self, key, value)

    def on_decode(self, container: Container, requirements: Optional[Mapping[str, Any]] = None) -> None:
        """React to the decoded payload. The default propagates to children."""
        self.propagate(container)

    def propagate(self, container: Container) -> None:
        (self.propagator or current_propagator()).propagate(self, container)

    def requirement_source(self) -> Any:
        """Object whose getters derive the requirements of this object's children."""
        return self

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._declared_fields)
        return f"{type(self).__name__}({values})"
