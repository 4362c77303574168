"""
Naming conventions for accessor discovery.

A convention turns a field or requirement name into the method names the
engine looks for: a getter, a setter and a per-field decode hook.

    SNAKE:  foo -> get_foo / set_foo / on_decode_foo
    CAMEL:  foo -> getFoo  / setFoo  / onDecodeFoo
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


def _upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


@dataclass(frozen=True)
class NamingConvention:
    """Derives accessor method names from a base name."""

    name: str
    getter_prefix: str
    setter_prefix: str
    hook_prefix: str
    capitalize: bool = False

    def _compose(self, prefix: str, name: str) -> str:
        if self.capitalize:
            return prefix + _upper_first(name)
        return prefix + name

    def getter(self, name: str) -> str:
        return self._compose(self.getter_prefix, name)

    def setter(self, name: str) -> str:
        return self._compose(self.setter_prefix, name)

    def hook(self, name: str) -> str:
        return self._compose(self.hook_prefix, name)

    def split(self, method_name: str, prefix: str) -> Optional[str]:
        """
        Recover the base name from a method name, or None if it does not
        follow this convention for ``prefix``.

        CAMEL names keep the original casing of the remainder apart from
        the first letter, which is lowered back (``getMediaId`` ->
        ``mediaId``).
        """
        if not method_name.startswith(prefix) or len(method_name) == len(prefix):
            return None
        rest = method_name[len(prefix):]
        if self.capitalize:
            if not rest[0].isupper():
                return None
            return rest[0].lower() + rest[1:]
        if rest.startswith("_"):
            return None
        return rest


SNAKE = NamingConvention(
    name="snake",
    getter_prefix="get_",
    setter_prefix="set_",
    hook_prefix="on_decode_",
)

CAMEL = NamingConvention(
    name="camel",
    getter_prefix="get",
    setter_prefix="set",
    hook_prefix="onDecode",
    capitalize=True,
)

CONVENTIONS: Dict[str, NamingConvention] = {
    SNAKE.name: SNAKE,
    CAMEL.name: CAMEL,
}


def get_convention(name: str | NamingConvention) -> NamingConvention:
    """Look up a built-in convention by name."""
    if isinstance(name, NamingConvention):
        return name
    convention = CONVENTIONS.get(name)
    if convention is None:
        raise ValueError(f"Unknown naming convention: {name}. Options: {list(CONVENTIONS)}")
    return convention
