"""
Decode propagation engine.

After a payload has been decoded into a graph of objects, the engine walks
that graph depth-first in field-declaration order. For every decodable
child it resolves the child's declared requirements against the parent,
injects them through the child's setters, and calls the child's
``on_decode(container, requirements)``, which in turn propagates into its
own children.

Architecture:
    DecodeEngine.decode(root, container)      top-level entry
    └── root.on_decode(container, {})
        └── Propagator.propagate(root, container)
            ├── on_decode_<field>() hook      once per field
            ├── RequirementResolver           per providing child
            ├── set_<name>(value)             when the child has a setter
            └── child.on_decode(container, requirements)   recursion

The container is wrapped once in a read-only mapping proxy and the same
instance reaches every object. Faults are never caught during traversal;
a failed decode leaves the graph partially populated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any, Dict, Iterable as IterableT, Optional, Tuple

from ..faults import CyclicGraphFault, Fault, NotDecodableFault, Severity
from .accessors import AccessorTable
from .fields import iter_field_values
from .naming import SNAKE, NamingConvention, get_convention
from .protocols import Container, DelegatesRequirements, ProvidesRequirements, SupportsDecode
from .requirements import RequirementResolver

logger = logging.getLogger("ripple.decoding")

# Objects currently being propagated, outermost first: (id, label)
_decode_path: ContextVar[Tuple[Tuple[int, str], ...]] = ContextVar("ripple_decode_path", default=())
_active_propagator: ContextVar[Optional["Propagator"]] = ContextVar("ripple_active_propagator", default=None)

_SCALARS = (str, bytes, bytearray)

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


def is_decodable(value: Any) -> bool:
    """True for instances exposing ``on_decode``; classes never qualify."""
    return not isinstance(value, type) and isinstance(value, SupportsDecode)


def provides_requirements(value: Any) -> bool:
    """True when ``requirements`` is a method, not a data field of that name."""
    return isinstance(value, ProvidesRequirements) and callable(getattr(value, "requirements", None))


# ============================================================================
# Propagator
# ============================================================================

class Propagator:
    """
    Shared traversal engine.

    Decodable types delegate their default ``on_decode`` here. Subclass to
    change how field values become child sequences (``iterable``) or
    which object derives requirement values (``getter_source``).
    """

    def __init__(
        self,
        convention: NamingConvention = SNAKE,
        *,
        detect_cycles: bool = True,
    ):
        self.convention = convention
        self.detect_cycles = detect_cycles
        self.resolver = RequirementResolver(convention)

    def __repr__(self) -> str:
        return f"<Propagator naming={self.convention.name} detect_cycles={self.detect_cycles}>"

    # ── Traversal ────────────────────────────────────────────────────────

    def propagate(self, obj: Any, container: Container) -> None:
        """
        Visit every declared field of ``obj`` in order.

        Raises:
            UndeclaredFieldsFault: ``obj`` has no ordered field declaration.
            CyclicGraphFault: ``obj`` is already being propagated (cycle guard on).
            Any fault raised while resolving or decoding a child.
        """
        path = _decode_path.get()
        label = type(obj).__name__
        if self.detect_cycles and any(entry[0] == id(obj) for entry in path):
            raise CyclicGraphFault([entry[1] for entry in path] + [label])

        token = _decode_path.set(path + ((id(obj), label),))
        try:
            table = AccessorTable.for_type(type(obj), self.convention)
            source = self.getter_source(obj)

            for field_name, value in iter_field_values(obj):
                children = self.iterable(value)

                hook = table.hook(obj, field_name)
                if hook is not None:
                    logger.debug("Running %s decode hook for field '%s'", label, field_name)
                    hook()

                self.dispatch(source, children, container)
        finally:
            _decode_path.reset(token)

    def dispatch(self, source: Any, children: IterableT[Any], container: Container) -> None:
        """Resolve, inject and decode each decodable item of one field."""
        for item in children:
            if not is_decodable(item):
                continue

            requirements: Dict[str, Any] = {}
            if provides_requirements(item):
                requirements = self.resolver.resolve_all(source, item)
                self.inject(item, requirements)

            logger.debug("Decoding %s", type(item).__name__)
            item.on_decode(container, requirements)

    def inject(self, subject: Any, requirements: Mapping[str, Any]) -> None:
        """Call the subject's setter for each requirement it has one for."""
        table = AccessorTable.for_type(type(subject), self.convention)
        for name, value in requirements.items():
            setter = table.setter(subject, name)
            if setter is None:
                logger.debug("%s has no setter for '%s'; passing it through only", type(subject).__name__, name)
                continue
            setter(value)

    # ── Extension points ─────────────────────────────────────────────────

    def iterable(self, value: Any) -> IterableT[Any]:
        """
        Normalise a field value into a sequence of children.

        Strings and bytes are scalars, mappings yield their values, other
        iterables are used as they are, anything else (``None`` included)
        becomes a one-element list.
        """
        if isinstance(value, _SCALARS):
            return [value]
        if isinstance(value, Mapping):
            return value.values()
        if isinstance(value, Iterable):
            return value
        return [value]

    def getter_source(self, parent: Any) -> Any:
        """Object whose getters derive requirement values for ``parent``'s children."""
        if isinstance(parent, DelegatesRequirements):
            return parent.requirement_source()
        return parent


DEFAULT_PROPAGATOR = Propagator()


def current_propagator() -> Propagator:
    """The propagator of the engine running the current decode, or the default one."""
    return _active_propagator.get() or DEFAULT_PROPAGATOR


def propagate(obj: Any, container: Container) -> None:
    """Propagate ``obj`` with the current propagator."""
    current_propagator().propagate(obj, container)


# ============================================================================
# DecodeEngine
# ============================================================================

class DecodeEngine:
    """
    Top-level decode entry point.

    Usage::

        engine = DecodeEngine(RippleConfig(naming="camel"))
        engine.decode(feed, payload)
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        *,
        naming: Optional[str | NamingConvention] = None,
        detect_cycles: Optional[bool] = None,
        propagator: Optional[Propagator] = None,
    ):
        if config is None:
            from ..config import RippleConfig
            config = RippleConfig()
        self.config = config

        if propagator is None:
            propagator = Propagator(
                get_convention(naming if naming is not None else config.naming),
                detect_cycles=config.detect_cycles if detect_cycles is None else detect_cycles,
            )
        self.propagator = propagator

    def decode(
        self,
        root: Any,
        container: Container,
        requirements: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Run one full decode over the graph rooted at ``root``.

        Args:
            root: Decodable root object
            container: Raw decoded payload
            requirements: Requirements handed to the root's ``on_decode``

        Returns:
            ``root``, for chaining.

        Raises:
            NotDecodableFault: ``root`` does not implement ``on_decode``.
            Any decode fault raised during propagation.
        """
        if not is_decodable(root):
            raise NotDecodableFault(type(root).__name__)

        if not isinstance(container, MappingProxyType):
            container = MappingProxyType(container)

        logger.debug("Decode started at %s using %r", type(root).__name__, self.propagator)
        token = _active_propagator.set(self.propagator)
        try:
            root.on_decode(container, dict(requirements or {}))
        except Fault as fault:
            logger.log(
                _LOG_LEVELS[fault.severity],
                f"[{fault.domain.value}] {fault.code}: {fault.message}",
                extra={"fault": fault.to_dict()},
            )
            raise
        finally:
            _active_propagator.reset(token)
        logger.debug("Decode finished at %s", type(root).__name__)
        return root


# Global decode engine instance (for convenience)
_default_engine: Optional[DecodeEngine] = None


def get_default_engine() -> DecodeEngine:
    """
    Get or create the default global decode engine.

    Returns:
        Global DecodeEngine instance
    """
    global _default_engine
    if _default_engine is None:
        _default_engine = DecodeEngine()
    return _default_engine


def decode(root: Any, container: Container, requirements: Optional[Mapping[str, Any]] = None) -> Any:
    """Decode ``root`` with the default engine."""
    return get_default_engine().decode(root, container, requirements)
