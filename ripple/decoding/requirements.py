"""
Decode requirements - parsing and resolution.

A child object may declare values it needs before it decodes, as strings
of the form ``name`` or ``name(param, ...)``. The parent derives each value
through its getter for ``name``, called with the values of the child's
getters for each parameter, in declared order::

    class Comment(Decodable):
        def requirements(self):
            return ["thread_url(media_id)"]

        def get_media_id(self):
            return self.media_id

    class Feed(Decodable):
        comments = DecodeField(default_factory=list)

        def get_thread_url(self, media_id):
            return f"{self.base_url}/media/{media_id}/comments"
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple, Union

from ..faults import (
    MalformedRequirementFault,
    MissingParameterGetterFault,
    MissingRequirementGetterFault,
)
from .accessors import AccessorTable
from .naming import SNAKE, NamingConvention

logger = logging.getLogger("ripple.decoding.requirements")

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
_IDENTIFIER_RE = re.compile(rf"^{_IDENTIFIER}$")
_SPEC_RE = re.compile(rf"^\s*(?P<name>{_IDENTIFIER})\s*(?:\((?P<params>.*)\))?\s*$", re.DOTALL)


# ============================================================================
# RequirementSpec
# ============================================================================

@dataclass(frozen=True)
class RequirementSpec:
    """A parsed requirement: the derived value's name and its parameter names."""

    name: str
    parameters: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, spec: Union[str, "RequirementSpec"]) -> "RequirementSpec":
        return parse_requirement(spec)

    def __str__(self) -> str:
        if not self.parameters:
            return self.name
        return f"{self.name}({','.join(self.parameters)})"


@functools.lru_cache(maxsize=512)
def _parse(spec: str) -> RequirementSpec:
    match = _SPEC_RE.match(spec)
    if match is None:
        if not spec.strip():
            raise MalformedRequirementFault(spec, "empty requirement")
        if spec.count("(") != spec.count(")"):
            raise MalformedRequirementFault(spec, "unbalanced parentheses")
        raise MalformedRequirementFault(spec, "expected 'name' or 'name(param, ...)'")

    params = match.group("params")
    if params is None or not params.strip():
        return RequirementSpec(match.group("name"))

    if "(" in params or ")" in params:
        raise MalformedRequirementFault(spec, "nested parameters are not supported")

    names = []
    for raw in params.split(","):
        param = raw.strip()
        if not param:
            raise MalformedRequirementFault(spec, "empty parameter")
        if not _IDENTIFIER_RE.match(param):
            raise MalformedRequirementFault(spec, f"invalid parameter name {param!r}")
        names.append(param)

    return RequirementSpec(match.group("name"), tuple(names))


def parse_requirement(spec: Union[str, RequirementSpec]) -> RequirementSpec:
    """
    Parse a requirement string.

    Args:
        spec: ``"name"``, ``"name()"`` or ``"name(a, b)"``; an already
            parsed ``RequirementSpec`` is returned as is.

    Returns:
        The parsed ``RequirementSpec``.

    Raises:
        MalformedRequirementFault: If the string does not follow the grammar.
    """
    if isinstance(spec, RequirementSpec):
        return spec
    if not isinstance(spec, str):
        raise MalformedRequirementFault(spec, f"expected a string, got {type(spec).__name__}")
    return _parse(spec)


# ============================================================================
# RequirementResolver
# ============================================================================

class RequirementResolver:
    """
    Computes requirement values.

    The *source* (normally the parent object) knows how to derive a value;
    the *subject* (the child) only exposes the raw parameters.
    """

    def __init__(self, convention: NamingConvention = SNAKE):
        self.convention = convention

    def resolve(
        self,
        source: Any,
        subject: Any,
        spec: Union[str, RequirementSpec],
    ) -> Tuple[str, Any]:
        """
        Resolve one requirement.

        Returns:
            ``(name, value)`` where name is the bare requirement name.

        Raises:
            MalformedRequirementFault: Spec string does not parse.
            MissingRequirementGetterFault: Source has no getter for the name.
            MissingParameterGetterFault: Subject has no getter for a parameter.
        """
        spec = parse_requirement(spec)

        derive = AccessorTable.for_type(type(source), self.convention).getter(source, spec.name)
        if derive is None:
            raise MissingRequirementGetterFault(spec.name, source)

        subject_table = AccessorTable.for_type(type(subject), self.convention)
        param_getters = []
        for parameter in spec.parameters:
            getter = subject_table.getter(subject, parameter)
            if getter is None:
                raise MissingParameterGetterFault(parameter, subject)
            param_getters.append(getter)

        arguments = [getter() for getter in param_getters]
        value = derive(*arguments)
        logger.debug(
            "Resolved requirement %s for %s from %s",
            spec, type(subject).__name__, type(source).__name__,
        )
        return spec.name, value

    def resolve_all(self, source: Any, subject: Any) -> Dict[str, Any]:
        """
        Resolve every requirement ``subject.requirements()`` declares.

        Results are keyed by bare name in declared order; a later spec
        with the same name replaces an earlier one.
        """
        provider = getattr(subject, "requirements", None)
        if not callable(provider):
            raise MalformedRequirementFault(provider, f"{type(subject).__name__}.requirements is not a method")
        declared = provider()
        if isinstance(declared, (str, bytes)) or not isinstance(declared, Iterable):
            raise MalformedRequirementFault(
                declared, f"requirements() of {type(subject).__name__} must return a sequence of strings"
            )

        resolved: Dict[str, Any] = {}
        for spec in declared:
            name, value = self.resolve(source, subject, spec)
            resolved[name] = value
        return resolved
