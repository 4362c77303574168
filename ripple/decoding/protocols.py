"""Capability protocols checked during traversal."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, Union, runtime_checkable

from .requirements import RequirementSpec

Container = Mapping[str, Any]
"""Raw decoded payload shared, read-only, by every object in one decode."""


@runtime_checkable
class SupportsDecode(Protocol):
    """An object that reacts to the decoded payload."""

    def on_decode(self, container: Container, requirements: Mapping[str, Any]) -> None:
        ...


@runtime_checkable
class ProvidesRequirements(Protocol):
    """An object that needs values derived by its parent before it decodes."""

    def requirements(self) -> Sequence[Union[str, RequirementSpec]]:
        ...


@runtime_checkable
class DelegatesRequirements(Protocol):
    """A parent that names another object as the source of derived values."""

    def requirement_source(self) -> Any:
        ...
