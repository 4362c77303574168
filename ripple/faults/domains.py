"""
RippleFaults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- DECODE faults
- ENCODE faults
"""

from typing import Any, Optional, Sequence

from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        self.key = key
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# DECODE Faults
# ============================================================================

class DecodeFault(Fault):
    """
    Base class for decode propagation faults.

    Every decode fault aborts the whole top-level decode call. The object
    graph is left partially populated; there is no rollback.
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.DECODE,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class MalformedRequirementFault(DecodeFault):
    """A requirement spec string does not parse."""

    def __init__(self, spec: Any, reason: str = "", **kwargs):
        self.spec = spec
        detail = f": {reason}" if reason else ""
        super().__init__(
            code="MALFORMED_REQUIREMENT",
            message=f"Malformed requirement {spec!r}{detail}",
            metadata={"spec": spec, "reason": reason, **kwargs.get("metadata", {})},
        )


class MissingRequirementGetterFault(DecodeFault):
    """The parent cannot derive a requirement one of its children declared."""

    def __init__(self, name: str, source: Any = None, **kwargs):
        self.name = name
        owner = type(source).__name__ if source is not None else "parent"
        super().__init__(
            code="MISSING_REQUIREMENT_GETTER",
            message=f"Could not derive decode requirement '{name}': {owner} has no getter for it",
            metadata={"name": name, "source": owner, **kwargs.get("metadata", {})},
        )


class MissingParameterGetterFault(DecodeFault):
    """The subject does not expose a getter for a requirement parameter."""

    def __init__(self, name: str, subject: Any = None, **kwargs):
        self.name = name
        owner = type(subject).__name__ if subject is not None else "subject"
        super().__init__(
            code="MISSING_PARAMETER_GETTER",
            message=f"Could not derive requirement parameter '{name}': {owner} has no getter for it",
            metadata={"name": name, "subject": owner, **kwargs.get("metadata", {})},
        )


class CyclicGraphFault(DecodeFault):
    """An object was reached again while it was still being propagated."""

    def __init__(self, path: Sequence[str], **kwargs):
        self.path = list(path)
        cycle_str = " -> ".join(self.path)
        super().__init__(
            code="CYCLIC_GRAPH",
            message=f"Cyclic object graph detected: {cycle_str}",
            metadata={"path": self.path, **kwargs.get("metadata", {})},
        )


class UndeclaredFieldsFault(DecodeFault):
    """An object was propagated without an ordered field declaration."""

    def __init__(self, type_name: str, **kwargs):
        self.type_name = type_name
        super().__init__(
            code="UNDECLARED_FIELDS",
            message=(
                f"'{type_name}' does not declare its fields; "
                f"use DecodeField attributes or a dataclass"
            ),
            metadata={"type": type_name, **kwargs.get("metadata", {})},
        )


class NotDecodableFault(DecodeFault):
    """The decode root does not implement on_decode()."""

    def __init__(self, type_name: str, **kwargs):
        self.type_name = type_name
        super().__init__(
            code="NOT_DECODABLE",
            message=f"'{type_name}' is not decodable",
            metadata={"type": type_name, **kwargs.get("metadata", {})},
        )


# ============================================================================
# ENCODE Faults
# ============================================================================

class EncodingFault(Fault):
    """
    Outbound request body could not be encoded.

    Recoverable: the caller of ``encode()`` decides what to do.
    """

    def __init__(
        self,
        reason: str,
        *,
        serializer: str = "",
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.reason = reason
        super().__init__(
            code="ENCODING_FAILED",
            message=f"Could not encode request body: {reason}",
            domain=FaultDomain.ENCODE,
            severity=Severity.WARN,
            retryable=False,
            public=False,
            metadata={"serializer": serializer, "reason": reason, **(metadata or {})},
        )
