"""
RippleFaults - Structured fault handling.

Errors in Ripple are typed fault signals with a stable code, a domain,
a severity and structured metadata.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
- Decode, encode and config fault types
"""

from .core import (
    DOMAIN_DEFAULTS,
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    CyclicGraphFault,
    DecodeFault,
    EncodingFault,
    MalformedRequirementFault,
    MissingParameterGetterFault,
    MissingRequirementGetterFault,
    NotDecodableFault,
    UndeclaredFieldsFault,
)

__all__ = [
    # Core types
    "DOMAIN_DEFAULTS",
    "Fault",
    "FaultDomain",
    "Severity",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",

    # Decode
    "DecodeFault",
    "MalformedRequirementFault",
    "MissingRequirementGetterFault",
    "MissingParameterGetterFault",
    "CyclicGraphFault",
    "UndeclaredFieldsFault",
    "NotDecodableFault",

    # Encode
    "EncodingFault",
]
