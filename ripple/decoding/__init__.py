"""
Ripple decoding - post-decode propagation and requirement injection.

Provides:
- Decodable: base class with the default propagating ``on_decode``
- DecodeField: ordered field declarations
- DecodeEngine / decode(): top-level entry
- Propagator: shared traversal engine
- RequirementSpec / parse_requirement / RequirementResolver
- NamingConvention (SNAKE, CAMEL) and AccessorTable
- SupportsDecode / ProvidesRequirements capability protocols
"""

from .accessors import AccessorTable
from .base import Decodable, DecodableMeta
from .engine import (
    DEFAULT_PROPAGATOR,
    DecodeEngine,
    Propagator,
    current_propagator,
    decode,
    get_default_engine,
    is_decodable,
    propagate,
    provides_requirements,
)
from .fields import DecodeField, class_fields, declared_fields, iter_field_values
from .naming import CAMEL, CONVENTIONS, SNAKE, NamingConvention, get_convention
from .protocols import Container, DelegatesRequirements, ProvidesRequirements, SupportsDecode
from .requirements import RequirementResolver, RequirementSpec, parse_requirement

__all__ = [
    # Core
    "Decodable",
    "DecodableMeta",
    "DecodeField",
    "DecodeEngine",
    "Propagator",
    "DEFAULT_PROPAGATOR",
    "current_propagator",
    "decode",
    "get_default_engine",
    "is_decodable",
    "provides_requirements",
    "propagate",
    "class_fields",
    "declared_fields",
    "iter_field_values",
    # Requirements
    "RequirementSpec",
    "RequirementResolver",
    "parse_requirement",
    # Naming
    "NamingConvention",
    "SNAKE",
    "CAMEL",
    "CONVENTIONS",
    "get_convention",
    "AccessorTable",
    # Protocols
    "Container",
    "SupportsDecode",
    "ProvidesRequirements",
    "DelegatesRequirements",
]
