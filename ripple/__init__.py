"""
Ripple - post-decode propagation and requirement injection.

After a raw payload has been decoded into a graph of typed objects, Ripple
walks that graph, lets every object react to the original payload, and
injects the values a child needs from its parent before the child decodes.

Usage::

    from ripple import Decodable, DecodeField, decode

    class Comment(Decodable):
        media_id = DecodeField()
        thread_url = DecodeField()

        def requirements(self):
            return ["thread_url(media_id)"]

        def get_media_id(self):
            return self.media_id

        def set_thread_url(self, value):
            self.thread_url = value

    class Feed(Decodable):
        base_url = DecodeField(default="https://api.example.com")
        comments = DecodeField(default_factory=list)

        def get_thread_url(self, media_id):
            return f"{self.base_url}/media/{media_id}/comments"

    feed = Feed(comments=[Comment(media_id="17")])
    decode(feed, payload)
    feed.comments[0].thread_url  # "https://api.example.com/media/17/comments"
"""

__version__ = "0.1.0"

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    DecodeFault,
    MalformedRequirementFault,
    MissingRequirementGetterFault,
    MissingParameterGetterFault,
    CyclicGraphFault,
    UndeclaredFieldsFault,
    NotDecodableFault,
    EncodingFault,
    ConfigInvalidFault,
)

from .decoding import (
    Decodable,
    DecodeField,
    DecodeEngine,
    Propagator,
    RequirementSpec,
    RequirementResolver,
    NamingConvention,
    SNAKE,
    CAMEL,
    SupportsDecode,
    ProvidesRequirements,
    decode,
    propagate,
    parse_requirement,
)

from .config import RippleConfig, ConfigLoader, load_config

from .serializers import (
    BodySerializer,
    JsonBodySerializer,
    FormBodySerializer,
    SignedBodySerializer,
    get_serializer,
)

__all__ = [
    "__version__",
    # Decoding
    "Decodable",
    "DecodeField",
    "DecodeEngine",
    "Propagator",
    "RequirementSpec",
    "RequirementResolver",
    "NamingConvention",
    "SNAKE",
    "CAMEL",
    "SupportsDecode",
    "ProvidesRequirements",
    "decode",
    "propagate",
    "parse_requirement",
    # Config
    "RippleConfig",
    "ConfigLoader",
    "load_config",
    # Serializers
    "BodySerializer",
    "JsonBodySerializer",
    "FormBodySerializer",
    "SignedBodySerializer",
    "get_serializer",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "DecodeFault",
    "MalformedRequirementFault",
    "MissingRequirementGetterFault",
    "MissingParameterGetterFault",
    "CyclicGraphFault",
    "UndeclaredFieldsFault",
    "NotDecodableFault",
    "EncodingFault",
    "ConfigInvalidFault",
]
