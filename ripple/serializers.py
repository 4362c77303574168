"""
Ripple request body serializers - encode outbound request bodies.

Supports compact JSON (default), form url-encoding, and HMAC-signed JSON
bodies. Every serializer raises ``EncodingFault`` when a body cannot be
encoded and logs the failure.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Any, Mapping, Protocol, runtime_checkable
from urllib.parse import urlencode

from .faults import EncodingFault

logger = logging.getLogger("ripple.serializers")


@runtime_checkable
class BodySerializer(Protocol):
    """Encodes a request body mapping into its wire string."""

    content_type: str

    def encode(self, body: Mapping[str, Any]) -> str:
        ...


def _require_mapping(body: Any, serializer: str) -> None:
    if not isinstance(body, Mapping):
        raise EncodingFault(f"body must be a mapping, got {type(body).__name__}", serializer=serializer)


class JsonBodySerializer:
    """
    JSON serializer - compact separators, UTF-8 kept as is.

    Non-serializable values are an error, not silently stringified.
    """

    content_type = "application/json"

    def __init__(self, *, sort_keys: bool = False):
        self.sort_keys = sort_keys

    def encode(self, body: Mapping[str, Any]) -> str:
        """Encode body as a JSON object."""
        _require_mapping(body, "json")
        try:
            return json.dumps(
                dict(body),
                separators=(",", ":"),
                ensure_ascii=False,
                sort_keys=self.sort_keys,
                allow_nan=False,
            )
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"JSON body encoding failed: {e}")
            raise EncodingFault(str(e), serializer="json") from e


class FormBodySerializer:
    """
    Form serializer - ``application/x-www-form-urlencoded``.

    Scalars are written as they are (``None`` as an empty value, booleans
    as ``true``/``false``); lists and mappings are JSON-encoded into a
    single value.
    """

    content_type = "application/x-www-form-urlencoded; charset=UTF-8"

    def _value(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, int, float)):
            return str(value)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    def encode(self, body: Mapping[str, Any]) -> str:
        """Encode body as url-encoded form fields, keeping key order."""
        _require_mapping(body, "form")
        try:
            return urlencode([(str(key), self._value(value)) for key, value in body.items()])
        except (TypeError, ValueError) as e:
            logger.warning(f"Form body encoding failed: {e}")
            raise EncodingFault(str(e), serializer="form") from e


class SignedBodySerializer:
    """
    Signed serializer - HMAC-SHA256 over the compact JSON body.

    Produces ``signed_body=<hex digest>.<json>&sig_key_version=<n>``,
    url-encoded, for APIs that verify request bodies against a shared key.
    """

    content_type = "application/x-www-form-urlencoded; charset=UTF-8"

    def __init__(self, key: str | bytes, *, key_version: int = 4):
        if not key:
            raise EncodingFault("a signing key is required", serializer="signed")
        self._key = key.encode("utf-8") if isinstance(key, str) else key
        self.key_version = key_version
        self._json = JsonBodySerializer()

    def sign(self, payload: str) -> str:
        """Return the HMAC-SHA256 hex signature of ``payload``."""
        return hmac.new(self._key, payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def encode(self, body: Mapping[str, Any]) -> str:
        """Encode and sign body."""
        payload = self._json.encode(body)
        return urlencode([
            ("signed_body", f"{self.sign(payload)}.{payload}"),
            ("sig_key_version", str(self.key_version)),
        ])


SERIALIZERS = {
    "json": JsonBodySerializer,
    "form": FormBodySerializer,
    "signed": SignedBodySerializer,
}


def get_serializer(name: str = "json", **options: Any) -> BodySerializer:
    """
    Factory for serializer instances.

    Args:
        name: "json", "form", or "signed"
        **options: Passed to the serializer constructor
            (``sort_keys`` for json, ``key`` and ``key_version`` for signed)

    Returns:
        BodySerializer instance
    """
    cls = SERIALIZERS.get(name)
    if cls is None:
        raise ValueError(f"Unknown serializer: {name}. Options: {list(SERIALIZERS.keys())}")

    return cls(**options)
