"""Token stream serialization: JSON round-trip for lexer output.

Converts frozen token streams to/from JSON-compatible dicts. Useful for:
- Caching lexed templates to disk
- Comparing lexer output across versions
- Debugging and inspection

All output is deterministic (sorted keys) for cache-key stability.

Example:
    from plantilla import lex_string
    from plantilla.serialization import to_json, from_json

    stream = lex_string('<root xmlns:ex="urn:ex"><p ex:If="{% a %}"/></root>')
    restored = from_json(to_json(stream))
    assert list(restored) == list(stream)

Thread Safety:
    All functions are pure — safe to call from any thread.

"""

import json
from dataclasses import fields
from typing import Any

from plantilla.stream import TokenStream
from plantilla.tokens import (
    ExpressionContentToken,
    ExpressionToken,
    HelperToken,
    NodeToken,
    PropertyToken,
    Token,
    TokenType,
)

# Registry of token class names for deserialization
_TOKEN_TYPES: dict[str, type[Token]] = {
    "PropertyToken": PropertyToken,
    "NodeToken": NodeToken,
    "HelperToken": HelperToken,
    "ExpressionToken": ExpressionToken,
    "ExpressionContentToken": ExpressionContentToken,
}

# Internal fields that are not part of the serialized form
_SKIPPED_FIELDS = {"_location_cache"}


def to_dict(value: TokenStream | Token) -> dict[str, Any]:
    """Convert a token stream or a single token to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization.
    Nested expression content streams are serialized recursively.

    Args:
        value: A frozen TokenStream or any Plantilla token.

    Returns:
        Dict with ``_type`` and all fields.

    Raises:
        ValueError: If the stream is not frozen yet.

    """
    if isinstance(value, TokenStream):
        if not value.frozen:
            msg = "Only frozen token streams can be serialized"
            raise ValueError(msg)
        return {
            "_type": "TokenStream",
            "source": value.source,
            "tokens": [to_dict(token) for token in value],
        }

    result: dict[str, Any] = {"_type": type(value).__name__}
    for f in fields(value):
        if f.name in _SKIPPED_FIELDS:
            continue
        result[f.name.lstrip("_")] = _serialize_value(getattr(value, f.name))
    return result


def _serialize_value(value: Any) -> Any:
    """Serialize a single field value."""
    if isinstance(value, TokenType):
        return value.name
    if isinstance(value, TokenStream):
        return to_dict(value)
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    # Primitives: str, int, bool, None
    return value


def from_dict(data: dict[str, Any]) -> TokenStream | Token:
    """Reconstruct a token stream or token from a dict.

    Args:
        data: Dict with ``_type`` and fields (as produced by to_dict).

    Returns:
        A frozen TokenStream or a token (frozen dataclass).

    Raises:
        ValueError: If ``_type`` is missing or unknown.

    """
    type_name = data.get("_type")
    if type_name is None:
        msg = "Missing '_type' field in serialized token"
        raise ValueError(msg)

    if type_name == "TokenStream":
        tokens = [from_dict(item) for item in data.get("tokens", [])]
        return TokenStream.from_tokens(tokens, data.get("source", ""))

    token_cls = _TOKEN_TYPES.get(type_name)
    if token_cls is None:
        msg = f"Unknown token class: {type_name!r}"
        raise ValueError(msg)

    kwargs: dict[str, Any] = {}
    for f in fields(token_cls):
        key = f.name.lstrip("_")
        if f.name in _SKIPPED_FIELDS or key not in data:
            continue
        kwargs[f.name] = _deserialize_value(data[key], f.name)
    return token_cls(**kwargs)


def _deserialize_value(value: Any, field_name: str) -> Any:
    """Deserialize a single field value."""
    if field_name == "type":
        try:
            return TokenType[value]
        except KeyError:
            msg = f"Unknown token type: {value!r}"
            raise ValueError(msg) from None
    if isinstance(value, dict) and value.get("_type") == "TokenStream":
        return from_dict(value)
    if isinstance(value, list):
        return tuple(value)
    return value


def to_json(stream: TokenStream, *, indent: int | None = None) -> str:
    """Serialize a token stream to a JSON string.

    Output is deterministic (sorted keys) for cache-key stability.

    Args:
        stream: Frozen stream to serialize.
        indent: JSON indentation level (None for compact).

    Returns:
        JSON string.

    """
    return json.dumps(to_dict(stream), sort_keys=True, indent=indent)


def from_json(data: str) -> TokenStream:
    """Deserialize a token stream from a JSON string.

    Args:
        data: JSON string (as produced by to_json).

    Returns:
        Frozen, rewound TokenStream.

    Raises:
        ValueError: If the JSON doesn't represent a TokenStream.

    """
    raw = json.loads(data)
    stream = from_dict(raw)
    if not isinstance(stream, TokenStream):
        msg = f"Expected TokenStream, got {type(stream).__name__}"
        raise ValueError(msg)
    return stream
