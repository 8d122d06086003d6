"""Link records and collection (de)serialization."""

from __future__ import annotations

import json
import re
from typing import Any, TypedDict


class Link(TypedDict, total=False):
    id: str
    name: str
    url: str
    color: str
    description: str
    emoji: str


REQUIRED_FIELDS: tuple[str, ...] = ("id", "name", "url")
OPTIONAL_FIELDS: tuple[str, ...] = ("color", "description", "emoji")
LINK_FIELDS: tuple[str, ...] = REQUIRED_FIELDS + OPTIONAL_FIELDS

_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


class LinkError(Exception):
    """Base class for link collection encode/decode failures."""


class ParseError(LinkError):
    """Raised when a document is not a JSON array of Link-shaped objects."""


class SerializeError(LinkError):
    """Raised when a collection cannot be encoded as JSON."""


def normalize_link(raw: Any, index: int = 0) -> Link:
    """Coerce one decoded JSON value into a Link.

    ``null`` decodes to an all-empty link and unknown keys are dropped.  Keys
    match field names case-insensitively (``"URL"`` fills ``url``); when an
    object repeats a field the last value wins, and a ``null`` value leaves
    the field as it was.  Lone UTF-16 surrogates become U+FFFD.  Required
    fields are always present in the result; optional fields only when
    non-empty.

    Raises:
        ParseError: If *raw* is not an object, or a known field is not a string.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ParseError(f"link {index}: expected an object, got {_json_type(raw)}")

    values: dict[str, str] = {}
    for key, value in raw.items():
        field = key.lower()
        if field not in LINK_FIELDS or value is None:
            continue
        if not isinstance(value, str):
            raise ParseError(
                f"link {index}: field '{field}' must be a string, got {_json_type(value)}"
            )
        values[field] = _LONE_SURROGATE.sub("\ufffd", value)

    link: Link = {}
    for field in LINK_FIELDS:
        value = values.get(field, "")
        if field in REQUIRED_FIELDS or value:
            link[field] = value  # type: ignore[literal-required]
    return link


def links_from_data(data: Any) -> list[Link]:
    """Validate an already-decoded JSON value as a collection of links."""
    if not isinstance(data, list):
        raise ParseError(f"expected a JSON array of links, got {_json_type(data)}")
    return [normalize_link(item, i) for i, item in enumerate(data)]


def parse_links(content: str | bytes) -> list[Link]:
    """Decode a JSON document into an ordered list of links.

    Raises:
        ParseError: On malformed JSON or a document that is not Link-shaped.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"invalid JSON: {exc}") from None
    return links_from_data(data)


def serialize_links(links: list[Link], *, indent: int | None = 2) -> str:
    """Encode *links* as JSON, preserving order and omitting empty optionals.

    With the default ``indent=2`` the output is the on-disk format; pass
    ``indent=None`` for a compact single-line body.  Always ends with a newline.

    Raises:
        SerializeError: If the collection holds values JSON cannot encode.
    """
    try:
        ordered = [_ordered(link) for link in links]
        text = json.dumps(ordered, indent=indent, ensure_ascii=False) + "\n"
        # Lone surrogates survive json.dumps but not the UTF-8 write.
        text.encode("utf-8")
        return text
    except (TypeError, ValueError, AttributeError) as exc:
        raise SerializeError(f"failed to encode links: {exc}") from None


def _ordered(link: Link) -> dict[str, str]:
    out: dict[str, str] = {}
    for field in LINK_FIELDS:
        value = link.get(field)  # type: ignore[misc]
        if field in REQUIRED_FIELDS:
            out[field] = value if value is not None else ""
        elif value:
            out[field] = value
    return out


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
