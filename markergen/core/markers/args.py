"""
Marker argument syntax — splitting raw marker text into name and values.

Grammar::

    name                      bare marker (flag / defaults)
    name=value                anonymous value
    name:key=value,key2=v2    named fields
    name:flag                 named boolean field set to true

Values are left as strings; typed coercion happens in pydantic when the
marker's target model validates them. Lists are written ``{a,b}`` or
``a;b`` and are split by :data:`MarkerList`.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BeforeValidator

_QUOTES = ("'", '"')


def split_marker(raw: str) -> tuple[str, str | None]:
    """Split ``name[:field...]=value`` into its name part and raw value.

    The leading ``+`` of source-code markers is dropped. The value is
    ``None`` when the marker has no ``=``.
    """
    raw = raw.strip()
    if raw.startswith("+"):
        raw = raw[1:]
    name, sep, value = raw.partition("=")
    return name, (value if sep else None)


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on ``sep`` outside of braces and quotes."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None

    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in _QUOTES:
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
        elif ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)

    if quote is not None:
        raise ValueError(f"unterminated quote in {text!r}")
    parts.append("".join(current))
    return parts


def unquote(value: str) -> str:
    """Strip one pair of matching quotes."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def parse_fields(text: str) -> dict[str, Any]:
    """Parse ``key=value,key2,key3=v`` into a dict of raw values.

    A key without ``=`` is a boolean flag set to ``True``.
    """
    fields: dict[str, Any] = {}
    for part in split_top_level(text):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        key = key.strip()
        if not key:
            raise ValueError(f"missing field name in {part!r}")
        if key in fields:
            raise ValueError(f"field {key!r} given more than once")
        fields[key] = unquote(value) if sep else True
    return fields


def split_list(value: Any) -> Any:
    """Turn ``{a,b}`` or ``a;b`` into ``["a", "b"]``; leave lists alone."""
    if not isinstance(value, str):
        return value
    value = value.strip()
    if value.startswith("{") and value.endswith("}"):
        items = split_top_level(value[1:-1])
    else:
        items = value.split(";")
    return [unquote(item) for item in items if item.strip()]


MarkerList = Annotated[list[str], BeforeValidator(split_list)]
"""A ``list[str]`` that also accepts the marker list syntax."""
