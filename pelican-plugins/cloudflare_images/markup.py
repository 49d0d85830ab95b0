"""HTML tag serialization."""
from __future__ import annotations

from html import escape
from typing import Any, Mapping, Optional

VOID_TAGS = ('img', 'source')


def build_attributes(attributes: Optional[Mapping[str, Any]]) -> str:
    parts = []
    for key, value in (attributes or {}).items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {key}")
        else:
            parts.append(f' {key}="{escape(str(value), quote=True)}"')
    return ''.join(parts)


def build_html_tag(tag: str, attributes: Optional[Mapping[str, Any]] = None) -> str:
    """Opening tag for *tag*; ``img`` and ``source`` are self-closed.

    ``True`` renders a bare attribute, ``False`` and ``None`` drop it.
    """
    closing = ' />' if tag in VOID_TAGS else '>'
    return f"<{tag}{build_attributes(attributes)}{closing}"
