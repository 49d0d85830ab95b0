"""Split template options into image transformations and HTML attributes."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

TRANSFORM_KEYS = (
    'width', 'height', 'quality', 'format', 'fit', 'dpr',
    'sharpen', 'blur', 'brightness', 'contrast', 'gamma', 'rotate',
)

HTML_KEYS = frozenset({
    'alt', 'title', 'class', 'id', 'style', 'loading', 'decoding',
    'sizes', 'data', 'aria', 'role', 'tabindex', 'crossorigin',
    'referrerpolicy', 'fetchpriority', 'elementtiming', 'importance',
})

HTML_PREFIXES = ('data-', 'aria-')


def is_html_attribute(key: str) -> bool:
    if key in TRANSFORM_KEYS:
        return False
    return key in HTML_KEYS or key.startswith(HTML_PREFIXES)


def separate_options(options: Optional[Mapping[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Return ``(transform, html)`` dicts for *options*.

    Unknown keys are treated as transformations; the CDN parameter builder
    and the fallback adapter ignore the ones they don't understand.
    """
    transform: Dict[str, Any] = {}
    html: Dict[str, Any] = {}
    for key, value in (options or {}).items():
        if is_html_attribute(key):
            html[key] = value
        else:
            transform[key] = value
    return transform, html
