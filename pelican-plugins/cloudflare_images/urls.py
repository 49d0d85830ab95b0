"""Cloudflare ``/cdn-cgi/image/`` URL construction."""
from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import urlparse

CDN_PREFIX = '/cdn-cgi/image'

# Emission order of the parameter string; keep it stable, Cloudflare caches
# per URL.
PARAM_NAMES = {
    'width': 'w',
    'height': 'h',
    'quality': 'q',
    'format': 'f',
    'fit': 'fit',
    'dpr': 'dpr',
    'sharpen': 'sharpen',
    'blur': 'blur',
    'brightness': 'brightness',
    'contrast': 'contrast',
    'gamma': 'gamma',
    'rotate': 'rotate',
}


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_cdn_params(options: Mapping[str, Any], defaults: Optional[Mapping[str, Any]] = None) -> str:
    """Comma-joined ``key=value`` string for the transformations in *options*.

    *defaults* (quality, format, fit) apply where *options* has no entry.
    Unknown keys and values of ``None`` or ``''`` are skipped.
    """
    merged = dict(defaults or {})
    merged.update(options)
    params = []
    for key, name in PARAM_NAMES.items():
        value = merged.get(key)
        if value is None or value == '':
            continue
        params.append(f"{name}={format_value(value)}")
    return ','.join(params)


def make_relative_path(url: str) -> str:
    """Path of *url* without its scheme, host or leading slash."""
    if url.startswith(('http://', 'https://')):
        url = urlparse(url).path
    return url.lstrip('/')


def cdn_url(params: str, path: str) -> str:
    return f"{CDN_PREFIX}/{params}/{path}"
