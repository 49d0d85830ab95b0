"""Decide whether an image is served through Cloudflare or by Pelican itself.

Configuration lives in the ``CLOUDFLARE_IMAGES`` dict of the Pelican
settings::

    CLOUDFLARE_IMAGES = {
        'enabled': True,
        'cloudflare_domains': ['example.com'],
    }

Every key is optional; see ``DEFAULTS`` for the values used when a key is
missing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Tuple

from .host import ConfigProvider

DEFAULTS = {
    'enabled': False,
    'force_cloudflare': False,
    'cloudflare_domains': (),
    'local_domains': (),
    'default_quality': 85,
    'default_format': 'auto',
    'default_fit': 'scale-down',
}

DEFAULT_LOCAL_HOSTS = ('localhost', '127.0.0.1', '::1')
LOCAL_HOST_MARKERS = ('.local', '.test', '.dev')


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class RoutingConfig:
    enabled: bool = False
    force_cloudflare: bool = False
    cloudflare_domains: Tuple[str, ...] = field(default_factory=tuple)
    local_domains: Tuple[str, ...] = field(default_factory=tuple)
    default_quality: Any = 85
    default_format: Any = 'auto'
    default_fit: Any = 'scale-down'

    @classmethod
    def from_provider(cls, provider: Optional[ConfigProvider]) -> 'RoutingConfig':
        """Build a config from anything with a dict-style ``get(key, default)``."""
        if provider is None:
            provider = {}

        def get(key):
            return provider.get(key, DEFAULTS[key])

        return cls(
            enabled=bool(get('enabled')),
            force_cloudflare=bool(get('force_cloudflare')),
            cloudflare_domains=_as_tuple(get('cloudflare_domains')),
            local_domains=_as_tuple(get('local_domains')),
            default_quality=get('default_quality'),
            default_format=get('default_format'),
            default_fit=get('default_fit'),
        )

    @property
    def defaults(self) -> dict:
        return {
            'quality': self.default_quality,
            'format': self.default_format,
            'fit': self.default_fit,
        }


def is_local_host(host: str, local_domains: Iterable[str] = ()) -> bool:
    """True for loopback hosts, configured local domains and dev-style TLDs."""
    host = host or ''
    if host in DEFAULT_LOCAL_HOSTS or host in tuple(local_domains):
        return True
    return any(marker in host for marker in LOCAL_HOST_MARKERS)


def host_matches_cdn_domain(host: str, domains: Iterable[str]) -> bool:
    """True when any non-empty configured domain occurs in *host*."""
    # Substring match so example.com also covers staging.tenant.example.com.
    host = host or ''
    return any(domain and domain in host for domain in domains)


def should_use_cdn(config: RoutingConfig, host: str) -> bool:
    """Whether images for *host* are served through Cloudflare."""
    if not config.enabled:
        return False
    if config.force_cloudflare:
        return True
    if is_local_host(host, config.local_domains):
        return False
    return host_matches_cdn_domain(host, config.cloudflare_domains)
