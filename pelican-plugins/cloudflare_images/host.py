"""Services the resolver needs from the site generator.

The resolver only talks to the small interfaces below. ``SiteContext`` and
``ThemeLocator`` are the Pelican-backed implementations; tests pass their
own fakes.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable
from urllib.parse import urlparse

THEME_SCHEME = 'theme://'


class ConfigProvider(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...


class RequestContext(Protocol):
    @property
    def host(self) -> str: ...


class ResourceLocator(Protocol):
    def find_resource(self, uri: str) -> Optional[Path]: ...


@runtime_checkable
class MediaHandle(Protocol):
    def url(self) -> str: ...

    def resize(self, width=None, height=None) -> 'MediaHandle': ...

    def crop_resize(self, width, height) -> 'MediaHandle': ...

    def crop_zoom(self, width, height) -> 'MediaHandle': ...

    def quality(self, value) -> 'MediaHandle': ...


@dataclass(frozen=True)
class SiteContext:
    """Request host, absolute base URL and output root of the site."""

    host: str = 'localhost'
    base_url: str = ''
    root: Optional[Path] = None

    @classmethod
    def from_settings(cls, settings) -> 'SiteContext':
        siteurl = (settings.get('SITEURL') or '').rstrip('/')
        host = settings.get('CLOUDFLARE_IMAGES_HOST') or urlparse(siteurl).hostname or 'localhost'
        output = settings.get('OUTPUT_PATH')
        return cls(host=host, base_url=siteurl, root=Path(output) if output else None)

    def url_for_path(self, path: Path) -> Optional[str]:
        """Absolute URL of a file inside the output root, or None."""
        if self.root is None:
            return None
        try:
            relative = Path(path).relative_to(self.root)
        except ValueError:
            return None
        return f"{self.base_url}/{relative.as_posix()}"


class ThemeLocator:
    """Resolve ``theme://`` paths to where Pelican publishes theme static files."""

    def __init__(self, theme_path, output_path, static_dir: str = 'theme'):
        self.theme_path = Path(theme_path) if theme_path else None
        self.output_path = Path(output_path) if output_path else None
        self.static_dir = static_dir

    @classmethod
    def from_settings(cls, settings) -> 'ThemeLocator':
        return cls(
            settings.get('THEME'),
            settings.get('OUTPUT_PATH'),
            settings.get('THEME_STATIC_DIR', 'theme'),
        )

    def find_resource(self, uri: str) -> Optional[Path]:
        if not uri.startswith(THEME_SCHEME) or self.theme_path is None or self.output_path is None:
            return None
        rest = uri[len(THEME_SCHEME):].lstrip('/')
        if not rest or not (self.theme_path / 'static' / rest).is_file():
            return None
        return self.output_path / self.static_dir / rest
