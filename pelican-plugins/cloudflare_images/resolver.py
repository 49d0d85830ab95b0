"""Turn image references into Cloudflare or local URLs and markup.

``ImageResolver`` is built once per page render with the services it may
consult. None of its methods raise for a bad reference: an image that
cannot be resolved becomes an empty URL and a logged warning, so a single
broken reference never aborts the build.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from .host import THEME_SCHEME, MediaHandle, ResourceLocator, SiteContext
from .markup import build_html_tag
from .options import separate_options
from .references import ImageReference, ReferenceKind
from .routing import RoutingConfig, should_use_cdn
from .urls import build_cdn_params, cdn_url, make_relative_path

logger = logging.getLogger(__name__)

DEFAULT_WIDTHS = (640, 768, 1024, 1536)
DEFAULT_SIZES = (
    '(max-width: 640px) 100vw, (max-width: 768px) 100vw, '
    '(max-width: 1024px) 100vw, 1024px'
)
DEFAULT_FIT = 'scale-down'


def _numeric(value: Any) -> Optional[int]:
    """Pixel or quality value usable by the local resizer, else None.

    Cloudflare-only values such as ``width=auto`` have no local meaning.
    """
    if value is None or value == '' or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError):
        logger.debug('Ignoring non-numeric image option %r on the local route', value)
        return None


def _width_list(value: Any) -> Optional[Sequence]:
    if isinstance(value, (list, tuple)):
        return value
    return None


class ImageResolver:
    def __init__(
        self,
        config: RoutingConfig,
        site: SiteContext,
        locator: Optional[ResourceLocator] = None,
        media: Optional[Mapping[str, MediaHandle]] = None,
    ):
        self.config = config
        self.site = site
        self.locator = locator
        self.media = media

    def use_cdn(self) -> bool:
        return should_use_cdn(self.config, self.site.host)

    # --- URLs ---

    def resolve_image(self, image: Any, options: Optional[Mapping[str, Any]] = None) -> str:
        """URL for *image*, through Cloudflare when routing allows it."""
        transform, _ = separate_options(options)
        ref = ImageReference.classify(image)

        if not self.use_cdn():
            return self.media_url(ref, transform)

        url = self.resolve_image_url(ref)
        if not url:
            return ''
        params = build_cdn_params(transform, self.config.defaults)
        return cdn_url(params, make_relative_path(url))

    def resolve_image_url(self, image: Any) -> str:
        """Plain absolute URL for *image*, with no transformations applied."""
        ref = ImageReference.classify(image)
        if ref.kind is ReferenceKind.ABSOLUTE_URL:
            return ref.value
        if ref.kind is ReferenceKind.MEDIA_HANDLE:
            return ref.value.url()
        if ref.kind is ReferenceKind.RELATIVE_PATH:
            path = ref.value
            if path.startswith(THEME_SCHEME):
                url = self._theme_url(path)
                if url:
                    return url
            medium = self._page_medium(path)
            if medium is not None:
                return medium.url()
            return f"{self.site.base_url}/{path.lstrip('/')}"

        logger.warning('Could not resolve image reference %r', ref.value)
        return ''

    def media_url(self, image: Any, options: Optional[Mapping[str, Any]] = None) -> str:
        """Local URL for *image*, sized by the page media handle when there is one."""
        options = options or {}
        ref = ImageReference.classify(image)
        if ref.kind is ReferenceKind.ABSOLUTE_URL:
            return ref.value
        if ref.kind is ReferenceKind.MEDIA_HANDLE:
            return self._apply_transforms(ref.value, options).url()
        if ref.kind is ReferenceKind.RELATIVE_PATH:
            path = ref.value
            if path.startswith(THEME_SCHEME):
                return self.resolve_image_url(ref)
            medium = self._page_medium(path)
            if medium is not None:
                return self.media_url(medium, options)
            return self.resolve_image_url(ref)

        logger.warning('Could not resolve image reference %r', ref.value)
        return ''

    def _theme_url(self, path: str) -> Optional[str]:
        if self.locator is None:
            return None
        found = self.locator.find_resource(path)
        if not found:
            logger.debug('Theme resource %s not found', path)
            return None
        return self.site.url_for_path(found)

    def _page_medium(self, path: str) -> Optional[MediaHandle]:
        if self.media is None:
            return None
        try:
            return self.media[path]
        except KeyError:
            return None

    def _apply_transforms(self, medium: MediaHandle, options: Mapping[str, Any]) -> MediaHandle:
        width = _numeric(options.get('width'))
        height = _numeric(options.get('height'))
        quality = _numeric(options.get('quality'))
        fit = options.get('fit') or DEFAULT_FIT

        if width and height:
            if fit == 'cover':
                medium = medium.crop_zoom(width, height)
            elif fit == 'crop':
                medium = medium.crop_resize(width, height)
            else:
                if fit == 'pad':
                    logger.debug('fit=pad has no local equivalent, using resize for %sx%s', width, height)
                medium = medium.resize(width, height)
        elif width:
            medium = medium.resize(width)
        elif height:
            medium = medium.resize(None, height)

        if quality is not None:
            medium = medium.quality(quality)
        return medium

    # --- Markup ---

    def responsive_set(
        self,
        image: Any,
        widths: Optional[Sequence[int]] = DEFAULT_WIDTHS,
        base_options: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, str]:
        """``src``, ``srcset`` and ``sizes`` for *image* at each of *widths*."""
        transform, html = separate_options(base_options)
        widths = list(DEFAULT_WIDTHS if widths is None else widths)

        urls = [self.resolve_image(image, {**transform, 'width': width}) for width in widths]
        srcset = ', '.join(f"{url} {width}w" for url, width in zip(urls, widths))
        sizes = html.get('sizes')
        return {
            'src': urls[len(urls) // 2] if urls else '',
            'srcset': srcset,
            'sizes': sizes if isinstance(sizes, str) else DEFAULT_SIZES,
        }

    def img_tag(self, image: Any, options: Optional[Mapping[str, Any]] = None) -> str:
        """An ``<img>`` tag, with a srcset when a list of widths is given."""
        options = dict(options or {})
        widths = _width_list(options.pop('widths', None)) or _width_list(options.get('sizes'))
        transform, attributes = separate_options(options)

        if widths is not None:
            responsive = self.responsive_set(image, widths, transform)
            caller_sizes = attributes.pop('sizes', None)
            attributes['src'] = responsive['src']
            attributes['srcset'] = responsive['srcset']
            attributes['sizes'] = caller_sizes if isinstance(caller_sizes, str) else responsive['sizes']
        else:
            attributes['src'] = self.resolve_image(image, transform)
        return build_html_tag('img', attributes)

    def picture_tag(
        self,
        image: Any,
        sources: Sequence[Mapping[str, Any]] = (),
        img_options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """A ``<picture>`` element with one ``<source>`` per entry of *sources*."""
        parts = [build_html_tag('picture')]
        for source in sources or ():
            widths = _width_list(source.get('widths')) or _width_list(source.get('sizes')) or DEFAULT_WIDTHS
            transform, _ = separate_options(source.get('options'))
            srcset = self.responsive_set(image, widths, transform)['srcset']
            sizes = source.get('sizes')
            attributes = {
                'srcset': srcset,
                'media': source.get('media'),
                'type': source.get('type'),
                'sizes': sizes if isinstance(sizes, str) else None,
            }
            parts.append(build_html_tag('source', {k: v for k, v in attributes.items() if v}))
        parts.append(self.img_tag(image, img_options))
        parts.append('</picture>')
        return ''.join(parts)
