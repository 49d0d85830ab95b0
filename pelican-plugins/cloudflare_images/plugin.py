"""Pelican wiring: Jinja globals, optional content rewriting and derivative output.

Templates get four globals::

    {{ cf_image(article.cover, {'width': 800}) }}
    {{ cf_img_tag('media/images/cat.jpg', {'width': 400, 'alt': 'Cat', 'loading': 'lazy'}) }}
    {% set r = cf_responsive('media/images/cat.jpg', [480, 960]) %}
    {{ cf_picture_tag('media/images/cat.jpg', [{'media': '(min-width: 800px)', 'widths': [800, 1600]}]) }}

Keyword arguments are merged over the options dict, so
``cf_image(path, width=800)`` works too. The current ``article`` or
``page`` in the template context supplies the page media collection.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from bs4 import BeautifulSoup
from jinja2 import pass_context
from markupsafe import Markup
from pelican import signals
from pelican.contents import Article, Page

from .host import SiteContext, ThemeLocator
from .media import MediaLibrary
from .options import separate_options
from .references import is_absolute_url
from .resolver import DEFAULT_WIDTHS, ImageResolver
from .routing import RoutingConfig
from .urls import CDN_PREFIX

logger = logging.getLogger(__name__)

SETTINGS_KEY = 'CLOUDFLARE_IMAGES'
CONTENT_PREFIX = re.compile(r'^(?:\{(?:static|attach|filename)\})?(?:\.{1,2}/)*')


class CloudflareImages:
    """Per-build state: settings-derived services and the media library."""

    def __init__(self, settings: Mapping[str, Any]):
        self.settings = settings
        self.options = settings.get(SETTINGS_KEY) or {}
        self.config = RoutingConfig.from_provider(self.options)
        self.site = SiteContext.from_settings(settings)
        self.locator = ThemeLocator.from_settings(settings)
        self.library = MediaLibrary.from_settings(settings, self.options)

    def resolver_for(self, page=None) -> ImageResolver:
        return ImageResolver(
            self.config,
            self.site,
            locator=self.locator,
            media=self.library.collection_for(page),
        )

    def template_globals(self) -> dict:
        def resolver(context) -> ImageResolver:
            return self.resolver_for(context.get('article') or context.get('page'))

        @pass_context
        def cf_image(context, image, options=None, **kwargs):
            return resolver(context).resolve_image(image, _merge(options, kwargs))

        @pass_context
        def cf_responsive(context, image, sizes=DEFAULT_WIDTHS, options=None, **kwargs):
            return resolver(context).responsive_set(image, sizes, _merge(options, kwargs))

        @pass_context
        def cf_img_tag(context, image, options=None, **kwargs):
            return Markup(resolver(context).img_tag(image, _merge(options, kwargs)))

        @pass_context
        def cf_picture_tag(context, image, sources=(), img_options=None, **kwargs):
            return Markup(resolver(context).picture_tag(image, sources, _merge(img_options, kwargs)))

        return {
            'cf_image': cf_image,
            'cf_responsive': cf_responsive,
            'cf_img_tag': cf_img_tag,
            'cf_picture_tag': cf_picture_tag,
        }

    def rewrite_html(self, html: str, page=None) -> str:
        """Point relative ``<img>`` sources in *html* at resolved image URLs."""
        soup = BeautifulSoup(html, 'html.parser')
        resolver = self.resolver_for(page)
        content_options = self.options.get('content_options') or {}
        widths = self.options.get('content_widths') or []
        _, attributes = separate_options(content_options)
        changed = False

        for img in soup.find_all('img', src=True):
            src = img['src'].strip()
            if not src or is_absolute_url(src) or src.startswith(('//', 'data:', CDN_PREFIX)):
                continue
            path = CONTENT_PREFIX.sub('', src)
            url = resolver.resolve_image(path, content_options)
            if not url:
                continue
            img['src'] = url
            if widths:
                responsive = resolver.responsive_set(path, widths, content_options)
                img['src'] = responsive['src']
                img['srcset'] = responsive['srcset']
                if not img.get('sizes'):
                    img['sizes'] = responsive['sizes']
            for key, value in attributes.items():
                if key == 'sizes' or value is None or value is False or img.has_attr(key):
                    continue
                img[key] = '' if value is True else str(value)
            changed = True

        return str(soup) if changed else html

    def rewrite_content(self, generators) -> None:
        if not self.options.get('rewrite_content'):
            return
        for generator in generators:
            for attr in ('articles', 'pages'):
                for instance in getattr(generator, attr, []):
                    if not isinstance(instance, (Article, Page)):
                        continue
                    content = getattr(instance, '_content', None)
                    if content:
                        instance._content = self.rewrite_html(content, instance)  # noqa: SLF001


def _merge(options: Optional[Mapping[str, Any]], extra: Mapping[str, Any]) -> dict:
    merged = dict(options or {})
    merged.update(extra)
    return merged


_state: Optional[CloudflareImages] = None


def _current(settings) -> CloudflareImages:
    global _state
    if _state is None or _state.settings is not settings:
        _state = CloudflareImages(settings)
    return _state


def on_initialized(pelican) -> None:
    state = _current(pelican.settings)
    logger.debug(
        'cloudflare_images: host=%s enabled=%s cdn=%s',
        state.site.host, state.config.enabled, state.resolver_for().use_cdn(),
    )


def on_generator_init(generator) -> None:
    generator.env.globals.update(_current(generator.settings).template_globals())


def on_all_generators_finalized(generators) -> None:
    if _state is not None:
        _state.rewrite_content(generators)


def on_finalized(pelican) -> None:
    if _state is None:
        return
    written = _state.library.write_pending(pelican.output_path)
    if written:
        logger.info('cloudflare_images: wrote %d resized image(s)', written)


def register():  # Pelican entry point
    signals.initialized.connect(on_initialized)
    signals.generator_init.connect(on_generator_init)
    signals.all_generators_finalized.connect(on_all_generators_finalized)
    signals.finalized.connect(on_finalized)
