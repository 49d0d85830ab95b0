"""
Cloudflare Images plugin for Pelican

Serves theme and content images through Cloudflare's image resizing
(``/cdn-cgi/image/<options>/<path>``) when the site is published on a
Cloudflare-proxied domain, and falls back to locally resized copies
everywhere else (development servers, ``.local``/``.test`` hosts).

Enable it in pelicanconf.py::

  PLUGINS = ['cloudflare_images']
  CLOUDFLARE_IMAGES = {
      'enabled': True,
      'cloudflare_domains': ['example.com'],
  }

and use ``cf_image``, ``cf_responsive``, ``cf_img_tag`` and
``cf_picture_tag`` from templates.
"""

from .plugin import register
from .resolver import ImageResolver

__all__ = ['register', 'ImageResolver']
