"""
Shared fixtures for cloudflare_images tests.
"""

from pathlib import Path

import pytest

from cloudflare_images.host import SiteContext
from cloudflare_images.resolver import ImageResolver
from cloudflare_images.routing import RoutingConfig


CDN_CONFIG = {
    'enabled': True,
    'cloudflare_domains': ['example.com'],
}


@pytest.fixture
def make_resolver():
    def factory(options=None, host='www.example.com', media=None, locator=None,
                base_url='https://www.example.com', root=Path('/srv/site')):
        config = RoutingConfig.from_provider(CDN_CONFIG if options is None else options)
        site = SiteContext(host=host, base_url=base_url, root=root)
        return ImageResolver(config, site, locator=locator, media=media)

    return factory


@pytest.fixture
def cdn_resolver(make_resolver):
    return make_resolver()


@pytest.fixture
def local_resolver(make_resolver):
    return make_resolver(host='localhost', base_url='')
