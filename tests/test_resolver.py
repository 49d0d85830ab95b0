"""
Tests for ImageResolver URL resolution on the Cloudflare and local routes.
"""

from pathlib import Path

import pytest

from cloudflare_images.references import ImageReference, ReferenceKind

from .fakes import FakeLocator, FakeMedium


class TestReferenceClassification:
    @pytest.mark.parametrize('value,kind', [
        ('https://cdn.example.org/a.jpg', ReferenceKind.ABSOLUTE_URL),
        ('http://cdn.example.org/a.jpg', ReferenceKind.ABSOLUTE_URL),
        ('media/a.jpg', ReferenceKind.RELATIVE_PATH),
        ('theme://images/logo.png', ReferenceKind.RELATIVE_PATH),
        ('', ReferenceKind.UNSUPPORTED),
        ('   ', ReferenceKind.UNSUPPORTED),
        (None, ReferenceKind.UNSUPPORTED),
        (42, ReferenceKind.UNSUPPORTED),
    ])
    def test_classify(self, value, kind):
        assert ImageReference.classify(value).kind is kind

    def test_media_handle(self):
        assert ImageReference.classify(FakeMedium('a.jpg')).kind is ReferenceKind.MEDIA_HANDLE


class TestCdnRoute:
    def test_relative_path(self, cdn_resolver):
        url = cdn_resolver.resolve_image('images/a.jpg', {'width': 300, 'quality': 80})
        assert url == '/cdn-cgi/image/w=300,q=80,f=auto,fit=scale-down/images/a.jpg'

    def test_html_attributes_do_not_leak_into_params(self, cdn_resolver):
        url = cdn_resolver.resolve_image('/images/a.jpg', {'width': 300, 'alt': 'x', 'data-id': 3})
        assert url == '/cdn-cgi/image/w=300,q=85,f=auto,fit=scale-down/images/a.jpg'

    def test_absolute_url_uses_its_path(self, cdn_resolver):
        url = cdn_resolver.resolve_image('https://www.example.com/media/a.jpg', {'height': 50})
        assert url == '/cdn-cgi/image/h=50,q=85,f=auto,fit=scale-down/media/a.jpg'

    def test_page_media(self, make_resolver):
        resolver = make_resolver(media={'a.jpg': FakeMedium('a.jpg')})
        url = resolver.resolve_image('a.jpg', {'width': 10})
        assert url == '/cdn-cgi/image/w=10,q=85,f=auto,fit=scale-down/media/a.jpg'

    def test_theme_resource(self, make_resolver):
        locator = FakeLocator({'theme://img/logo.png': Path('/srv/site/theme/img/logo.png')})
        resolver = make_resolver(locator=locator)
        assert resolver.resolve_image_url('theme://img/logo.png') == 'https://www.example.com/theme/img/logo.png'
        assert resolver.resolve_image('theme://img/logo.png', {'width': 64}) == (
            '/cdn-cgi/image/w=64,q=85,f=auto,fit=scale-down/theme/img/logo.png'
        )

    def test_configured_defaults(self, make_resolver):
        resolver = make_resolver({
            'enabled': True,
            'cloudflare_domains': ['example.com'],
            'default_quality': 70,
            'default_format': 'webp',
            'default_fit': 'cover',
        })
        assert resolver.resolve_image('a.jpg') == '/cdn-cgi/image/q=70,f=webp,fit=cover/a.jpg'

    @pytest.mark.parametrize('image', [None, '', 3.5, object()])
    def test_unresolvable_reference_is_empty(self, cdn_resolver, image):
        assert cdn_resolver.resolve_image(image, {'width': 100}) == ''


class TestResolveImageUrl:
    def test_absolute_url_unchanged(self, cdn_resolver):
        url = 'https://images.example.org/a.jpg?x=1'
        assert cdn_resolver.resolve_image_url(url) == url

    def test_relative_path_joins_base_url(self, cdn_resolver):
        assert cdn_resolver.resolve_image_url('/media/a.jpg') == 'https://www.example.com/media/a.jpg'

    def test_unknown_theme_resource_falls_through(self, make_resolver):
        resolver = make_resolver(locator=FakeLocator({}))
        assert resolver.resolve_image_url('theme://missing.png') == 'https://www.example.com/theme://missing.png'

    def test_theme_resource_outside_root_falls_through(self, make_resolver):
        locator = FakeLocator({'theme://a.png': Path('/elsewhere/a.png')})
        resolver = make_resolver(locator=locator, media={'theme://a.png': FakeMedium('a.png')})
        assert resolver.resolve_image_url('theme://a.png') == 'https://cms.example.org/media/a.png'

    def test_unsupported_is_empty(self, cdn_resolver):
        assert cdn_resolver.resolve_image_url(['a.jpg']) == ''


class TestLocalRoute:
    def test_absolute_url_unchanged_whatever_the_options(self, local_resolver):
        url = 'https://images.example.org/a.jpg'
        assert local_resolver.resolve_image(url, {'width': 10, 'fit': 'cover', 'quality': 5}) == url

    def test_plain_path(self, local_resolver):
        assert local_resolver.resolve_image('media/a.jpg', {'width': 300}) == '/media/a.jpg'

    @pytest.mark.parametrize('fit,call', [
        ('cover', 'crop_zoom'),
        ('crop', 'crop_resize'),
        ('pad', 'resize'),
        ('contain', 'resize'),
        ('scale-down', 'resize'),
        (None, 'resize'),
        ('unknown', 'resize'),
    ])
    def test_fit_dispatch(self, local_resolver, fit, call):
        medium = FakeMedium('a.jpg')
        local_resolver.resolve_image(medium, {'width': 200, 'height': 100, 'fit': fit})
        assert medium.calls == [(call, 200, 100)]

    def test_width_only(self, local_resolver):
        medium = FakeMedium('a.jpg')
        local_resolver.resolve_image(medium, {'width': 200, 'fit': 'cover'})
        assert medium.calls == [('resize', 200, None)]

    def test_height_only(self, local_resolver):
        medium = FakeMedium('a.jpg')
        local_resolver.resolve_image(medium, {'height': 120})
        assert medium.calls == [('resize', None, 120)]

    def test_quality_after_sizing(self, local_resolver):
        medium = FakeMedium('a.jpg')
        url = local_resolver.resolve_image(medium, {'width': 200, 'quality': 60})
        assert medium.calls == [('resize', 200, None), ('quality', 60)]
        assert url == 'https://cms.example.org/media/a.jpg/resize-200xNone/quality-60'

    def test_no_options_no_calls(self, local_resolver):
        medium = FakeMedium('a.jpg')
        assert local_resolver.resolve_image(medium) == 'https://cms.example.org/media/a.jpg'
        assert medium.calls == []

    def test_page_media_is_transformed(self, make_resolver):
        medium = FakeMedium('a.jpg')
        resolver = make_resolver(host='localhost', media={'a.jpg': medium})
        resolver.resolve_image('a.jpg', {'width': 50, 'height': 50, 'fit': 'cover'})
        assert medium.calls == [('crop_zoom', 50, 50)]

    def test_theme_resource_is_not_transformed(self, make_resolver):
        medium = FakeMedium('logo.png')
        locator = FakeLocator({'theme://logo.png': Path('/srv/site/theme/logo.png')})
        resolver = make_resolver(host='localhost', locator=locator, media={'theme://logo.png': medium})
        assert resolver.resolve_image('theme://logo.png', {'width': 10}) == 'https://www.example.com/theme/logo.png'
        assert medium.calls == []

    def test_disabled_plugin_falls_back_on_cdn_host(self, make_resolver):
        resolver = make_resolver({'enabled': False, 'cloudflare_domains': ['example.com']})
        assert resolver.resolve_image('media/a.jpg', {'width': 1}) == 'https://www.example.com/media/a.jpg'

    def test_unresolvable_reference_is_empty(self, local_resolver):
        assert local_resolver.resolve_image(None) == ''

    @pytest.mark.parametrize('options', [
        {'width': 'auto'},
        {'width': 'auto', 'height': 'auto', 'fit': 'cover'},
        {'quality': 'high'},
    ])
    def test_non_numeric_sizes_are_skipped(self, local_resolver, options):
        medium = FakeMedium('a.jpg')
        assert local_resolver.resolve_image(medium, options) == 'https://cms.example.org/media/a.jpg'
        assert medium.calls == []

    def test_numeric_strings_are_coerced(self, local_resolver):
        medium = FakeMedium('a.jpg')
        local_resolver.resolve_image(medium, {'width': '200', 'quality': '70'})
        assert medium.calls == [('resize', 200, None), ('quality', 70)]
