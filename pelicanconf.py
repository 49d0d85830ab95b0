# --- Site Information ---
SITENAME = 'Cloudflare Images demo'
SITEURL = ''
SITESUBTITLE = 'responsive images through /cdn-cgi/image'

# --- Paths ---
PATH = 'content'
ARTICLE_PATHS = ['articles']
PAGE_PATHS = ['pages']
STATIC_PATHS = ['media', 'extra']

# --- Content Settings ---
TIMEZONE = 'UTC'
DEFAULT_LANG = 'en'
ARTICLE_SAVE_AS = 'blog/{slug}.html'
ARTICLE_URL = 'blog/{slug}.html'
PAGE_SAVE_AS = '{slug}.html'
PAGE_URL = '{slug}.html'
DELETE_OUTPUT_DIRECTORY = True

# --- Feed Settings (disabled for development) ---
FEED_ALL_ATOM = None
CATEGORY_FEED_ATOM = None
TRANSLATION_FEED_ATOM = None
AUTHOR_FEED_ATOM = None
AUTHOR_FEED_RSS = None

# --- Plugins ---
PLUGIN_PATHS = ['pelican-plugins']
PLUGINS = ['cloudflare_images']

# Local builds resize through Pillow; only hosts listed in
# cloudflare_domains get /cdn-cgi/image URLs.
CLOUDFLARE_IMAGES = {
    'enabled': True,
    'force_cloudflare': False,
    'cloudflare_domains': ['example.com'],
    'local_domains': [],
    'default_quality': 85,
    'default_format': 'auto',
    'default_fit': 'scale-down',
    'derivatives_dir': 'images',
    'rewrite_content': True,
    'content_options': {'quality': 80},
    'content_widths': [640, 1024],
}

# --- URL Settings ---
RELATIVE_URLS = True
