"""Page media for the local (non-Cloudflare) route.

``Medium`` is the image handle templates get back from a page's media
collection. Resize and quality calls only record operations; ``url()``
names the derivative and queues it on the ``MediaLibrary``, which renders
everything with Pillow once the build is finished.
"""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

IMAGE_EXT = {'.jpg', '.jpeg', '.png', '.gif', '.webp', '.avif', '.bmp', '.tif', '.tiff'}
JPEG_EXT = {'.jpg', '.jpeg'}
RESAMPLE = Image.Resampling.LANCZOS


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXT and path.is_file()


@dataclass(frozen=True)
class Medium:
    path: Path
    url_path: str
    library: 'MediaLibrary' = field(compare=False, repr=False)
    operations: Tuple[Tuple, ...] = ()

    def _with(self, *operation) -> 'Medium':
        return replace(self, operations=self.operations + (operation,))

    def resize(self, width=None, height=None) -> 'Medium':
        return self._with('resize', width, height)

    def crop_resize(self, width, height) -> 'Medium':
        return self._with('crop_resize', width, height)

    def crop_zoom(self, width, height) -> 'Medium':
        return self._with('crop_zoom', width, height)

    def quality(self, value) -> 'Medium':
        return self._with('quality', value)

    @property
    def derivative_name(self) -> str:
        """File name of the derivative; changes when the source file is modified."""
        try:
            mtime = self.path.stat().st_mtime_ns
        except OSError:
            mtime = None
        key = repr((self.url_path, mtime, self.operations))
        digest = hashlib.sha1(key.encode('utf-8')).hexdigest()[:10]
        return f"{self.path.stem}-{digest}{self.path.suffix.lower()}"

    def url(self) -> str:
        if not self.operations:
            return self.library.url_for(self.url_path)
        return self.library.schedule(self)

    def render(self, destination: Path) -> None:
        """Apply the recorded operations to the source file and save to *destination*."""
        quality = None
        with Image.open(self.path) as source:
            image = source.copy()
        for name, *args in self.operations:
            if name == 'quality':
                quality = int(args[0])
            else:
                image = _apply(image, name, *args)

        if destination.suffix.lower() in JPEG_EXT and image.mode != 'RGB':
            image = image.convert('RGB')
        save_kwargs = {'quality': quality} if quality is not None else {}
        destination.parent.mkdir(parents=True, exist_ok=True)
        image.save(destination, **save_kwargs)


def _scaled(image: Image.Image, width, height) -> Tuple[int, int]:
    if width:
        ratio = int(width) / image.width
        return int(width), max(1, round(image.height * ratio))
    ratio = int(height) / image.height
    return max(1, round(image.width * ratio)), int(height)


def _apply(image: Image.Image, name: str, width, height) -> Image.Image:
    if name == 'resize':
        if width and height:
            # Pads to the exact box, like Grav's resize.
            if image.mode not in ('RGB', 'RGBA'):
                image = image.convert('RGBA')
            fill = (255, 255, 255, 0) if image.mode == 'RGBA' else (255, 255, 255)
            return ImageOps.pad(image, (int(width), int(height)), method=RESAMPLE, color=fill)
        return image.resize(_scaled(image, width, height), RESAMPLE)
    if name == 'crop_resize':
        return ImageOps.contain(image, (int(width), int(height)), method=RESAMPLE)
    if name == 'crop_zoom':
        return ImageOps.fit(image, (int(width), int(height)), method=RESAMPLE)
    raise ValueError(f"Unknown image operation: {name}")


class MediaLibrary:
    """Image files under the content ``PATH`` plus the derivatives made from them."""

    def __init__(self, content_path, base_url: str = '', derivatives_dir: str = 'images'):
        self.content_path = Path(content_path).resolve()
        self.base_url = (base_url or '').rstrip('/')
        self.derivatives_dir = derivatives_dir.strip('/')
        self.pending: Dict[str, Medium] = {}

    @classmethod
    def from_settings(cls, settings, options: Optional[Mapping] = None) -> 'MediaLibrary':
        options = options or {}
        return cls(
            settings.get('PATH', 'content'),
            settings.get('SITEURL', ''),
            options.get('derivatives_dir', 'images'),
        )

    def url_for(self, url_path: str) -> str:
        return f"{self.base_url}/{url_path}"

    def medium(self, path: Path) -> Optional[Medium]:
        path = path.resolve()
        if not is_image_file(path):
            return None
        try:
            url_path = path.relative_to(self.content_path).as_posix()
        except ValueError:
            return None
        return Medium(path, url_path, self)

    def collection_for(self, page=None) -> 'MediaCollection':
        source_path = getattr(page, 'source_path', None)
        page_dir = Path(source_path).parent if source_path else None
        return MediaCollection(self, page_dir)

    def schedule(self, medium: Medium) -> str:
        name = medium.derivative_name
        self.pending.setdefault(name, medium)
        return self.url_for(f"{self.derivatives_dir}/{name}")

    def write_pending(self, output_path) -> int:
        """Render queued derivatives into *output_path*; returns how many were written."""
        target_dir = Path(output_path) / self.derivatives_dir
        written = 0
        for name, medium in sorted(self.pending.items()):
            destination = target_dir / name
            if destination.exists():
                continue
            try:
                medium.render(destination)
            except (OSError, ValueError) as err:
                logger.error('Could not render %s from %s: %s', name, medium.path, err)
                continue
            written += 1
        self.pending.clear()
        return written


class MediaCollection(Mapping):
    """Media of one page, keyed by path relative to the page or to ``PATH``."""

    def __init__(self, library: MediaLibrary, page_dir: Optional[Path] = None):
        self.library = library
        self.page_dir = page_dir

    def _candidates(self, key: str) -> Iterator[Path]:
        trimmed = key.lstrip('/')
        if self.page_dir is not None and not key.startswith('/'):
            yield self.page_dir / key
        yield self.library.content_path / trimmed

    def __getitem__(self, key: str) -> Medium:
        if isinstance(key, str) and key.strip():
            for candidate in self._candidates(key):
                medium = self.library.medium(candidate)
                if medium is not None:
                    return medium
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        if self.page_dir is None or not self.page_dir.is_dir():
            return iter(())
        return iter(sorted(p.name for p in self.page_dir.iterdir() if is_image_file(p)))

    def __len__(self) -> int:
        return sum(1 for _ in self)
