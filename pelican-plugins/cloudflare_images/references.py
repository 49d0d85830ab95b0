"""Image references as passed in from templates.

Templates hand over a URL, a path, or a media handle. ``ImageReference``
tags the value once so the resolver can dispatch on ``kind`` instead of
repeating type checks.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from .host import MediaHandle

ABSOLUTE_PREFIXES = ('http://', 'https://')


class ReferenceKind(enum.Enum):
    ABSOLUTE_URL = 'absolute_url'
    RELATIVE_PATH = 'relative_path'
    MEDIA_HANDLE = 'media_handle'
    UNSUPPORTED = 'unsupported'


def is_absolute_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(ABSOLUTE_PREFIXES)


@dataclass(frozen=True)
class ImageReference:
    kind: ReferenceKind
    value: Any

    @classmethod
    def classify(cls, image: Any) -> 'ImageReference':
        """Tag *image* by kind.

        Empty or whitespace-only strings are ``UNSUPPORTED``, so they resolve
        to an empty URL rather than to the bare site root.
        """
        if isinstance(image, ImageReference):
            return image
        if isinstance(image, str):
            if not image.strip():
                return cls(ReferenceKind.UNSUPPORTED, image)
            if is_absolute_url(image):
                return cls(ReferenceKind.ABSOLUTE_URL, image)
            return cls(ReferenceKind.RELATIVE_PATH, image)
        if isinstance(image, MediaHandle):
            return cls(ReferenceKind.MEDIA_HANDLE, image)
        return cls(ReferenceKind.UNSUPPORTED, image)
