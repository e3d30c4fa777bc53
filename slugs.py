"""
Slug helpers shared by the admin forms and the song importer
"""

import re
from typing import Callable, Optional

NON_ALNUM = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """Lowercase text and collapse everything that is not [a-z0-9] into single dashes."""
    return NON_ALNUM.sub('-', (text or '').lower()).strip('-')


def song_slug(title: str, artist_name: Optional[str] = None) -> str:
    """Build the public song slug, e.g. 'burna-boy-last-last-mp3-download'."""
    parts = [slugify(artist_name), slugify(title), 'mp3-download']
    return '-'.join(part for part in parts if part)


def unique_slug(base: str, exists: Callable[[str], bool]) -> str:
    """Append -2, -3, ... to base until exists() reports the slug as free."""
    slug = base
    counter = 2
    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug
