import re
from typing import List, Optional, Tuple
from urllib.parse import urlparse

YOUTUBE_HOSTS = ('youtube.com', 'youtu.be', 'music.youtube.com')
AUDIOMACK_HOSTS = ('audiomack.com',)
SOUNDCLOUD_HOSTS = ('soundcloud.com', 'on.soundcloud.com')

YOUTUBE_VIDEO_PATTERNS = [
    re.compile(r'(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/embed/|music\.youtube\.com/watch\?(?:.*&)?v=)([^&\n?#/]+)'),
    re.compile(r'youtube\.com/shorts/([^&\n?#/]+)'),
]
PLAYLIST_ID_PATTERN = re.compile(r'[?&]list=([^&#]+)')


def _host(url: str) -> str:
    try:
        netloc = urlparse(url if '://' in url else f"https://{url}").netloc.lower()
    except ValueError:
        return ''
    return netloc.split(':')[0]


def _matches(host: str, domains) -> bool:
    return any(host == d or host.endswith('.' + d) for d in domains)


def detect_platform(url: str) -> Optional[str]:
    """Return 'youtube', 'audiomack', 'soundcloud' or None for unsupported URLs."""
    host = _host((url or '').strip())
    if not host:
        return None
    if _matches(host, YOUTUBE_HOSTS):
        return 'youtube'
    if _matches(host, AUDIOMACK_HOSTS):
        return 'audiomack'
    if _matches(host, SOUNDCLOUD_HOSTS):
        return 'soundcloud'
    return None


def extract_youtube_video_id(url: str) -> Optional[str]:
    for pattern in YOUTUBE_VIDEO_PATTERNS:
        match = pattern.search(url or '')
        if match:
            return match.group(1)
    return None


def extract_playlist_id(url: str) -> Optional[str]:
    match = PLAYLIST_ID_PATTERN.search(url or '')
    return match.group(1) if match else None


def is_playlist_url(url: str) -> bool:
    """A YouTube URL pointing at a whole playlist rather than one video in it."""
    return (
        detect_platform(url) == 'youtube'
        and extract_playlist_id(url) is not None
        and extract_youtube_video_id(url) is None
    )


def _title_case(slug_part: str) -> str:
    words = slug_part.replace('-', ' ').split()
    return ' '.join(w[:1].upper() + w[1:] for w in words)


def parse_audiomack_slug(url: str) -> Optional[Tuple[str, str]]:
    """
    Audiomack URLs follow audiomack.com/<artist>/song/<title>.
    Returns (title, artist) title-cased, or None when the path doesn't fit.
    """
    try:
        parsed = urlparse(url if '://' in url else f"https://{url}")
    except ValueError:
        return None
    if not _matches(parsed.netloc.lower(), AUDIOMACK_HOSTS):
        return None

    parts = [p for p in parsed.path.split('/') if p]
    if len(parts) < 3:
        return None

    artist, title = parts[0], parts[2]
    return _title_case(title) or 'Unknown Title', _title_case(artist) or 'Unknown Artist'


def parse_urls(text: str) -> List[str]:
    """Split pasted text on newlines/commas and keep supported, de-duplicated URLs in order."""
    seen = set()
    urls = []
    for raw in re.split(r'[\n,]', text or ''):
        url = raw.strip()
        if not url or url in seen:
            continue
        if detect_platform(url) is None:
            continue
        seen.add(url)
        urls.append(url)
    return urls
