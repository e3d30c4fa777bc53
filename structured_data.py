"""
schema.org JSON-LD builders for song, artist and listing pages
"""

from typing import Dict, List, Optional, Any

import config


def _drop_empty(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v not in (None, '')}


def iso_duration(duration: Optional[str]) -> Optional[str]:
    """'3:45' -> 'PT3M45S', '1:02:03' -> 'PT1H2M3S'."""
    if not duration:
        return None
    try:
        parts = [int(p) for p in str(duration).split(':')]
    except ValueError:
        return None
    if len(parts) == 2:
        return f"PT{parts[0]}M{parts[1]}S"
    if len(parts) == 3:
        return f"PT{parts[0]}H{parts[1]}M{parts[2]}S"
    if len(parts) == 1:
        minutes, seconds = divmod(parts[0], 60)
        return f"PT{minutes}M{seconds}S"
    return None


def song_schema(song: Dict[str, Any], site_url: str = None) -> Dict[str, Any]:
    site_url = (site_url or config.SITE_URL).rstrip('/')
    url = f"{site_url}/song/{song['slug']}"
    return _drop_empty({
        '@context': 'https://schema.org',
        '@type': 'MusicRecording',
        '@id': url,
        'name': song.get('title'),
        'byArtist': {'@type': 'MusicGroup', 'name': song.get('artist_name') or 'Unknown Artist'},
        'image': song.get('cover_url'),
        'duration': iso_duration(song.get('duration')),
        'genre': song.get('genre'),
        'datePublished': song.get('release_date'),
        'description': song.get('description'),
        'url': url,
        'inLanguage': 'en',
    })


def artist_schema(artist: Dict[str, Any], site_url: str = None) -> Dict[str, Any]:
    site_url = (site_url or config.SITE_URL).rstrip('/')
    url = f"{site_url}/artist/{artist['slug']}"
    return _drop_empty({
        '@context': 'https://schema.org',
        '@type': 'MusicGroup',
        '@id': url,
        'name': artist.get('name'),
        'image': artist.get('image_url'),
        'description': artist.get('bio'),
        'genre': artist.get('genre'),
        'url': url,
    })


def breadcrumb_schema(items: List[Dict[str, str]], site_url: str = None) -> Dict[str, Any]:
    """items: [{'name': 'Home', 'url': '/'}, ...] with site-relative URLs."""
    site_url = (site_url or config.SITE_URL).rstrip('/')
    return {
        '@context': 'https://schema.org',
        '@type': 'BreadcrumbList',
        'itemListElement': [
            {
                '@type': 'ListItem',
                'position': position,
                'name': item['name'],
                'item': f"{site_url}{item['url']}",
            }
            for position, item in enumerate(items, start=1)
        ],
    }


def playlist_schema(name: str, description: str, songs: List[Dict[str, Any]],
                    site_url: str = None) -> Dict[str, Any]:
    site_url = (site_url or config.SITE_URL).rstrip('/')
    return {
        '@context': 'https://schema.org',
        '@type': 'MusicPlaylist',
        'name': name,
        'description': description,
        'numTracks': len(songs),
        'track': [
            {
                '@type': 'MusicRecording',
                'name': song.get('title'),
                'byArtist': {'@type': 'MusicGroup', 'name': song.get('artist_name') or 'Unknown Artist'},
                'url': f"{site_url}/song/{song['slug']}",
            }
            for song in songs
        ],
    }


def faq_schema(faqs: List[Dict[str, str]]) -> Dict[str, Any]:
    return {
        '@context': 'https://schema.org',
        '@type': 'FAQPage',
        'mainEntity': [
            {
                '@type': 'Question',
                'name': faq['question'],
                'acceptedAnswer': {'@type': 'Answer', 'text': faq['answer']},
            }
            for faq in faqs
        ],
    }


def song_faqs(song: Dict[str, Any]) -> List[Dict[str, str]]:
    """Stock download FAQ shown on every song page."""
    title = song.get('title', '')
    artist = song.get('artist_name') or 'Unknown Artist'
    return [
        {
            'question': f"How do I download {title} by {artist}?",
            'answer': f"Click the download button on this page to get {title} by {artist} as an MP3 file for free.",
        },
        {
            'question': f"Is {title} free to download?",
            'answer': f"Yes, {title} by {artist} is available as a free MP3 download on {config.SITE_NAME}.",
        },
    ]
