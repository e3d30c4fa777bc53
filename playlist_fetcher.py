#!/usr/bin/env python3
"""
YouTube playlist fetcher
Expands a public playlist URL into its video entries by reading the
ytInitialData blob embedded in the playlist page (no API key needed).
"""

import re
import json
import logging
from typing import Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

import config
from http_client import open_client
from models import PlaylistInfo, PlaylistVideo
from song_fetcher import FetchError
from url_parser import extract_playlist_id

logger = logging.getLogger(__name__)

YT_INITIAL_DATA_RE = re.compile(r'var ytInitialData\s*=\s*({.+?});\s*(?:</script>|$)', re.DOTALL)


def _runs_text(node: Optional[Dict]) -> str:
    """YouTube text nodes are either {'runs': [{'text': ...}]} or {'simpleText': ...}."""
    if not node:
        return ''
    runs = node.get('runs') or []
    if runs and runs[0].get('text'):
        return runs[0]['text']
    return node.get('simpleText') or ''


def extract_initial_data(html: str) -> Optional[Dict]:
    """Find and decode the ytInitialData JSON in a YouTube page."""
    soup = BeautifulSoup(html, 'html.parser')
    for script in soup.find_all('script'):
        text = script.string or script.get_text() or ''
        if 'ytInitialData' not in text:
            continue
        match = YT_INITIAL_DATA_RE.search(text)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError as e:
                logger.debug(f"ytInitialData in script tag did not decode: {e}")

    # Fall back to the raw page in case the script tag was split oddly
    match = YT_INITIAL_DATA_RE.search(html)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError as e:
            logger.debug(f"ytInitialData in raw HTML did not decode: {e}")
    return None


def parse_playlist_data(data: Dict) -> PlaylistInfo:
    """Pull the playlist title and video entries out of decoded ytInitialData."""
    try:
        contents = (
            data['contents']['twoColumnBrowseResultsRenderer']['tabs'][0]['tabRenderer']['content']
            ['sectionListRenderer']['contents'][0]['itemSectionRenderer']['contents'][0]
            ['playlistVideoListRenderer']['contents']
        )
    except (KeyError, IndexError, TypeError):
        contents = []

    videos: List[PlaylistVideo] = []
    for item in contents or []:
        renderer = item.get('playlistVideoRenderer') if isinstance(item, dict) else None
        if not renderer or not renderer.get('videoId'):
            continue

        video_id = renderer['videoId']
        thumbnails = (renderer.get('thumbnail') or {}).get('thumbnails') or []
        videos.append(PlaylistVideo(
            video_id=video_id,
            title=_runs_text(renderer.get('title')) or 'Unknown Title',
            thumbnail=(thumbnails[0].get('url') if thumbnails else None)
            or config.YOUTUBE_PLAYLIST_THUMBNAIL_URL.format(video_id=video_id),
            author=_runs_text(renderer.get('shortBylineText'))
            or _runs_text(renderer.get('ownerText'))
            or 'Unknown Artist',
        ))

    title = ((data.get('metadata') or {}).get('playlistMetadataRenderer') or {}).get('title')
    return PlaylistInfo(playlist_title=title or 'Unknown Playlist', videos=videos)


class PlaylistFetcher:
    def __init__(self, client: httpx.AsyncClient = None):
        self.client = client

    async def fetch(self, url: str) -> PlaylistInfo:
        """
        Fetch every video in a public YouTube playlist.

        Raises:
            FetchError: bad URL (400), page/parse failure (502), empty playlist (404)
        """
        url = (url or '').strip()
        if not url:
            raise FetchError('URL is required', 400)

        playlist_id = extract_playlist_id(url)
        if not playlist_id:
            raise FetchError('Could not extract playlist ID from URL', 400)

        logger.info(f"📃 [FETCH-PLAYLIST] Fetching playlist {playlist_id}")

        async with open_client(self.client) as client:
            try:
                response = await client.get(
                    config.YOUTUBE_PLAYLIST_URL,
                    params={'list': playlist_id},
                    headers=config.HEADERS,
                )
            except httpx.HTTPError as e:
                logger.error(f"❌ [FETCH-PLAYLIST] Request failed: {e}")
                raise FetchError(f'Failed to fetch playlist: {e}', 502)

        if not response.is_success:
            raise FetchError(f'Failed to fetch playlist: HTTP {response.status_code}', 502)

        data = extract_initial_data(response.text)
        if data is None:
            raise FetchError('Could not parse playlist data', 502)

        playlist = parse_playlist_data(data)
        if not playlist.videos:
            raise FetchError('No videos found in playlist', 404)

        logger.info(f"✅ [FETCH-PLAYLIST] Found {len(playlist.videos)} videos in '{playlist.playlist_title}'")
        return playlist
