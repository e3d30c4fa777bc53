#!/usr/bin/env python3
"""
Song Fetcher
Turns a YouTube / Audiomack / SoundCloud URL into song metadata plus a
downloadable audio link.

Metadata comes from the platform (oEmbed, URL slug, rendered page). The audio
link comes from a chain of third-party converters tried in order until one
answers:

    YouTube:    Y2Mate mirrors -> Cobalt -> RapidAPI youtube-mp36 -> yt-dlp
    SoundCloud: Cobalt -> yt-dlp
    Audiomack:  yt-dlp
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple, Any

import httpx
import yt_dlp

import config
from http_client import open_client
from models import FetchedSong
from page_scraper import AudiomackPageScraper
from url_parser import detect_platform, extract_youtube_video_id, parse_audiomack_slug

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = 'Unknown Title'
UNKNOWN_ARTIST = 'Unknown Artist'

# (result, error) returned by every resolver
ResolverResult = Tuple[Optional[Dict[str, Any]], Optional[str]]


class FetchError(Exception):
    """A URL could not be turned into a song."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def format_duration(value: Any) -> str:
    """Normalise seconds (int, float or numeric string) to m:ss; pass 'm:ss' strings through."""
    if value is None or value == '':
        return ''
    if isinstance(value, str):
        value = value.strip()
        if ':' in value:
            return value
        try:
            value = float(value)
        except ValueError:
            return value
    total = int(round(float(value)))
    if total <= 0:
        return ''
    minutes, seconds = divmod(total, 60)
    if minutes >= 60:
        hours, minutes = divmod(minutes, 60)
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def y2mate_headers(host: str) -> Dict[str, str]:
    return {
        'Content-Type': 'application/x-www-form-urlencoded',
        'Accept': 'application/json',
        'User-Agent': config.USER_AGENTS[0],
        'Origin': host,
        'Referer': f"{host}/",
    }


async def y2mate_analyze(client: httpx.AsyncClient, host: str, url: str) -> Tuple[Optional[Dict], Optional[str]]:
    """
    Run the Y2Mate analyze step for a video on one mirror host.

    Returns:
        (analysis, None) when the host returned mp3 formats, else (None, error)
    """
    response = await client.post(
        f"{host}{config.Y2MATE_ANALYZE_PATH}",
        data={'k_query': url, 'k_page': 'home', 'hl': 'en', 'q_auto': '0'},
        headers=y2mate_headers(host),
    )
    if response.status_code != 200:
        return None, f"HTTP {response.status_code}"

    data = response.json()
    if data.get('mess'):
        return None, data['mess']
    if not data.get('links') or not data.get('vid'):
        return None, 'No links/vid in response'
    if not (data['links'].get('mp3') or {}):
        return None, 'No MP3 formats available'
    return data, None


def pick_mp3_format(mp3_links: Dict[str, Dict]) -> Optional[Dict]:
    """Choose the highest bitrate mp3 entry from a Y2Mate links.mp3 mapping."""
    def bitrate(entry: Dict) -> int:
        digits = ''.join(ch for ch in str(entry.get('q', '')) if ch.isdigit())
        return int(digits) if digits else 0

    candidates = [entry for entry in mp3_links.values() if entry.get('k')]
    if not candidates:
        return None
    return max(candidates, key=bitrate)


class SongFetcher:
    """Resolve song metadata and a download link for a single source URL."""

    RESOLVER_CHAINS = {
        'youtube': ['_resolve_y2mate', '_resolve_cobalt', '_resolve_rapidapi', '_resolve_ytdlp'],
        'soundcloud': ['_resolve_cobalt', '_resolve_ytdlp'],
        'audiomack': ['_resolve_ytdlp'],
    }

    def __init__(self, db=None, client: httpx.AsyncClient = None, use_browser: bool = None):
        """
        Args:
            db: CatalogDatabase used for runtime settings (cached Y2Mate host, API keys)
            client: httpx client to reuse; a fresh one is opened per fetch otherwise
            use_browser: render Audiomack pages with Playwright for richer metadata
        """
        self.db = db
        self.client = client
        self.use_browser = config.AUDIOMACK_BROWSER_ENRICH if use_browser is None else use_browser

    def _setting(self, key: str, fallback: str = '') -> str:
        if self.db is not None:
            value = self.db.get_setting(key)
            if value:
                return value
        return fallback

    async def fetch(self, url: str) -> FetchedSong:
        """
        Fetch metadata and a download link for one URL.

        Raises:
            FetchError: the URL is empty/unsupported, or every backend failed
        """
        url = (url or '').strip()
        if not url:
            raise FetchError('URL is required', 400)

        platform = detect_platform(url)
        if platform is None:
            raise FetchError('Only YouTube, Audiomack and SoundCloud URLs are supported', 400)

        if platform == 'youtube' and not extract_youtube_video_id(url):
            raise FetchError('Could not extract video ID from URL', 400)

        logger.info(f"🎵 [FETCH-SONG] Processing {platform} URL: {url}")

        async with open_client(self.client) as client:
            metadata = await self._fetch_metadata(client, platform, url)
            resolved, errors = await self._resolve_audio(client, platform, url)

        if not resolved:
            detail = errors[-1] if errors else 'No download backend available'
            logger.error(f"❌ [FETCH-SONG] All backends failed for {url}: {'; '.join(errors)}")
            raise FetchError(detail, 502)

        song = FetchedSong(
            title=metadata.get('title') or resolved.get('title') or UNKNOWN_TITLE,
            artist=metadata.get('artist') or resolved.get('artist') or UNKNOWN_ARTIST,
            duration=format_duration(resolved.get('duration') or metadata.get('duration')),
            thumbnail=metadata.get('thumbnail') or resolved.get('thumbnail') or '',
            audio_url=resolved['audio_url'],
            platform=platform,
            source_url=url,
        )
        logger.info(f"✅ [FETCH-SONG] {song.artist} - {song.title} via {resolved.get('backend')}")
        return song

    # ============================================================================
    # METADATA
    # ============================================================================

    async def _fetch_metadata(self, client: httpx.AsyncClient, platform: str, url: str) -> Dict[str, str]:
        if platform == 'youtube':
            return await self._youtube_metadata(client, url)
        if platform == 'soundcloud':
            return await self._soundcloud_metadata(client, url)
        return await self._audiomack_metadata(url)

    async def _oembed(self, client: httpx.AsyncClient, endpoint: str, url: str) -> Optional[Dict]:
        try:
            response = await client.get(endpoint, params={'url': url, 'format': 'json'})
            if response.status_code != 200:
                logger.debug(f"oEmbed {endpoint} returned HTTP {response.status_code}")
                return None
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"oEmbed error for {url}: {e}")
            return None

    async def _youtube_metadata(self, client: httpx.AsyncClient, url: str) -> Dict[str, str]:
        video_id = extract_youtube_video_id(url)
        metadata = {'thumbnail': config.YOUTUBE_THUMBNAIL_URL.format(video_id=video_id)}

        data = await self._oembed(client, config.YOUTUBE_OEMBED_URL, url)
        if data:
            metadata['title'] = data.get('title') or ''
            metadata['artist'] = data.get('author_name') or ''
            if data.get('thumbnail_url'):
                metadata['thumbnail'] = data['thumbnail_url']
        return metadata

    async def _soundcloud_metadata(self, client: httpx.AsyncClient, url: str) -> Dict[str, str]:
        data = await self._oembed(client, config.SOUNDCLOUD_OEMBED_URL, url)
        if not data:
            return {}

        title = data.get('title') or ''
        artist = data.get('author_name') or ''
        # SoundCloud oEmbed titles read 'Track by Artist'
        suffix = f" by {artist}"
        if artist and title.endswith(suffix):
            title = title[:-len(suffix)]
        return {'title': title, 'artist': artist, 'thumbnail': data.get('thumbnail_url') or ''}

    async def _audiomack_metadata(self, url: str) -> Dict[str, str]:
        metadata = {}
        parsed = parse_audiomack_slug(url)
        if parsed:
            metadata['title'], metadata['artist'] = parsed

        if self.use_browser:
            try:
                async with AudiomackPageScraper() as scraper:
                    metadata.update(await scraper.scrape_metadata(url))
            except Exception as e:
                logger.warning(f"⚠️ [AUDIOMACK] Page render failed, using URL slug only: {e}")
        return metadata

    # ============================================================================
    # AUDIO RESOLVERS
    # ============================================================================

    async def _resolve_audio(self, client: httpx.AsyncClient, platform: str, url: str) -> Tuple[Optional[Dict], List[str]]:
        errors = []
        for name in self.RESOLVER_CHAINS[platform]:
            resolver = getattr(self, name)
            backend = name.replace('_resolve_', '')
            try:
                result, error = await resolver(client, url)
            except Exception as e:
                result, error = None, str(e)

            if result and result.get('audio_url'):
                result['backend'] = backend
                return result, errors

            logger.warning(f"⚠️ [FETCH-SONG] {backend} failed: {error}")
            errors.append(f"{backend}: {error}")
        return None, errors

    async def _resolve_y2mate(self, client: httpx.AsyncClient, url: str) -> ResolverResult:
        cached_host = self._setting('y2mate_cached_host')
        hosts = [cached_host] if cached_host else []
        hosts += [h for h in config.Y2MATE_HOSTS if h != cached_host]

        last_error = 'No Y2Mate hosts configured'
        for host in hosts:
            try:
                analysis, error = await y2mate_analyze(client, host, url)
                if not analysis:
                    last_error = f"{host}: {error}"
                    continue

                fmt = pick_mp3_format(analysis['links']['mp3'])
                if not fmt:
                    last_error = f"{host}: No convertible MP3 format"
                    continue

                response = await client.post(
                    f"{host}{config.Y2MATE_CONVERT_PATH}",
                    data={'vid': analysis['vid'], 'k': fmt['k']},
                    headers=y2mate_headers(host),
                )
                if response.status_code != 200:
                    last_error = f"{host}: convert HTTP {response.status_code}"
                    continue

                converted = response.json()
                if converted.get('status') != 'ok' or not converted.get('dlink'):
                    last_error = f"{host}: {converted.get('mess') or 'conversion failed'}"
                    continue

                return {
                    'audio_url': converted['dlink'],
                    'title': converted.get('title') or analysis.get('title'),
                    'artist': analysis.get('a'),
                    'duration': analysis.get('t'),
                }, None

            except (httpx.HTTPError, ValueError) as e:
                last_error = f"{host}: {e}"
                logger.debug(f"Y2Mate host {host} failed: {e}")

        return None, last_error

    async def _resolve_cobalt(self, client: httpx.AsyncClient, url: str) -> ResolverResult:
        last_error = 'No Cobalt instances configured'
        for instance in config.COBALT_INSTANCES:
            try:
                response = await client.post(
                    f"{instance}/",
                    json={'url': url, 'downloadMode': 'audio', 'audioFormat': 'mp3'},
                    headers={'Accept': 'application/json', 'Content-Type': 'application/json'},
                )
                data = response.json()
                logger.debug(f"Cobalt response: {response.status_code} {data}")

                if response.status_code == 200 and data.get('status') in ('tunnel', 'redirect', 'stream'):
                    if data.get('url'):
                        return {'audio_url': data['url']}, None

                error = data.get('error')
                if isinstance(error, dict):
                    error = error.get('code')
                last_error = f"{instance}: {error or 'HTTP ' + str(response.status_code)}"

            except (httpx.HTTPError, ValueError) as e:
                last_error = f"{instance}: {e}"
                logger.debug(f"Cobalt instance {instance} failed: {e}")

        return None, last_error

    async def _resolve_rapidapi(self, client: httpx.AsyncClient, url: str) -> ResolverResult:
        api_key = self._setting('rapidapi_key', config.RAPIDAPI_KEY)
        if not api_key:
            return None, 'RapidAPI key not configured'

        video_id = extract_youtube_video_id(url)
        try:
            response = await client.get(
                f"https://{config.RAPIDAPI_HOST}/dl",
                params={'id': video_id},
                headers={'x-rapidapi-key': api_key, 'x-rapidapi-host': config.RAPIDAPI_HOST},
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            return None, str(e)

        if data.get('status') == 'fail' or not data.get('link'):
            return None, data.get('msg') or 'Failed to get download link'

        return {
            'audio_url': data['link'],
            'title': data.get('title'),
            'duration': data.get('duration'),
            'thumbnail': config.YOUTUBE_THUMBNAIL_URL.format(video_id=video_id),
        }, None

    async def _resolve_ytdlp(self, client: httpx.AsyncClient, url: str) -> ResolverResult:
        def extract():
            ydl_opts = {
                'format': 'bestaudio[ext=m4a]/bestaudio/best',
                'quiet': True,
                'no_warnings': True,
                'noplaylist': True,
                'skip_download': True,
                'logger': logger,
                'http_headers': {'User-Agent': config.USER_AGENTS[0]},
            }
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                return ydl.extract_info(url, download=False)

        try:
            info = await asyncio.wait_for(asyncio.to_thread(extract), timeout=config.YTDLP_TIMEOUT)
        except asyncio.TimeoutError:
            return None, f"yt-dlp timeout after {config.YTDLP_TIMEOUT}s"

        if not info:
            return None, 'yt-dlp returned no info'

        audio_url = info.get('url')
        if not audio_url:
            for fmt in info.get('requested_formats') or []:
                if fmt.get('acodec') not in (None, 'none'):
                    audio_url = fmt.get('url')
                    break
        if not audio_url:
            return None, 'yt-dlp found no audio stream'

        return {
            'audio_url': audio_url,
            'title': info.get('track') or info.get('title'),
            'artist': info.get('artist') or info.get('uploader'),
            'duration': info.get('duration'),
            'thumbnail': info.get('thumbnail'),
        }, None
