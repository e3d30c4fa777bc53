#!/usr/bin/env python3
"""
Song Importer
Bulk-imports songs from pasted YouTube / Audiomack / SoundCloud URLs.

Each URL goes through fetch-song, gets its artist (and optionally album)
resolved or created, an optional AI description, and is inserted into the
catalog. Items run concurrently under a semaphore; one bad URL never stops
the batch.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

import config
from db_manager import CatalogDatabase, DuplicateSlugError, NotFoundError
from description_generator import DescriptionGenerator, DescriptionError
from models import ImportItemResult, ImportResult
from playlist_fetcher import PlaylistFetcher
from slugs import song_slug
from song_fetcher import SongFetcher, FetchError, UNKNOWN_ARTIST
from url_parser import parse_urls, is_playlist_url

logger = logging.getLogger(__name__)

NO_VALID_URLS = 'Please enter valid YouTube, Audiomack or SoundCloud URLs'


class SongImporter:
    def __init__(self, db: CatalogDatabase, song_fetcher: SongFetcher = None,
                 playlist_fetcher: PlaylistFetcher = None,
                 description_generator: DescriptionGenerator = None,
                 concurrency: int = None):
        self.db = db
        self.song_fetcher = song_fetcher or SongFetcher(db=db)
        self.playlist_fetcher = playlist_fetcher or PlaylistFetcher()
        self.description_generator = description_generator or DescriptionGenerator(db=db)
        self.concurrency = concurrency or config.IMPORT_CONCURRENCY

        self.items: List[ImportItemResult] = []
        self.is_running = False
        self.is_queued = False
        self.started_at: Optional[str] = None
        self.finished_at: Optional[str] = None

    # ============================================================================
    # STATUS
    # ============================================================================

    @property
    def is_busy(self) -> bool:
        return self.is_running or self.is_queued

    def reserve(self):
        """Claim the importer for a background run that has been scheduled but not started yet."""
        if self.is_busy:
            raise ValueError('An import is already running')
        self.is_queued = True

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of the current (or last) import run for polling."""
        succeeded = sum(1 for item in self.items if item.status == 'success')
        failed = sum(1 for item in self.items if item.status == 'error')
        return {
            'is_running': self.is_running,
            'is_queued': self.is_queued,
            'progress': succeeded + failed,
            'total': len(self.items),
            'succeeded': succeeded,
            'failed': failed,
            'started_at': self.started_at,
            'finished_at': self.finished_at,
            'items': [item.model_dump() for item in self.items],
        }

    # ============================================================================
    # IMPORT
    # ============================================================================

    async def expand_urls(self, urls: List[str]) -> List[ImportItemResult]:
        """Replace playlist URLs with their video URLs; failed expansions become error items."""
        items: List[ImportItemResult] = []
        seen = set()

        for url in urls:
            if not is_playlist_url(url):
                if url not in seen:
                    seen.add(url)
                    items.append(ImportItemResult(url=url))
                continue

            try:
                playlist = await self.playlist_fetcher.fetch(url)
            except FetchError as e:
                logger.warning(f"⚠️ [IMPORT] Playlist expansion failed for {url}: {e.message}")
                items.append(ImportItemResult(url=url, status='error', error=e.message))
                continue

            logger.info(f"📃 [IMPORT] Playlist '{playlist.playlist_title}' -> {len(playlist.videos)} videos")
            for video in playlist.videos:
                if video.url not in seen:
                    seen.add(video.url)
                    items.append(ImportItemResult(url=video.url))

        return items

    async def run(self, text: str, generate_descriptions: bool = False,
                  category_id: int = None, album_title: str = None,
                  genre: str = None, concurrency: int = None) -> ImportResult:
        """
        Import every supported URL in ``text``.

        Raises:
            ValueError: no supported URL found, or an import is already running
        """
        urls = parse_urls(text)
        if not urls:
            raise ValueError(NO_VALID_URLS)
        if self.is_running:
            raise ValueError('An import is already running')

        self.is_queued = False
        self.is_running = True
        self.started_at = datetime.now(timezone.utc).isoformat()
        self.finished_at = None
        self.items = []

        try:
            self.items = await self.expand_urls(urls)
            limit = max(1, concurrency or self.concurrency)
            semaphore = asyncio.Semaphore(limit)

            logger.info(f"🚀 [IMPORT] Importing {len(self.items)} URLs (concurrency {limit})")

            async def worker(item: ImportItemResult):
                async with semaphore:
                    await self.import_item(
                        item,
                        generate_descriptions=generate_descriptions,
                        category_id=category_id,
                        album_title=album_title,
                        genre=genre,
                    )

            await asyncio.gather(*(worker(item) for item in self.items if item.status == 'pending'))
        finally:
            self.is_running = False
            self.finished_at = datetime.now(timezone.utc).isoformat()

        status = self.get_status()
        logger.info(f"🏁 [IMPORT] Done: {status['succeeded']} succeeded, {status['failed']} failed")
        return ImportResult(
            total=status['total'],
            succeeded=status['succeeded'],
            failed=status['failed'],
            items=list(self.items),
        )

    async def import_item(self, item: ImportItemResult, generate_descriptions: bool = False,
                          category_id: int = None, album_title: str = None,
                          genre: str = None) -> ImportItemResult:
        """Import one URL, recording the outcome on ``item`` instead of raising."""
        item.status = 'loading'
        try:
            item.song = await self._import_url(item.url, generate_descriptions,
                                               category_id, album_title, genre)
            item.status = 'success'
            logger.info(f"✅ [IMPORT] {item.song['title']} ({item.url})")
        except (FetchError, DescriptionError) as e:
            item.status, item.error = 'error', e.message
        except (DuplicateSlugError, NotFoundError, ValueError) as e:
            item.status, item.error = 'error', str(e)
        except Exception as e:
            logger.error(f"❌ [IMPORT] Unexpected error for {item.url}: {e}")
            item.status, item.error = 'error', str(e) or 'Import failed'

        if item.status == 'error':
            logger.warning(f"❌ [IMPORT] {item.url}: {item.error}")
        return item

    async def _import_url(self, url: str, generate_descriptions: bool,
                          category_id: Optional[int], album_title: Optional[str],
                          genre: Optional[str]) -> Dict[str, Any]:
        fetched = await self.song_fetcher.fetch(url)

        artist = None
        if fetched.artist and fetched.artist != UNKNOWN_ARTIST:
            artist, _ = self.db.find_or_create_artist(fetched.artist)

        album = None
        if album_title and album_title.strip():
            album, _ = self.db.find_or_create_album(album_title, artist['id'] if artist else None)

        slug = song_slug(fetched.title, artist['name'] if artist else None)
        if self.db.slug_exists('songs', slug):
            raise ValueError('Song already exists')

        description = f"Downloaded from {fetched.platform}"
        if generate_descriptions:
            try:
                generated = await self.description_generator.generate(
                    fetched.title, artist['name'] if artist else None, 'description'
                )
                description = generated.get('description') or description
            except DescriptionError as e:
                logger.warning(f"⚠️ [IMPORT] Description generation failed for '{fetched.title}': {e.message}")

        try:
            return self.db.create_song({
                'title': fetched.title,
                'slug': slug,
                'artist_id': artist['id'] if artist else None,
                'album_id': album['id'] if album else None,
                'category_id': category_id,
                'cover_url': fetched.thumbnail or None,
                'duration': fetched.duration or None,
                'genre': genre or ('Music' if fetched.platform == 'youtube' else 'Hip Hop'),
                'download_url': fetched.audio_url,
                'source_url': fetched.source_url or url,
                'platform': fetched.platform,
                'description': description,
            })
        except DuplicateSlugError:
            raise ValueError('Song already exists')
