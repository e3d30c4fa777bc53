#!/usr/bin/env python3
"""
Headless browser scraper for client-rendered music pages (Audiomack)

Audiomack serves an empty shell to plain HTTP clients; the OpenGraph tags
that carry the track title, artist and artwork only appear after the page
has been rendered, so Playwright drives a headless Chromium to read them.
"""

import asyncio
import random
import logging
from typing import Dict, Optional
from bs4 import BeautifulSoup
from playwright.async_api import async_playwright, Page, Browser, BrowserContext

import config

logger = logging.getLogger(__name__)


def parse_open_graph(html: str) -> Dict[str, str]:
    """Pull og:title / og:image / og:description out of an HTML document."""
    soup = BeautifulSoup(html, 'html.parser')
    meta = {}
    for tag in soup.find_all('meta'):
        key = tag.get('property') or tag.get('name')
        content = tag.get('content')
        if key and content and key.startswith(('og:', 'twitter:')):
            meta.setdefault(key, content.strip())
    return meta


def split_og_title(og_title: str) -> Optional[Dict[str, str]]:
    """
    Audiomack titles look like 'Song Title by Artist Name' (sometimes with
    a '| Audiomack' suffix).
    """
    if not og_title:
        return None
    title = og_title.split('|')[0].strip()
    if ' by ' in title:
        song, artist = title.rsplit(' by ', 1)
        return {'title': song.strip(), 'artist': artist.strip()}
    return {'title': title}


class AudiomackPageScraper:
    """Render Audiomack pages with Playwright and extract their metadata."""

    def __init__(self, headless: bool = None):
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.headless = config.HEADLESS if headless is None else headless

    async def __aenter__(self) -> 'AudiomackPageScraper':
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def initialize(self) -> None:
        """Initialize the Playwright browser."""
        try:
            self.playwright = await async_playwright().start()

            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--no-sandbox',
                    '--disable-setuid-sandbox',
                    '--disable-dev-shm-usage',
                    '--disable-gpu'
                ]
            )

            self.context = await self.browser.new_context(
                user_agent=random.choice(config.USER_AGENTS),
                viewport={'width': 1366, 'height': 900},
                locale='en-US'
            )
            self.page = await self.context.new_page()

            logger.debug("Browser initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize browser: {str(e)}")
            await self.close()
            raise

    async def close(self) -> None:
        """Close the browser and clean up resources."""
        try:
            if self.page:
                await self.page.close()
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()
        except Exception as e:
            logger.error(f"Error closing browser: {str(e)}")
        finally:
            self.page = self.context = self.browser = self.playwright = None

    async def scrape_metadata(self, url: str) -> Dict[str, str]:
        """
        Load a track page and read its metadata.

        Returns:
            {'title': str, 'artist': str, 'thumbnail': str} with whatever
            fields the page exposed (may be empty).
        """
        if not self.page:
            raise RuntimeError("Browser not initialized")

        logger.info(f"🌐 [AUDIOMACK] Rendering {url}")
        await self.page.goto(url, wait_until='domcontentloaded', timeout=config.BROWSER_TIMEOUT)

        try:
            await self.page.wait_for_selector('meta[property="og:title"]', state='attached', timeout=10000)
        except Exception:
            logger.debug("og:title did not appear, parsing what we have")
        await asyncio.sleep(random.uniform(0.5, 1.5))

        og = parse_open_graph(await self.page.content())

        result = {}
        parts = split_og_title(og.get('og:title', '')) or {}
        if parts.get('title'):
            result['title'] = parts['title']
        if parts.get('artist'):
            result['artist'] = parts['artist']
        thumbnail = og.get('og:image') or og.get('twitter:image')
        if thumbnail:
            result['thumbnail'] = thumbnail

        return result
