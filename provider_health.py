"""
Y2Mate mirror health check.

Probes every mirror with a known video, records latency, and caches the
fastest working host in site_settings so the song fetcher tries it first.
"""

import json
import time
import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Dict, Any

import httpx

import config
from http_client import open_client
from models import HostHealth
from song_fetcher import y2mate_analyze

logger = logging.getLogger(__name__)


class ProviderHealthChecker:
    def __init__(self, db, client: httpx.AsyncClient = None, hosts: List[str] = None,
                 test_url: str = None):
        self.db = db
        self.client = client
        self.hosts = hosts or list(config.Y2MATE_HOSTS)
        self.test_url = test_url or config.HEALTH_CHECK_VIDEO_URL

    async def test_host(self, client: httpx.AsyncClient, host: str) -> HostHealth:
        start = time.monotonic()
        try:
            analysis, error = await y2mate_analyze(client, host, self.test_url)
        except (httpx.HTTPError, ValueError) as e:
            analysis, error = None, str(e) or type(e).__name__
        latency_ms = int((time.monotonic() - start) * 1000)

        if analysis:
            return HostHealth(host=host, status='ok', latency_ms=latency_ms)
        return HostHealth(host=host, status='error', latency_ms=latency_ms, error=error)

    async def run(self) -> Dict[str, Any]:
        """
        Test all hosts concurrently and persist the result.

        Returns:
            {'success': True, 'best_host': str|None, 'results': [...], 'checked_at': iso}
        """
        logger.info(f"🩺 [HEALTH] Checking {len(self.hosts)} Y2Mate hosts")

        async with open_client(self.client, timeout=15) as client:
            results = await asyncio.gather(*(self.test_host(client, host) for host in self.hosts))

        working = sorted((r for r in results if r.status == 'ok'), key=lambda r: r.latency_ms)
        best_host = working[0].host if working else None

        for r in results:
            if r.status == 'ok':
                logger.info(f"   ✅ {r.host} ({r.latency_ms}ms)")
            else:
                logger.warning(f"   ❌ {r.host} ({r.latency_ms}ms): {r.error}")

        checked_at = datetime.now(timezone.utc).isoformat()
        result_dicts = [r.model_dump() for r in results]

        self.db.set_setting('y2mate_cached_host', best_host or '')
        self.db.set_setting('y2mate_health_report', json.dumps({
            'checked_at': checked_at,
            'results': result_dicts,
            'best_host': best_host,
        }))

        if best_host:
            logger.info(f"🏆 [HEALTH] Best host: {best_host}")
        else:
            logger.warning("⚠️ [HEALTH] No working Y2Mate host found")

        return {
            'success': True,
            'best_host': best_host,
            'results': result_dicts,
            'checked_at': checked_at,
        }
