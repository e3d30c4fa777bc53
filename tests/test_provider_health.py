import json
import unittest

import httpx

import config
from helpers import make_db, mock_client
from provider_health import ProviderHealthChecker

HOSTS = ['https://fast.y2mate.test', 'https://down.y2mate.test', 'https://busy.y2mate.test']

GOOD_ANALYSIS = {'vid': 'dQw4w9WgXcQ', 'links': {'mp3': {'mp3128': {'k': 'abc', 'q': '128kbps'}}}}


class TestProviderHealthChecker(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db = make_db()

    def tearDown(self):
        self.db.close()

    async def _run(self, handler):
        async with mock_client(handler) as client:
            return await ProviderHealthChecker(self.db, client=client, hosts=HOSTS).run()

    async def test_picks_working_host_and_persists(self):
        def handler(request):
            self.assertEqual(request.url.path, config.Y2MATE_ANALYZE_PATH)
            host = f"https://{request.url.host}"
            if host == HOSTS[0]:
                return httpx.Response(200, json=GOOD_ANALYSIS)
            if host == HOSTS[1]:
                return httpx.Response(521)
            return httpx.Response(200, json={'mess': 'Too many requests'})

        result = await self._run(handler)

        self.assertTrue(result['success'])
        self.assertEqual(result['best_host'], HOSTS[0])
        statuses = {r['host']: (r['status'], r['error']) for r in result['results']}
        self.assertEqual(statuses[HOSTS[0]], ('ok', None))
        self.assertEqual(statuses[HOSTS[1]], ('error', 'HTTP 521'))
        self.assertEqual(statuses[HOSTS[2]], ('error', 'Too many requests'))

        self.assertEqual(self.db.get_setting('y2mate_cached_host'), HOSTS[0])
        report = json.loads(self.db.get_setting('y2mate_health_report'))
        self.assertEqual(report['best_host'], HOSTS[0])
        self.assertEqual(len(report['results']), 3)
        self.assertEqual(report['checked_at'], result['checked_at'])

    async def test_no_working_host_clears_cache(self):
        self.db.set_setting('y2mate_cached_host', HOSTS[0])

        def handler(request):
            if request.url.host == 'fast.y2mate.test':
                raise httpx.ConnectTimeout('timed out', request=request)
            return httpx.Response(200, json={'vid': 'x', 'links': {'mp3': {}}})

        result = await self._run(handler)

        self.assertIsNone(result['best_host'])
        self.assertTrue(all(r['status'] == 'error' for r in result['results']))
        errors = {r['host']: r['error'] for r in result['results']}
        self.assertEqual(errors[HOSTS[1]], 'No MP3 formats available')
        self.assertEqual(self.db.get_setting('y2mate_cached_host'), '')

    async def test_invalid_json_is_an_error(self):
        result = await self._run(lambda request: httpx.Response(200, text='<html>blocked</html>'))
        self.assertIsNone(result['best_host'])
        self.assertTrue(all(r['latency_ms'] >= 0 for r in result['results']))


if __name__ == '__main__':
    unittest.main()
