import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import maintenance
from helpers import make_db
from models import ImportItemResult, ImportResult


class TestMaintenanceRunner(unittest.TestCase):
    def setUp(self):
        self.db = make_db()
        self.tmp = Path(tempfile.mkdtemp())
        self.runner = maintenance.MaintenanceRunner(self.db, sitemap_path=self.tmp / 'sitemap.xml')

    def tearDown(self):
        self.db.close()

    def test_run_sitemap_writes_default_path(self):
        written = self.runner.run_sitemap()
        self.assertEqual(written, self.tmp / 'sitemap.xml')
        self.assertIn('<urlset', written.read_text(encoding='utf-8'))

    def test_health_check_result_and_guard(self):
        checker = MagicMock()
        checker.return_value.run = AsyncMock(return_value={'best_host': 'https://a.test', 'results': []})
        with patch.object(maintenance, 'ProviderHealthChecker', checker):
            result = self.runner.run_health_check()
            self.assertEqual(result['best_host'], 'https://a.test')
            self.assertFalse(self.runner.is_running)

            self.runner.is_running = True
            self.assertIsNone(self.runner.run_health_check())
        checker.assert_called_once_with(self.db)

    def test_health_check_failure_returns_none(self):
        checker = MagicMock()
        checker.return_value.run = AsyncMock(side_effect=RuntimeError('boom'))
        with patch.object(maintenance, 'ProviderHealthChecker', checker):
            self.assertIsNone(self.runner.run_health_check())
        self.assertFalse(self.runner.is_running)


class TestMaintenanceImport(unittest.IsolatedAsyncioTestCase):
    async def test_run_import_reads_file(self):
        db = make_db()
        urls_file = Path(tempfile.mkdtemp()) / 'urls.txt'
        urls_file.write_text('https://www.youtube.com/watch?v=abc\n', encoding='utf-8')

        importer = MagicMock()
        importer.return_value.run = AsyncMock(return_value=ImportResult(
            total=1, succeeded=1, failed=0,
            items=[ImportItemResult(url='https://www.youtube.com/watch?v=abc', status='success')],
        ))
        with patch.object(maintenance, 'SongImporter', importer):
            result = await maintenance.MaintenanceRunner(db).run_import(urls_file, generate_descriptions=True)

        importer.return_value.run.assert_awaited_once_with(
            'https://www.youtube.com/watch?v=abc\n', generate_descriptions=True)
        self.assertEqual(result['succeeded'], 1)
        db.close()


class TestMaintenanceCli(unittest.TestCase):
    def _main(self, *args):
        with patch.object(sys, 'argv', ['maintenance.py', *args]):
            return maintenance.main()

    def test_dry_run_modes(self):
        self.assertEqual(self._main('--dry-run'), 0)
        self.assertEqual(self._main('--health-check', '--dry-run'), 0)
        self.assertEqual(self._main('--sitemap', 'out.xml', '--dry-run'), 0)

    def test_rejects_bad_arguments(self):
        self.assertEqual(self._main('--time', '25h'), 1)
        self.assertEqual(self._main('--health-check', '--sitemap', 'out.xml'), 1)
        self.assertEqual(self._main('--import', os.path.join(tempfile.mkdtemp(), 'missing.txt')), 1)

    def test_sitemap_one_shot(self):
        path = Path(tempfile.mkdtemp()) / 'public' / 'sitemap.xml'
        self.assertEqual(self._main('--sitemap', str(path)), 0)
        self.assertTrue(path.exists())


if __name__ == '__main__':
    unittest.main()
