#!/usr/bin/env python3
"""
OlasPlay Maintenance Runner
Keeps the converter host cache fresh and the sitemap file current,
with one-shot modes for manual runs and bulk imports from a file
"""

import asyncio
import logging
import argparse
from datetime import datetime
from pathlib import Path
import time
import schedule
from typing import Optional

import config
from db_manager import CatalogDatabase
from provider_health import ProviderHealthChecker
from sitemap import write_sitemap
from song_importer import SongImporter

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class MaintenanceRunner:
    """Periodic provider health checks and daily sitemap regeneration"""

    def __init__(self, db: CatalogDatabase, health_interval_hours: int = None,
                 sitemap_time: str = None, sitemap_path: Path = None):
        self.db = db
        self.health_interval_hours = health_interval_hours or config.HEALTH_CHECK_INTERVAL_HOURS
        self.sitemap_time = sitemap_time or config.SITEMAP_DAILY_TIME
        self.sitemap_path = Path(sitemap_path or config.SITEMAP_PATH)
        self.is_running = False

    def run_health_check(self) -> Optional[dict]:
        """Probe the Y2Mate mirrors and cache the best one"""
        if self.is_running:
            logger.warning("⚠️ A maintenance task is already running, skipping this execution")
            return None

        self.is_running = True
        try:
            result = asyncio.run(ProviderHealthChecker(self.db).run())
            logger.info(f"✅ Health check completed, best host: {result['best_host'] or 'none'}")
            return result
        except Exception as e:
            logger.error(f"💥 Unexpected error in health check: {e}")
            return None
        finally:
            self.is_running = False

    def run_sitemap(self, path: Path = None) -> Optional[Path]:
        try:
            return write_sitemap(self.db, path or self.sitemap_path)
        except Exception as e:
            logger.error(f"💥 Sitemap generation failed: {e}")
            return None

    async def run_import(self, urls_file: Path, generate_descriptions: bool = False) -> dict:
        """Import every URL listed in a text file (one per line or comma separated)"""
        text = Path(urls_file).read_text(encoding='utf-8')
        result = await SongImporter(self.db).run(text, generate_descriptions=generate_descriptions)
        return result.model_dump()

    def start_scheduler(self):
        """Start the continuous scheduler"""
        logger.info(f"🕐 Starting maintenance scheduler - health check every {self.health_interval_hours}h, "
                    f"sitemap daily at {self.sitemap_time}")
        logger.info(f"📍 Current time: {datetime.now().strftime('%H:%M:%S')}")

        schedule.every(self.health_interval_hours).hours.do(self.run_health_check)
        schedule.every().day.at(self.sitemap_time).do(self.run_sitemap)

        # Warm the host cache and sitemap on startup
        self.run_health_check()
        self.run_sitemap()

        logger.info("⏰ Scheduler started. Press Ctrl+C to stop.")

        try:
            while True:
                schedule.run_pending()
                time.sleep(60)  # Check every minute
        except KeyboardInterrupt:
            logger.info("\n⏹️ Scheduler stopped by user")
        finally:
            schedule.clear()


def main() -> int:
    """Main maintenance function"""
    parser = argparse.ArgumentParser(
        description='OlasPlay maintenance - provider health checks, sitemap and bulk imports'
    )

    parser.add_argument('--health-check', action='store_true',
                        help='Run the provider health check once and exit')
    parser.add_argument('--sitemap', type=Path, default=None, metavar='PATH',
                        help='Write the sitemap to PATH once and exit')
    parser.add_argument('--import', dest='import_file', type=Path, default=None, metavar='FILE',
                        help='Import the URLs listed in FILE and exit')
    parser.add_argument('--descriptions', action='store_true',
                        help='Generate AI descriptions for imported songs')
    parser.add_argument('--interval', type=int, default=config.HEALTH_CHECK_INTERVAL_HOURS,
                        help=f'Health check interval in hours (default: {config.HEALTH_CHECK_INTERVAL_HOURS})')
    parser.add_argument('--time', type=str, default=config.SITEMAP_DAILY_TIME,
                        help=f'Daily sitemap time in HH:MM format (default: {config.SITEMAP_DAILY_TIME})')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show what would be done without executing')

    args = parser.parse_args()

    try:
        datetime.strptime(args.time, '%H:%M')
    except ValueError:
        print("❌ Invalid time format. Use HH:MM (e.g., 03:00, 14:30)")
        return 1

    one_shot = [args.health_check, args.sitemap is not None, args.import_file is not None]
    if sum(one_shot) > 1:
        print("❌ Please specify only one execution mode")
        return 1

    if args.import_file is not None and not args.import_file.exists():
        print(f"❌ File not found: {args.import_file}")
        return 1

    if args.dry_run:
        if args.health_check:
            print(f"🔍 DRY RUN: Would check {len(config.Y2MATE_HOSTS)} Y2Mate hosts")
        elif args.sitemap is not None:
            print(f"🔍 DRY RUN: Would write sitemap to {args.sitemap}")
        elif args.import_file is not None:
            print(f"🔍 DRY RUN: Would import URLs from {args.import_file}")
        else:
            print(f"🔍 DRY RUN: Would start scheduler (health every {args.interval}h, sitemap at {args.time})")
        return 0

    db = CatalogDatabase()
    db.connect()
    db.create_tables()

    runner = MaintenanceRunner(db, health_interval_hours=args.interval, sitemap_time=args.time)

    try:
        if args.health_check:
            return 0 if runner.run_health_check() else 1
        if args.sitemap is not None:
            return 0 if runner.run_sitemap(args.sitemap) else 1
        if args.import_file is not None:
            result = asyncio.run(runner.run_import(args.import_file, args.descriptions))
            print(f"\n📊 IMPORT COMPLETE: {result['succeeded']}/{result['total']} songs imported")
            for item in result['items']:
                if item['status'] == 'error':
                    print(f"❌ {item['url']}: {item['error']}")
            return 0 if result['failed'] == 0 else 1

        runner.start_scheduler()
        return 0
    except ValueError as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⏹️  Operation cancelled by user")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    exit(main())
