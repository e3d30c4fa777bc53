"""
XML sitemap for the public catalog pages.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

import config

logger = logging.getLogger(__name__)

STATIC_PAGES = [
    ('/', '1.0', 'daily'),
    ('/songs', '0.9', 'daily'),
    ('/artists', '0.9', 'weekly'),
    ('/categories', '0.8', 'weekly'),
    ('/search', '0.7', 'monthly'),
]

# (entries key, URL prefix, priority)
DYNAMIC_SECTIONS = [
    ('songs', '/song/', '0.8'),
    ('artists', '/artist/', '0.7'),
    ('categories', '/category/', '0.6'),
]


def format_lastmod(value) -> str:
    """SQLite timestamps ('2024-05-01 10:00:00' or ISO) -> 'YYYY-MM-DD'."""
    if not value:
        return ''
    text = str(value).replace('T', ' ')
    try:
        return datetime.fromisoformat(text.split('.')[0].rstrip('Z')).strftime('%Y-%m-%d')
    except ValueError:
        return text[:10]


def _url_entry(loc: str, changefreq: str, priority: str, lastmod: str = None) -> str:
    lines = ['  <url>', f'    <loc>{escape(loc)}</loc>']
    if lastmod is not None:
        lines.append(f'    <lastmod>{lastmod}</lastmod>')
    lines.append(f'    <changefreq>{changefreq}</changefreq>')
    lines.append(f'    <priority>{priority}</priority>')
    lines.append('  </url>')
    return '\n'.join(lines)


def get_base_url(db) -> str:
    return (db.get_setting('site_url') or config.SITE_URL).rstrip('/')


def generate_sitemap(db, base_url: Optional[str] = None) -> str:
    base_url = (base_url or get_base_url(db)).rstrip('/')
    entries = db.get_sitemap_entries()

    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"',
        '        xmlns:music="http://www.google.com/schemas/sitemap-music/1.0">',
    ]
    for path, priority, changefreq in STATIC_PAGES:
        parts.append(_url_entry(f'{base_url}{path}', changefreq, priority))

    count = len(STATIC_PAGES)
    for key, prefix, priority in DYNAMIC_SECTIONS:
        for row in entries.get(key, []):
            parts.append(_url_entry(
                f"{base_url}{prefix}{row['slug']}",
                'weekly',
                priority,
                lastmod=format_lastmod(row.get('updated_at')),
            ))
            count += 1

    parts.append('</urlset>')
    logger.info(f"🗺️ [SITEMAP] Generated sitemap with {count} URLs")
    return '\n'.join(parts) + '\n'


def write_sitemap(db, path: Path = None) -> Path:
    path = Path(path or config.SITEMAP_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_sitemap(db), encoding='utf-8')
    logger.info(f"💾 [SITEMAP] Written to {path}")
    return path
