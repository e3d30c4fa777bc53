#!/usr/bin/env python3
"""
Database Manager for the OlasPlay catalog
Handles SQLite schema creation, catalog CRUD and site settings
"""

import sqlite3
import logging
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple
from fuzzywuzzy import fuzz

import config
from slugs import slugify, unique_slug

logger = logging.getLogger(__name__)


class DuplicateSlugError(Exception):
    """Raised when a catalog row would reuse an existing slug."""

    def __init__(self, entity: str, slug: str):
        self.entity = entity
        self.slug = slug
        super().__init__(f"A {entity} with slug '{slug}' already exists")


class NotFoundError(Exception):
    """Raised when a referenced catalog row doesn't exist."""


# Writable columns per table (id and timestamps are managed here)
ARTIST_COLUMNS = ['name', 'slug', 'image_url', 'bio', 'genre', 'followers']
ALBUM_COLUMNS = ['title', 'slug', 'artist_id', 'cover_url', 'genre', 'release_date']
CATEGORY_COLUMNS = ['name', 'slug', 'icon_url']
SONG_COLUMNS = [
    'title', 'slug', 'artist_id', 'album_id', 'category_id', 'cover_url',
    'duration', 'genre', 'release_date', 'download_url', 'source_url', 'platform',
    'lyrics', 'description', 'summary', 'is_trending'
]

TABLE_COLUMNS = {
    'artists': ARTIST_COLUMNS,
    'albums': ALBUM_COLUMNS,
    'categories': CATEGORY_COLUMNS,
    'songs': SONG_COLUMNS,
}

ENTITY_NAMES = {
    'artists': 'artist',
    'albums': 'album',
    'categories': 'category',
    'songs': 'song',
}

SONG_ORDERS = {
    'latest': 's.created_at DESC, s.id DESC',
    'popular': 's.plays DESC, s.id DESC',
    'downloads': 's.downloads DESC, s.id DESC',
    'title': 's.title COLLATE NOCASE ASC',
}

SONG_SELECT = '''
    SELECT s.*,
           a.name AS artist_name, a.slug AS artist_slug,
           al.title AS album_title, al.slug AS album_slug,
           c.name AS category_name, c.slug AS category_slug
    FROM songs s
    LEFT JOIN artists a ON s.artist_id = a.id
    LEFT JOIN albums al ON s.album_id = al.id
    LEFT JOIN categories c ON s.category_id = c.id
'''


def _song_row(row: sqlite3.Row) -> Dict[str, Any]:
    song = dict(row)
    song['is_trending'] = bool(song.get('is_trending'))
    return song


class CatalogDatabase:
    def __init__(self, db_path: str = None):
        self.db_path = db_path or config.DB_PATH
        self.connection = None

    def connect(self):
        """Connect to SQLite database"""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self.connection.row_factory = sqlite3.Row  # Enable dict-like access
        self.connection.execute('PRAGMA foreign_keys = ON')
        return self.connection

    def close(self):
        """Close database connection"""
        if self.connection:
            self.connection.close()
            self.connection = None

    def create_tables(self):
        """Create database tables"""
        cursor = self.connection.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS artists (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                slug TEXT UNIQUE NOT NULL,
                image_url TEXT,
                bio TEXT,
                genre TEXT,
                followers INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS albums (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                slug TEXT UNIQUE NOT NULL,
                artist_id INTEGER,
                cover_url TEXT,
                genre TEXT,
                release_date DATE,
                track_count INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (artist_id) REFERENCES artists(id) ON DELETE SET NULL
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                slug TEXT UNIQUE NOT NULL,
                icon_url TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS songs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                slug TEXT UNIQUE NOT NULL,
                artist_id INTEGER,
                album_id INTEGER,
                category_id INTEGER,
                cover_url TEXT,
                duration TEXT,
                genre TEXT,
                release_date DATE,
                download_url TEXT,
                source_url TEXT,
                platform TEXT,
                lyrics TEXT,
                description TEXT,
                summary TEXT,
                is_trending BOOLEAN DEFAULT 0,
                plays INTEGER DEFAULT 0,
                downloads INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (artist_id) REFERENCES artists(id) ON DELETE SET NULL,
                FOREIGN KEY (album_id) REFERENCES albums(id) ON DELETE SET NULL,
                FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL
            )
        ''')

        # Settings table for site configuration (plain string values)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS site_settings (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        # Create indexes
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_songs_artist_id ON songs(artist_id)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_songs_album_id ON songs(album_id)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_songs_category_id ON songs(category_id)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_songs_created_at ON songs(created_at)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_songs_plays ON songs(plays)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_albums_artist_id ON albums(artist_id)')

        self.connection.commit()
        logger.info("Database tables created successfully")

        # Run migrations for existing databases
        self._run_migrations()
        self.seed_default_settings()

    def _run_migrations(self):
        """Apply database migrations for columns added after the first release"""
        cursor = self.connection.cursor()

        cursor.execute("PRAGMA table_info(songs)")
        columns = [row[1] for row in cursor.fetchall()]

        new_columns = {
            'source_url': 'TEXT',
            'platform': 'TEXT',
            'summary': 'TEXT',
        }

        migrations_needed = [
            (name, column_type) for name, column_type in new_columns.items()
            if name not in columns
        ]

        if migrations_needed:
            logger.info(f"Running migrations: adding {len(migrations_needed)} new columns to songs table")
            for column_name, column_type in migrations_needed:
                try:
                    cursor.execute(f'ALTER TABLE songs ADD COLUMN {column_name} {column_type}')
                    logger.info(f"  ✓ Added column: {column_name}")
                except sqlite3.OperationalError as e:
                    logger.warning(f"  ⚠ Could not add {column_name}: {e}")

            self.connection.commit()
            logger.info("✓ Database migrations completed successfully")
        else:
            logger.debug("✓ Database schema is up to date")

    # ============================================================================
    # GENERIC ROW HELPERS
    # ============================================================================

    def _insert(self, table: str, data: Dict[str, Any]) -> int:
        columns = [c for c in TABLE_COLUMNS[table] if c in data]
        placeholders = ', '.join('?' for _ in columns)
        cursor = self.connection.cursor()
        try:
            cursor.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                [data[c] for c in columns]
            )
        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            if 'slug' in str(e):
                raise DuplicateSlugError(ENTITY_NAMES[table], data.get('slug', ''))
            raise
        self.connection.commit()
        return cursor.lastrowid

    def _update(self, table: str, row_id: int, data: Dict[str, Any]) -> bool:
        columns = [c for c in TABLE_COLUMNS[table] if c in data]
        if not columns:
            return self._exists(table, row_id)

        assignments = ', '.join(f"{c} = ?" for c in columns)
        cursor = self.connection.cursor()
        try:
            cursor.execute(
                f"UPDATE {table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                [data[c] for c in columns] + [row_id]
            )
        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            if 'slug' in str(e):
                raise DuplicateSlugError(ENTITY_NAMES[table], data.get('slug', ''))
            raise
        self.connection.commit()
        return cursor.rowcount > 0

    def _delete(self, table: str, row_id: int) -> bool:
        cursor = self.connection.cursor()
        cursor.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))
        self.connection.commit()
        return cursor.rowcount > 0

    def _exists(self, table: str, row_id: int) -> bool:
        cursor = self.connection.cursor()
        cursor.execute(f"SELECT 1 FROM {table} WHERE id = ?", (row_id,))
        return cursor.fetchone() is not None

    def slug_exists(self, table: str, slug: str) -> bool:
        cursor = self.connection.cursor()
        cursor.execute(f"SELECT 1 FROM {table} WHERE slug = ?", (slug,))
        return cursor.fetchone() is not None

    def _check_reference(self, table: str, row_id: Optional[int]):
        if row_id is not None and not self._exists(table, row_id):
            raise NotFoundError(f"{ENTITY_NAMES[table].capitalize()} {row_id} not found")

    # ============================================================================
    # ARTISTS
    # ============================================================================

    def create_artist(self, data: Dict[str, Any]) -> Dict[str, Any]:
        artist_id = self._insert('artists', data)
        return self.get_artist(artist_id)

    def update_artist(self, artist_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not self._update('artists', artist_id, data):
            return None
        return self.get_artist(artist_id)

    def delete_artist(self, artist_id: int) -> bool:
        return self._delete('artists', artist_id)

    def get_artist(self, artist_id: int) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute('''
            SELECT a.*, (SELECT COUNT(*) FROM songs s WHERE s.artist_id = a.id) AS song_count
            FROM artists a WHERE a.id = ?
        ''', (artist_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def get_artist_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute('''
            SELECT a.*, (SELECT COUNT(*) FROM songs s WHERE s.artist_id = a.id) AS song_count
            FROM artists a WHERE a.slug = ?
        ''', (slug,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def list_artists(self, search: str = None, limit: int = 100, offset: int = 0,
                     order: str = 'name') -> Dict[str, Any]:
        """List artists with song counts, optionally filtered by name/genre"""
        cursor = self.connection.cursor()

        where = ''
        params: List[Any] = []
        if search:
            where = 'WHERE a.name LIKE ? OR a.genre LIKE ?'
            params.extend([f"%{search}%", f"%{search}%"])

        order_by = 'a.created_at DESC, a.id DESC' if order == 'latest' else 'a.name COLLATE NOCASE ASC'

        cursor.execute(f'SELECT COUNT(*) FROM artists a {where}', params)
        total = cursor.fetchone()[0]

        cursor.execute(f'''
            SELECT a.*, (SELECT COUNT(*) FROM songs s WHERE s.artist_id = a.id) AS song_count
            FROM artists a
            {where}
            ORDER BY {order_by}
            LIMIT ? OFFSET ?
        ''', params + [limit, offset])

        return {"items": [dict(row) for row in cursor.fetchall()], "total": total}

    def find_or_create_artist(self, name: str) -> Tuple[Dict[str, Any], bool]:
        """
        Resolve an artist by name for imports.

        Tries an exact slug match first, then a fuzzy name match against the
        existing artists, and finally inserts a new row.

        Returns:
            (artist, created)
        """
        name = name.strip()
        slug = slugify(name)

        # Names with no [a-z0-9] characters slugify to '' and are matched by name below
        existing = self.get_artist_by_slug(slug) if slug else None
        if existing:
            return existing, False

        cursor = self.connection.cursor()
        cursor.execute('SELECT id, name FROM artists')

        best_id = None
        best_score = 0
        for row in cursor.fetchall():
            if row['name'].lower() == name.lower():
                return self.get_artist(row['id']), False
            score = fuzz.token_sort_ratio(name.lower(), row['name'].lower())
            if score > best_score:
                best_id, best_score = row['id'], score

        if best_id is not None and best_score >= config.ARTIST_MATCH_THRESHOLD:
            logger.debug(f"Matched artist '{name}' to id {best_id} (score: {best_score})")
            return self.get_artist(best_id), False

        slug = unique_slug(slug or 'artist', lambda s: self.slug_exists('artists', s))
        logger.info(f"➕ Creating artist: {name}")
        return self.create_artist({'name': name, 'slug': slug}), True

    # ============================================================================
    # ALBUMS
    # ============================================================================

    def create_album(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._check_reference('artists', data.get('artist_id'))
        album_id = self._insert('albums', data)
        return self.get_album(album_id)

    def update_album(self, album_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._check_reference('artists', data.get('artist_id'))
        if not self._update('albums', album_id, data):
            return None
        return self.get_album(album_id)

    def delete_album(self, album_id: int) -> bool:
        return self._delete('albums', album_id)

    def get_album(self, album_id: int) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute('''
            SELECT al.*, a.name AS artist_name, a.slug AS artist_slug
            FROM albums al LEFT JOIN artists a ON al.artist_id = a.id
            WHERE al.id = ?
        ''', (album_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def get_album_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute('''
            SELECT al.*, a.name AS artist_name, a.slug AS artist_slug
            FROM albums al LEFT JOIN artists a ON al.artist_id = a.id
            WHERE al.slug = ?
        ''', (slug,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def list_albums(self, artist_id: int = None, search: str = None,
                    limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        cursor = self.connection.cursor()

        conditions = []
        params: List[Any] = []
        if artist_id is not None:
            conditions.append('al.artist_id = ?')
            params.append(artist_id)
        if search:
            conditions.append('(al.title LIKE ? OR a.name LIKE ?)')
            params.extend([f"%{search}%", f"%{search}%"])

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        cursor.execute(f'''
            SELECT COUNT(*) FROM albums al LEFT JOIN artists a ON al.artist_id = a.id
            WHERE {where_clause}
        ''', params)
        total = cursor.fetchone()[0]

        cursor.execute(f'''
            SELECT al.*, a.name AS artist_name, a.slug AS artist_slug
            FROM albums al LEFT JOIN artists a ON al.artist_id = a.id
            WHERE {where_clause}
            ORDER BY al.created_at DESC, al.id DESC
            LIMIT ? OFFSET ?
        ''', params + [limit, offset])

        return {"items": [dict(row) for row in cursor.fetchall()], "total": total}

    def find_or_create_album(self, title: str, artist_id: Optional[int]) -> Tuple[Dict[str, Any], bool]:
        """Resolve an album by title within one artist's discography, creating it if needed."""
        title = title.strip()
        cursor = self.connection.cursor()
        if artist_id is None:
            cursor.execute('SELECT id, title FROM albums WHERE artist_id IS NULL')
        else:
            cursor.execute('SELECT id, title FROM albums WHERE artist_id = ?', (artist_id,))

        for row in cursor.fetchall():
            if row['title'].lower() == title.lower() or \
                    fuzz.token_sort_ratio(title.lower(), row['title'].lower()) >= config.ARTIST_MATCH_THRESHOLD:
                return self.get_album(row['id']), False

        artist = self.get_artist(artist_id) if artist_id is not None else None
        base = slugify(f"{artist['name']} {title}" if artist else title)
        slug = unique_slug(base or 'album', lambda s: self.slug_exists('albums', s))

        logger.info(f"➕ Creating album: {title}")
        return self.create_album({'title': title, 'slug': slug, 'artist_id': artist_id}), True

    def _refresh_album_track_count(self, album_id: Optional[int]):
        if album_id is None:
            return
        cursor = self.connection.cursor()
        cursor.execute('''
            UPDATE albums
            SET track_count = (SELECT COUNT(*) FROM songs WHERE album_id = ?)
            WHERE id = ?
        ''', (album_id, album_id))
        self.connection.commit()

    # ============================================================================
    # CATEGORIES
    # ============================================================================

    def create_category(self, data: Dict[str, Any]) -> Dict[str, Any]:
        category_id = self._insert('categories', data)
        return self.get_category(category_id)

    def update_category(self, category_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not self._update('categories', category_id, data):
            return None
        return self.get_category(category_id)

    def delete_category(self, category_id: int) -> bool:
        return self._delete('categories', category_id)

    def get_category(self, category_id: int) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute('''
            SELECT c.*, (SELECT COUNT(*) FROM songs s WHERE s.category_id = c.id) AS song_count
            FROM categories c WHERE c.id = ?
        ''', (category_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def get_category_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute('''
            SELECT c.*, (SELECT COUNT(*) FROM songs s WHERE s.category_id = c.id) AS song_count
            FROM categories c WHERE c.slug = ?
        ''', (slug,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def list_categories(self) -> List[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute('''
            SELECT c.*, (SELECT COUNT(*) FROM songs s WHERE s.category_id = c.id) AS song_count
            FROM categories c
            ORDER BY c.name COLLATE NOCASE ASC
        ''')
        return [dict(row) for row in cursor.fetchall()]

    # ============================================================================
    # SONGS
    # ============================================================================

    def create_song(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._check_reference('artists', data.get('artist_id'))
        self._check_reference('albums', data.get('album_id'))
        self._check_reference('categories', data.get('category_id'))

        song_id = self._insert('songs', data)
        self._refresh_album_track_count(data.get('album_id'))
        return self.get_song(song_id)

    def update_song(self, song_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._check_reference('artists', data.get('artist_id'))
        self._check_reference('albums', data.get('album_id'))
        self._check_reference('categories', data.get('category_id'))

        previous = self.get_song(song_id)
        if previous is None:
            return None

        self._update('songs', song_id, data)
        if 'album_id' in data and data['album_id'] != previous['album_id']:
            self._refresh_album_track_count(previous['album_id'])
            self._refresh_album_track_count(data['album_id'])
        return self.get_song(song_id)

    def delete_song(self, song_id: int) -> bool:
        previous = self.get_song(song_id)
        if previous is None:
            return False
        deleted = self._delete('songs', song_id)
        self._refresh_album_track_count(previous['album_id'])
        return deleted

    def get_song(self, song_id: int) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute(SONG_SELECT + ' WHERE s.id = ?', (song_id,))
        row = cursor.fetchone()
        return _song_row(row) if row else None

    def get_song_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        cursor = self.connection.cursor()
        cursor.execute(SONG_SELECT + ' WHERE s.slug = ?', (slug,))
        row = cursor.fetchone()
        return _song_row(row) if row else None

    def list_songs(
        self,
        search: str = None,
        genre: str = None,
        artist_id: int = None,
        album_id: int = None,
        category_id: int = None,
        trending: bool = None,
        order: str = 'latest',
        limit: int = 50,
        offset: int = 0,
        exclude_id: int = None
    ) -> Dict[str, Any]:
        """List songs with joined artist/album/category names, filters and pagination"""
        if order not in SONG_ORDERS:
            raise ValueError(f"Invalid order '{order}'. Must be one of: {', '.join(SONG_ORDERS)}")

        conditions = []
        params: List[Any] = []

        if search:
            conditions.append("(s.title LIKE ? OR a.name LIKE ? OR s.genre LIKE ?)")
            params.extend([f"%{search}%"] * 3)
        if genre:
            conditions.append("s.genre LIKE ?")
            params.append(f"%{genre}%")
        if artist_id is not None:
            conditions.append("s.artist_id = ?")
            params.append(artist_id)
        if album_id is not None:
            conditions.append("s.album_id = ?")
            params.append(album_id)
        if category_id is not None:
            conditions.append("s.category_id = ?")
            params.append(category_id)
        if trending is not None:
            conditions.append("s.is_trending = ?")
            params.append(1 if trending else 0)
        if exclude_id is not None:
            conditions.append("s.id != ?")
            params.append(exclude_id)

        where_clause = " AND ".join(conditions) if conditions else "1=1"
        cursor = self.connection.cursor()

        cursor.execute(f'''
            SELECT COUNT(*) FROM songs s LEFT JOIN artists a ON s.artist_id = a.id
            WHERE {where_clause}
        ''', params)
        total = cursor.fetchone()[0]

        cursor.execute(f'''
            {SONG_SELECT}
            WHERE {where_clause}
            ORDER BY {SONG_ORDERS[order]}
            LIMIT ? OFFSET ?
        ''', params + [limit, offset])

        return {"items": [_song_row(row) for row in cursor.fetchall()], "total": total}

    def get_trending_songs(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Flagged trending songs first, then the most played"""
        cursor = self.connection.cursor()
        cursor.execute(f'''
            {SONG_SELECT}
            ORDER BY s.is_trending DESC, s.plays DESC, s.id DESC
            LIMIT ?
        ''', (limit,))
        return [_song_row(row) for row in cursor.fetchall()]

    def get_latest_songs(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self.list_songs(order='latest', limit=limit)['items']

    def increment_song_counter(self, song_id: int, counter: str) -> bool:
        if counter not in ('plays', 'downloads'):
            raise ValueError(f"Unknown counter: {counter}")
        cursor = self.connection.cursor()
        cursor.execute(f'UPDATE songs SET {counter} = {counter} + 1 WHERE id = ?', (song_id,))
        self.connection.commit()
        return cursor.rowcount > 0

    def search(self, query: str, scope: str = 'all', limit: int = 20) -> Dict[str, Any]:
        """Case-insensitive substring search across songs and artists"""
        if scope not in ('all', 'songs', 'artists'):
            raise ValueError("Invalid scope. Must be 'all', 'songs' or 'artists'")

        songs: List[Dict[str, Any]] = []
        artists: List[Dict[str, Any]] = []
        query = (query or '').strip()
        if not query:
            return {"songs": songs, "artists": artists}

        if scope in ('all', 'songs'):
            songs = self.list_songs(search=query, order='popular', limit=limit)['items']
        if scope in ('all', 'artists'):
            artists = self.list_artists(search=query, limit=limit)['items']

        return {"songs": songs, "artists": artists}

    # ============================================================================
    # DASHBOARD & SITEMAP
    # ============================================================================

    def get_dashboard_stats(self) -> Dict[str, Any]:
        """Get summary of catalog contents for the admin dashboard"""
        cursor = self.connection.cursor()
        stats = {}
        for table in ('songs', 'artists', 'albums', 'categories'):
            cursor.execute(f"SELECT COUNT(*) AS total FROM {table}")
            stats[table] = cursor.fetchone()['total']

        cursor.execute("SELECT COALESCE(SUM(plays), 0) AS plays, COALESCE(SUM(downloads), 0) AS downloads FROM songs")
        row = cursor.fetchone()
        stats['total_plays'] = row['plays']
        stats['total_downloads'] = row['downloads']
        stats['recent_songs'] = self.get_latest_songs(limit=5)

        # Database size (approximate)
        cursor.execute("SELECT page_count * page_size as size FROM pragma_page_count(), pragma_page_size()")
        stats['database_size_bytes'] = cursor.fetchone()['size']
        return stats

    def get_sitemap_entries(self) -> Dict[str, List[Dict[str, Any]]]:
        """Slugs and last-modified timestamps for every public detail page"""
        cursor = self.connection.cursor()
        entries = {}
        for table in ('songs', 'artists', 'categories'):
            cursor.execute(f"SELECT slug, updated_at FROM {table} ORDER BY updated_at DESC, id DESC")
            entries[table] = [dict(row) for row in cursor.fetchall()]
        return entries

    # ============================================================================
    # SITE SETTINGS
    # ============================================================================

    def seed_default_settings(self):
        cursor = self.connection.cursor()
        cursor.executemany(
            'INSERT OR IGNORE INTO site_settings (key, value) VALUES (?, ?)',
            list(config.DEFAULT_SETTINGS.items())
        )
        self.connection.commit()

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value by key"""
        cursor = self.connection.cursor()
        cursor.execute('SELECT value FROM site_settings WHERE key = ?', (key,))
        result = cursor.fetchone()
        if result and result['value'] is not None:
            return result['value']
        return default

    def set_setting(self, key: str, value: str) -> bool:
        """Set a setting value"""
        try:
            cursor = self.connection.cursor()
            cursor.execute('''
                INSERT INTO site_settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
            ''', (key, value))
            self.connection.commit()
            return True
        except sqlite3.Error as e:
            logger.error(f"Error setting {key}: {e}")
            return False

    def get_settings(self, keys: List[str] = None) -> Dict[str, str]:
        cursor = self.connection.cursor()
        if keys:
            placeholders = ','.join('?' for _ in keys)
            cursor.execute(f'SELECT key, value FROM site_settings WHERE key IN ({placeholders})', keys)
        else:
            cursor.execute('SELECT key, value FROM site_settings ORDER BY key')
        return {row['key']: row['value'] or '' for row in cursor.fetchall()}
