import os
import random
from pathlib import Path

# Site
SITE_NAME = "OlasPlay"
SITE_URL = os.getenv("OLASPLAY_SITE_URL", "https://olasplay.com").rstrip("/")

# Storage
DB_PATH = os.getenv("OLASPLAY_DB_PATH", "data/olasplay.db")
SECRET_KEY_PATH = os.getenv(
    "OLASPLAY_SECRET_KEY_PATH",
    str(Path(DB_PATH).parent / ".secret_key")
)

# Common user agents to rotate
USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.1 Safari/605.1.15',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/120.0',
]

# Base headers for scraped HTML pages
HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'User-Agent': random.choice(USER_AGENTS),
}

# Request settings
REQUEST_TIMEOUT = 20  # seconds
YTDLP_TIMEOUT = 60  # seconds
BROWSER_TIMEOUT = 30000  # milliseconds

# Debug mode (set OLASPLAY_DEBUG=1 for more verbose output)
DEBUG = os.getenv("OLASPLAY_DEBUG", "").lower() in ("1", "true", "yes")

# YouTube
YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"
YOUTUBE_PLAYLIST_URL = "https://www.youtube.com/playlist"
YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"
YOUTUBE_PLAYLIST_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"

# SoundCloud
SOUNDCLOUD_OEMBED_URL = "https://soundcloud.com/oembed"

# Audiomack pages are rendered client-side, so metadata needs a browser
AUDIOMACK_BROWSER_ENRICH = os.getenv("OLASPLAY_AUDIOMACK_BROWSER", "1").lower() in ("1", "true", "yes")
HEADLESS = True

# Y2Mate mirrors, tried in order after the cached healthy host
Y2MATE_HOSTS = [
    'https://www.y2mate.com',
    'https://v6.www-y2mate.com',
    'https://v5.www-y2mate.com',
]
Y2MATE_ANALYZE_PATH = "/mates/analyzeV2/ajax"
Y2MATE_CONVERT_PATH = "/mates/convertV2/index"

# Short, always-available video used by the provider health check
HEALTH_CHECK_VIDEO_URL = 'https://www.youtube.com/watch?v=dQw4w9WgXcQ'

# Cobalt API instances (v10 request format)
COBALT_INSTANCES = [
    "https://api.cobalt.tools",
]

# RapidAPI youtube-mp36
RAPIDAPI_HOST = "youtube-mp36.p.rapidapi.com"
RAPIDAPI_KEY = os.getenv("RAPIDAPI_KEY", "")

# AI gateway (OpenAI-compatible chat completions)
AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
AI_MODEL = os.getenv("AI_MODEL", "google/gemini-2.5-flash-lite")
AI_API_KEY = os.getenv("AI_API_KEY", "")

# Importer
IMPORT_CONCURRENCY = int(os.getenv("OLASPLAY_IMPORT_CONCURRENCY", "3"))
ARTIST_MATCH_THRESHOLD = 90  # fuzzy token_sort_ratio

# Maintenance schedule
HEALTH_CHECK_INTERVAL_HOURS = 6
SITEMAP_DAILY_TIME = "03:00"
SITEMAP_PATH = Path("data/sitemap.xml")

# Defaults for the site_settings table
DEFAULT_SETTINGS = {
    'site_name': SITE_NAME,
    'site_tagline': 'Download Free MP3 Music',
    'footer_text': '© 2024 OlasPlay. All rights reserved.',
    'logo_url': '',
    'site_url': SITE_URL,
    'meta_description': 'Download free MP3 music from top artists worldwide.',
    'meta_keywords': 'mp3 download, free music, afrobeats, amapiano, hip hop',
    'google_analytics_id': '',
    'google_verification': '',
    'rapidapi_key': '',
    'ai_api_key': '',
    'y2mate_cached_host': '',
    'y2mate_health_report': '',
}

PUBLIC_SETTING_KEYS = ['site_name', 'site_tagline', 'footer_text', 'logo_url']
SECRET_SETTING_KEYS = ['rapidapi_key', 'ai_api_key']
