from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

# ============================================================================
# CATALOG MODELS
# ============================================================================

class ArtistCreate(BaseModel):
    name: str
    slug: Optional[str] = None
    image_url: Optional[str] = None
    bio: Optional[str] = None
    genre: Optional[str] = None
    followers: int = 0

class ArtistUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    image_url: Optional[str] = None
    bio: Optional[str] = None
    genre: Optional[str] = None
    followers: Optional[int] = None

class AlbumCreate(BaseModel):
    title: str
    slug: Optional[str] = None
    artist_id: Optional[int] = None
    cover_url: Optional[str] = None
    genre: Optional[str] = None
    release_date: Optional[str] = None

class AlbumUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    artist_id: Optional[int] = None
    cover_url: Optional[str] = None
    genre: Optional[str] = None
    release_date: Optional[str] = None

class CategoryCreate(BaseModel):
    name: str
    slug: Optional[str] = None
    icon_url: Optional[str] = None

class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    icon_url: Optional[str] = None

class SongCreate(BaseModel):
    title: str
    slug: Optional[str] = None
    artist_id: Optional[int] = None
    album_id: Optional[int] = None
    category_id: Optional[int] = None
    cover_url: Optional[str] = None
    duration: Optional[str] = None
    genre: Optional[str] = None
    release_date: Optional[str] = None
    download_url: Optional[str] = None
    lyrics: Optional[str] = None
    description: Optional[str] = None
    is_trending: bool = False

class SongUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    artist_id: Optional[int] = None
    album_id: Optional[int] = None
    category_id: Optional[int] = None
    cover_url: Optional[str] = None
    duration: Optional[str] = None
    genre: Optional[str] = None
    release_date: Optional[str] = None
    download_url: Optional[str] = None
    lyrics: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    is_trending: Optional[bool] = None

# ============================================================================
# SCRAPING MODELS
# ============================================================================

class FetchedSong(BaseModel):
    """Song metadata plus a downloadable audio link resolved from a source URL."""
    title: str
    artist: str
    duration: str = ""
    thumbnail: str = ""
    audio_url: str
    platform: str
    source_url: str = ""

class PlaylistVideo(BaseModel):
    video_id: str
    title: str
    thumbnail: str
    author: str

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"

class PlaylistInfo(BaseModel):
    playlist_title: str
    videos: List[PlaylistVideo]

class HostHealth(BaseModel):
    host: str
    status: str  # 'ok' or 'error'
    latency_ms: int
    error: Optional[str] = None

# ============================================================================
# REQUEST MODELS
# ============================================================================

class UrlRequest(BaseModel):
    url: str = ""

class DescriptionRequest(BaseModel):
    title: str = ""
    artist: Optional[str] = None
    type: str = "description"  # 'description' or 'summary'

class ImportRequest(BaseModel):
    urls: str
    generate_descriptions: bool = False
    category_id: Optional[int] = None
    album_title: Optional[str] = None
    genre: Optional[str] = None
    concurrency: Optional[int] = Field(default=None, ge=1, le=10)

class ImportItemResult(BaseModel):
    url: str
    status: str = "pending"  # pending, loading, success, error
    song: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

class ImportResult(BaseModel):
    total: int
    succeeded: int
    failed: int
    items: List[ImportItemResult]

class SettingsUpdate(BaseModel):
    settings: Dict[str, str]
