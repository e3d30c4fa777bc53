#!/usr/bin/env python3
"""
FastAPI Web Server for OlasPlay
Serves the public catalog API, the sitemap and the admin panel API
"""

import json
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
import logging
from fastapi import FastAPI, HTTPException, Query, BackgroundTasks, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

import config
from auth_manager import AuthManager, ROLES
from db_manager import CatalogDatabase, DuplicateSlugError, NotFoundError
from description_generator import DescriptionGenerator, DescriptionError
from models import (
    ArtistCreate, ArtistUpdate, AlbumCreate, AlbumUpdate,
    CategoryCreate, CategoryUpdate, SongCreate, SongUpdate,
    UrlRequest, DescriptionRequest, ImportRequest, SettingsUpdate
)
from playlist_fetcher import PlaylistFetcher
from provider_health import ProviderHealthChecker
from sitemap import generate_sitemap, get_base_url
from slugs import slugify, song_slug, unique_slug
from song_fetcher import SongFetcher, FetchError
from song_importer import SongImporter, NO_VALID_URLS
from url_parser import parse_urls
import structured_data

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Global database instance
db = CatalogDatabase()

# Global auth manager instance
auth_manager = AuthManager()

# Scraping services share the catalog for cached hosts and API keys
song_fetcher = SongFetcher(db=db)
playlist_fetcher = PlaylistFetcher()
description_generator = DescriptionGenerator(db=db)
importer = SongImporter(db, song_fetcher=song_fetcher, playlist_fetcher=playlist_fetcher,
                        description_generator=description_generator)

# Security scheme for JWT tokens
security = HTTPBearer()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    db.connect()
    db.create_tables()
    logger.info("🗄️ Database connected and initialized")

    yield

    # Shutdown
    db.close()
    logger.info("🗄️ Database disconnected")

app = FastAPI(
    title="OlasPlay API",
    description="API for browsing and downloading free MP3 music",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware for the separately hosted frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Authentication models
class SetupRequest(BaseModel):
    username: str = "admin"
    password: str

class LoginRequest(BaseModel):
    username: str
    password: str
    remember_me: bool = False

class AuthResponse(BaseModel):
    success: bool
    token: Optional[str] = None
    message: str
    role: Optional[str] = None
    expires_hours: Optional[int] = None

class UserCreate(BaseModel):
    username: str
    password: str
    role: str = "editor"


# Authentication dependencies
async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, str]:
    """Verify JWT token and return the caller's username and role"""
    user = auth_manager.decode_token(credentials.credentials)
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

async def require_admin(user: Dict[str, str] = Depends(get_current_user)) -> Dict[str, str]:
    """Editors may manage content; destructive and site-wide actions need admin"""
    if user['role'] != 'admin':
        raise HTTPException(status_code=403, detail="Admin role required")
    return user


def _site_url() -> str:
    return get_base_url(db)

def _mask_secret(value: str) -> str:
    if not value:
        return ''
    return '****' + value[-4:] if len(value) > 4 else '****'


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    try:
        stats = db.get_dashboard_stats()
        return {"status": "healthy", "songs": stats['songs']}
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Database unavailable")

@app.get("/api/settings/public")
async def get_public_settings():
    """Branding settings for the site header and footer"""
    return db.get_settings(config.PUBLIC_SETTING_KEYS)

@app.get("/api/home")
async def get_home():
    """Everything the home page renders in one call"""
    try:
        return {
            "trending": db.get_trending_songs(limit=8),
            "latest": db.get_latest_songs(limit=12),
            "categories": db.list_categories(),
            "artists": db.list_artists(limit=12)['items'],
        }
    except Exception as e:
        logger.error(f"Error fetching home page: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch home page")

@app.get("/api/songs")
async def get_songs(
    search: Optional[str] = Query(None, description="Match title, artist or genre"),
    genre: Optional[str] = Query(None),
    artist_id: Optional[int] = Query(None),
    album_id: Optional[int] = Query(None),
    category_id: Optional[int] = Query(None),
    trending: Optional[bool] = Query(None),
    order: str = Query('latest', description="latest, popular, downloads or title"),
    limit: int = Query(24, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    """List songs with filters and pagination"""
    try:
        result = db.list_songs(
            search=search, genre=genre, artist_id=artist_id, album_id=album_id,
            category_id=category_id, trending=trending, order=order,
            limit=limit, offset=offset
        )
        result.update({"limit": limit, "offset": offset})
        return result
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing songs: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch songs")

@app.get("/api/songs/trending")
async def get_trending_songs(limit: int = Query(10, ge=1, le=50)):
    return {"items": db.get_trending_songs(limit=limit)}

@app.get("/api/songs/{slug}")
async def get_song(slug: str):
    """Song detail with related songs by the same artist and JSON-LD"""
    song = db.get_song_by_slug(slug)
    if not song:
        raise HTTPException(status_code=404, detail="Song not found")

    related = []
    if song['artist_id'] is not None:
        related = db.list_songs(artist_id=song['artist_id'], exclude_id=song['id'],
                                order='popular', limit=6)['items']

    site_url = _site_url()
    breadcrumbs = [{"name": "Home", "url": "/"}, {"name": "Songs", "url": "/songs"}]
    if song.get('artist_slug'):
        breadcrumbs.append({"name": song['artist_name'], "url": f"/artist/{song['artist_slug']}"})
    breadcrumbs.append({"name": song['title'], "url": f"/song/{song['slug']}"})

    return {
        "song": song,
        "related": related,
        "structured_data": [
            structured_data.song_schema(song, site_url),
            structured_data.breadcrumb_schema(breadcrumbs, site_url),
            structured_data.faq_schema(structured_data.song_faqs(song)),
        ],
    }

@app.post("/api/songs/{slug}/play")
async def record_play(slug: str):
    song = db.get_song_by_slug(slug)
    if not song:
        raise HTTPException(status_code=404, detail="Song not found")
    db.increment_song_counter(song['id'], 'plays')
    return {"success": True, "plays": song['plays'] + 1}

@app.get("/api/songs/{slug}/download")
async def download_song(slug: str):
    """Count the download and redirect to the converter's audio link"""
    song = db.get_song_by_slug(slug)
    if not song:
        raise HTTPException(status_code=404, detail="Song not found")
    if not song.get('download_url'):
        raise HTTPException(status_code=404, detail="No download available for this song")

    db.increment_song_counter(song['id'], 'downloads')
    return RedirectResponse(url=song['download_url'], status_code=307)

@app.get("/api/artists")
async def get_artists(
    search: Optional[str] = Query(None),
    order: str = Query('name', description="name or latest"),
    limit: int = Query(48, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    result = db.list_artists(search=search, limit=limit, offset=offset, order=order)
    result.update({"limit": limit, "offset": offset})
    return result

@app.get("/api/artists/{slug}")
async def get_artist(slug: str):
    artist = db.get_artist_by_slug(slug)
    if not artist:
        raise HTTPException(status_code=404, detail="Artist not found")

    songs = db.list_songs(artist_id=artist['id'], order='popular', limit=100)['items']
    albums = db.list_albums(artist_id=artist['id'])['items']
    site_url = _site_url()
    return {
        "artist": artist,
        "songs": songs,
        "albums": albums,
        "structured_data": [
            structured_data.artist_schema(artist, site_url),
            structured_data.breadcrumb_schema([
                {"name": "Home", "url": "/"},
                {"name": "Artists", "url": "/artists"},
                {"name": artist['name'], "url": f"/artist/{artist['slug']}"},
            ], site_url),
        ],
    }

@app.get("/api/albums")
async def get_albums(
    artist_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(48, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    result = db.list_albums(artist_id=artist_id, search=search, limit=limit, offset=offset)
    result.update({"limit": limit, "offset": offset})
    return result

@app.get("/api/albums/{slug}")
async def get_album(slug: str):
    album = db.get_album_by_slug(slug)
    if not album:
        raise HTTPException(status_code=404, detail="Album not found")
    songs = db.list_songs(album_id=album['id'], order='title', limit=200)['items']
    return {"album": album, "songs": songs}

@app.get("/api/categories")
async def get_categories():
    return {"items": db.list_categories()}

@app.get("/api/categories/{slug}")
async def get_category(
    slug: str,
    order: str = Query('latest'),
    limit: int = Query(24, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    category = db.get_category_by_slug(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    try:
        songs = db.list_songs(category_id=category['id'], order=order, limit=limit, offset=offset)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    site_url = _site_url()
    return {
        "category": category,
        "songs": songs['items'],
        "total": songs['total'],
        "structured_data": [
            structured_data.playlist_schema(
                f"{category['name']} Songs",
                f"Download the latest {category['name']} songs for free",
                songs['items'],
                site_url,
            ),
        ],
    }

@app.get("/api/search")
async def search_catalog(
    q: str = Query('', description="Search query"),
    scope: str = Query('all', description="all, songs or artists"),
    limit: int = Query(20, ge=1, le=100)
):
    """Search songs and artists"""
    try:
        results = db.search(q, scope=scope, limit=limit)
        results["query"] = q
        return results
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Search error: {e}")
        raise HTTPException(status_code=500, detail="Search failed")

@app.get("/sitemap.xml")
async def sitemap_xml():
    try:
        xml = generate_sitemap(db)
    except Exception as e:
        logger.error(f"Sitemap generation error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate sitemap")
    return Response(
        content=xml,
        media_type="application/xml",
        headers={"Cache-Control": "public, max-age=3600"},
    )


# ============================================================================
# AUTHENTICATION ENDPOINTS
# ============================================================================

@app.get("/api/auth/status")
async def get_auth_status():
    """Get authentication status (public endpoint)"""
    return auth_manager.get_auth_status()

@app.post("/api/auth/setup", response_model=AuthResponse)
async def setup_admin(request: SetupRequest):
    """Create the first admin account"""
    try:
        if not auth_manager.is_first_time_setup():
            raise HTTPException(status_code=409, detail="Admin account already set up")

        auth_manager.create_user(request.username, request.password, role='admin')
        token = auth_manager.generate_token(request.username.strip(), 'admin', expires_hours=24)

        return AuthResponse(
            success=True,
            token=token,
            message="Admin account created successfully",
            role='admin',
            expires_hours=24
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Setup error: {e}")
        raise HTTPException(status_code=500, detail="Setup failed")

@app.post("/api/auth/login", response_model=AuthResponse)
async def admin_login(request: LoginRequest):
    """Admin panel login endpoint"""
    try:
        if auth_manager.is_first_time_setup():
            raise HTTPException(status_code=409, detail="First-time setup required")

        role = auth_manager.verify_password(request.username, request.password)
        if not role:
            raise HTTPException(status_code=401, detail="Invalid username or password")

        expires_hours = 168 if request.remember_me else 24  # 7 days or 24 hours
        token = auth_manager.generate_token(request.username, role, expires_hours=expires_hours)

        return AuthResponse(
            success=True,
            token=token,
            message="Login successful",
            role=role,
            expires_hours=expires_hours
        )
    except HTTPException:
        raise
    except ValueError as e:
        # Account locked
        raise HTTPException(status_code=423, detail=str(e))
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise HTTPException(status_code=500, detail="Login failed")

@app.post("/api/auth/verify")
async def verify_token_endpoint(user: Dict[str, str] = Depends(get_current_user)):
    """Verify if token is valid (protected endpoint)"""
    return {"valid": True, "message": "Token is valid", **user}


# ============================================================================
# ADMIN: DASHBOARD & CATALOG CRUD
# ============================================================================

@app.get("/api/admin/dashboard")
async def get_dashboard(user: Dict[str, str] = Depends(get_current_user)):
    try:
        return db.get_dashboard_stats()
    except Exception as e:
        logger.error(f"Error fetching dashboard stats: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch dashboard stats")


def _fill_slug(data: Dict[str, Any], table: str, source: str) -> Dict[str, Any]:
    """Derive a unique slug from ``source`` when the form left it blank"""
    if data.get('slug'):
        data['slug'] = slugify(data['slug'])
    else:
        data['slug'] = unique_slug(slugify(source), lambda s: db.slug_exists(table, s))
    if not data['slug']:
        raise HTTPException(status_code=400, detail="Could not derive a slug; please provide one")
    return data


def _run_write(entity: str, action):
    """Run a catalog write, translating domain errors into HTTP errors"""
    try:
        result = action()
    except DuplicateSlugError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error writing {entity}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to save {entity}")
    if result is None or result is False:
        raise HTTPException(status_code=404, detail=f"{entity.capitalize()} not found")
    return result


@app.post("/api/admin/songs", status_code=201)
async def create_song(song: SongCreate, user: Dict[str, str] = Depends(get_current_user)):
    data = song.model_dump()
    if data.get('slug'):
        data['slug'] = slugify(data['slug'])
    elif slugify(data['title']):
        artist = db.get_artist(data['artist_id']) if data.get('artist_id') else None
        base = song_slug(data['title'], artist['name'] if artist else None)
        data['slug'] = unique_slug(base, lambda s: db.slug_exists('songs', s))
    if not data['slug']:
        raise HTTPException(status_code=400, detail="Could not derive a slug; please provide one")
    return _run_write('song', lambda: db.create_song(data))

@app.put("/api/admin/songs/{song_id}")
async def update_song(song_id: int, song: SongUpdate, user: Dict[str, str] = Depends(get_current_user)):
    data = song.model_dump(exclude_unset=True)
    if data.get('slug'):
        data['slug'] = slugify(data['slug'])
    return _run_write('song', lambda: db.update_song(song_id, data))

@app.delete("/api/admin/songs/{song_id}")
async def delete_song(song_id: int, user: Dict[str, str] = Depends(require_admin)):
    _run_write('song', lambda: db.delete_song(song_id))
    return {"success": True, "message": f"Song {song_id} deleted"}

@app.post("/api/admin/artists", status_code=201)
async def create_artist(artist: ArtistCreate, user: Dict[str, str] = Depends(get_current_user)):
    data = _fill_slug(artist.model_dump(), 'artists', artist.name)
    return _run_write('artist', lambda: db.create_artist(data))

@app.put("/api/admin/artists/{artist_id}")
async def update_artist(artist_id: int, artist: ArtistUpdate, user: Dict[str, str] = Depends(get_current_user)):
    data = artist.model_dump(exclude_unset=True)
    if data.get('slug'):
        data['slug'] = slugify(data['slug'])
    return _run_write('artist', lambda: db.update_artist(artist_id, data))

@app.delete("/api/admin/artists/{artist_id}")
async def delete_artist(artist_id: int, user: Dict[str, str] = Depends(require_admin)):
    _run_write('artist', lambda: db.delete_artist(artist_id))
    return {"success": True, "message": f"Artist {artist_id} deleted"}

@app.post("/api/admin/albums", status_code=201)
async def create_album(album: AlbumCreate, user: Dict[str, str] = Depends(get_current_user)):
    data = _fill_slug(album.model_dump(), 'albums', album.title)
    return _run_write('album', lambda: db.create_album(data))

@app.put("/api/admin/albums/{album_id}")
async def update_album(album_id: int, album: AlbumUpdate, user: Dict[str, str] = Depends(get_current_user)):
    data = album.model_dump(exclude_unset=True)
    if data.get('slug'):
        data['slug'] = slugify(data['slug'])
    return _run_write('album', lambda: db.update_album(album_id, data))

@app.delete("/api/admin/albums/{album_id}")
async def delete_album(album_id: int, user: Dict[str, str] = Depends(require_admin)):
    _run_write('album', lambda: db.delete_album(album_id))
    return {"success": True, "message": f"Album {album_id} deleted"}

@app.post("/api/admin/categories", status_code=201)
async def create_category(category: CategoryCreate, user: Dict[str, str] = Depends(get_current_user)):
    data = _fill_slug(category.model_dump(), 'categories', category.name)
    return _run_write('category', lambda: db.create_category(data))

@app.put("/api/admin/categories/{category_id}")
async def update_category(category_id: int, category: CategoryUpdate, user: Dict[str, str] = Depends(get_current_user)):
    data = category.model_dump(exclude_unset=True)
    if data.get('slug'):
        data['slug'] = slugify(data['slug'])
    return _run_write('category', lambda: db.update_category(category_id, data))

@app.delete("/api/admin/categories/{category_id}")
async def delete_category(category_id: int, user: Dict[str, str] = Depends(require_admin)):
    _run_write('category', lambda: db.delete_category(category_id))
    return {"success": True, "message": f"Category {category_id} deleted"}


# ============================================================================
# ADMIN: SETTINGS
# ============================================================================

@app.get("/api/admin/settings")
async def get_admin_settings(user: Dict[str, str] = Depends(get_current_user)):
    """All site settings, with API keys masked"""
    settings = db.get_settings()
    for key in config.SECRET_SETTING_KEYS:
        if key in settings:
            settings[key] = _mask_secret(settings[key])
    return settings

@app.put("/api/admin/settings")
async def update_admin_settings(request: SettingsUpdate, user: Dict[str, str] = Depends(require_admin)):
    unknown = [key for key in request.settings if key not in config.DEFAULT_SETTINGS]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown setting(s): {', '.join(sorted(unknown))}")

    updated = []
    for key, value in request.settings.items():
        # Masked secrets come back unchanged from the settings form
        if key in config.SECRET_SETTING_KEYS and value.startswith('****'):
            continue
        if not db.set_setting(key, value.strip()):
            raise HTTPException(status_code=500, detail=f"Failed to save setting '{key}'")
        updated.append(key)

    logger.info(f"⚙️ Settings updated by {user['username']}: {', '.join(updated) or 'none'}")
    return {"message": "Settings updated successfully", "updated": updated}


# ============================================================================
# ADMIN: SCRAPING FUNCTIONS
# ============================================================================

@app.post("/api/admin/fetch-song")
async def fetch_song(request: UrlRequest, user: Dict[str, str] = Depends(get_current_user)):
    """Resolve metadata and a download link for one URL"""
    try:
        song = await song_fetcher.fetch(request.url)
        return {"success": True, "data": song.model_dump()}
    except FetchError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching song: {e}")
        raise HTTPException(status_code=500, detail="Processing failed")

@app.post("/api/admin/fetch-playlist")
async def fetch_playlist(request: UrlRequest, user: Dict[str, str] = Depends(get_current_user)):
    try:
        playlist = await playlist_fetcher.fetch(request.url)
        return {
            "success": True,
            "data": {
                "playlist_title": playlist.playlist_title,
                "videos": [dict(v.model_dump(), url=v.url) for v in playlist.videos],
            },
        }
    except FetchError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching playlist: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch playlist")

@app.post("/api/admin/generate-description")
async def generate_description(request: DescriptionRequest, user: Dict[str, str] = Depends(get_current_user)):
    try:
        return await description_generator.generate(request.title, request.artist, request.type)
    except DescriptionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error generating description: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate content")

@app.post("/api/admin/import")
async def import_songs(request: ImportRequest, user: Dict[str, str] = Depends(get_current_user)):
    """Import a batch of URLs and wait for the aggregate result"""
    if importer.is_busy:
        raise HTTPException(status_code=409, detail="An import is already running")
    try:
        result = await importer.run(
            request.urls,
            generate_descriptions=request.generate_descriptions,
            category_id=request.category_id,
            album_title=request.album_title,
            genre=request.genre,
            concurrency=request.concurrency,
        )
        return result.model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Import error: {e}")
        raise HTTPException(status_code=500, detail="Import failed")

async def run_import_task(request: ImportRequest):
    try:
        await importer.run(
            request.urls,
            generate_descriptions=request.generate_descriptions,
            category_id=request.category_id,
            album_title=request.album_title,
            genre=request.genre,
            concurrency=request.concurrency,
        )
    except Exception as e:
        logger.error(f"❌ [IMPORT] Background import failed: {e}")
    finally:
        importer.is_queued = False

@app.post("/api/admin/import/background")
async def import_songs_background(request: ImportRequest, background_tasks: BackgroundTasks,
                                  user: Dict[str, str] = Depends(get_current_user)):
    """Start an import and return immediately; poll /api/admin/import/status"""
    if importer.is_busy:
        raise HTTPException(status_code=409, detail="An import is already running")

    urls = parse_urls(request.urls)
    if not urls:
        raise HTTPException(status_code=400, detail=NO_VALID_URLS)

    importer.reserve()
    background_tasks.add_task(run_import_task, request)
    return {"message": f"Import started for {len(urls)} URLs", "urls": len(urls)}

@app.get("/api/admin/import/status")
async def get_import_status(user: Dict[str, str] = Depends(get_current_user)):
    return importer.get_status()

@app.post("/api/admin/provider-health-check")
async def provider_health_check(user: Dict[str, str] = Depends(require_admin)):
    try:
        return await ProviderHealthChecker(db).run()
    except Exception as e:
        logger.error(f"Health check error: {e}")
        raise HTTPException(status_code=500, detail="Health check failed")

@app.get("/api/admin/provider-health")
async def get_provider_health(user: Dict[str, str] = Depends(get_current_user)):
    """Last stored health check report"""
    report = db.get_setting('y2mate_health_report')
    return json.loads(report) if report else {"checked_at": None, "results": [], "best_host": None}


# ============================================================================
# ADMIN: USERS
# ============================================================================

@app.get("/api/admin/users")
async def list_users(user: Dict[str, str] = Depends(require_admin)):
    return {"users": auth_manager.list_users(), "roles": list(ROLES)}

@app.post("/api/admin/users", status_code=201)
async def create_user(request: UserCreate, user: Dict[str, str] = Depends(require_admin)):
    try:
        auth_manager.create_user(request.username, request.password, request.role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(f"👤 {user['username']} created {request.role} '{request.username}'")
    return {"success": True, "username": request.username.strip(), "role": request.role}

@app.delete("/api/admin/users/{username}")
async def delete_user(username: str, user: Dict[str, str] = Depends(require_admin)):
    try:
        deleted = auth_manager.delete_user(username)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"User '{username}' not found")
    return {"success": True, "message": f"User '{username}' deleted"}


@app.get("/")
async def root():
    return {"message": "OlasPlay API", "api_docs": "/docs", "sitemap": "/sitemap.xml"}


if __name__ == "__main__":
    # Run server directly
    uvicorn.run(app, host="0.0.0.0", port=8000)
