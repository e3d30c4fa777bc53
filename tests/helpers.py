import os
import tempfile

import httpx

from db_manager import CatalogDatabase


def make_db() -> CatalogDatabase:
    """Fresh on-disk catalog in its own temp directory"""
    path = os.path.join(tempfile.mkdtemp(prefix="olasplay-db-"), "catalog.db")
    db = CatalogDatabase(path)
    db.connect()
    db.create_tables()
    return db


def mock_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler(request)``"""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
