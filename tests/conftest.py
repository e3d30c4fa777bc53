import os
import sys
import tempfile
from pathlib import Path

# Point every module at a throwaway data directory before config is imported
_DATA_DIR = tempfile.mkdtemp(prefix="olasplay-tests-")
os.environ.setdefault("OLASPLAY_DB_PATH", os.path.join(_DATA_DIR, "olasplay.db"))
os.environ.setdefault("OLASPLAY_SECRET_KEY_PATH", os.path.join(_DATA_DIR, ".secret_key"))
os.environ.setdefault("OLASPLAY_AUDIOMACK_BROWSER", "0")
os.environ.pop("RAPIDAPI_KEY", None)
os.environ.pop("AI_API_KEY", None)

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
