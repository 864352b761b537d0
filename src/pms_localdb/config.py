import os
from typing import Dict, Optional, Tuple

from .logging import get_logger
from .paths import expand_abs, find_project_root, var_dir

log = get_logger("config")

DEFAULT_DB_FOLDER = "localdb"
DEFAULT_DB_FILENAME = "pms-db.sqlite3"


def _find_upwards(start_dir: str, filename: str) -> Optional[str]:
    """Return first matching file found when walking up from start_dir."""
    d = os.path.abspath(start_dir or ".")
    while True:
        candidate = os.path.join(d, filename)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(d)
        if parent == d:
            return None
        d = parent


def _read_dotenv(dotenv_dir: str) -> Dict[str, str]:
    """Minimal .env reader (no external dependencies).

    - Reads key=value pairs, ignores comments (#/;) and blank lines.
    - Trims single/double quotes around the value.
    - Returns mapping; does not mutate environment.
    """
    env: Dict[str, str] = {}
    path = _find_upwards(dotenv_dir, ".env")
    if not path:
        log.debug(f"No .env found starting from: {os.path.abspath(dotenv_dir)}")
        return env
    try:
        with open(path, "r", encoding="utf-8") as f:
            for raw in f:
                line = raw.strip()
                if not line or line.startswith("#") or line.startswith(";"):
                    continue
                if "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip()
                if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
                    v = v[1:-1]
                env[k] = v.strip()
        log.debug(f"Loaded {len(env)} key(s) from .env at {path}")
    except OSError as e:
        log.warning(f"Failed reading .env: {e}")
    return env


def _lookup(key: str, dotenv_dir: str) -> Optional[str]:
    v = os.environ.get(key)
    if v:
        return v.strip()
    v = _read_dotenv(dotenv_dir).get(key)
    return v.strip() if v else None


def load_db_path(dotenv_dir: Optional[str] = None) -> str:
    """Return the local store path from PMS_LOCAL_DB or the var/ default."""
    start = dotenv_dir or os.getcwd()
    configured = _lookup("PMS_LOCAL_DB", start)
    if configured:
        return expand_abs(configured)
    root = find_project_root(start)
    return os.path.join(var_dir(root), DEFAULT_DB_FOLDER, DEFAULT_DB_FILENAME)


def load_remote(dotenv_dir: Optional[str] = None) -> Optional[Tuple[str, str]]:
    """Return (base_url, api_key) for the hosted backend, or None if unset."""
    start = dotenv_dir or os.getcwd()
    url = _lookup("SUPABASE_URL", start)
    key = _lookup("SUPABASE_KEY", start)
    if not url or not key:
        log.debug("SUPABASE_URL/SUPABASE_KEY not configured; remote refresh disabled")
        return None
    return url, key
