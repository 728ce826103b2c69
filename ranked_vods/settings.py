import os
from dotenv import load_dotenv

# Load .env from repo root (dotenv auto-walks up from CWD)
load_dotenv()


def _get_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _get_float(name: str) -> float | None:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    try:
        return float(val)
    except ValueError:
        return None


# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# --- MCSR Ranked API ---
RANKED_API_BASE = os.getenv("RANKED_API_BASE", "https://api.mcsrranked.com").rstrip("/")
RANKED_API_TIMEOUT_MS = _get_int("RANKED_API_TIMEOUT_MS", 10000)

# --- Match record cache ---
VOD_CACHE_DIR = os.getenv("VOD_CACHE_DIR", "./cache")

# --- Request orchestration ---
VOD_FETCH_WORKERS = max(1, _get_int("VOD_FETCH_WORKERS", 1))   # 1 = sequential
VOD_REQUEST_DEADLINE_S = _get_float("VOD_REQUEST_DEADLINE_S")  # None = no overall deadline
