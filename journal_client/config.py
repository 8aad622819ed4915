# config.py
import logging
import os
from dotenv import load_dotenv

# Load local .env (on Railway/Render, env vars are injected automatically)
load_dotenv()

DEFAULT_API_URL = "https://timemachine-production-xxxx.up.railway.app"

# --- Remote journal API ---
API_BASE_URL = os.getenv("MEMENTOTE_API_URL") or DEFAULT_API_URL

# --- Client server ---
# Dev fallback: a random key per process (sessions reset on restart)
SECRET_KEY = os.getenv("SECRET_KEY") or os.urandom(24).hex()
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# In-memory page states kept at once; the least recently used is dropped first
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))


def resolve_log_level(name) -> int:
    """Level number for a name like 'DEBUG'; unknown names fall back to INFO."""
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else logging.INFO
