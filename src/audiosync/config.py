"""Configuration settings for AudioSync."""

import os
from pathlib import Path
from typing import FrozenSet, Optional

from .exceptions import ConfigError

# Directories
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "audiosync"

# Playback timing (can be overridden via environment variables)
LOOKAHEAD_MS = float(os.getenv("AUDIOSYNC_LOOKAHEAD_MS", "400"))  # Added to every observed position
MERGE_THRESHOLD_MS = float(os.getenv("AUDIOSYNC_MERGE_THRESHOLD_MS", "20"))
END_SENTINEL_MS = 5000.0  # Gap between the last lyric and the virtual end line

# Resolution
SELECTION_TIMEOUT = float(os.getenv("AUDIOSYNC_SELECTION_TIMEOUT", "20"))  # seconds
REQUEST_TIMEOUT = float(os.getenv("AUDIOSYNC_REQUEST_TIMEOUT", "10"))  # seconds
PROVIDER_MAX_RETRIES = int(os.getenv("AUDIOSYNC_PROVIDER_MAX_RETRIES", "1"))
PROVIDER_SEARCH_LIMIT = 5

# Genres whose tracks are usually tagged with translated names
ORIGINAL_NAME_GENRES: FrozenSet[str] = frozenset(
    g.strip()
    for g in os.getenv("AUDIOSYNC_ORIGINAL_NAME_GENRES", "J-Pop,Kayokyoku,J-Rock").split(",")
    if g.strip()
)

# In-memory caches
ARTWORK_CACHE_BYTES = int(os.getenv("AUDIOSYNC_ARTWORK_CACHE_BYTES", str(100 * 1024 * 1024)))
COVER_CACHE_SIZE = int(os.getenv("AUDIOSYNC_COVER_CACHE_SIZE", "30"))
IDENTITY_CACHE_SIZE = int(os.getenv("AUDIOSYNC_IDENTITY_CACHE_SIZE", "30"))

# Provider endpoints
NETEASE_BASE_URL = os.getenv(
    "AUDIOSYNC_NETEASE_BASE_URL", "https://neteasecloudmusicapi-ten-wine.vercel.app"
)
QQ_BASE_URL = os.getenv("AUDIOSYNC_QQ_BASE_URL", "https://c.y.qq.com")
ITUNES_SEARCH_URL = "https://itunes.apple.com/search"
LASTFM_BASE_URL = os.getenv("AUDIOSYNC_LASTFM_BASE_URL", "https://ws.audioscrobbler.com/2.0/")
SIMILAR_LIMIT = int(os.getenv("AUDIOSYNC_SIMILAR_LIMIT", "10"))
SILICONFLOW_URL = "https://api.siliconflow.cn/v1/chat/completions"
SILICONFLOW_MODEL = os.getenv("AUDIOSYNC_SILICONFLOW_MODEL", "deepseek-ai/DeepSeek-R1")
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

def validate_config() -> None:
    """Validate configuration values."""
    if LOOKAHEAD_MS < 0:
        raise ConfigError("Lookahead must be non-negative")

    if MERGE_THRESHOLD_MS <= 0:
        raise ConfigError("Merge threshold must be positive")

    if SELECTION_TIMEOUT <= 0 or REQUEST_TIMEOUT <= 0:
        raise ConfigError("Timeouts must be positive")

    if PROVIDER_MAX_RETRIES < 0:
        raise ConfigError("Provider retries must be non-negative")

    if SIMILAR_LIMIT <= 0:
        raise ConfigError("Similar item limit must be positive")

    if ARTWORK_CACHE_BYTES <= 0 or COVER_CACHE_SIZE <= 0 or IDENTITY_CACHE_SIZE <= 0:
        raise ConfigError("Cache budgets must be positive")

def get_cache_dir() -> Path:
    """Get cache directory from environment or default."""
    cache_dir = os.getenv("AUDIOSYNC_CACHE_DIR")
    if cache_dir:
        return Path(cache_dir)
    return DEFAULT_CACHE_DIR

def get_siliconflow_api_key() -> Optional[str]:
    """API key for the original-name lookup, if configured."""
    return os.getenv("AUDIOSYNC_SILICONFLOW_API_KEY") or None

def get_lastfm_api_key() -> Optional[str]:
    """API key for Last.fm recommendations, if configured."""
    return os.getenv("AUDIOSYNC_LASTFM_API_KEY") or None

# Validate config on import
validate_config()

# Local store cleanup
STORE_MAX_AGE_DAYS = 90
