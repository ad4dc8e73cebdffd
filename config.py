"""
Configuration module for the Strapi Places pipeline.
Loads environment variables and provides constants.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

# Target Strapi instance: "local" or "cloud"
MODE = os.getenv("MODE", "local").lower()

if MODE == "cloud":
    STRAPI_BASE = os.getenv("CLOUD_STRAPI_URL")
    STRAPI_API_TOKEN = os.getenv("CLOUD_STRAPI_TOKEN")
else:
    STRAPI_BASE = os.getenv("LOCAL_STRAPI_URL", "http://127.0.0.1:1337")
    STRAPI_API_TOKEN = os.getenv("LOCAL_STRAPI_TOKEN") or os.getenv("STRAPI_API_TOKEN")

STRAPI_API_URL = f"{STRAPI_BASE}/api" if STRAPI_BASE else None

# Google Places
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GOOGLE_PLACES_ENDPOINT = "https://maps.googleapis.com/maps/api/place"
DEFAULT_SEARCH_REGION = "Western Cape, South Africa"

# Harvest output
PLACES_DIR = os.getenv(
    "PLACES_DIR",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "Places")
)
MAX_PHOTOS = 10
PHOTO_MAX_WIDTH = 1600
SAVE_REVIEWER_PHOTOS = False

# HTTP timeouts (seconds)
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))
UPDATE_TIMEOUT = 25

# Batch runs
BATCH_DELAY_MS = int(os.getenv("BATCH_DELAY_MS", "3000"))
BATCH_LOG_FILE = os.path.join(os.getcwd(), "batch_log.txt")

# Waiting for Strapi to come up (seconds)
STRAPI_WAIT_TIMEOUT = 180
STRAPI_WAIT_INTERVAL = 4


class ConfigError(Exception):
    """Raised when required configuration is missing."""


@dataclass(frozen=True)
class StrapiSettings:
    base_url: str
    token: str
    mode: str = "local"
    timeout: int = REQUEST_TIMEOUT

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api"


def get_strapi_settings() -> StrapiSettings:
    """
    Build the Strapi settings for the configured MODE.

    Raises:
        ConfigError: if the base URL or API token is not set
    """
    if not STRAPI_BASE:
        raise ConfigError("Missing CLOUD_STRAPI_URL. Please set it in your .env file.")
    if not STRAPI_API_TOKEN:
        raise ConfigError("Missing STRAPI_API_TOKEN. Please set it in your .env file.")

    return StrapiSettings(
        base_url=STRAPI_BASE,
        token=STRAPI_API_TOKEN,
        mode=MODE,
        timeout=REQUEST_TIMEOUT,
    )


def print_mode_banner() -> None:
    """Print which Strapi instance the run targets."""
    print(f"Running in {MODE.upper()} mode")
    print(f"Base URL: {STRAPI_BASE}")
