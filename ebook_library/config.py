"""Configuration management."""
import os
from dotenv import load_dotenv

from ebook_library.client import build_query_url

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Content store
    SANITY_PROJECT_ID = os.getenv("SANITY_PROJECT_ID", "")
    SANITY_DATASET = os.getenv("SANITY_DATASET", "production")
    SANITY_API_VERSION = os.getenv("SANITY_API_VERSION", "2023-05-03")
    SANITY_TOKEN = os.getenv("SANITY_TOKEN")
    SANITY_USE_CDN = _env_bool("SANITY_USE_CDN", True)

    @property
    def QUERY_URL(self):
        """Build the GROQ query endpoint for the configured dataset."""
        return build_query_url(
            self.SANITY_PROJECT_ID,
            self.SANITY_DATASET,
            self.SANITY_API_VERSION,
            self.SANITY_USE_CDN and not self.SANITY_TOKEN
        )

    # Display defaults
    PLACEHOLDER_COVER_URL = os.getenv("PLACEHOLDER_COVER_URL", "/placeholder.svg")
    PLACEHOLDER_POST_COVER_URL = os.getenv("PLACEHOLDER_POST_COVER_URL", "/blog-post-cover.png")
    PLACEHOLDER_AVATAR_URL = os.getenv("PLACEHOLDER_AVATAR_URL", "/placeholder-user.jpg")
    FALLBACK_AUTHOR = os.getenv("FALLBACK_AUTHOR", "EduHansa Team")

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
