"""
Central feature flags for the search path.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, search uses the plain query fallback. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Document Search ──────────────────────────────────────────────
    use_full_text_search: bool = Field(default=True, alias="FF_USE_FULL_TEXT_SEARCH")
    # ON  → search_documents() procedure first (needs the SQL function installed).
    # OFF → Straight to the ILIKE + subject filter query.

    # ── Failed searches ──────────────────────────────────────────────
    log_failed_searches: bool = Field(default=True, alias="FF_LOG_FAILED_SEARCHES")
    # ON  → Zero-result queries are counted in failed_searches for review.
    # OFF → Misses are not recorded.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
