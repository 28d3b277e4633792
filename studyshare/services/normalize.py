"""
Query normalization. The normalized form is the dedup key for failed searches.
"""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_query(query: str) -> str:
    """Lowercase, drop everything but a-z/0-9/whitespace, collapse spaces, trim."""
    stripped = _NON_ALNUM.sub("", query.lower())
    return _WHITESPACE.sub(" ", stripped).strip()
