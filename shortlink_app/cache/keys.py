"""Cache key layout for link records.

Example:
    >>> link_cache_key("abc123")
    'url:abc123'
"""

LINK_KEY_PREFIX = "url"


def link_cache_key(link_id: str) -> str:
    return f"{LINK_KEY_PREFIX}:{link_id}"
