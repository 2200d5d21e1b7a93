"""Models for cache data.

Defines the stored cache entry and the statistics reported by cache backends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__: list[str] = ["CacheEntry", "CacheStatistics"]


@dataclass
class CacheEntry:
    """A cached value with its expiry.

    Attributes:
        key (str): Namespaced cache key.
        value (Any): JSON-compatible cached value.
        created_at (int): Creation time in epoch milliseconds.
        expires_at (int): Expiry time in epoch milliseconds.
    """

    key: str
    value: Any
    created_at: int
    expires_at: int

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at <= now_ms


@dataclass
class CacheStatistics:
    """Cache usage statistics.

    Attributes:
        total_entries (int): Number of stored entries, expired ones included.
        expired_entries (int): Entries past their expiry that have not been purged yet.
        kind_distribution (dict[str, int]): Entry count per key kind ('t', 'lang', ...).
    """

    total_entries: int = 0
    expired_entries: int = 0
    kind_distribution: dict[str, int] = field(default_factory=dict)
