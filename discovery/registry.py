"""
discovery/registry.py - In-memory pool registry.

Holds every PoolRecord decoded during one run, keyed by (venue, pool_id).
Re-scanning a pool replaces its record; nothing survives the process.
"""

from typing import Iterator

from core.logging import get_logger
from core.models import PoolRecord

logger = get_logger(__name__)


class PoolRegistry:
    """
    Registry of discovered pools.

    Iteration follows insertion order. A re-upserted key keeps its
    original position.
    """

    def __init__(self):
        self._pools: dict[tuple[str, int], PoolRecord] = {}

    def upsert(self, record: PoolRecord) -> bool:
        """
        Insert or replace a record.

        Returns:
            True if the key was new, False if an existing record was replaced
        """
        is_new = record.key not in self._pools
        self._pools[record.key] = record

        if not is_new:
            logger.debug(
                f"Replaced pool {record.label}",
                extra={"context": {"venue": record.venue, "pool_id": record.pool_id}},
            )
        return is_new

    def get(self, venue: str, pool_id: int) -> PoolRecord | None:
        return self._pools.get((venue, pool_id))

    def query_by_token_pair(self, token_a: str, token_b: str) -> list[PoolRecord]:
        """All records holding exactly {token_a, token_b}, in either order."""
        wanted = frozenset((token_a, token_b))
        return [r for r in self._pools.values() if frozenset(r.tokens) == wanted]

    def query_by_venue(self, venue: str) -> list[PoolRecord]:
        return [r for r in self._pools.values() if r.venue == venue]

    def venues(self) -> list[str]:
        """Venues with at least one record, in first-seen order."""
        return list(dict.fromkeys(r.venue for r in self._pools.values()))

    def size(self) -> int:
        return len(self._pools)

    def clear(self) -> None:
        self._pools.clear()

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[PoolRecord]:
        return iter(list(self._pools.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._pools

    def get_summary(self) -> dict:
        """Pools per venue and distinct pairs."""
        venues: dict[str, int] = {}
        pairs: set[str] = set()

        for record in self._pools.values():
            venues[record.venue] = venues.get(record.venue, 0) + 1
            pairs.add(record.pair_key)

        return {
            "total_pools": len(self._pools),
            "venues": venues,
            "pairs": sorted(pairs),
        }
