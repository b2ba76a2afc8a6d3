"""
Candidate page id generation around a seed.
"""

from __future__ import annotations

from wikigolf.config import MAX_SEARCH_OFFSET, PAGEID_CHUNK_SIZE
from wikigolf.wikipedia.batching import chunk


def build_candidate_ids(base_id: int, max_offset: int = MAX_SEARCH_OFFSET) -> list[int]:
    """
    Expand outward from ``base_id``: base, base+1, base-1, base+2, base-2, ...

    Ids closer to the seed come first so the first valid hit is both
    deterministic and near the seed. Non-positive ids are skipped.
    """
    ids: list[int] = []
    if base_id > 0:
        ids.append(base_id)

    for offset in range(1, max_offset + 1):
        if base_id + offset > 0:
            ids.append(base_id + offset)
        if base_id - offset > 0:
            ids.append(base_id - offset)
    return ids


def build_candidate_batches(
    base_id: int,
    max_offset: int = MAX_SEARCH_OFFSET,
    batch_size: int = PAGEID_CHUNK_SIZE,
) -> list[list[int]]:
    """Candidate ids split into bulk-lookup batches, in search order."""
    return chunk(build_candidate_ids(base_id, max_offset), batch_size)
