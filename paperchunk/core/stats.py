"""Chunk size statistics."""

import logging
from typing import Sequence

from ..models.chunk import ChunkingStats, ContentChunk

logger = logging.getLogger(__name__)


def compute_chunk_stats(chunks: Sequence[ContentChunk]) -> ChunkingStats:
    """
    Compute average, minimum and maximum chunk content length.

    An empty chunk list yields all-zero statistics.

    Args:
        chunks: All chunks of a document

    Returns:
        ChunkingStats
    """
    if not chunks:
        return ChunkingStats()

    chunk_sizes = [len(chunk.content) for chunk in chunks]

    stats = ChunkingStats(
        average_chunk_size=sum(chunk_sizes) // len(chunk_sizes),
        total_chunks=len(chunk_sizes),
        min_chunk_size=min(chunk_sizes),
        max_chunk_size=max(chunk_sizes),
    )

    logger.debug(
        f"Chunk stats: avg={stats.average_chunk_size}, "
        f"min={stats.min_chunk_size}, max={stats.max_chunk_size} chars"
    )
    return stats
