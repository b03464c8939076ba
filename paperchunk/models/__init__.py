"""Data models for paperchunk package."""

from .section import PaperSection
from .table import ColumnType, TableMetadata, TableContext, TableExtraction, MarkdownTableMatch
from .chunk import ContentChunk, ChunkTableMetadata, ChunkingStats, ChunkingResult

__all__ = [
    "PaperSection",
    "ColumnType",
    "TableMetadata",
    "TableContext",
    "TableExtraction",
    "MarkdownTableMatch",
    "ContentChunk",
    "ChunkTableMetadata",
    "ChunkingStats",
    "ChunkingResult",
]
