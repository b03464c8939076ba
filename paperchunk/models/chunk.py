"""Content chunk related data models."""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .table import ColumnType


@dataclass(frozen=True)
class ChunkTableMetadata:
    """Table metadata snapshot carried by a table chunk"""

    headers: List[str]
    row_count: int
    col_count: int
    column_types: List[ColumnType]
    caption: Optional[str] = None
    is_split: bool = False
    split_index: Optional[int] = None
    total_splits: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "caption": self.caption,
            "headers": list(self.headers),
            "row_count": self.row_count,
            "col_count": self.col_count,
            "column_types": [column_type.value for column_type in self.column_types],
            "is_split": self.is_split,
            "split_index": self.split_index,
            "total_splits": self.total_splits,
        }


@dataclass(frozen=True)
class ContentChunk:
    """A bounded-size unit of section content"""

    id: str
    paper_id: str
    content: str
    index: int
    section: str
    section_level: int
    section_index: int
    start_char: int
    end_char: int
    token_count: int
    parent_section: Optional[str] = None
    # None until the section's chunk list is complete
    total_section_chunks: Optional[int] = None
    is_table: bool = False
    table_metadata: Optional[ChunkTableMetadata] = None
    paragraph_index: Optional[int] = None
    sentence_group_index: Optional[int] = None
    css_selector: Optional[str] = None
    element_id: Optional[str] = None
    x_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "paper_id": self.paper_id,
            "content": self.content,
            "index": self.index,
            "section": self.section,
            "section_level": self.section_level,
            "parent_section": self.parent_section,
            "section_index": self.section_index,
            "total_section_chunks": self.total_section_chunks,
            "is_table": self.is_table,
            "table_metadata": (
                self.table_metadata.to_dict() if self.table_metadata else None
            ),
            "start_char": self.start_char,
            "end_char": self.end_char,
            "token_count": self.token_count,
            "paragraph_index": self.paragraph_index,
            "sentence_group_index": self.sentence_group_index,
            "css_selector": self.css_selector,
            "element_id": self.element_id,
            "x_path": self.x_path,
        }


@dataclass(frozen=True)
class ChunkingStats:
    """Chunk size statistics for a whole document"""

    average_chunk_size: int = 0
    total_chunks: int = 0
    min_chunk_size: int = 0
    max_chunk_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_chunk_size": self.average_chunk_size,
            "total_chunks": self.total_chunks,
            "min_chunk_size": self.min_chunk_size,
            "max_chunk_size": self.max_chunk_size,
        }


@dataclass(frozen=True)
class ChunkingResult:
    """Chunks of one document plus their statistics"""

    chunks: List[ContentChunk] = field(default_factory=list)
    stats: ChunkingStats = field(default_factory=ChunkingStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "stats": self.stats.to_dict(),
        }
