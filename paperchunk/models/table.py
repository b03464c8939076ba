"""Table related data models."""

from typing import List, Dict, Any, Optional
from enum import Enum
from dataclasses import dataclass


class ColumnType(str, Enum):
    """Data type of a table column"""

    TEXT = "text"
    NUMERIC = "numeric"
    MIXED = "mixed"


@dataclass(frozen=True)
class TableMetadata:
    """Structural metadata of a normalized table"""

    headers: List[str]
    column_types: List[ColumnType]
    row_count: int
    col_count: int
    estimated_size: int
    caption: Optional[str] = None
    has_caption: bool = False
    has_headers: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "caption": self.caption,
            "headers": list(self.headers),
            "column_types": [column_type.value for column_type in self.column_types],
            "row_count": self.row_count,
            "col_count": self.col_count,
            "estimated_size": self.estimated_size,
            "has_caption": self.has_caption,
            "has_headers": self.has_headers,
        }


@dataclass(frozen=True)
class TableContext:
    """Text surrounding a table in the source document"""

    preceding_text: str = ""
    following_text: str = ""
    section_heading: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "preceding_text": self.preceding_text,
            "following_text": self.following_text,
            "section_heading": self.section_heading,
        }


@dataclass(frozen=True)
class TableExtraction:
    """A table extracted from an HTML document"""

    markdown: str
    metadata: TableMetadata
    context: TableContext
    block: str
    table_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "table_index": self.table_index,
            "markdown": self.markdown,
            "block": self.block,
            "metadata": self.metadata.to_dict(),
            "context": self.context.to_dict(),
        }


@dataclass(frozen=True)
class MarkdownTableMatch:
    """Location of a normalized table inside section text"""

    start: int
    end: int
    markdown: str
