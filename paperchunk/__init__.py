"""
paperchunk - adaptive chunking for research papers

Splits paper sections into bounded-size chunks along paragraph and sentence
boundaries, keeping tables intact or splitting them by rows with the header
repeated.
"""

__version__ = "0.1.0"

# Core classes and functions
from .core.chunker import AdaptiveChunker, chunk_sections
from .core.config import Config, validate_config
from .core.quota import InputQuotaService, StaticQuotaProvider
from .core.stats import compute_chunk_stats
from .core.table_extractor import (
    convert_html_table_to_markdown,
    extract_table_context,
    extract_table_metadata,
    extract_tables_from_html,
)
from .core.table_splitter import should_split_table, split_large_table

# Data models
from .models.section import PaperSection
from .models.table import ColumnType, TableContext, TableExtraction, TableMetadata
from .models.chunk import ChunkTableMetadata, ChunkingResult, ChunkingStats, ContentChunk

# Utilities
from .utils.format import format_chunk_results, format_chunk_stats, format_table_extraction

__all__ = [
    # Version info
    "__version__",
    # Core classes
    "AdaptiveChunker",
    "chunk_sections",
    "Config",
    "validate_config",
    "InputQuotaService",
    "StaticQuotaProvider",
    "compute_chunk_stats",
    # Table functions
    "convert_html_table_to_markdown",
    "extract_table_context",
    "extract_table_metadata",
    "extract_tables_from_html",
    "should_split_table",
    "split_large_table",
    # Data models
    "PaperSection",
    "ColumnType",
    "TableContext",
    "TableExtraction",
    "TableMetadata",
    "ChunkTableMetadata",
    "ChunkingResult",
    "ChunkingStats",
    "ContentChunk",
    # Utilities
    "format_chunk_results",
    "format_chunk_stats",
    "format_table_extraction",
]
