"""Core functionality for paperchunk package."""

from .chunker import AdaptiveChunker, Segment, chunk_sections, segment_section
from .config import Config, validate_config
from .quota import InputQuotaService, StaticQuotaProvider
from .stats import compute_chunk_stats
from .table_extractor import (
    convert_html_table_to_markdown,
    extract_table_context,
    extract_table_metadata,
    extract_tables_from_html,
)
from .table_splitter import (
    find_markdown_tables,
    parse_markdown_table,
    should_split_table,
    split_large_table,
)

__all__ = [
    "AdaptiveChunker",
    "Segment",
    "chunk_sections",
    "segment_section",
    "Config",
    "validate_config",
    "InputQuotaService",
    "StaticQuotaProvider",
    "compute_chunk_stats",
    "convert_html_table_to_markdown",
    "extract_table_context",
    "extract_table_metadata",
    "extract_tables_from_html",
    "find_markdown_tables",
    "parse_markdown_table",
    "should_split_table",
    "split_large_table",
]
