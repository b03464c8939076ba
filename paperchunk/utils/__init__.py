"""Utility functions for paperchunk package."""

from .format import (
    format_chunk_results,
    format_chunk_stats,
    format_section_path,
    format_table_extraction,
)

__all__ = [
    "format_chunk_results",
    "format_chunk_stats",
    "format_section_path",
    "format_table_extraction",
]
