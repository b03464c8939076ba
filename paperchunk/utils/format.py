"""
Formatting utilities for chunking results and extracted tables
"""

from typing import List, Optional

from ..models.chunk import ChunkingStats, ContentChunk
from ..models.table import TableExtraction


def format_section_path(section: str, parent_section: Optional[str] = None) -> str:
    """
    Format a section location as a path.

    Args:
        section: Section heading
        parent_section: Parent section heading

    Returns:
        Formatted section path
    """
    if not section:
        return "Unknown"

    if parent_section:
        return f"{parent_section} > {section}"
    return section


def format_chunk_stats(stats: ChunkingStats) -> str:
    """Format chunking statistics on one line."""
    return (
        f"📊 {stats.total_chunks} chunks | avg {stats.average_chunk_size} chars | "
        f"min {stats.min_chunk_size} | max {stats.max_chunk_size}"
    )


def _format_chunk_kind(chunk: ContentChunk) -> str:
    if not chunk.is_table:
        if chunk.sentence_group_index is not None:
            return f"paragraph {chunk.paragraph_index + 1}, sentences {chunk.sentence_group_index + 1}"
        if chunk.paragraph_index is not None:
            return f"paragraph {chunk.paragraph_index + 1}"
        return "text"

    table = chunk.table_metadata
    kind = f"table {table.row_count}x{table.col_count}"
    if table.is_split:
        kind += f", part {table.split_index + 1}/{table.total_splits}"
    return kind


def format_chunk_results(
    chunks: List[ContentChunk],
    show_full_content: bool = False,
    max_content_length: int = 200,
) -> str:
    """
    Format chunks for display.

    Args:
        chunks: Chunk list
        show_full_content: Show full chunk content
        max_content_length: Maximum content length when truncating

    Returns:
        Formatted chunk list
    """
    if not chunks:
        return "No chunks."

    formatted_chunks = []

    for chunk in chunks:
        chunk_lines = []

        # Header
        chunk_lines.append(f"📄 Chunk {chunk.index} (ID: {chunk.id})")
        chunk_lines.append("=" * 50)

        chunk_lines.append(
            f"📍 Section: {format_section_path(chunk.section, chunk.parent_section)} "
            f"({chunk.section_index + 1}/{chunk.total_section_chunks})"
        )
        chunk_lines.append(
            f"ℹ️  {_format_chunk_kind(chunk)} | {len(chunk.content)} chars | "
            f"~{chunk.token_count} tokens | chars {chunk.start_char}-{chunk.end_char}"
        )

        content = chunk.content
        if not show_full_content and len(content) > max_content_length:
            content = content[:max_content_length] + "..."

        chunk_lines.append("📝 Content:")
        chunk_lines.append(content)

        chunk_lines.append("")
        formatted_chunks.append("\n".join(chunk_lines))

    return "\n".join(formatted_chunks)


def format_table_extraction(extraction: TableExtraction) -> str:
    """
    Format an extracted table with its metadata.

    Args:
        extraction: Extracted table

    Returns:
        Formatted table block
    """
    metadata = extraction.metadata
    lines = [f"📋 Table {extraction.table_index + 1}"]

    if metadata.caption:
        lines.append(f"   Caption: {metadata.caption}")
    if extraction.context.section_heading:
        lines.append(f"   Section: {extraction.context.section_heading}")

    lines.append(
        f"   {metadata.row_count} rows x {metadata.col_count} cols | "
        f"{metadata.estimated_size} chars"
    )
    if metadata.has_headers:
        lines.append(f"   Headers: {', '.join(metadata.headers)}")
    lines.append(
        f"   Column types: {', '.join(column_type.value for column_type in metadata.column_types)}"
    )

    lines.append("-" * 50)
    lines.append(extraction.block)
    lines.append("-" * 50)

    return "\n".join(lines)
