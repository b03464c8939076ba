"""
Markdown table detection, parsing and splitting

Tables embedded in section text are located by their structure (a pipe row,
a separator row, then data rows). Large tables are split into row batches that
each repeat the header and carry continuation notes.
"""

import logging
import math
import re
from typing import List, Optional

from ..models.table import MarkdownTableMatch, TableMetadata
from .table_extractor import classify_column_types

# Configure logging
logger = logging.getLogger(__name__)

SMALL_TABLE_THRESHOLD = 800
MEDIUM_TABLE_THRESHOLD = 2000
# Medium tables stay whole while below this share of the budget
MEDIUM_TABLE_BUDGET_RATIO = 0.7

# Allowance for continuation note text
CONTINUATION_OVERHEAD = 50

MARKDOWN_TABLE_PATTERN = re.compile(
    r"^\|[^\n]*\|[ \t]*\r?\n"
    r"\|(?:[ \t]*:?-+:?[ \t]*\|)+[ \t]*\r?\n"
    r"(?:\|[^\n]*\|[ \t]*(?:\r?\n|$))+",
    re.MULTILINE,
)
SEPARATOR_CELL_PATTERN = re.compile(r"^:?-+:?$")
CELL_DELIMITER_PATTERN = re.compile(r"(?<!\\)\|")
CONTINUATION_ROW_PATTERN = re.compile(
    r"^\|\s*_\.\.\.continued (from previous chunk \(\d+/\d+\)|in next chunk)\.\.\._\s*\|$"
)


def find_markdown_tables(content: str) -> List[MarkdownTableMatch]:
    """
    Find all Markdown tables in a content string.

    Args:
        content: Section text

    Returns:
        Table positions and text, in order of appearance
    """
    tables = []

    for match in MARKDOWN_TABLE_PATTERN.finditer(content):
        markdown = match.group(0).rstrip()
        tables.append(
            MarkdownTableMatch(
                start=match.start(),
                end=match.start() + len(markdown),
                markdown=markdown,
            )
        )

    return tables


def split_cells(line: str) -> List[str]:
    """Split a pipe-delimited row into trimmed cells, honoring escaped pipes."""
    line = line.strip()
    if line.startswith("|"):
        line = line[1:]
    if line.endswith("|") and not line.endswith("\\|"):
        line = line[:-1]
    return [cell.strip() for cell in CELL_DELIMITER_PATTERN.split(line)]


def is_continuation_row(line: str) -> bool:
    """Whether a line is a continuation note inserted by split_large_table."""
    return bool(CONTINUATION_ROW_PATTERN.match(line.strip()))


def parse_markdown_table(markdown_table: str) -> Optional[TableMetadata]:
    """
    Parse table metadata back from Markdown.

    Args:
        markdown_table: Markdown table text

    Returns:
        TableMetadata, or None if the block is not a well-formed table
    """
    lines = markdown_table.strip().split("\n")

    # Need at least header, separator and one data row
    if len(lines) < 3:
        return None

    headers = split_cells(lines[0])
    separator = split_cells(lines[1])

    if len(separator) != len(headers):
        return None
    if not all(SEPARATOR_CELL_PATTERN.match(cell) for cell in separator):
        return None

    col_count = len(headers)
    body_rows = [split_cells(line) for line in lines[2:] if not is_continuation_row(line)]

    return TableMetadata(
        caption=None,
        headers=headers,
        column_types=classify_column_types(body_rows, col_count),
        row_count=len(body_rows),
        col_count=col_count,
        estimated_size=len(markdown_table),
        has_caption=False,
        has_headers=any(headers),
    )


def should_split_table(
    table_size: int,
    max_chunk_size: int,
    small_threshold: int = SMALL_TABLE_THRESHOLD,
    medium_threshold: int = MEDIUM_TABLE_THRESHOLD,
) -> bool:
    """
    Decide whether a table is kept whole or split.

    Args:
        table_size: Estimated table size in characters
        max_chunk_size: Chunk budget in characters
        small_threshold: Tables below this size are always kept whole
        medium_threshold: Tables below this size are kept whole when they
            use less than 70% of the budget

    Returns:
        True if the table should be split
    """
    if table_size < small_threshold:
        return False

    if table_size < medium_threshold and table_size < max_chunk_size * MEDIUM_TABLE_BUDGET_RATIO:
        return False

    return True


def calculate_rows_per_partition(
    max_chunk_size: int, header_overhead: int, average_row_length: float
) -> int:
    """Rows that fit next to the repeated header, at least one."""
    if average_row_length <= 0:
        return 1
    return max(1, math.floor((max_chunk_size - header_overhead) / average_row_length))


def _continuation_row(note: str, width: int) -> str:
    return "| " + note.ljust(width - 4) + " |"


def split_large_table(markdown_table: str, max_chunk_size: int) -> List[str]:
    """
    Split a large Markdown table into smaller tables.

    Every partition repeats the header and separator rows. Partitions after
    the first start with a note giving their position; partitions before the
    last end with a note pointing to the next one. Rows keep their order and
    each row lands in exactly one partition.

    Args:
        markdown_table: Markdown table text
        max_chunk_size: Chunk budget in characters

    Returns:
        Partition texts
    """
    lines = markdown_table.split("\n")

    if len(lines) < 3:
        # Too small to split meaningfully
        return [markdown_table]

    header_row = lines[0]
    separator_row = lines[1]
    data_rows = lines[2:]

    header_overhead = len(header_row) + len(separator_row) + CONTINUATION_OVERHEAD
    average_row_length = sum(len(row) + 1 for row in data_rows) / len(data_rows)
    rows_per_partition = calculate_rows_per_partition(
        max_chunk_size, header_overhead, average_row_length
    )
    total_partitions = math.ceil(len(data_rows) / rows_per_partition)

    logger.debug(
        f"Splitting table: {len(data_rows)} rows into {total_partitions} "
        f"partitions of {rows_per_partition} rows"
    )

    partitions = []
    for partition_index, start in enumerate(range(0, len(data_rows), rows_per_partition)):
        partition_lines = [header_row, separator_row]

        if partition_index > 0:
            partition_lines.append(
                _continuation_row(
                    f"_...continued from previous chunk ({partition_index + 1}/{total_partitions})..._",
                    len(header_row),
                )
            )

        partition_lines.extend(data_rows[start:start + rows_per_partition])

        if start + rows_per_partition < len(data_rows):
            partition_lines.append(
                _continuation_row("_...continued in next chunk..._", len(header_row))
            )

        partitions.append("\n".join(partition_lines))

    return partitions
