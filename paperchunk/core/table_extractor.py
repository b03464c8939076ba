"""
HTML table extraction and conversion

Converts HTML tables to pipe-delimited Markdown while keeping the row
structure, extracts structural metadata and the text surrounding each table.
Spanning cells are annotated inline; no grid reconstruction is attempted.
"""

import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from ..models.table import ColumnType, TableMetadata, TableContext, TableExtraction

# Configure logging
logger = logging.getLogger(__name__)

# Header heuristic: header cells are short and not bare numbers
MAX_HEADER_CELL_LENGTH = 50
BARE_NUMBER_PATTERN = re.compile(r"^\d+(\.\d+)?$")

# Number with optional sign, decimals, percent sign or short unit
NUMERIC_CELL_PATTERN = re.compile(r"^[+-]?\d+(\.\d+)?(%|[a-zA-Z]{0,3})?$")
NUMERIC_COLUMN_RATIO = 0.8
TEXT_COLUMN_RATIO = 0.2

# Context window around a table
CONTEXT_SIBLING_LIMIT = 5
MIN_CONTEXT_PARAGRAPH_LENGTH = 20
SHORT_REFERENCE_LENGTH = 200

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def _normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _span_value(cell: Tag, attribute: str) -> int:
    try:
        return int(cell.get(attribute, 1))
    except (TypeError, ValueError):
        return 1


def _own_rows(table: Tag) -> List[Tag]:
    """Rows that belong to ``table`` rather than to a nested table."""
    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def _row_cells(row: Tag) -> List[Tag]:
    return row.find_all(["th", "td"], recursive=False)


def _cell_text(cell: Tag) -> str:
    return _normalize_whitespace(cell.get_text(" "))


def extract_row_cells(row: Tag) -> List[str]:
    """
    Extract the rendered cell texts of a table row.

    Cells spanning several columns or rows get an inline note such as
    ``_(spans 2 cols)_``. Literal pipes are escaped so the row stays
    parseable once rendered.

    Args:
        row: ``<tr>`` element

    Returns:
        Cell texts
    """
    cells = []

    for cell in _row_cells(row):
        cell_text = _cell_text(cell)

        colspan = _span_value(cell, "colspan")
        rowspan = _span_value(cell, "rowspan")

        if colspan > 1 or rowspan > 1:
            span_note = []
            if colspan > 1:
                span_note.append(f"spans {colspan} cols")
            if rowspan > 1:
                span_note.append(f"spans {rowspan} rows")
            cell_text = f"{cell_text} _({', '.join(span_note)})_".strip()

        cells.append(cell_text.replace("|", "\\|"))

    return cells


def looks_like_header_row(cells: List[str]) -> bool:
    """Every cell is non-empty, short and not a bare number."""
    if not cells:
        return False

    return all(
        0 < len(cell.strip()) < MAX_HEADER_CELL_LENGTH
        and not BARE_NUMBER_PATTERN.match(cell.strip())
        for cell in cells
    )


def _partition_rows(table: Tag) -> Tuple[List[Tag], List[Tag], List[Tag]]:
    """Split the rows of a table into header, body and footer rows."""
    # Spacer rows without cells carry nothing to render
    rows = [row for row in _own_rows(table) if _row_cells(row)]

    header_rows = [row for row in rows if row.parent.name == "thead"]
    footer_rows = [row for row in rows if row.parent.name == "tfoot"]
    body_rows = [row for row in rows if row.parent.name not in ("thead", "tfoot")]

    if not header_rows and body_rows:
        first_row = body_rows[0]
        if any(cell.name == "th" for cell in _row_cells(first_row)) or looks_like_header_row(
            extract_row_cells(first_row)
        ):
            header_rows = [first_row]
            body_rows = body_rows[1:]

    return header_rows, body_rows, footer_rows


def _pad(cells: List[str], width: int) -> List[str]:
    return cells + [""] * (width - len(cells))


def _render_row(cells: List[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def render_markdown_table(rows: List[List[str]]) -> str:
    """
    Render rows as a pipe-delimited table.

    The first row is followed by a separator line; all rows are padded to the
    widest row.
    """
    if not rows:
        return ""

    col_count = max(len(row) for row in rows)
    normalized_rows = [_pad(row, col_count) for row in rows]

    lines = [_render_row(normalized_rows[0]), "|" + " --- |" * col_count]
    lines.extend(_render_row(row) for row in normalized_rows[1:])
    return "\n".join(lines)


def convert_html_table_to_markdown(table: Tag) -> str:
    """
    Convert an HTML table to Markdown.

    Header rows come from ``<thead>``, else from a first row containing
    ``<th>`` cells or looking like headers. Footer rows are appended last.

    Args:
        table: ``<table>`` element

    Returns:
        Markdown table, or an empty string for an empty table
    """
    header_rows, body_rows, footer_rows = _partition_rows(table)
    rows = [extract_row_cells(row) for row in header_rows + body_rows + footer_rows]
    rows = [row for row in rows if row]

    if not rows:
        logger.warning("Empty table found")
        return ""

    return render_markdown_table(rows)


def classify_column_types(rows: List[List[str]], col_count: int) -> List[ColumnType]:
    """
    Classify each column as numeric, text or mixed.

    Args:
        rows: Body rows as cell texts
        col_count: Number of columns

    Returns:
        One ColumnType per column
    """
    column_types = []

    for col in range(col_count):
        values = [row[col].strip() for row in rows if col < len(row) and row[col].strip()]

        if not values:
            column_types.append(ColumnType.TEXT)
            continue

        numeric_count = sum(1 for value in values if NUMERIC_CELL_PATTERN.match(value))
        numeric_ratio = numeric_count / len(values)

        if numeric_ratio > NUMERIC_COLUMN_RATIO:
            column_types.append(ColumnType.NUMERIC)
        elif numeric_ratio < TEXT_COLUMN_RATIO:
            column_types.append(ColumnType.TEXT)
        else:
            column_types.append(ColumnType.MIXED)

    return column_types


def extract_table_metadata(table: Tag, markdown: Optional[str] = None) -> TableMetadata:
    """
    Extract structural metadata from an HTML table.

    Args:
        table: ``<table>`` element
        markdown: Already converted Markdown (converted again when omitted)

    Returns:
        TableMetadata
    """
    caption_element = table.find("caption")
    caption = _cell_text(caption_element) if caption_element is not None else None
    caption = caption or None

    header_rows, body_rows, footer_rows = _partition_rows(table)
    all_rows = header_rows + body_rows + footer_rows
    col_count = max((len(_row_cells(row)) for row in all_rows), default=0)

    headers = _pad(extract_row_cells(header_rows[0]), col_count) if header_rows else []

    # Column types use raw cell text so span notes do not hide numbers
    body_values = [[_cell_text(cell) for cell in _row_cells(row)] for row in body_rows]
    column_types = classify_column_types(body_values, col_count)

    if markdown is None:
        markdown = convert_html_table_to_markdown(table)

    return TableMetadata(
        caption=caption,
        headers=headers,
        column_types=column_types,
        row_count=len(body_rows) + len(footer_rows),
        col_count=col_count,
        estimated_size=len(markdown),
        has_caption=caption is not None,
        has_headers=len(headers) > 0,
    )


def _find_context_paragraph(siblings) -> str:
    attempts = 0
    for sibling in siblings:
        if not isinstance(sibling, Tag):
            continue
        if attempts >= CONTEXT_SIBLING_LIMIT:
            break
        attempts += 1

        if sibling.name == "p":
            text = _normalize_whitespace(sibling.get_text(" "))
            if len(text) > MIN_CONTEXT_PARAGRAPH_LENGTH:
                return text

    return ""


def _find_section_heading(table: Tag) -> Optional[str]:
    # Nearest first
    preceding_headings = table.find_all_previous(HEADING_TAGS)
    if not preceding_headings:
        return None

    for parent in table.parents:
        if parent.name in ("body", "[document]"):
            break
        for heading in preceding_headings:
            if any(ancestor is parent for ancestor in heading.parents):
                return _normalize_whitespace(heading.get_text(" ")) or None

    return None


def extract_table_context(table: Tag) -> TableContext:
    """
    Extract the text surrounding a table.

    Looks at up to CONTEXT_SIBLING_LIMIT sibling elements on each side for a
    meaningful paragraph and walks up the ancestors for the closest heading
    before the table.

    Args:
        table: ``<table>`` element

    Returns:
        TableContext
    """
    return TableContext(
        preceding_text=_find_context_paragraph(table.previous_siblings),
        following_text=_find_context_paragraph(table.next_siblings),
        section_heading=_find_section_heading(table),
    )


def build_table_block(
    markdown_table: str,
    metadata: TableMetadata,
    context: TableContext,
    include_context: bool = True,
) -> str:
    """
    Build a table block with caption and short surrounding context.

    The section heading is not repeated since it already lives in the section
    structure.
    """
    parts = []

    if include_context and context.preceding_text:
        if len(context.preceding_text) < SHORT_REFERENCE_LENGTH:
            parts.append(context.preceding_text)
            parts.append("")

    if metadata.caption:
        parts.append(f"**{metadata.caption}**")
        parts.append("")

    parts.append(markdown_table)

    if include_context and context.following_text:
        if len(context.following_text) < SHORT_REFERENCE_LENGTH:
            parts.append("")
            parts.append(context.following_text)

    return "\n".join(parts)


def extract_table(table: Tag, table_index: int = 0, include_context: bool = True) -> Optional[TableExtraction]:
    """
    Normalize one HTML table with its metadata and context.

    Returns:
        TableExtraction, or None for an empty table
    """
    markdown = convert_html_table_to_markdown(table)
    if not markdown:
        return None

    metadata = extract_table_metadata(table, markdown)
    context = extract_table_context(table)

    return TableExtraction(
        markdown=markdown,
        metadata=metadata,
        context=context,
        block=build_table_block(markdown, metadata, context, include_context),
        table_index=table_index,
    )


def extract_tables_from_html(html: str, include_context: bool = True) -> List[TableExtraction]:
    """
    Extract every top-level table of an HTML document.

    Args:
        html: HTML source
        include_context: Include short surrounding paragraphs in each block

    Returns:
        TableExtraction list in document order (empty tables skipped)
    """
    soup = BeautifulSoup(html, "html.parser")

    extractions = []
    for table in soup.find_all("table"):
        if table.find_parent("table") is not None:
            continue

        extraction = extract_table(table, len(extractions), include_context)
        if extraction is not None:
            extractions.append(extraction)

    logger.info(f"Extracted {len(extractions)} table(s) from HTML")
    return extractions
