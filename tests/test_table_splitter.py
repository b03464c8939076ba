"""
Test suite for Markdown table detection, parsing and splitting.
"""

import sys
import unittest
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from paperchunk.core.table_splitter import (
    calculate_rows_per_partition,
    find_markdown_tables,
    is_continuation_row,
    parse_markdown_table,
    should_split_table,
    split_cells,
    split_large_table,
)
from paperchunk.models.table import ColumnType

HEADER_ROW = "| " + "H" * 16 + " |"
SEPARATOR_ROW = "| " + "-" * 16 + " |"


def make_large_table(row_count=50):
    """Table with 20-char header lines and 39-char data rows."""
    rows = ["| " + f"row {i:02d} ".ljust(35, "x") + " |" for i in range(row_count)]
    return "\n".join([HEADER_ROW, SEPARATOR_ROW] + rows), rows


class TestShouldSplitTable(unittest.TestCase):
    """Tests for the split decision."""

    def test_small_tables_never_split(self):
        self.assertFalse(should_split_table(799, 100))
        self.assertFalse(should_split_table(0, 1))

    def test_large_tables_always_split(self):
        self.assertTrue(should_split_table(2000, 100000))
        self.assertTrue(should_split_table(5000, 100000))

    def test_medium_tables_split_when_crowding_budget(self):
        # 0.7 * 1500 = 1050
        self.assertFalse(should_split_table(1000, 1500))
        # 0.7 * 1400 = 980
        self.assertTrue(should_split_table(1000, 1400))
        self.assertTrue(should_split_table(800, 1000))

    def test_custom_thresholds(self):
        self.assertFalse(should_split_table(1500, 100, small_threshold=2000, medium_threshold=3000))
        self.assertTrue(should_split_table(1500, 100, small_threshold=100, medium_threshold=1000))


class TestSplitLargeTable(unittest.TestCase):
    """Tests for splitting tables into row partitions."""

    def test_rows_per_partition(self):
        self.assertEqual(calculate_rows_per_partition(1000, 90, 40), 22)
        self.assertEqual(calculate_rows_per_partition(100, 90, 40), 1)
        self.assertEqual(calculate_rows_per_partition(50, 90, 40), 1)

    def test_fifty_rows_into_three_partitions(self):
        table, rows = make_large_table(50)

        partitions = split_large_table(table, 1000)

        self.assertEqual(len(partitions), 3)

        data_counts = []
        for partition in partitions:
            lines = partition.split("\n")
            data_counts.append(len([line for line in lines[2:] if not is_continuation_row(line)]))
        self.assertEqual(data_counts, [22, 22, 6])

    def test_partitions_repeat_header(self):
        table, _ = make_large_table(50)

        for partition in split_large_table(table, 1000):
            lines = partition.split("\n")
            self.assertEqual(lines[0], HEADER_ROW)
            self.assertEqual(lines[1], SEPARATOR_ROW)

    def test_continuation_notes(self):
        table, _ = make_large_table(50)

        partitions = split_large_table(table, 1000)

        first, middle, last = [partition.split("\n") for partition in partitions]
        self.assertIn("continued in next chunk", first[-1])
        self.assertFalse(any("continued from previous chunk" in line for line in first))
        self.assertIn("continued from previous chunk (2/3)", middle[2])
        self.assertIn("continued in next chunk", middle[-1])
        self.assertIn("continued from previous chunk (3/3)", last[2])
        self.assertNotIn("continued in next chunk", last[-1])

    def test_rows_reconstructed_in_order(self):
        table, rows = make_large_table(50)

        reconstructed = []
        for partition in split_large_table(table, 1000):
            lines = partition.split("\n")
            reconstructed.extend(line for line in lines[2:] if not is_continuation_row(line))

        self.assertEqual(reconstructed, rows)

    def test_partitions_parse_back(self):
        table, _ = make_large_table(50)

        for partition in split_large_table(table, 1000):
            metadata = parse_markdown_table(partition)
            self.assertIsNotNone(metadata)
            self.assertEqual(metadata.col_count, 1)

    def test_tiny_table_returned_unchanged(self):
        table = "| A |\n| --- |"
        self.assertEqual(split_large_table(table, 10), [table])


class TestParseMarkdownTable(unittest.TestCase):
    """Tests for recovering metadata from Markdown tables."""

    def test_parse_valid_table(self):
        table = "| Model | Score | Notes |\n| --- | --- | --- |\n| A | 71.2% | ok |\n| B | 84.5% | best |"

        metadata = parse_markdown_table(table)

        self.assertEqual(metadata.headers, ["Model", "Score", "Notes"])
        self.assertEqual(metadata.col_count, 3)
        self.assertEqual(metadata.row_count, 2)
        self.assertEqual(
            metadata.column_types, [ColumnType.TEXT, ColumnType.NUMERIC, ColumnType.TEXT]
        )
        self.assertEqual(metadata.estimated_size, len(table))
        self.assertTrue(metadata.has_headers)
        self.assertIsNone(metadata.caption)

    def test_separator_count_mismatch(self):
        table = "| A | B | C |\n| --- | --- |\n| 1 | 2 | 3 |"
        self.assertIsNone(parse_markdown_table(table))

    def test_too_few_lines(self):
        self.assertIsNone(parse_markdown_table("| A | B |\n| --- | --- |"))

    def test_alignment_separator(self):
        table = "| A | B |\n| :--- | ---: |\n| x | 1 |"
        self.assertIsNotNone(parse_markdown_table(table))

    def test_escaped_pipes(self):
        self.assertEqual(split_cells("| a \\| b | c |"), ["a \\| b", "c"])


class TestFindMarkdownTables(unittest.TestCase):
    """Tests for locating tables inside section text."""

    def test_find_table_in_text(self):
        content = "Intro text.\n\n| A | B |\n| --- | --- |\n| 1 | 2 |\n\nAfter."

        tables = find_markdown_tables(content)

        self.assertEqual(len(tables), 1)
        self.assertEqual(tables[0].start, content.index("| A"))
        self.assertEqual(tables[0].markdown, "| A | B |\n| --- | --- |\n| 1 | 2 |")
        self.assertEqual(content[tables[0].start:tables[0].end], tables[0].markdown)

    def test_multi_column_separator(self):
        content = "| A | B | C |\n| --- | --- | --- |\n| 1 | 2 | 3 |"
        self.assertEqual(len(find_markdown_tables(content)), 1)

    def test_crlf_line_endings(self):
        content = "Intro.\r\n\r\n| A | B |\r\n| --- | --- |\r\n| 1 | 2 |\r\n\r\nAfter."

        tables = find_markdown_tables(content)

        self.assertEqual(len(tables), 1)
        self.assertEqual(tables[0].markdown, "| A | B |\r\n| --- | --- |\r\n| 1 | 2 |")
        metadata = parse_markdown_table(tables[0].markdown)
        self.assertEqual(metadata.headers, ["A", "B"])
        self.assertEqual(metadata.row_count, 1)

    def test_no_table(self):
        self.assertEqual(find_markdown_tables("Plain | text with a pipe."), [])


if __name__ == "__main__":
    unittest.main()
