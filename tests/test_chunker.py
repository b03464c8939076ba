"""
Test suite for the adaptive section chunker.
"""

import asyncio
import sys
import unittest
from pathlib import Path

import pytest

# Add the project root to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from paperchunk.core.chunker import (
    TABLE_SEGMENT,
    TEXT_SEGMENT,
    AdaptiveChunker,
    chunk_sections,
    estimate_tokens,
    extract_paragraphs,
    extract_sentences,
    group_sentences,
    segment_section,
)
from paperchunk.core.quota import StaticQuotaProvider
from paperchunk.models.section import PaperSection


def make_section(heading, content, level=2, start_index=0, parent_heading=None):
    return PaperSection(
        heading=heading,
        level=level,
        content=content,
        start_index=start_index,
        parent_heading=parent_heading,
    )


def make_paragraph(sentence_count, sentence_length=99, word="result"):
    """Paragraph of distinct sentences, each exactly ``sentence_length`` chars."""
    sentences = []
    for i in range(sentence_count):
        prefix = f"{word} {i} "
        sentences.append(prefix + "w" * (sentence_length - len(prefix) - 1) + ".")
    return " ".join(sentences)


def make_large_table(row_count=50):
    header = "| " + "H" * 16 + " |"
    separator = "| " + "-" * 16 + " |"
    rows = ["| " + f"row {i:02d} ".ljust(35, "x") + " |" for i in range(row_count)]
    return "\n".join([header, separator] + rows)


class CountingQuotaProvider:
    """Quota provider recording how often it is asked."""

    def __init__(self, max_chunk_size):
        self.max_chunk_size = max_chunk_size
        self.calls = 0

    async def get_max_chunk_size(self):
        self.calls += 1
        return self.max_chunk_size


class FailingQuotaProvider:
    async def get_max_chunk_size(self):
        raise RuntimeError("quota backend unavailable")


class TestTextSplitting(unittest.TestCase):
    """Tests for paragraph and sentence helpers."""

    def test_extract_paragraphs(self):
        self.assertEqual(extract_paragraphs("a\n\n\n  \nb\n"), ["a", "b"])
        self.assertEqual(extract_paragraphs("  \n\n "), [])

    def test_extract_sentences_keeps_trailing_text(self):
        self.assertEqual(
            extract_sentences("First. Second! Third? trailing"),
            ["First.", "Second!", "Third?", "trailing"],
        )

    def test_extract_sentences_without_terminator(self):
        self.assertEqual(extract_sentences("no terminator here"), ["no terminator here"])

    def test_group_sentences(self):
        self.assertEqual(
            group_sentences(["aaaa", "bbbb", "cccc"], 9),
            [["aaaa", "bbbb"], ["cccc"]],
        )

    def test_group_keeps_long_sentence_alone(self):
        self.assertEqual(
            group_sentences(["short.", "x" * 20, "tail."], 10),
            [["short."], ["x" * 20], ["tail."]],
        )

    def test_decimals_stay_in_sentence(self):
        self.assertEqual(
            extract_sentences("The value is 3.5 m in trial one. Trial two reached 4.25 m!"),
            ["The value is 3.5 m in trial one.", "Trial two reached 4.25 m!"],
        )

    def test_estimate_tokens(self):
        self.assertEqual(estimate_tokens("abcde"), 2)
        self.assertEqual(estimate_tokens("abcd"), 1)
        self.assertEqual(estimate_tokens(""), 0)


class TestSegmentSection(unittest.TestCase):
    """Tests for splitting content into text and table segments."""

    def test_text_table_text(self):
        content = "Intro paragraph here.\n\n| A | B |\n| --- | --- |\n| 1 | 2 |\n\nClosing paragraph."

        segments = segment_section(content)

        self.assertEqual([s.kind for s in segments], [TEXT_SEGMENT, TABLE_SEGMENT, TEXT_SEGMENT])
        self.assertEqual(segments[1].text, "| A | B |\n| --- | --- |\n| 1 | 2 |")
        self.assertEqual(segments[1].table.col_count, 2)
        self.assertEqual("".join(s.text for s in segments), content)

    def test_malformed_table_stays_text(self):
        content = "| A | B | C |\n| --- | --- |\n| 1 | 2 | 3 |"

        with self.assertLogs("paperchunk.core.chunker", level="WARNING"):
            segments = segment_section(content)

        self.assertEqual(len(segments), 1)
        self.assertEqual(segments[0].kind, TEXT_SEGMENT)
        self.assertEqual(segments[0].text, content)

    def test_empty_content(self):
        self.assertEqual(segment_section(""), [])


class TestAdaptiveChunker(unittest.TestCase):
    """Tests for the AdaptiveChunker class."""

    def setUp(self):
        self.chunker = AdaptiveChunker(StaticQuotaProvider(1500))

    def test_results_example(self):
        short_paragraph = make_paragraph(1, sentence_length=100)
        long_paragraph = make_paragraph(30)
        section = make_section("Results", short_paragraph + "\n\n" + long_paragraph)

        result = asyncio.run(self.chunker.chunk_document([section], "paper"))
        chunks = result.chunks

        self.assertEqual(chunks[0].content, short_paragraph)
        self.assertEqual(chunks[0].paragraph_index, 0)
        self.assertIsNone(chunks[0].sentence_group_index)

        sentence_chunks = chunks[1:]
        self.assertGreaterEqual(len(sentence_chunks), 2)
        for i, chunk in enumerate(sentence_chunks):
            self.assertLessEqual(len(chunk.content), 1500)
            self.assertEqual(chunk.paragraph_index, 1)
            self.assertEqual(chunk.sentence_group_index, i)
        self.assertEqual(" ".join(c.content for c in sentence_chunks), long_paragraph)

    def test_chunk_fields(self):
        section = make_section(
            "Methods", "First paragraph.\n\nSecond paragraph.", level=3, parent_heading="Study"
        )

        chunks = asyncio.run(self.chunker.chunk_document([section], "doc1")).chunks

        self.assertEqual([c.id for c in chunks], ["chunk_doc1_0", "chunk_doc1_1"])
        self.assertTrue(all(c.paper_id == "doc1" for c in chunks))
        self.assertTrue(all(c.section == "Methods" for c in chunks))
        self.assertTrue(all(c.section_level == 3 for c in chunks))
        self.assertTrue(all(c.parent_section == "Study" for c in chunks))
        self.assertTrue(all(not c.is_table for c in chunks))
        self.assertEqual(chunks[1].token_count, estimate_tokens("Second paragraph."))

    def test_offsets_are_document_relative(self):
        content = "First paragraph.\n\nSecond paragraph."
        section = make_section("Intro", content, start_index=1000)

        chunks = self.chunker.chunk_with_budget([section], "doc", 1500).chunks

        for chunk in chunks:
            self.assertEqual(content[chunk.start_char - 1000:chunk.end_char - 1000], chunk.content)

    def test_sentence_group_offsets(self):
        paragraph = make_paragraph(30)
        section = make_section("Results", paragraph, start_index=50)

        chunks = self.chunker.chunk_with_budget([section], "doc", 1500).chunks

        self.assertEqual(chunks[0].start_char, 50)
        self.assertEqual(chunks[-1].end_char, 50 + len(paragraph))
        self.assertLess(chunks[0].end_char, chunks[1].start_char)

    def test_text_chunks_fit_budget(self):
        content = "\n\n".join(make_paragraph(n, word=f"p{n}") for n in (1, 5, 12, 40, 3))
        section = make_section("Discussion", content)

        chunks = self.chunker.chunk_with_budget([section], "doc", 800).chunks

        self.assertTrue(all(len(c.content) <= 800 for c in chunks))

    def test_over_long_sentence_kept_whole(self):
        long_sentence = "x" * 2000 + "."
        section = make_section("Appendix", "Short one. " + long_sentence + " Short two.")

        chunks = self.chunker.chunk_with_budget([section], "doc", 500).chunks

        self.assertEqual([c.content for c in chunks], ["Short one.", long_sentence, "Short two."])

    def test_section_index_and_totals(self):
        sections = [
            make_section("A", make_paragraph(30)),
            make_section("B", "Only paragraph."),
            make_section("C", "One.\n\nTwo.\n\nThree."),
        ]

        chunks = self.chunker.chunk_with_budget(sections, "doc", 1500).chunks

        for heading in ("A", "B", "C"):
            section_chunks = [c for c in chunks if c.section == heading]
            self.assertEqual([c.section_index for c in section_chunks], list(range(len(section_chunks))))
            self.assertTrue(all(c.total_section_chunks == len(section_chunks) for c in section_chunks))

    def test_global_index_contiguous(self):
        sections = [make_section(f"S{i}", make_paragraph(i + 1)) for i in range(5)]

        chunks = self.chunker.chunk_with_budget(sections, "doc", 300).chunks

        self.assertEqual([c.index for c in chunks], list(range(len(chunks))))
        self.assertEqual([c.id for c in chunks], [f"chunk_doc_{i}" for i in range(len(chunks))])

    def test_deterministic(self):
        sections = [
            make_section("Results", make_paragraph(20) + "\n\n" + make_large_table()),
            make_section("Discussion", "Closing words."),
        ]

        first = self.chunker.chunk_with_budget(sections, "doc", 1000)
        second = self.chunker.chunk_with_budget(sections, "doc", 1000)

        self.assertEqual(first.chunks, second.chunks)
        self.assertEqual(first.stats, second.stats)

    def test_small_table_kept_whole(self):
        table = "| A | B |\n| --- | --- |\n| 1 | 2 |"
        content = "Intro paragraph here.\n\n" + table + "\n\nClosing paragraph."
        section = make_section("Results", content)

        chunks = self.chunker.chunk_with_budget([section], "doc", 1500).chunks

        self.assertEqual([c.is_table for c in chunks], [False, True, False])
        table_chunk = chunks[1]
        self.assertEqual(table_chunk.content, table)
        self.assertFalse(table_chunk.table_metadata.is_split)
        self.assertEqual(table_chunk.table_metadata.headers, ["A", "B"])
        self.assertEqual(table_chunk.table_metadata.row_count, 1)
        self.assertIsNone(table_chunk.paragraph_index)
        self.assertEqual(content[table_chunk.start_char:table_chunk.end_char], table)
        self.assertEqual(chunks[2].paragraph_index, 1)

    def test_large_table_split(self):
        section = make_section("Results", make_large_table(50))

        chunks = self.chunker.chunk_with_budget([section], "doc", 1000).chunks

        self.assertEqual(len(chunks), 3)
        for i, chunk in enumerate(chunks):
            self.assertTrue(chunk.is_table)
            self.assertTrue(chunk.table_metadata.is_split)
            self.assertEqual(chunk.table_metadata.split_index, i)
            self.assertEqual(chunk.table_metadata.total_splits, 3)
            self.assertEqual(chunk.table_metadata.row_count, 50)
            self.assertEqual(chunk.total_section_chunks, 3)

    def test_malformed_table_chunked_as_text(self):
        content = "| A | B | C |\n| --- | --- |\n| 1 | 2 | 3 |"
        section = make_section("Results", content)

        chunks = self.chunker.chunk_with_budget([section], "doc", 1500).chunks

        self.assertEqual(len(chunks), 1)
        self.assertFalse(chunks[0].is_table)
        self.assertEqual(chunks[0].content, content)

    def test_empty_section(self):
        result = self.chunker.chunk_with_budget([make_section("Empty", "  \n\n  ")], "doc", 1500)

        self.assertEqual(result.chunks, [])
        self.assertEqual(result.stats.total_chunks, 0)

    def test_no_sections(self):
        result = asyncio.run(self.chunker.chunk_document([], "doc"))

        self.assertEqual(result.chunks, [])
        self.assertEqual(result.stats.average_chunk_size, 0)

    def test_stats_in_result(self):
        section = make_section("Intro", "Tiny.\n\n" + "y" * 20 + ".")

        stats = self.chunker.chunk_with_budget([section], "doc", 1500).stats

        self.assertEqual(stats.total_chunks, 2)
        self.assertEqual(stats.min_chunk_size, 5)
        self.assertEqual(stats.max_chunk_size, 21)
        self.assertEqual(stats.average_chunk_size, 13)

    def test_source_locators_passed_through(self):
        section = PaperSection(
            heading="Intro",
            level=2,
            content="Text.",
            css_selector="#intro",
            element_id="intro",
            x_path="/html/body/section[1]",
        )

        chunk = self.chunker.chunk_with_budget([section], "doc", 1500).chunks[0]

        self.assertEqual(chunk.css_selector, "#intro")
        self.assertEqual(chunk.element_id, "intro")
        self.assertEqual(chunk.x_path, "/html/body/section[1]")

    def test_sentence_chunks_keep_source_text(self):
        content = "The value is 3.5 m in trial one. Trial two reached 4.25 m in the field."
        section = make_section("Results", content)

        chunks = self.chunker.chunk_with_budget([section], "doc", 40).chunks

        self.assertEqual(
            [c.content for c in chunks],
            ["The value is 3.5 m in trial one.", "Trial two reached 4.25 m in the field."],
        )

    def test_crlf_table_detected(self):
        table = "| A | B |\r\n| --- | --- |\r\n| 1 | 2 |"
        section = make_section("Results", "Intro.\r\n\r\n" + table + "\r\n\r\nAfter.")

        chunks = self.chunker.chunk_with_budget([section], "doc", 1500).chunks

        self.assertEqual([c.is_table for c in chunks], [False, True, False])
        self.assertEqual(chunks[1].content, table)
        self.assertEqual([chunks[0].content, chunks[2].content], ["Intro.", "After."])

    def test_zero_table_thresholds_respected(self):
        chunker = AdaptiveChunker(
            StaticQuotaProvider(1500), small_table_threshold=0, medium_table_threshold=0
        )
        section = make_section("Results", "| A | B |\n| --- | --- |\n| 1 | 2 |")

        chunks = chunker.chunk_with_budget([section], "doc", 1500).chunks

        self.assertEqual(chunker.small_table_threshold, 0)
        self.assertEqual(chunker.medium_table_threshold, 0)
        # Split path taken even though one partition suffices
        self.assertEqual(chunks[0].table_metadata.total_splits, 1)
        self.assertFalse(chunks[0].table_metadata.is_split)

    def test_non_positive_budget(self):
        with self.assertRaises(ValueError):
            self.chunker.chunk_with_budget([make_section("A", "Text.")], "doc", 0)


class TestQuotaInteraction(unittest.TestCase):
    """Tests for how the chunker uses its quota provider."""

    def test_quota_requested_once(self):
        provider = CountingQuotaProvider(1500)
        sections = [make_section(f"S{i}", "Some text.") for i in range(3)]

        asyncio.run(AdaptiveChunker(provider).chunk_document(sections, "doc"))

        self.assertEqual(provider.calls, 1)

    def test_quota_failure_propagates(self):
        chunker = AdaptiveChunker(FailingQuotaProvider())

        with self.assertRaises(RuntimeError):
            asyncio.run(chunker.chunk_document([make_section("A", "Text.")], "doc"))

    def test_chunk_sections_entry_point(self):
        sections = [make_section("A", "One.\n\nTwo.")]

        result = asyncio.run(chunk_sections(sections, "paper", StaticQuotaProvider(1500)))

        self.assertEqual(len(result.chunks), 2)
        self.assertEqual(result.chunks[0].id, "chunk_paper_0")


class TestPaperSection(unittest.TestCase):
    """Tests for building sections from splitter output."""

    def test_from_camel_case_dict(self):
        section = PaperSection.from_dict(
            {
                "heading": "Results",
                "level": 2,
                "content": "Text.",
                "parentHeading": "Study",
                "startIndex": 120,
                "cssSelector": "#results",
                "xPath": "/html/body/section[3]",
            }
        )

        self.assertEqual(section.parent_heading, "Study")
        self.assertEqual(section.start_index, 120)
        self.assertEqual(section.css_selector, "#results")
        self.assertEqual(section.x_path, "/html/body/section[3]")

    def test_missing_content(self):
        with pytest.raises(ValueError):
            PaperSection.from_dict({"heading": "Results"})


if __name__ == "__main__":
    unittest.main()
