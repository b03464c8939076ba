"""
Adaptive chunking of research paper sections

Sections are chunked along natural document boundaries: one chunk per
paragraph, sentence groups for paragraphs above the size budget, and tables
kept whole or split by rows with the header repeated. The size budget comes
from a quota provider queried once per document.
"""

import logging
import math
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from ..models.chunk import ChunkTableMetadata, ChunkingResult, ContentChunk
from ..models.section import PaperSection
from ..models.table import TableMetadata
from .config import Config
from .quota import CHARS_PER_TOKEN, InputQuotaService
from .stats import compute_chunk_stats
from .table_splitter import (
    find_markdown_tables,
    parse_markdown_table,
    should_split_table,
    split_large_table,
)

# Configure logging
logger = logging.getLogger(__name__)

TEXT_SEGMENT = "text"
TABLE_SEGMENT = "table"

PARAGRAPH_SEPARATOR = re.compile(r"\n\s*\n")
# A terminator ends a sentence only before whitespace or the end of text
SENTENCE_PATTERN = re.compile(r"\S.*?(?:[.!?]+(?=\s|$)|$)", re.DOTALL)


@dataclass(frozen=True)
class Segment:
    """A run of section content: plain text or one table"""

    kind: str
    text: str
    start: int
    end: int
    table: Optional[TableMetadata] = None


@dataclass(frozen=True)
class _Piece:
    content: str
    start: int
    end: int
    table_metadata: Optional[ChunkTableMetadata] = None
    paragraph_index: Optional[int] = None
    sentence_group_index: Optional[int] = None


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def extract_paragraphs(content: str) -> List[str]:
    """Split content on blank lines, dropping empty paragraphs."""
    paragraphs = (paragraph.strip() for paragraph in PARAGRAPH_SEPARATOR.split(content))
    return [paragraph for paragraph in paragraphs if paragraph]


def extract_sentences(text: str) -> List[str]:
    """
    Split text into sentences ending in ``.``, ``!`` or ``?``.

    Text after the last terminator is kept as a final sentence.
    """
    sentences = (sentence.strip() for sentence in SENTENCE_PATTERN.findall(text))
    return [sentence for sentence in sentences if sentence] or [text.strip()]


def group_sentences(sentences: Sequence[str], max_chunk_size: int) -> List[List[str]]:
    """
    Greedily pack sentences into groups whose space-joined length fits the budget.

    A sentence longer than the budget forms a group of its own.

    Args:
        sentences: Sentences in order
        max_chunk_size: Chunk budget in characters

    Returns:
        Sentence groups in order
    """
    groups = []
    current: List[str] = []
    current_length = 0

    for sentence in sentences:
        candidate_length = current_length + 1 + len(sentence) if current else len(sentence)

        if current and candidate_length > max_chunk_size:
            groups.append(current)
            current = [sentence]
            current_length = len(sentence)
        else:
            current.append(sentence)
            current_length = candidate_length

    if current:
        groups.append(current)

    return groups


def segment_section(content: str) -> List[Segment]:
    """
    Split section content into text and table segments.

    A tabular block whose structure cannot be parsed stays part of the
    surrounding text.

    Args:
        content: Section text

    Returns:
        Segments in order of appearance
    """
    segments = []
    last_position = 0

    for found in find_markdown_tables(content):
        metadata = parse_markdown_table(found.markdown)
        if metadata is None:
            logger.warning(
                f"Failed to parse table at offset {found.start}, treating it as text"
            )
            continue

        if found.start > last_position:
            segments.append(
                Segment(TEXT_SEGMENT, content[last_position:found.start], last_position, found.start)
            )
        segments.append(Segment(TABLE_SEGMENT, found.markdown, found.start, found.end, metadata))
        last_position = found.end

    if last_position < len(content):
        segments.append(
            Segment(TEXT_SEGMENT, content[last_position:], last_position, len(content))
        )

    return segments


def finalize_section_chunks(chunks: Sequence[ContentChunk]) -> List[ContentChunk]:
    """Return copies of a section's chunks carrying the final section chunk count."""
    total_chunks = len(chunks)
    return [
        replace(chunk, section_index=position, total_section_chunks=total_chunks)
        for position, chunk in enumerate(chunks)
    ]


def _locate(content: str, text: str, cursor: int) -> int:
    position = content.find(text, cursor)
    return position if position >= 0 else cursor


def _table_snapshot(
    table: TableMetadata,
    is_split: bool = False,
    split_index: Optional[int] = None,
    total_splits: Optional[int] = None,
) -> ChunkTableMetadata:
    return ChunkTableMetadata(
        caption=table.caption,
        headers=list(table.headers),
        row_count=table.row_count,
        col_count=table.col_count,
        column_types=list(table.column_types),
        is_split=is_split,
        split_index=split_index,
        total_splits=total_splits,
    )


class AdaptiveChunker:
    """Chunks paper sections to fit the downstream model's input quota"""

    def __init__(
        self,
        quota_provider=None,
        small_table_threshold: Optional[int] = None,
        medium_table_threshold: Optional[int] = None,
        show_progress: bool = False,
    ):
        """
        Initialize the chunker.

        Args:
            quota_provider: Object with ``async get_max_chunk_size()``
                (defaults to InputQuotaService)
            small_table_threshold: Tables below this size are never split
            medium_table_threshold: Tables below this size are split only
                when they use 70% of the budget or more
            show_progress: Show a progress bar over sections
        """
        self.quota_provider = quota_provider or InputQuotaService()
        self.small_table_threshold = (
            Config.SMALL_TABLE_THRESHOLD if small_table_threshold is None else small_table_threshold
        )
        self.medium_table_threshold = (
            Config.MEDIUM_TABLE_THRESHOLD if medium_table_threshold is None else medium_table_threshold
        )
        self.show_progress = show_progress

        logger.debug(
            f"Adaptive chunker initialized: small table={self.small_table_threshold}, "
            f"medium table={self.medium_table_threshold}"
        )

    async def chunk_document(
        self, sections: Sequence[PaperSection], document_id: str
    ) -> ChunkingResult:
        """
        Chunk all sections of a document.

        The quota provider is queried once, before any chunking. Its errors
        propagate to the caller.

        Args:
            sections: Sections in document order
            document_id: Paper identifier used in chunk ids

        Returns:
            ChunkingResult with chunks and statistics
        """
        logger.info(f"Chunking {len(sections)} sections for paper {document_id}")

        try:
            max_chunk_size = await self.quota_provider.get_max_chunk_size()
        except Exception as e:
            logger.error(f"Failed to get max chunk size: {e}")
            raise

        logger.debug(f"Max allowed chunk size: {max_chunk_size} chars")
        return self.chunk_with_budget(sections, document_id, max_chunk_size)

    def chunk_with_budget(
        self, sections: Sequence[PaperSection], document_id: str, max_chunk_size: int
    ) -> ChunkingResult:
        """
        Chunk all sections with a known size budget.

        Args:
            sections: Sections in document order
            document_id: Paper identifier used in chunk ids
            max_chunk_size: Chunk budget in characters

        Returns:
            ChunkingResult with chunks and statistics

        Raises:
            ValueError: If the budget is not positive
        """
        if max_chunk_size <= 0:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

        all_chunks: List[ContentChunk] = []
        global_index = 0

        for section in tqdm(sections, desc="Chunking sections", disable=not self.show_progress):
            section_chunks = self.chunk_section(section, document_id, max_chunk_size, global_index)
            all_chunks.extend(section_chunks)
            global_index += len(section_chunks)

        stats = compute_chunk_stats(all_chunks)

        logger.info(f"Created {len(all_chunks)} chunks from {len(sections)} sections")
        if sections:
            logger.debug(f"Avg chunks per section: {len(all_chunks) / len(sections):.1f}")

        return ChunkingResult(chunks=all_chunks, stats=stats)

    def chunk_section(
        self,
        section: PaperSection,
        document_id: str,
        max_chunk_size: int,
        start_global_index: int,
    ) -> List[ContentChunk]:
        """
        Chunk a single section.

        Args:
            section: Section to chunk
            document_id: Paper identifier used in chunk ids
            max_chunk_size: Chunk budget in characters
            start_global_index: Global index of the section's first chunk

        Returns:
            Finalized chunks of the section
        """
        segments = segment_section(section.content)
        table_count = sum(1 for segment in segments if segment.kind == TABLE_SEGMENT)
        logger.debug(
            f"Chunking section \"{section.heading}\" ({len(section.content)} chars, "
            f"{table_count} table(s))"
        )

        pieces: List[_Piece] = []
        paragraph_count = 0

        for segment in segments:
            if segment.kind == TABLE_SEGMENT:
                pieces.extend(self._chunk_table_segment(segment, max_chunk_size))
            else:
                text_pieces, paragraph_count = self._chunk_text_segment(
                    section.content, segment, max_chunk_size, paragraph_count
                )
                pieces.extend(text_pieces)

        provisional_chunks = [
            self._build_chunk(section, document_id, start_global_index, position, piece)
            for position, piece in enumerate(pieces)
        ]
        chunks = finalize_section_chunks(provisional_chunks)

        logger.debug(f"Created {len(chunks)} chunks for section \"{section.heading}\"")
        return chunks

    def _chunk_text_segment(
        self, content: str, segment: Segment, max_chunk_size: int, paragraph_offset: int
    ) -> Tuple[List[_Piece], int]:
        """Chunk a text segment by paragraphs, falling back to sentence groups."""
        pieces = []
        cursor = segment.start
        paragraphs = extract_paragraphs(segment.text)

        for i, paragraph in enumerate(paragraphs):
            paragraph_index = paragraph_offset + i
            paragraph_start = _locate(content, paragraph, cursor)
            cursor = paragraph_start + len(paragraph)

            if len(paragraph) <= max_chunk_size:
                pieces.append(
                    _Piece(paragraph, paragraph_start, cursor, paragraph_index=paragraph_index)
                )
                continue

            logger.debug(
                f"Paragraph {paragraph_index + 1} ({len(paragraph)} chars) exceeds max size, "
                f"chunking by sentences"
            )

            sentences = extract_sentences(paragraph)
            sentence_spans = []
            sentence_cursor = paragraph_start
            for sentence in sentences:
                sentence_start = _locate(content, sentence, sentence_cursor)
                sentence_cursor = sentence_start + len(sentence)
                sentence_spans.append((sentence_start, sentence_cursor))

            position = 0
            for group_index, group in enumerate(group_sentences(sentences, max_chunk_size)):
                group_start = sentence_spans[position][0]
                position += len(group)
                group_end = sentence_spans[position - 1][1]

                pieces.append(
                    _Piece(
                        " ".join(group),
                        group_start,
                        group_end,
                        paragraph_index=paragraph_index,
                        sentence_group_index=group_index,
                    )
                )

        return pieces, paragraph_offset + len(paragraphs)

    def _chunk_table_segment(self, segment: Segment, max_chunk_size: int) -> List[_Piece]:
        """Keep a table whole or split it into row partitions."""
        table = segment.table

        if not should_split_table(
            table.estimated_size,
            max_chunk_size,
            self.small_table_threshold,
            self.medium_table_threshold,
        ):
            logger.debug(
                f"Keeping table whole ({table.row_count}x{table.col_count}, "
                f"{table.estimated_size} chars)"
            )
            return [
                _Piece(segment.text, segment.start, segment.end, table_metadata=_table_snapshot(table))
            ]

        logger.debug(
            f"Splitting large table ({table.row_count}x{table.col_count}, "
            f"{table.estimated_size} chars)"
        )

        partitions = split_large_table(segment.text, max_chunk_size)
        return [
            _Piece(
                partition,
                segment.start,
                segment.end,
                table_metadata=_table_snapshot(
                    table,
                    is_split=len(partitions) > 1,
                    split_index=split_index,
                    total_splits=len(partitions),
                ),
            )
            for split_index, partition in enumerate(partitions)
        ]

    def _build_chunk(
        self,
        section: PaperSection,
        document_id: str,
        start_global_index: int,
        position: int,
        piece: _Piece,
    ) -> ContentChunk:
        index = start_global_index + position

        return ContentChunk(
            id=f"chunk_{document_id}_{index}",
            paper_id=document_id,
            content=piece.content,
            index=index,
            section=section.heading,
            section_level=section.level,
            parent_section=section.parent_heading,
            section_index=position,
            start_char=section.start_index + piece.start,
            end_char=section.start_index + piece.end,
            token_count=estimate_tokens(piece.content),
            is_table=piece.table_metadata is not None,
            table_metadata=piece.table_metadata,
            paragraph_index=piece.paragraph_index,
            sentence_group_index=piece.sentence_group_index,
            css_selector=section.css_selector,
            element_id=section.element_id,
            x_path=section.x_path,
        )


async def chunk_sections(
    sections: Sequence[PaperSection], paper_id: str, quota_provider=None
) -> ChunkingResult:
    """
    Chunk research paper sections adaptively based on the input quota.

    Args:
        sections: Sections in document order
        paper_id: Paper identifier used in chunk ids
        quota_provider: Object with ``async get_max_chunk_size()``

    Returns:
        ChunkingResult with chunks and statistics
    """
    return await AdaptiveChunker(quota_provider).chunk_document(sections, paper_id)
