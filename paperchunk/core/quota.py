"""
Input quota providers for adaptive chunk sizing

The chunker only needs an object exposing ``async get_max_chunk_size()``.
InputQuotaService derives that size from a model input quota (tokens), which
is detected by an optional async callable, read from configuration, or
replaced by a conservative fallback.
"""

import logging
import math
from typing import Awaitable, Callable, Dict, Optional

from .config import Config

# Configure logging
logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4

# Estimated prompt sizes per use case (tokens)
PROMPT_ESTIMATES: Dict[str, int] = {
    "chat": 800,
    "qa": 350,
    "analysis": 300,
    "definition": 250,
}


class StaticQuotaProvider:
    """Quota provider returning a fixed max chunk size"""

    def __init__(self, max_chunk_size: int):
        if max_chunk_size <= 0:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
        self.max_chunk_size = max_chunk_size

    async def get_max_chunk_size(self) -> int:
        return self.max_chunk_size


class InputQuotaService:
    """Derives chunk and retrieval sizing from a model input quota"""

    FALLBACK_QUOTA = 1024
    # Worst case prompt: system + summary + chat history
    MAX_PROMPT_TOKENS = 800
    RESPONSE_BUFFER = 500
    MIN_CHUNKS_TO_FIT = 2
    MIN_RAG_CHUNKS = 2
    MAX_RAG_CHUNKS = 8
    DEFAULT_AVG_CHUNK_SIZE = 500

    def __init__(
        self,
        input_quota: Optional[int] = None,
        detector: Optional[Callable[[], Awaitable[int]]] = None,
        min_chunk_size: Optional[int] = None,
    ):
        """
        Initialize the quota service.

        Args:
            input_quota: Known input quota in tokens (overrides configuration)
            detector: Async callable returning the input quota in tokens
            min_chunk_size: Lower bound for the derived max chunk size
        """
        self.configured_quota = input_quota if input_quota is not None else Config.INPUT_QUOTA
        self.detector = detector
        self.min_chunk_size = min_chunk_size or Config.MIN_CHUNK_SIZE
        self.input_quota: Optional[int] = None

    async def initialize(self) -> None:
        """Detect the input quota, falling back to FALLBACK_QUOTA on failure."""
        if self.detector is None:
            self.input_quota = self.configured_quota or self.FALLBACK_QUOTA
            logger.debug(f"Using input quota: {self.input_quota} tokens")
            return

        try:
            logger.debug("Detecting input quota...")
            self.input_quota = int(await self.detector())
            logger.debug(f"Detected input quota: {self.input_quota} tokens")
        except Exception as e:
            logger.error(f"Failed to detect input quota: {e}")
            self.input_quota = self.configured_quota or self.FALLBACK_QUOTA
            logger.debug(f"Using fallback: {self.input_quota} tokens")

    async def get_input_quota(self) -> int:
        """Return the input quota in tokens, initializing on first use."""
        if self.input_quota is None:
            await self.initialize()
        return self.input_quota or self.FALLBACK_QUOTA

    async def get_max_chunk_size(self) -> int:
        """
        Return the maximum chunk size in characters.

        At least MIN_CHUNKS_TO_FIT chunks must fit next to the worst case
        prompt and the response buffer.

        Returns:
            Max chunk size in characters
        """
        quota = await self.get_input_quota()

        available_for_chunks = quota - self.MAX_PROMPT_TOKENS - self.RESPONSE_BUFFER
        max_chunk_tokens = math.floor(available_for_chunks / self.MIN_CHUNKS_TO_FIT)
        max_chunk_chars = max_chunk_tokens * CHARS_PER_TOKEN

        if max_chunk_chars < self.min_chunk_size:
            logger.warning(
                f"Quota {quota} leaves {max_chunk_chars} chars per chunk, "
                f"using minimum of {self.min_chunk_size} chars"
            )
            max_chunk_chars = self.min_chunk_size

        logger.debug(
            f"Max chunk size: {max_chunk_chars} chars ({max_chunk_tokens} tokens) for quota {quota}"
        )
        return max_chunk_chars

    async def get_optimal_rag_chunk_count(
        self, use_case: str, avg_chunk_size: Optional[int] = None
    ) -> int:
        """
        Number of chunks to retrieve so that chunks, prompt and response fit the quota.

        Args:
            use_case: One of chat, qa, analysis, definition
            avg_chunk_size: Average chunk size in characters (e.g. from ChunkingStats)

        Returns:
            Chunk count clamped between MIN_RAG_CHUNKS and MAX_RAG_CHUNKS

        Raises:
            ValueError: If the use case is unknown
        """
        if use_case not in PROMPT_ESTIMATES:
            raise ValueError(f"Unknown use case: {use_case}")

        quota = await self.get_input_quota()

        avg_chunk_chars = avg_chunk_size or self.DEFAULT_AVG_CHUNK_SIZE
        avg_chunk_tokens = math.ceil(avg_chunk_chars / CHARS_PER_TOKEN)
        available_tokens = quota - PROMPT_ESTIMATES[use_case] - self.RESPONSE_BUFFER

        optimal_count = math.floor(available_tokens / avg_chunk_tokens)
        clamped_count = max(self.MIN_RAG_CHUNKS, min(self.MAX_RAG_CHUNKS, optimal_count))

        logger.debug(
            f"Optimal RAG chunks for {use_case}: {clamped_count} "
            f"(avg chunk size: {avg_chunk_chars} chars, quota: {quota}, available: {available_tokens})"
        )
        return clamped_count

    def reset(self) -> None:
        """Forget the cached quota so the next call detects it again."""
        self.input_quota = None
