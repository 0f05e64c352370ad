"""Chunked, length-controlled transcript summarization."""

import asyncio
import re

from src.utils.logging import get_logger

from .ai_gateway import AIGateway
from .config import VideoSummarizerConfig
from .exceptions import NotFoundError
from .schemas import Chunk, ChunkSummary, FinalSummary

logger = get_logger(__name__)

# A word ending a sentence, allowing trailing quotes or closing brackets
_SENTENCE_END = re.compile(r"[.!?][\"')\]]*$")

CHUNK_PROMPT = """You are summarizing part {ordinal} of {total} of a video transcript.
Write a clear, well-organized summary of this part. Capture the key points,
main ideas, names, numbers and important details. Do not invent anything that
is not in the transcript.

Transcript part {ordinal} of {total}:
{text}
"""

REDUCE_PROMPT = """Below are summaries of consecutive parts of one video transcript,
in order. Combine them into a single cohesive narrative summary of about
{target_words} words. Keep the chronological flow, remove redundancy and focus
on the main narrative and key points. Write flowing prose, not a list of parts.

{summaries}
"""

EXPAND_PROMPT = """The summary below is shorter than required. Rewrite it into a single
narrative summary of about {target_words} words (it currently has
{word_count}). Add detail only from the transcript that follows: every
statement must be supported by it. Return only the expanded summary.

Current summary:
{summary}

Full transcript:
{transcript}
"""


def count_words(text: str) -> int:
    return len(text.split())


def _split_oversized(word: str, max_chunk_size: int) -> list[str]:
    return [word[i : i + max_chunk_size] for i in range(0, len(word), max_chunk_size)]


def _sentence_cut(words: list[str], max_chunk_size: int) -> int:
    """Number of leading words to emit as the next chunk.

    Cuts after the last sentence terminator that lies past the halfway point
    of the budget; without one, the whole buffer is emitted.
    """
    halfway = max_chunk_size / 2
    length = 0
    cut = len(words)
    best = None
    for i, word in enumerate(words):
        length += len(word) + (1 if i else 0)
        if length >= halfway and _SENTENCE_END.search(word):
            best = i + 1
    if best is not None and best < len(words):
        cut = best
    return cut


def chunk_transcript(text: str, max_chunk_size: int) -> list[Chunk]:
    """Split text into word-bounded chunks of at most ``max_chunk_size`` chars.

    Chunks prefer to end on a sentence boundary past the halfway point of the
    budget and only break mid-sentence when no such boundary exists. A word
    longer than the budget is split at the budget.

    Args:
        text: Transcript text.
        max_chunk_size: Character budget per chunk.

    Returns:
        Ordered chunks; joining them with spaces reproduces the words of
        ``text``.
    """
    if max_chunk_size < 1:
        raise ValueError("max_chunk_size must be positive")

    pieces: list[str] = []
    for word in text.split():
        if len(word) > max_chunk_size:
            pieces.extend(_split_oversized(word, max_chunk_size))
        else:
            pieces.append(word)

    chunk_texts: list[str] = []
    buffer: list[str] = []
    length = 0

    for piece in pieces:
        while buffer and length + 1 + len(piece) > max_chunk_size:
            cut = _sentence_cut(buffer, max_chunk_size)
            chunk_texts.append(" ".join(buffer[:cut]))
            buffer = buffer[cut:]
            length = len(" ".join(buffer))
        length += len(piece) + (1 if buffer else 0)
        buffer.append(piece)

    if buffer:
        chunk_texts.append(" ".join(buffer))

    return [
        Chunk(index=i, text=chunk_text, char_length=len(chunk_text))
        for i, chunk_text in enumerate(chunk_texts)
    ]


class SummarizationService:
    """Service producing a length-targeted summary of a transcript.

    Map/reduce over chunks: chunks are summarized strictly in order, one at a
    time with a fixed pause between calls, then merged into one narrative. A
    materially short result is expanded once against the full transcript.
    """

    def __init__(self, gateway: AIGateway, config: VideoSummarizerConfig):
        """Initialize summarization service.

        Args:
            gateway: AI gateway used for every model call.
            config: Configuration with chunk size, target length and delays.
        """
        self.gateway = gateway
        self.config = config
        logger.info(
            "summarization_service_initialized",
            max_chunk_size=config.max_chunk_size,
            target_words=config.target_summary_words,
            tolerance=config.summary_length_tolerance,
        )

    @property
    def _max_tokens(self) -> int:
        # Roughly 1.5 tokens per English word, with headroom
        return max(1024, int(self.config.target_summary_words * 2))

    async def summarize(self, transcript: str) -> FinalSummary:
        """Summarize a transcript to roughly the configured word count.

        Args:
            transcript: Cleaned transcript text.

        Returns:
            FinalSummary with the text and its word counts.

        Raises:
            NotFoundError: If the transcript is empty.
            ProviderThrottledError: If throttling outlasted the retry ceiling.
            AIProviderError: On any other provider failure.
        """
        if not transcript.strip():
            raise NotFoundError("Transcript is empty")

        target = self.config.target_summary_words
        chunks = chunk_transcript(transcript, self.config.max_chunk_size)
        logger.info("summarization_started", chunks=len(chunks), target_words=target)

        chunk_summaries = await self._map_chunks(chunks)

        if len(chunk_summaries) == 1:
            candidate = chunk_summaries[0].text
        else:
            candidate = await self._reduce(chunk_summaries, target)

        word_count = count_words(candidate)
        expanded = False
        threshold = target * self.config.summary_length_tolerance

        if word_count < threshold:
            logger.info(
                "summary_below_target",
                word_count=word_count,
                threshold=round(threshold, 1),
                target_words=target,
            )
            candidate = await self._expand(candidate, transcript, target, word_count)
            word_count = count_words(candidate)
            expanded = True

        logger.info(
            "summarization_completed",
            chunks=len(chunks),
            word_count=word_count,
            target_words=target,
            expanded=expanded,
        )
        return FinalSummary(
            text=candidate.strip(),
            word_count=word_count,
            target_word_count=target,
            chunk_count=len(chunks),
            expanded=expanded,
        )

    async def _map_chunks(self, chunks: list[Chunk]) -> list[ChunkSummary]:
        # At most one chunk call in flight
        summaries: list[ChunkSummary] = []
        total = len(chunks)

        for chunk in chunks:
            if chunk.index > 0 and self.config.chunk_delay_seconds > 0:
                await asyncio.sleep(self.config.chunk_delay_seconds)

            prompt = CHUNK_PROMPT.format(ordinal=chunk.index + 1, total=total, text=chunk.text)
            text = await self.gateway.generate(
                prompt,
                temperature=self.config.summary_temperature,
                max_tokens=self._max_tokens,
            )
            summaries.append(ChunkSummary(index=chunk.index, text=text.strip()))
            logger.info(
                "chunk_summarized",
                chunk=chunk.index + 1,
                total=total,
                chunk_chars=chunk.char_length,
                summary_words=count_words(text),
            )

        return summaries

    async def _reduce(self, summaries: list[ChunkSummary], target: int) -> str:
        ordered = sorted(summaries, key=lambda s: s.index)
        combined = "\n\n".join(f"Part {s.index + 1}:\n{s.text}" for s in ordered)
        logger.info("summary_reduce_started", parts=len(ordered))
        return await self.gateway.generate(
            REDUCE_PROMPT.format(target_words=target, summaries=combined),
            temperature=self.config.summary_temperature,
            max_tokens=self._max_tokens,
        )

    async def _expand(self, summary: str, transcript: str, target: int, word_count: int) -> str:
        logger.info("summary_expand_started", word_count=word_count, target_words=target)
        return await self.gateway.generate(
            EXPAND_PROMPT.format(
                target_words=target,
                word_count=word_count,
                summary=summary,
                transcript=transcript,
            ),
            temperature=self.config.summary_temperature,
            max_tokens=self._max_tokens,
        )
