"""
Text Chunker - Splits text into smaller pieces for embedding.

Key Concepts:
- Chunk Size: How many characters per chunk (default: 1000)
- Overlap: How many characters overlap between chunks (default: 100)
- Why Overlap? To avoid losing context at chunk boundaries

Example:
    Text: "ABCDEFGHIJ" (10 chars)
    Chunk size: 5, Overlap: 2

    Chunk 1: "ABCDE"
    Chunk 2: "DEFGH"  <- 'DE' overlaps with chunk 1
    Chunk 3: "GHIJ"   <- 'GH' overlaps with chunk 2
"""

import re
from dataclasses import dataclass, field

from textbook_tutor.config import CHUNK_OVERLAP, CHUNK_SIZE


@dataclass(frozen=True)
class TextChunk:
    """
    A single chunk of text with metadata.

    Attributes:
        text: The chunk content
        chunk_index: Position of this chunk (0-indexed)
        start_char: Character position where chunk starts in original text
        end_char: Character position where chunk ends in original text
        metadata: Additional metadata (source file, page, etc.)
    """
    text: str
    chunk_index: int
    start_char: int
    end_char: int
    metadata: dict = field(default_factory=dict)

    @property
    def char_count(self) -> int:
        return len(self.text)


class TextChunker:
    """
    Splits text into overlapping chunks for embedding.

    A fixed-size window slides over the text. Each window end is pulled
    back to the nearest sentence, line, or word boundary within the last
    100 characters when one exists, and the next window starts
    `chunk_overlap` characters before the previous end.

    Example:
        chunker = TextChunker(chunk_size=1000, chunk_overlap=100)
        chunks = chunker.chunk_text("Your long text here...")
    """

    def __init__(
        self,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
        min_chunk_size: int = 20
    ):
        """
        Args:
            chunk_size: Target size for each chunk in characters
            chunk_overlap: Number of characters to overlap between chunks
            min_chunk_size: Chunks shorter than this are dropped

        Raises:
            ValueError: If overlap >= chunk_size or sizes are invalid
        """
        if chunk_overlap < 0:
            raise ValueError("Overlap cannot be negative")
        if chunk_overlap >= chunk_size:
            raise ValueError("Overlap must be less than chunk size")
        if chunk_size < 50:
            raise ValueError("Chunk size must be at least 50 characters")
        if min_chunk_size < 1:
            raise ValueError("Minimum chunk size must be at least 1")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.min_chunk_size = min_chunk_size

        self.sentence_endings = re.compile(r'[.!?]\s+')

    def _find_split_point(self, text: str, target_pos: int, floor: int = 0) -> int:
        """
        Find a good split point near the target position.

        Tries, in order: sentence boundary, paragraph boundary, word
        boundary, and finally the exact target position. The result is
        always greater than `floor`.
        """
        search_start = max(floor, target_pos - 100)
        search_text = text[search_start:target_pos]

        sentence_matches = list(self.sentence_endings.finditer(search_text))
        if sentence_matches:
            return search_start + sentence_matches[-1].end()

        newline_pos = search_text.rfind('\n')
        if newline_pos != -1 and newline_pos > len(search_text) // 2:
            return search_start + newline_pos + 1

        space_pos = search_text.rfind(' ')
        if space_pos != -1:
            return search_start + space_pos + 1

        return target_pos

    def chunk_text(
        self,
        text: str,
        metadata: dict | None = None
    ) -> list[TextChunk]:
        """
        Split text into overlapping chunks.

        Args:
            text: The text to chunk
            metadata: Optional metadata to attach to all chunks

        Returns:
            List of TextChunk objects, in text order
        """
        if not text or not text.strip():
            return []

        text = text.strip()
        metadata = metadata or {}

        chunks = []
        start = 0
        chunk_index = 0

        while start < len(text):
            end = start + self.chunk_size

            if end >= len(text):
                end = len(text)
            else:
                end = self._find_split_point(text, end, floor=start)

            chunk_text = text[start:end].strip()

            if len(chunk_text) >= self.min_chunk_size:
                chunks.append(TextChunk(
                    text=chunk_text,
                    chunk_index=chunk_index,
                    start_char=start,
                    end_char=end,
                    metadata=metadata.copy()
                ))
                chunk_index += 1

            if end >= len(text):
                break

            next_start = end - self.chunk_overlap
            # Always make progress, even when a boundary sits inside the overlap
            start = next_start if next_start > start else end

        return chunks

    def chunk_with_pages(
        self,
        pages: list[tuple[int, str]],
        source_file: str = ""
    ) -> list[TextChunk]:
        """
        Chunk text page by page, tagging each chunk with its page number.

        Args:
            pages: List of (page_number, page_text) tuples
            source_file: Name of the source file

        Returns:
            List of TextChunk objects, indexed sequentially across pages
        """
        all_chunks = []

        for page_num, page_text in pages:
            if not page_text.strip():
                continue

            metadata = {
                "source_file": source_file,
                "page_number": page_num,
            }
            for chunk in self.chunk_text(page_text, metadata):
                all_chunks.append(TextChunk(
                    text=chunk.text,
                    chunk_index=len(all_chunks),
                    start_char=chunk.start_char,
                    end_char=chunk.end_char,
                    metadata=chunk.metadata,
                ))

        return all_chunks
