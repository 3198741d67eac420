"""
Token-window chunker for book pages.

Splits normalized page text into overlapping windows of ``chunk_size``
tokens, each new window starting ``chunk_size - chunk_overlap`` tokens
after the previous one. Splitting is deterministic for the same input.

Dependencies: bookrag.core.text, bookrag.models
System role: First stage of the ingestion pipeline
"""

import logging

from bookrag.core.exceptions import MalformedDocument
from bookrag.core.text import normalize_text, tokenize
from bookrag.models.chunk import BookRecord, Chunk, PageRecord

logger = logging.getLogger(__name__)


class TextChunker:
    """Split pages into overlapping token-bounded chunks."""

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 50,
    ) -> None:
        """
        Initialize chunker with window configuration.

        Args:
            chunk_size: Target chunk length in tokens
            chunk_overlap: Tokens shared by consecutive chunks

        Raises:
            ValueError: When overlap is negative or not smaller than chunk_size
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def window_spans(self, token_count: int) -> list[tuple[int, int]]:
        """
        Compute [start, end) token spans for a text of ``token_count`` tokens.

        Args:
            token_count: Number of tokens in the normalized text

        Returns:
            list[tuple[int, int]]: Ordered spans covering the whole text
        """
        if token_count == 0:
            return []

        step = self.chunk_size - self.chunk_overlap
        spans = []
        start = 0
        while True:
            end = min(start + self.chunk_size, token_count)
            spans.append((start, end))
            if end >= token_count:
                break
            start += step
        return spans

    def chunk_page(self, page: PageRecord, book: BookRecord | None = None) -> list[Chunk]:
        """
        Split one page into chunks.

        Args:
            page: Page content and provenance
            book: Optional book metadata copied onto each chunk

        Returns:
            list[Chunk]: Chunks in reading order with stable indices

        Raises:
            MalformedDocument: When the page content cannot be decoded as text
        """
        text = self._decode(page)
        tokens = tokenize(normalize_text(text))

        chunks = [
            Chunk(
                book_id=page.book_id,
                page_number=page.page_number,
                chunk_index=index,
                text=" ".join(tokens[start:end]),
                token_count=end - start,
                chapter_title=page.chapter_title,
                section_title=page.section_title,
                book_title=book.title if book else None,
                category=book.category if book else None,
            )
            for index, (start, end) in enumerate(self.window_spans(len(tokens)))
        ]

        logger.debug(
            f"{__name__}:chunk_page - Split page into {len(chunks)} chunks",
            extra={"book_id": page.book_id, "page_number": page.page_number, "token_count": len(tokens)},
        )
        return chunks

    @staticmethod
    def _decode(page: PageRecord) -> str:
        content = page.text
        if isinstance(content, bytes):
            try:
                return content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedDocument(
                    f"Page content is not valid UTF-8: {e.reason}",
                    book_id=page.book_id,
                    page_number=page.page_number,
                ) from e
        if not isinstance(content, str):
            raise MalformedDocument(
                f"Page content has unsupported type {type(content).__name__}",
                book_id=page.book_id,
                page_number=page.page_number,
            )
        return content
