"""
Ingestion service.

Turns a catalog book into indexed chunks: chunk every page (malformed
pages are skipped and reported), embed through the bounded pool, and
replace the book's previous chunks in both indexes.

Dependencies: bookrag.core, bookrag.boundary.catalog
System role: Book ingestion orchestration
"""

import logging

from bookrag.boundary.catalog import BookCatalog
from bookrag.core.chunking import TextChunker
from bookrag.core.exceptions import BookNotFound, MalformedDocument
from bookrag.core.retrieval.index_clients import KeywordIndexClient, VectorIndexClient
from bookrag.models.api import IngestionResponse
from bookrag.models.chunk import Chunk

logger = logging.getLogger(__name__)


class IngestionService:
    """Chunks, embeds and indexes books from the catalog."""

    def __init__(
        self,
        catalog: BookCatalog,
        chunker: TextChunker,
        vector_client: VectorIndexClient,
        keyword_client: KeywordIndexClient,
    ) -> None:
        self._catalog = catalog
        self._chunker = chunker
        self._vector_client = vector_client
        self._keyword_client = keyword_client

    async def ingest_book(self, book_id: str) -> IngestionResponse:
        """
        Ingest (or re-ingest) one book.

        Args:
            book_id: Catalog book id

        Returns:
            IngestionResponse: Chunk count, pages processed and skipped pages

        Raises:
            BookNotFound: If the catalog has no such book
            EmbeddingProviderUnavailable: If embedding failed after retries;
                the previously indexed chunks are left in place
        """
        book = self._catalog.get_book(book_id)
        if book is None:
            raise BookNotFound(book_id)

        logger.info(f"{__name__}:ingest_book - START", extra={"book_id": book_id})

        chunks: list[Chunk] = []
        skipped: list[int] = []
        pages = 0
        for page in self._catalog.iter_pages(book_id):
            pages += 1
            try:
                chunks.extend(self._chunker.chunk_page(page, book))
            except MalformedDocument as e:
                logger.warning(
                    f"{__name__}:ingest_book - Skipping malformed page",
                    extra={"book_id": book_id, "page_number": page.page_number, "error": e.message},
                )
                skipped.append(page.page_number)

        processed = await self._vector_client.reindex_book(book_id, chunks)
        await self._keyword_client.reindex_book(book_id, processed)

        logger.info(
            f"{__name__}:ingest_book - END",
            extra={"book_id": book_id, "chunks": len(processed), "pages": pages, "skipped": len(skipped)},
        )
        return IngestionResponse(
            book_id=book_id,
            chunk_count=len(processed),
            pages_processed=pages - len(skipped),
            skipped_pages=skipped,
        )
