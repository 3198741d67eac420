"""
Book catalog interface.

Read-only source of books and their page text for ingestion. The host
platform supplies the real implementation; InMemoryBookCatalog serves
development and tests.

Dependencies: bookrag.models
System role: Ingestion input boundary
"""

from collections.abc import Iterable
from typing import Protocol

from bookrag.models.chunk import BookRecord, PageRecord


class BookCatalog(Protocol):
    def get_book(self, book_id: str) -> BookRecord | None: ...

    def iter_pages(self, book_id: str) -> Iterable[PageRecord]: ...


class InMemoryBookCatalog:
    """Catalog held in dictionaries; pages are returned in page order."""

    def __init__(self) -> None:
        self._books: dict[str, BookRecord] = {}
        self._pages: dict[str, dict[int, PageRecord]] = {}

    def add_book(self, book: BookRecord, pages: Iterable[PageRecord] = ()) -> None:
        """Register a book, replacing any pages with the same number."""
        self._books[book.book_id] = book
        book_pages = self._pages.setdefault(book.book_id, {})
        for page in pages:
            if page.book_id != book.book_id:
                raise ValueError(f"Page belongs to book {page.book_id}, not {book.book_id}")
            book_pages[page.page_number] = page

    def get_book(self, book_id: str) -> BookRecord | None:
        return self._books.get(book_id)

    def iter_pages(self, book_id: str) -> Iterable[PageRecord]:
        pages = self._pages.get(book_id, {})
        return [pages[number] for number in sorted(pages)]
