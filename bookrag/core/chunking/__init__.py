"""
Chunking module.

Splits book pages into overlapping token windows.
"""

from bookrag.core.chunking.chunker import TextChunker

__all__ = ["TextChunker"]
