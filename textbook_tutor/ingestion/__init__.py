"""
Ingestion module - Handles PDF parsing, chunking, and index building.

This module is responsible for:
1. Extracting text from PDF files
2. Splitting text into overlapping chunks
3. Embedding the chunks into a new index
"""

from .pdf_parser import PDFParser
from .chunker import TextChunker
from .ingest import IngestionResult, ingest_document, ingest_documents

__all__ = [
    "PDFParser",
    "TextChunker",
    "IngestionResult",
    "ingest_document",
    "ingest_documents",
]
