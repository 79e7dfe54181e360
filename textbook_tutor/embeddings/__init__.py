"""
Embeddings module - Handles embedding generation and vector storage.

This module is responsible for:
1. Converting text chunks to embeddings
2. Building, persisting and searching per-upload ChromaDB indexes
"""

from .embedder import Embedder, get_embedder
from .vector_store import IndexManifest, SearchResult, VectorStore

__all__ = [
    "Embedder",
    "get_embedder",
    "IndexManifest",
    "SearchResult",
    "VectorStore",
]
