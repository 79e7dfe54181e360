"""
Retriever - Finds relevant chunks for a given query.

This module handles the retrieval part of RAG:
1. Opens the index at the session's index location
2. Checks the index was built with the same embedding model
3. Converts the query to an embedding
4. Returns the top-K most similar chunks, most similar first
"""

import logging
from dataclasses import dataclass

from textbook_tutor.config import TOP_K_CHUNKS
from textbook_tutor.embeddings.embedder import Embedder, get_embedder
from textbook_tutor.embeddings.vector_store import VectorStore
from textbook_tutor.errors import EmbeddingModelMismatchError

logger = logging.getLogger(__name__)


@dataclass
class RetrievalResult:
    """
    Contains the retrieved context and metadata.

    Attributes:
        chunks: Chunk texts, most similar first
        scores: Similarity scores for each chunk
        sources: Source information (file, page) for each chunk
        query: The query that was searched for
    """

    chunks: list[str]
    scores: list[float]
    sources: list[dict]
    query: str


class Retriever:
    """
    Retrieves relevant context from an index.

    The retriever holds no index itself; each call names the index
    location, so one retriever can serve many sessions.

    Example:
        retriever = Retriever()
        result = retriever.retrieve(session.index_location, "What is osmosis?")
        print(result.chunks[0], result.scores[0])
    """

    def __init__(
        self,
        embedder: Embedder | None = None,
        top_k: int = TOP_K_CHUNKS,
    ):
        """
        Args:
            embedder: Embedder instance (uses the shared one if not provided).
                Must be the model the index was built with.
            top_k: Number of chunks to retrieve
        """
        self.embedder = embedder or get_embedder()
        self.top_k = top_k

    def retrieve(
        self,
        index_location: str,
        query: str,
        top_k: int | None = None,
    ) -> RetrievalResult:
        """
        Retrieve the chunks most similar to a query.

        Args:
            index_location: Directory of a finished index
            query: The text to search for
            top_k: Override the default number of results

        Returns:
            RetrievalResult with chunks, scores, and sources

        Raises:
            IndexNotFoundError: If the index is missing, incomplete, or unreadable
            EmbeddingModelMismatchError: If the index was built with another model
        """
        top_k = top_k or self.top_k
        with VectorStore.open(index_location) as store:
            if store.manifest.embedding_model != self.embedder.model_name:
                raise EmbeddingModelMismatchError(
                    index_model=store.manifest.embedding_model,
                    query_model=self.embedder.model_name,
                )

            query_embedding = self.embedder.embed(query)
            results = store.search(query_embedding, top_k=top_k)

        logger.info("Retrieved %d chunks from %s", len(results), index_location)

        return RetrievalResult(
            chunks=[r.text for r in results],
            scores=[r.score for r in results],
            sources=[r.metadata for r in results],
            query=query,
        )
