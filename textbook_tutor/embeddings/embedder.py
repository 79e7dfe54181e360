"""
Embedder - Converts text to vector embeddings.

This module handles the conversion of text into numerical vectors (embeddings)
using sentence-transformers.

Key Concepts:
- Embeddings are lists of numbers that represent meaning
- Similar text = Similar embeddings
- We use the same model for storing and querying (important!)
- The default model creates 384-dimensional vectors

Example:
    embedder = Embedder()

    vector = embedder.embed("What is photosynthesis?")
    vectors = embedder.embed_batch(["text1", "text2", "text3"])
"""

import logging
import threading

import numpy as np
from sentence_transformers import SentenceTransformer

from textbook_tutor.config import EMBEDDING_BATCH_SIZE, EMBEDDING_MODEL

logger = logging.getLogger(__name__)


class Embedder:
    """
    Converts text to vector embeddings using sentence-transformers.

    IMPORTANT: Always use the same model for indexing and querying!
    The model name is written into every index manifest, and the
    retriever refuses to query an index built with a different model.

    Example:
        embedder = Embedder()
        question_embedding = embedder.embed("What is a cell?")
        chunk_embeddings = embedder.embed_batch(chunks)
    """

    def __init__(self, model_name: str | None = None):
        """
        Args:
            model_name: Name of the sentence-transformer model to use.
                Defaults to the model specified in config.

        Note:
            First run will download the model (~90MB for MiniLM).
        """
        self.model_name = model_name or EMBEDDING_MODEL
        self._model = None  # Lazy loading
        self._load_lock = threading.Lock()

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the model on first use."""
        if self._model is None:
            with self._load_lock:
                if self._model is None:
                    logger.info("Loading embedding model: %s", self.model_name)
                    self._model = SentenceTransformer(self.model_name)
                    logger.info(
                        "Embedding model loaded (dimension %d)",
                        self._model.get_sentence_embedding_dimension(),
                    )
        return self._model

    @property
    def dimension(self) -> int:
        return self.model.get_sentence_embedding_dimension()

    def embed(self, text: str) -> list[float]:
        """
        Convert a single text to an embedding vector.

        Args:
            text: The text to embed

        Returns:
            List of floats (the embedding vector). Empty text maps to a
            zero vector.
        """
        if not text or not text.strip():
            return [0.0] * self.dimension

        embedding = self.model.encode(text, convert_to_numpy=True)
        return embedding.tolist()

    def embed_batch(
        self,
        texts: list[str],
        show_progress: bool = False,
        batch_size: int = EMBEDDING_BATCH_SIZE
    ) -> list[list[float]]:
        """
        Convert multiple texts to embeddings efficiently.

        Args:
            texts: List of texts to embed
            show_progress: Whether to show a progress bar
            batch_size: Number of texts to process at once

        Returns:
            List of embedding vectors (one per text, same order)
        """
        if not texts:
            return []

        non_empty_indices = []
        non_empty_texts = []

        for i, text in enumerate(texts):
            if text and text.strip():
                non_empty_indices.append(i)
                non_empty_texts.append(text)

        dim = self.dimension
        result = [[0.0] * dim for _ in texts]
        if not non_empty_texts:
            return result

        embeddings: np.ndarray = self.model.encode(
            non_empty_texts,
            convert_to_numpy=True,
            show_progress_bar=show_progress,
            batch_size=batch_size
        )

        for idx, embedding in zip(non_empty_indices, embeddings):
            result[idx] = embedding.tolist()

        return result


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

# One shared instance per model name, so each model is loaded once per process
_embedders: dict[str, Embedder] = {}
_embedders_lock = threading.Lock()


def get_embedder(model_name: str | None = None) -> Embedder:
    """
    Get or create the shared embedder for a model.

    Returns:
        The process-wide Embedder instance for `model_name`
    """
    name = model_name or EMBEDDING_MODEL
    with _embedders_lock:
        if name not in _embedders:
            _embedders[name] = Embedder(name)
        return _embedders[name]
