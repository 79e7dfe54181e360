"""
Vector Store - Stores and searches embeddings using ChromaDB.

Each ingested batch of documents gets its own index: a directory holding a
ChromaDB persistent database with a single collection, plus an `index.json`
manifest written after every chunk has been stored.

Key Concepts:
- Index location: the directory path; it doubles as the session's handle
- Manifest: records the embedding model, chunk count and source files.
  No manifest = the index was never finished and cannot be queried.
- Cosine distance: ChromaDB returns 0 for identical vectors, so we report
  similarity as 1 - distance

How it works:
1. VectorStore.create(path)  -> empty collection in a fresh directory
2. add_documents(...)        -> text + embedding + metadata -> ChromaDB
3. write_manifest(...)       -> index becomes queryable
4. VectorStore.open(path)    -> search(query_embedding, top_k)
5. close()                   -> release the cached ChromaDB connection
"""

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import chromadb
from chromadb.api import ClientAPI
from chromadb.api.client import SharedSystemClient
from chromadb.config import Settings

from textbook_tutor.config import COLLECTION_NAME, INDEX_MANIFEST_NAME, TOP_K_CHUNKS
from textbook_tutor.errors import IndexNotFoundError

logger = logging.getLogger(__name__)

# Stay well under ChromaDB's per-call insert limit
_ADD_BATCH_SIZE = 1000

# Written by ChromaDB into every persistent index directory
_CHROMA_DB_FILE = "chroma.sqlite3"


@dataclass
class SearchResult:
    """
    A single search hit.

    Attributes:
        text: The retrieved chunk text
        score: Similarity score (higher = more similar)
        metadata: Source file, page number, chunk index
        id: Unique identifier within the index
    """
    text: str
    score: float
    metadata: dict
    id: str

    @property
    def source_file(self) -> str:
        return self.metadata.get("source_file", "unknown")

    @property
    def page_number(self) -> int:
        return self.metadata.get("page_number", 0)


@dataclass
class IndexManifest:
    """What an index was built from, and with which embedding model."""
    embedding_model: str
    embedding_dimension: int
    chunk_count: int
    source_files: list[str] = field(default_factory=list)
    collection_name: str = COLLECTION_NAME
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @classmethod
    def from_dict(cls, data: dict) -> "IndexManifest":
        return cls(
            embedding_model=data["embedding_model"],
            embedding_dimension=int(data["embedding_dimension"]),
            chunk_count=int(data["chunk_count"]),
            source_files=list(data.get("source_files", [])),
            collection_name=data.get("collection_name", COLLECTION_NAME),
            created_at=data.get("created_at", ""),
        )


# ChromaDB caches one System (SQLite connection + HNSW segments) per directory
# for the life of the process. Count the stores using each one so the last
# close() can stop it and drop it from the cache.
_open_clients: dict[str, int] = {}
_clients_lock = threading.Lock()


def _client_for(path: Path) -> ClientAPI:
    with _clients_lock:
        client = chromadb.PersistentClient(
            path=str(path),
            settings=Settings(anonymized_telemetry=False),
        )
        key = SharedSystemClient._get_identifier_from_settings(client.get_settings())
        _open_clients[key] = _open_clients.get(key, 0) + 1
    return client


def _release_client(client: ClientAPI) -> None:
    key = SharedSystemClient._get_identifier_from_settings(client.get_settings())
    with _clients_lock:
        remaining = _open_clients.get(key, 0) - 1
        if remaining > 0:
            _open_clients[key] = remaining
            return
        _open_clients.pop(key, None)
        system = SharedSystemClient._identifier_to_system.pop(key, None)
    if system is not None:
        system.stop()


class VectorStore:
    """
    ChromaDB-backed index living in one directory.

    Use the `create` and `open` constructors rather than calling the class
    directly.

    Example:
        store = VectorStore.create("data/vector_stores/abc")
        store.add_documents(texts, embeddings, metadatas)
        store.write_manifest(IndexManifest("all-MiniLM-L6-v2", 384, len(texts)))

        store.close()

        with VectorStore.open("data/vector_stores/abc") as store:
            results = store.search(query_embedding, top_k=5)
    """

    def __init__(
        self,
        persist_directory: Path,
        client: ClientAPI,
        collection,
        manifest: IndexManifest | None = None,
    ):
        self.persist_directory = persist_directory
        self._client = client
        self._collection = collection
        self.manifest = manifest

    @property
    def location(self) -> str:
        return str(self.persist_directory)

    @property
    def manifest_path(self) -> Path:
        return self.persist_directory / INDEX_MANIFEST_NAME

    @property
    def count(self) -> int:
        """Get the number of chunks in the collection."""
        return self._collection.count()

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        persist_directory: str | Path,
        collection_name: str = COLLECTION_NAME,
    ) -> "VectorStore":
        """
        Create a new, empty index in a directory that must not already hold one.

        Raises:
            FileExistsError: If the directory already exists and is not empty
        """
        path = Path(persist_directory)
        if path.exists() and any(path.iterdir()):
            raise FileExistsError(f"Index location already in use: {path}")
        path.mkdir(parents=True, exist_ok=True)

        client = _client_for(path)
        try:
            collection = client.create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        except Exception:
            _release_client(client)
            raise
        logger.debug("Created index at %s", path)
        return cls(path, client, collection)

    @classmethod
    def open(cls, persist_directory: str | Path) -> "VectorStore":
        """
        Open a finished index for searching.

        Raises:
            IndexNotFoundError: If the location does not exist, has no
                manifest (never finished), has no vector database, or its
                collection cannot be read
        """
        if not persist_directory:
            raise IndexNotFoundError("No index location given")

        path = Path(persist_directory)
        if not path.is_dir():
            raise IndexNotFoundError(f"Index not found: {path}")

        manifest_path = path / INDEX_MANIFEST_NAME
        if not manifest_path.is_file():
            raise IndexNotFoundError(f"Index at {path} is incomplete or corrupt (no manifest)")

        try:
            manifest = IndexManifest.from_dict(json.loads(manifest_path.read_text()))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise IndexNotFoundError(f"Index manifest at {manifest_path} is unreadable: {e}") from e

        # Opening a PersistentClient creates a database, so check for one first
        if not (path / _CHROMA_DB_FILE).is_file():
            raise IndexNotFoundError(f"Index at {path} has no vector database")

        try:
            client = _client_for(path)
        except Exception as e:
            raise IndexNotFoundError(f"Index at {path} cannot be read: {e}") from e

        try:
            collection = client.get_collection(name=manifest.collection_name)
        except Exception as e:
            _release_client(client)
            raise IndexNotFoundError(f"Index at {path} cannot be read: {e}") from e

        return cls(path, client, collection, manifest)

    def close(self) -> None:
        """Release the ChromaDB client. The store cannot be used afterwards."""
        if self._client is None:
            return
        _release_client(self._client)
        self._client = None
        self._collection = None

    def __enter__(self) -> "VectorStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def add_documents(
        self,
        texts: list[str],
        embeddings: list[list[float]],
        metadatas: list[dict] | None = None,
        ids: list[str] | None = None
    ) -> None:
        """
        Add chunks to the index.

        Args:
            texts: List of chunk texts
            embeddings: List of embedding vectors (one per text)
            metadatas: Optional list of metadata dicts (one per text)
            ids: Optional list of unique IDs (auto-generated if not provided)

        Raises:
            ValueError: If lists have mismatched lengths
        """
        if len(texts) != len(embeddings):
            raise ValueError("texts and embeddings must have same length")
        if metadatas is not None and len(metadatas) != len(texts):
            raise ValueError("texts and metadatas must have same length")

        if not texts:
            return

        if ids is None:
            existing_count = self.count
            ids = [f"chunk_{existing_count + i}" for i in range(len(texts))]

        for start in range(0, len(texts), _ADD_BATCH_SIZE):
            end = start + _ADD_BATCH_SIZE
            batch = {
                "documents": texts[start:end],
                "embeddings": embeddings[start:end],
                "ids": ids[start:end],
            }
            # ChromaDB rejects empty metadata dicts, so omit them entirely
            if metadatas is not None:
                batch["metadatas"] = metadatas[start:end]
            self._collection.add(**batch)

    def write_manifest(self, manifest: IndexManifest) -> None:
        """Write the manifest, marking this index as complete and queryable."""
        self.manifest_path.write_text(json.dumps(asdict(manifest), indent=2, ensure_ascii=False))
        self.manifest = manifest

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def search(
        self,
        query_embedding: list[float],
        top_k: int = TOP_K_CHUNKS,
    ) -> list[SearchResult]:
        """
        Find the chunks closest to a query embedding.

        Args:
            query_embedding: The embedding vector to search with
            top_k: Number of results to return

        Returns:
            List of SearchResult objects, sorted by similarity (highest first)
        """
        total = self.count
        if total == 0:
            return []

        results = self._collection.query(
            query_embeddings=[query_embedding],
            n_results=min(top_k, total),
            include=["documents", "metadatas", "distances"]
        )

        search_results = []

        if results and results["documents"] and results["documents"][0]:
            documents = results["documents"][0]
            metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(documents)
            distances = results["distances"][0] if results["distances"] else [0.0] * len(documents)
            ids = results["ids"][0]

            for doc, meta, dist, doc_id in zip(documents, metadatas, distances, ids):
                search_results.append(SearchResult(
                    text=doc,
                    score=max(0.0, 1 - dist),
                    metadata=meta or {},
                    id=doc_id
                ))

        return search_results

    def get_by_id(self, doc_id: str) -> dict | None:
        """
        Get a specific chunk by ID.

        Returns:
            Dict with 'text' and 'metadata', or None if not found
        """
        result = self._collection.get(ids=[doc_id], include=["documents", "metadatas"])

        if result["documents"]:
            return {
                "text": result["documents"][0],
                "metadata": result["metadatas"][0] if result["metadatas"] else {},
            }
        return None
