"""
Ingest - Turn uploaded PDF bytes into a queryable vector index.

Pipeline for one batch of uploads:
1. Write each upload to a temporary file and parse it with PDFParser
2. Split the pages into overlapping chunks
3. Embed the chunks in batches
4. Store them in a brand-new index directory
5. Write the index manifest (only now is the index usable)

Any failure along the way removes the half-built index directory and raises
IngestionError, so a caller never sees a partial index.
"""

import logging
import re
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path

from textbook_tutor.config import (
    CHUNK_OVERLAP,
    CHUNK_SIZE,
    EMBEDDING_BATCH_SIZE,
    UPLOAD_DIR,
    VECTOR_STORE_DIR,
)
from textbook_tutor.embeddings.embedder import Embedder, get_embedder
from textbook_tutor.embeddings.vector_store import IndexManifest, VectorStore
from textbook_tutor.errors import IngestionError
from textbook_tutor.ingestion.chunker import TextChunk, TextChunker
from textbook_tutor.ingestion.pdf_parser import PDFParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """Where the new index lives and how many chunks went into it."""
    index_location: str
    chunk_count: int
    source_files: tuple[str, ...] = ()


def _safe_file_name(file_name: str) -> str:
    """Strip directories and unusual characters from an uploaded file name."""
    name = Path(file_name or "").name
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or "document.pdf"


def _extract_chunks(
    raw_bytes: bytes,
    file_name: str,
    parser: PDFParser,
    chunker: TextChunker,
    upload_dir: Path,
) -> list[TextChunk]:
    """Parse one upload via a temporary file and chunk it page by page."""
    if not raw_bytes:
        raise IngestionError(f"{file_name}: file is empty")

    temp_path = upload_dir / f"{uuid.uuid4().hex}-{_safe_file_name(file_name)}"

    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IngestionError(f"{file_name}: upload directory unavailable: {e}") from e

    try:
        temp_path.write_bytes(raw_bytes)
        content = parser.parse_pdf(temp_path, display_name=file_name)
    except (OSError, RuntimeError) as e:
        raise IngestionError(f"{file_name}: could not read PDF: {e}") from e
    finally:
        temp_path.unlink(missing_ok=True)

    if content.is_empty:
        raise IngestionError(f"{file_name}: no extractable text (is it a scanned PDF?)")

    chunks = chunker.chunk_with_pages(
        [(page.page_number, page.text) for page in content.pages],
        source_file=file_name,
    )
    if not chunks:
        raise IngestionError(f"{file_name}: text could not be split into chunks")

    logger.info("%s: %d pages -> %d chunks", file_name, content.total_pages, len(chunks))
    return chunks


def ingest_documents(
    files: list[tuple[str, bytes]],
    embedder: Embedder | None = None,
    vector_store_dir: str | Path | None = None,
    upload_dir: str | Path | None = None,
    chunk_size: int = CHUNK_SIZE,
    chunk_overlap: int = CHUNK_OVERLAP,
) -> IngestionResult:
    """
    Ingest one or more PDFs into a single new index.

    Args:
        files: (file_name, raw_bytes) pairs
        embedder: Embedder to use (shared default if not provided)
        vector_store_dir: Parent directory for index directories
        upload_dir: Where uploads are written while being parsed
        chunk_size: Target chunk size in characters
        chunk_overlap: Overlap between consecutive chunks

    Returns:
        IngestionResult with the new index location and chunk count

    Raises:
        IngestionError: If any file fails to parse, chunk, or embed
    """
    if not files:
        raise IngestionError("No documents to ingest")

    embedder = embedder or get_embedder()
    parser = PDFParser()
    chunker = TextChunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    upload_dir = Path(upload_dir or UPLOAD_DIR)
    index_dir = Path(vector_store_dir or VECTOR_STORE_DIR) / uuid.uuid4().hex

    # Parse everything before touching the index
    all_chunks: list[TextChunk] = []
    for file_name, raw_bytes in files:
        all_chunks.extend(_extract_chunks(raw_bytes, file_name, parser, chunker, upload_dir))

    texts = [chunk.text for chunk in all_chunks]
    metadatas = [
        {**chunk.metadata, "chunk_index": i}
        for i, chunk in enumerate(all_chunks)
    ]
    source_files = tuple(dict.fromkeys(name for name, _ in files))

    store = None
    try:
        embeddings = []
        for i in range(0, len(texts), EMBEDDING_BATCH_SIZE):
            embeddings.extend(embedder.embed_batch(texts[i:i + EMBEDDING_BATCH_SIZE]))

        store = VectorStore.create(index_dir)
        store.add_documents(
            texts=texts,
            embeddings=embeddings,
            metadatas=metadatas,
            ids=[f"chunk_{i}" for i in range(len(texts))],
        )
        store.write_manifest(IndexManifest(
            embedding_model=embedder.model_name,
            embedding_dimension=len(embeddings[0]),
            chunk_count=len(texts),
            source_files=list(source_files),
        ))
    except Exception as e:
        if store is not None:
            store.close()
        shutil.rmtree(index_dir, ignore_errors=True)
        raise IngestionError(f"Failed to build index: {e}") from e

    store.close()

    logger.info("Built index %s with %d chunks", index_dir, len(texts))
    return IngestionResult(
        index_location=str(index_dir),
        chunk_count=len(texts),
        source_files=source_files,
    )


def ingest_document(
    raw_bytes: bytes,
    file_name: str,
    embedder: Embedder | None = None,
    vector_store_dir: str | Path | None = None,
    upload_dir: str | Path | None = None,
) -> IngestionResult:
    """
    Ingest a single PDF into a new index.

    Example:
        result = ingest_document(Path("biology.pdf").read_bytes(), "biology.pdf")
        print(result.index_location, result.chunk_count)
    """
    return ingest_documents(
        [(file_name, raw_bytes)],
        embedder=embedder,
        vector_store_dir=vector_store_dir,
        upload_dir=upload_dir,
    )
