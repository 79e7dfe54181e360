"""
Study pipeline - Sequences ingestion, retrieval, prompting and generation.

Two public operations:
- process_document: ingest an upload and make it the session's active index
- ask_or_generate: answer a question or write a study guide from an index

Questions and study guides share one code path; they differ only in how the
retrieval query is derived from what the student typed.
"""

import logging
from pathlib import Path

from textbook_tutor.config import STUDY_GUIDE_QUERY_TEMPLATE
from textbook_tutor.errors import IndexNotFoundError
from textbook_tutor.ingestion.ingest import IngestionResult, ingest_documents
from textbook_tutor.rag.generator import Generator
from textbook_tutor.rag.prompts import build_prompt, fill_prompt
from textbook_tutor.rag.retriever import Retriever
from textbook_tutor.session import Credentials, Preferences, StudySession

logger = logging.getLogger(__name__)

QUESTION = "question"
STUDY_GUIDE = "study-guide"
KINDS = (QUESTION, STUDY_GUIDE)


def build_query(kind: str, text: str) -> str:
    """
    Derive the retrieval query from the student's input.

    Example:
        build_query("study-guide", "Photosynthesis")
        # -> "Create a study guide on Photosynthesis."
    """
    if kind == QUESTION:
        return text
    if kind == STUDY_GUIDE:
        return STUDY_GUIDE_QUERY_TEMPLATE.format(topic=text)
    raise ValueError(f"Unknown request kind '{kind}'. Choose from: {', '.join(KINDS)}")


class StudyPipeline:
    """
    Complete RAG pipeline combining ingestion, retrieval and generation.

    The pipeline holds only stateless collaborators; all per-user state
    lives in the StudySession passed to each call.

    Example:
        pipeline = StudyPipeline()
        session = StudySession()
        pipeline.process_document(session, "biology.pdf", pdf_bytes)
        answer = pipeline.ask(session, "What is osmosis?", Credentials.from_config())
    """

    def __init__(
        self,
        retriever: Retriever | None = None,
        generator: Generator | None = None,
        vector_store_dir: str | Path | None = None,
        upload_dir: str | Path | None = None,
    ):
        """
        Args:
            retriever: Retriever (its embedder is also used for ingestion)
            generator: Generator for LLM calls
            vector_store_dir: Parent directory for new indexes (config default if None)
            upload_dir: Temporary upload directory (config default if None)
        """
        self.retriever = retriever or Retriever()
        self.generator = generator or Generator()
        self.vector_store_dir = vector_store_dir
        self.upload_dir = upload_dir

    def process_document(
        self,
        session: StudySession,
        file_name: str,
        raw_bytes: bytes,
    ) -> IngestionResult:
        """Ingest one PDF; see process_documents."""
        return self.process_documents(session, [(file_name, raw_bytes)])

    def process_documents(
        self,
        session: StudySession,
        files: list[tuple[str, bytes]],
    ) -> IngestionResult:
        """
        Ingest PDFs into a new index and make it the session's active index.

        On failure the error propagates and the session keeps whatever
        index it had before.

        Raises:
            IngestionError: If any file fails to ingest
        """
        result = ingest_documents(
            files,
            embedder=self.retriever.embedder,
            vector_store_dir=self.vector_store_dir,
            upload_dir=self.upload_dir,
        )
        session.index_location = result.index_location
        session.uploaded_files = list(result.source_files)
        return result

    def ask_or_generate(
        self,
        kind: str,
        text: str,
        preferences: Preferences,
        index_location: str,
        credentials: Credentials,
        model_name: str | None = None,
    ) -> str:
        """
        Answer a question or generate a study guide.

        Args:
            kind: "question" or "study-guide"
            text: The question, or the study guide topic
            preferences: Learner preferences for this request
            index_location: Index to retrieve context from
            credentials: LLM provider and key (server-side)
            model_name: LLM model (provider default if None)

        Returns:
            The generated answer

        Raises:
            ValueError: If kind is unknown
            IndexNotFoundError: If the index cannot be opened
            EmbeddingModelMismatchError: If the index uses another embedding model
        """
        query = build_query(kind, text)
        logger.info("Handling %s request against %s", kind, index_location)
        retrieval = self.retriever.retrieve(index_location, query)

        template = build_prompt(preferences)
        prompt = fill_prompt(template, retrieval.chunks, query, preferences)

        return self.generator.generate(prompt, model_name, credentials)

    def ask(
        self,
        session: StudySession,
        question: str,
        credentials: Credentials,
        model_name: str | None = None,
    ) -> str:
        """Ask a question against the session's active index."""
        return self._run(session, QUESTION, question, credentials, model_name)

    def study_guide(
        self,
        session: StudySession,
        topic: str,
        credentials: Credentials,
        model_name: str | None = None,
    ) -> str:
        """Generate a study guide on a topic from the session's active index."""
        return self._run(session, STUDY_GUIDE, topic, credentials, model_name)

    def _run(self, session, kind, text, credentials, model_name):
        if not session.has_index:
            raise IndexNotFoundError("No document has been processed in this session yet")
        return self.ask_or_generate(
            kind,
            text,
            session.preferences,
            session.index_location,
            credentials,
            model_name=model_name or session.model_name,
        )
