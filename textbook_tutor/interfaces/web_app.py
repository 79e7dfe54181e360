"""
Web Interface - JSON API for ingesting textbooks and asking questions.

Endpoints:
    POST /api/ingest   base64 PDF -> new index location + chunk count
    POST /api/query    question or study guide topic -> generated answer
    GET  /health       liveness probe

Every failure, including a wrong HTTP method or a malformed body, is
returned as {"success": false, "error": "..."} with an error status code.

Run with:
    uvicorn textbook_tutor.interfaces.web_app:create_app --factory
"""

import base64
import binascii
import logging

import groq
import ollama
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from textbook_tutor import __version__
from textbook_tutor.config import EMBEDDING_MODEL
from textbook_tutor.errors import (
    EmbeddingModelMismatchError,
    IndexNotFoundError,
    IngestionError,
    MissingCredentialsError,
)
from textbook_tutor.interfaces.schemas import (
    ErrorResponse,
    IngestRequest,
    IngestResponse,
    QueryRequest,
    QueryResponse,
)
from textbook_tutor.logging_utils import configure_logging
from textbook_tutor.rag.pipeline import StudyPipeline
from textbook_tutor.session import Credentials, Preferences, StudySession

logger = logging.getLogger(__name__)

# Upstream LLM failures, reported as 502 Bad Gateway
_UPSTREAM_ERRORS = (groq.APIError, ollama.ResponseError, ConnectionError)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def _query_error_status(exc: Exception) -> int:
    if isinstance(exc, IndexNotFoundError):
        return 404
    if isinstance(exc, EmbeddingModelMismatchError):
        return 409
    if isinstance(exc, _UPSTREAM_ERRORS):
        return 502
    return 500


def create_app(
    pipeline: StudyPipeline | None = None,
    credentials: Credentials | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        pipeline: StudyPipeline to serve (a default one if not provided)
        credentials: LLM credentials (read from server config if not provided)
    """
    configure_logging()

    app = FastAPI(title="Textbook Tutor API", version=__version__)
    app.state.pipeline = pipeline or StudyPipeline()
    app.state.credentials = credentials or Credentials.from_config()

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        response = _error(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'] if p != 'body') or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        return _error(422, f"Invalid request: {problems}")

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "provider": app.state.credentials.provider,
            "embedding_model": EMBEDDING_MODEL,
        }

    @app.post(
        "/api/ingest",
        response_model=IngestResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def ingest(req: IngestRequest):
        """Decode the uploaded PDF, build a new index, and return its location."""
        try:
            raw_bytes = base64.b64decode(req.pdf, validate=True)
        except (binascii.Error, ValueError) as e:
            return _error(400, f"Invalid base64 PDF data: {e}")

        session = StudySession()
        try:
            result = app.state.pipeline.process_document(session, req.file_name, raw_bytes)
        except IngestionError as e:
            logger.warning("Ingestion of %s failed: %s", req.file_name, e)
            return _error(400, str(e))
        except Exception as e:
            logger.exception("Unexpected error ingesting %s", req.file_name)
            return _error(500, str(e))

        return IngestResponse(
            message=f"Processed {req.file_name} into {result.chunk_count} chunks",
            vector_store_path=result.index_location,
            chunk_count=result.chunk_count,
        )

    @app.post(
        "/api/query",
        response_model=QueryResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
            502: {"model": ErrorResponse},
        },
    )
    def query(req: QueryRequest):
        """Answer a question, or write a study guide, from an existing index."""
        if req.groq_api_key:
            logger.warning("Ignoring client-supplied API key; server-side credentials are used")

        preferences = Preferences(
            learning_style=req.learning_style,
            complexity_level=req.complexity_level,
            include_examples=req.include_examples,
            include_analogies=req.include_analogies,
            include_questions=req.include_questions,
        )

        try:
            answer = app.state.pipeline.ask_or_generate(
                req.kind,
                req.question,
                preferences,
                req.vector_store_path,
                app.state.credentials,
                model_name=req.model_name,
            )
        except MissingCredentialsError as e:
            logger.error("%s", e)
            return _error(500, str(e))
        except Exception as e:
            status = _query_error_status(e)
            if status >= 500:
                logger.exception("Query against %s failed", req.vector_store_path)
            else:
                logger.warning("Query against %s failed: %s", req.vector_store_path, e)
            return _error(status, str(e))

        return QueryResponse(answer=answer)

    return app

