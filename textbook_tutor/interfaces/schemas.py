"""Pydantic request/response schemas for the HTTP API.

Field names on the wire are camelCase (`fileName`, `vectorStorePath`, ...);
the Python attributes are snake_case aliases of them.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from textbook_tutor.config import DEFAULT_COMPLEXITY_LEVEL, DEFAULT_LEARNING_STYLE


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class IngestRequest(_WireModel):
    """Body of POST /api/ingest."""
    pdf: str = Field(..., min_length=1, description="Base64-encoded PDF bytes")
    file_name: str = Field(..., alias="fileName", min_length=1)


class IngestResponse(_WireModel):
    success: bool = True
    message: str
    vector_store_path: str = Field(..., alias="vectorStorePath")
    chunk_count: int = Field(..., alias="chunkCount")


class QueryRequest(_WireModel):
    """Body of POST /api/query.

    `groqApiKey` is accepted so older clients keep working, but it is never
    used: the server supplies its own key.
    """
    question: str = Field(..., min_length=1, description="Question, or study guide topic")
    vector_store_path: str = Field(..., alias="vectorStorePath", min_length=1)
    model_name: str | None = Field(default=None, alias="modelName")
    groq_api_key: str | None = Field(default=None, alias="groqApiKey", repr=False)
    learning_style: str = Field(default=DEFAULT_LEARNING_STYLE, alias="learningStyle")
    complexity_level: str = Field(default=DEFAULT_COMPLEXITY_LEVEL, alias="complexityLevel")
    include_examples: bool = Field(default=True, alias="includeExamples")
    include_analogies: bool = Field(default=False, alias="includeAnalogies")
    include_questions: bool = Field(default=False, alias="includeQuestions")
    kind: Literal["question", "study-guide"] = "question"


class QueryResponse(_WireModel):
    success: bool = True
    answer: str


class ErrorResponse(_WireModel):
    success: bool = False
    error: str
