"""
Configuration settings for the Textbook Tutor application.

This file centralizes all configuration so you can easily adjust parameters.
Values that differ between deployments (data location, API keys, provider)
can be overridden with environment variables.
"""

import os
from pathlib import Path

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Base directory (where this project lives)
BASE_DIR = Path(__file__).parent.parent

# Data storage directory
DATA_DIR = Path(os.environ.get("TEXTBOOK_TUTOR_DATA_DIR", BASE_DIR / "data"))

# Uploaded PDFs are written here while they are parsed, then deleted
UPLOAD_DIR = DATA_DIR / "uploads"

# One sub-directory per ingested batch, e.g. data/vector_stores/<uuid>/
VECTOR_STORE_DIR = DATA_DIR / "vector_stores"

# Written last into every index directory; its presence marks a complete index
INDEX_MANIFEST_NAME = "index.json"

# =============================================================================
# CHUNKING CONFIGURATION
# =============================================================================

# Chunk size in characters
CHUNK_SIZE = 1000

# Overlap between chunks in characters, so a sentence split across a
# boundary still appears whole in one of the two chunks
CHUNK_OVERLAP = 100

# =============================================================================
# EMBEDDING CONFIGURATION
# =============================================================================

# This model creates 384-dimensional vectors.
# The same model MUST be used at ingestion and query time; the model name is
# stored in each index manifest and checked on every query.
EMBEDDING_MODEL = "all-MiniLM-L6-v2"

EMBEDDING_BATCH_SIZE = 32

# =============================================================================
# CHROMADB CONFIGURATION
# =============================================================================

# Every index directory holds exactly one collection with this name
COLLECTION_NAME = "textbook_chunks"

# =============================================================================
# RAG CONFIGURATION
# =============================================================================

# Number of chunks to retrieve for context. Fixed; requests cannot override it.
TOP_K_CHUNKS = 5

# =============================================================================
# LLM CONFIGURATION
# =============================================================================

# "groq" (hosted, default) or "ollama" (local)
LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "groq")

# Injected server-side; never accepted from or shown to a client
GROQ_API_KEY = os.environ.get("GROQ_API_KEY", "")

GROQ_MODEL = "llama-3.1-8b-instant"

AVAILABLE_GROQ_MODELS = [
    "llama-3.1-8b-instant",
    "llama-3.3-70b-versatile",
    "gemma2-9b-it",
]

OLLAMA_MODEL = "llama3.2"

OLLAMA_BASE_URL = os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")

# =============================================================================
# LEARNER PREFERENCES
# =============================================================================

LEARNING_STYLES = ["Visual", "Auditory", "Read/Write", "Kinesthetic", "Balanced"]

COMPLEXITY_LEVELS = ["Beginner", "Intermediate", "Advanced", "Expert"]

DEFAULT_LEARNING_STYLE = "Balanced"

DEFAULT_COMPLEXITY_LEVEL = "Intermediate"

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# =============================================================================
# LLM PROMPT TEMPLATES
# =============================================================================

# Placeholders: {context}, {question}, {learningStyle}, {complexityLevel}.
# Preference-driven instruction lines are appended after the base block.
BASE_PROMPT_TEMPLATE = """You are a knowledgeable and patient tutor helping a student learn from their own textbook.

Use ONLY the context below, taken from the student's uploaded textbook, to answer.
If the answer is not in the context, say that the textbook does not cover it.

Context:
---
{context}
---

Question: {question}

The student prefers the {learningStyle} learning style and is at the {complexityLevel} level.

Instructions:
- Give a clear and concise explanation.
- Use vocabulary and depth appropriate for a {complexityLevel} learner."""

# Exactly one of these is appended, chosen by exact match on the learning style.
# "Balanced" (or anything else) adds no style line.
LEARNING_STYLE_INSTRUCTIONS = {
    "Visual": (
        "- The student is a visual learner: describe diagrams, charts and mental "
        "images, and lay information out spatially with tables or nested lists."
    ),
    "Auditory": (
        "- The student is an auditory learner: write in a conversational tone, as "
        "if explaining out loud, and suggest mnemonics or rhymes for key points."
    ),
    "Read/Write": (
        "- The student is a read/write learner: use well-structured text with "
        "headings, definitions, numbered lists and a short written summary."
    ),
    "Kinesthetic": (
        "- The student is a kinesthetic learner: tie each idea to a hands-on "
        "activity, experiment or real-world action the student can try."
    ),
}

EXAMPLES_INSTRUCTION = "- Include concrete examples that illustrate the key concepts."

ANALOGIES_INSTRUCTION = "- Use analogies that relate the concepts to everyday experiences."

QUESTIONS_INSTRUCTION = (
    "- Finish with 3 practice questions (with answers) so the student can check "
    "their understanding."
)

# The query sent to retrieval when the student asks for a study guide
STUDY_GUIDE_QUERY_TEMPLATE = "Create a study guide on {topic}."
