"""
RAG module - Retrieval-Augmented Generation pipeline.

This module is responsible for:
1. Retrieving relevant chunks for a query
2. Assembling the tutor prompt from learner preferences
3. Generating responses with a hosted or local LLM
"""

from .retriever import Retriever, RetrievalResult
from .prompts import build_prompt, fill_prompt
from .generator import Generator
from .pipeline import StudyPipeline, build_query

__all__ = [
    "Retriever",
    "RetrievalResult",
    "build_prompt",
    "fill_prompt",
    "Generator",
    "StudyPipeline",
    "build_query",
]
