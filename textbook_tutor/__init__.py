"""
Textbook Tutor - A RAG study assistant for uploaded PDF textbooks.

This package provides:
- PDF ingestion and text extraction
- Overlapping text chunking
- Embedding generation using sentence-transformers
- Per-upload vector indexes with ChromaDB
- Preference-driven prompts and LLM generation (Groq or Ollama)
- CLI and HTTP interfaces
"""

__version__ = "0.1.0"
