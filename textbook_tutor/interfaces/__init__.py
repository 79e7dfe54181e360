"""
Interfaces module - User-facing interfaces for the Textbook Tutor.

This module provides:
1. CLI interface for command-line interaction
2. HTTP JSON API using FastAPI
"""
