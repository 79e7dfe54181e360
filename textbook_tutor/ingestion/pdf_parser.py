"""
PDF Parser - Extracts text from uploaded PDF textbooks.

This module handles the extraction of text content from PDF files using
pymupdf (fitz).

Key Concepts:
- PDFs store text in a structured way (pages, blocks, lines)
- Images and diagrams are not extracted (text only)
- We preserve page boundaries so chunks can carry a page number
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import fitz  # pymupdf - the library is called 'fitz' historically

logger = logging.getLogger(__name__)


@dataclass
class PageContent:
    """
    Represents the content of a single PDF page.

    Attributes:
        page_number: 1-indexed page number
        text: Extracted text content
    """
    page_number: int
    text: str


@dataclass
class DocumentContent:
    """
    Represents the full content of a PDF document.

    Attributes:
        filename: Name of the PDF file
        total_pages: Total number of pages
        pages: List of PageContent objects (empty pages are skipped)
    """
    filename: str
    total_pages: int
    pages: list[PageContent]

    @property
    def is_empty(self) -> bool:
        """True when no page produced any text (e.g. a scanned PDF)."""
        return not self.pages


class PDFParser:
    """
    Parses PDF files and extracts text content.

    Example:
        parser = PDFParser()
        content = parser.parse_pdf("chapter1.pdf")
        print(content.total_pages, len(content.pages))
    """

    def __init__(self, clean_text: bool = True):
        """
        Initialize the PDF parser.

        Args:
            clean_text: If True, apply text cleaning (remove extra whitespace, etc.)
        """
        self.clean_text = clean_text

    def _clean_extracted_text(self, text: str) -> str:
        """
        Clean extracted text by removing common artifacts.

        This handles:
        - Multiple consecutive newlines
        - Extra whitespace
        - Lines that are just page numbers
        """
        if not self.clean_text:
            return text

        # Replace multiple newlines with double newline (paragraph break)
        text = re.sub(r'\n{3,}', '\n\n', text)

        # Replace multiple spaces with single space
        text = re.sub(r' {2,}', ' ', text)

        lines = text.split('\n')
        cleaned_lines = [
            line for line in lines
            if not (line.strip().isdigit() and len(line.strip()) < 4)
        ]
        text = '\n'.join(cleaned_lines)

        return text.strip()

    def parse_pdf(self, pdf_path: str | Path, display_name: str | None = None) -> DocumentContent:
        """
        Parse a single PDF file and extract all text.

        Args:
            pdf_path: Path to the PDF file
            display_name: Name recorded as the source file (defaults to the
                file name on disk, which for uploads is a temporary name)

        Returns:
            DocumentContent with all extracted text and metadata

        Raises:
            FileNotFoundError: If the PDF file doesn't exist
            RuntimeError: If the PDF cannot be opened or is password protected
        """
        pdf_path = Path(pdf_path)
        source_name = display_name or pdf_path.name

        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        try:
            doc = fitz.open(pdf_path, filetype="pdf")
        except Exception as e:
            raise RuntimeError(f"Failed to open PDF {source_name}: {e}") from e

        try:
            if doc.needs_pass:
                raise RuntimeError(f"PDF {source_name} is password protected")

            pages = []
            total_pages = len(doc)

            for page_num in range(total_pages):
                text = doc[page_num].get_text()
                cleaned = self._clean_extracted_text(text)

                if cleaned:  # Only add non-empty pages
                    pages.append(PageContent(
                        page_number=page_num + 1,  # 1-indexed
                        text=cleaned,
                    ))
        finally:
            doc.close()

        logger.debug("Parsed %s: %d/%d pages with text", source_name, len(pages), total_pages)

        return DocumentContent(
            filename=source_name,
            total_pages=total_pages,
            pages=pages,
        )
