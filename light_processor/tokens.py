# ================================================================
# Light Processor - Token Source
# ================================================================
# Phrase / document tokenization and text extraction (txt, csv, pdf)
# ================================================================

import re
from pathlib import Path
from typing import List

import fitz

from light_processor.errors import UnsupportedFormatError

WORD_PATTERN = re.compile(r"\b\w+\b")

SUPPORTED_SUFFIXES = {".txt", ".csv", ".pdf"}


def tokenize_phrase(text: str) -> List[str]:
    """Typed input: lowercase, split on whitespace runs."""
    return text.lower().split()


def tokenize_document(text: str) -> List[str]:
    """Bulk input: lowercase word-character runs."""
    return WORD_PATTERN.findall(text.lower())


def extract_text(path) -> str:
    """
    Read a document as plain text.

    .txt is read as-is, .csv has its commas turned into spaces and
    .pdf pages are joined with spaces. Anything else (.doc/.docx included)
    raises UnsupportedFormatError.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFormatError(suffix)
    if suffix == ".pdf":
        return extract_pdf_text(path)

    text = path.read_text(encoding="utf-8")
    if suffix == ".csv":
        text = text.replace(",", " ")
    return text


def read_tokens(path) -> List[str]:
    """Extract a document and tokenize it."""
    return tokenize_document(extract_text(path))


def extract_pdf_text(path) -> str:
    """Text of every page, in page order."""
    with fitz.open(str(path)) as doc:
        pages = [page.get_text() for page in doc]
    return " ".join(pages)
