from __future__ import annotations

import os
import re
from io import BytesIO
from typing import Tuple

from docx import Document
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from tldr_ai.core.errors import UploadError

SUPPORTED = {".txt", ".pdf", ".doc", ".docx"}

# Runs of printable characters long enough to be words, not binary noise
_PRINTABLE_RUN = re.compile(r"[^\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufffd]{4,}")


def extract_text_from_upload(filename: str, data: bytes, max_bytes: int) -> Tuple[str, str]:
    ext = os.path.splitext((filename or "").lower())[1]

    if ext not in SUPPORTED:
        raise UploadError("Invalid file type. Only TXT, PDF, DOC, and DOCX files are allowed.")

    if len(data) > max_bytes:
        raise UploadError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")

    if ext == ".txt":
        return data.decode("utf-8", errors="ignore").strip(), "txt"

    if ext == ".pdf":
        try:
            reader = PdfReader(BytesIO(data))
            pages = [p.extract_text() or "" for p in reader.pages]
        except PyPdfError as e:
            raise UploadError(f"Could not read PDF {filename}: {e}") from e
        return "\n".join(pages).strip(), "pdf"

    if ext == ".docx":
        try:
            doc = Document(BytesIO(data))
        except Exception as e:
            # python-docx raises zipfile/lxml/package errors for non-docx bytes
            raise UploadError(f"Could not read DOCX {filename}: {e}") from e
        parts = [p.text for p in doc.paragraphs if p.text and p.text.strip()]
        return "\n".join(parts).strip(), "docx"

    # .doc (Word 97-2003): no parser, keep the readable runs
    decoded = data.decode("utf-8", errors="replace")
    runs = [m.group(0).strip() for m in _PRINTABLE_RUN.finditer(decoded)]
    return "\n".join(r for r in runs if r), "doc"
