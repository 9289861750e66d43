"""
Text extractor.
Recovers plain text from PDF reports and HTML pages.
"""

import io
import pdfplumber
from bs4 import BeautifulSoup
from loguru import logger

from tracker.errors import ExtractionError, ExtractionStage
from tracker.models import ContentKind, ExtractedText


# Elements whose text never reaches the user's eyes
INVISIBLE_TAGS = ["script", "style", "noscript", "template"]


def normalize_text(text: str) -> str:
    """Drop carriage returns and non-breaking spaces, trim the ends."""
    return text.replace("\r", "").replace("\xa0", " ").strip()


def extract_pdf_text(content: bytes) -> str:
    """
    Decode the text streams of a PDF, one visual line per text line.

    Raises:
        ExtractionError: if the document cannot be parsed
    """
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.warning(f"PDF decode failed: {e}")
        raise ExtractionError(
            ExtractionStage.PDF_DECODE,
            "No se pudo leer el documento PDF",
            {"reason": str(e)},
        ) from e

    logger.debug(f"PDF decoded: {len(pages)} pages")
    return "\n".join(pages)


def extract_markup_text(content: bytes) -> str:
    """Strip tags and keep the visible text in document order."""
    try:
        soup = BeautifulSoup(content, "html.parser")
    except Exception as e:
        raise ExtractionError(
            ExtractionStage.MARKUP_DECODE,
            "No se pudo leer la página del transportador",
            {"reason": str(e)},
        ) from e

    for tag in soup.find_all(INVISIBLE_TAGS):
        tag.decompose()

    return soup.get_text(separator="\n", strip=True)


def extract_text(content: bytes, kind: ContentKind) -> ExtractedText:
    """
    Produce the normalized plain text for classified content.

    Args:
        content: Raw bytes from the carrier
        kind: PDF or MARKUP, as decided by the classifier
    """
    if kind == ContentKind.PDF:
        text = extract_pdf_text(content)
    elif kind == ContentKind.MARKUP:
        text = extract_markup_text(content)
    else:
        raise ValueError(f"Cannot extract text from {kind} content")

    return ExtractedText(plain_text=normalize_text(text), source_kind=kind)
