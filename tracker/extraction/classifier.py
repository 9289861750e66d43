"""
Content classifier.
Decides PDF vs. markup vs. empty from the bytes alone.
"""

from tracker.models import ContentKind


PDF_SIGNATURE = b"%PDF-"
MIN_CONTENT_BYTES = 100


def classify_content(content: bytes, min_bytes: int = MIN_CONTENT_BYTES) -> ContentKind:
    """
    Classify fetched content.

    The byte signature is authoritative; the upstream Content-Type header
    is never consulted.
    """
    if not content or len(content) < min_bytes:
        return ContentKind.EMPTY
    if content[:5] == PDF_SIGNATURE:
        return ContentKind.PDF
    return ContentKind.MARKUP
