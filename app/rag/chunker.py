"""Boundary-aware text chunking"""

from typing import List

BOUNDARY_CHARS = (".", "\n")


def _last_boundary(text: str, start: int, end: int) -> int:
    """Index of the last sentence/line boundary in ``text[start:end]``, or -1"""
    return max(text.rfind(ch, start, end) for ch in BOUNDARY_CHARS)


def chunk_text(text: str, size: int = 1500, overlap: int = 100) -> List[str]:
    """
    Split text into overlapping chunks, preferring sentence or line ends

    A window of ``size`` characters slides over the text. When the window
    ends inside the text, the cut snaps back to just after the last ``.`` or
    newline in the window, provided that boundary lies in the second half of
    the window. The next window starts ``overlap`` characters before the cut.

    Args:
        text: Cleaned document text
        size: Maximum characters per chunk
        overlap: Characters shared between consecutive windows

    Returns:
        Trimmed, non-empty chunks in document order
    """
    if size <= 0:
        raise ValueError("size must be positive")
    if overlap < 0 or overlap * 2 >= size:
        raise ValueError("overlap must be non-negative and less than half of size")

    chunks = []
    length = len(text)
    start = 0

    while start < length:
        end = start + size

        if end < length:
            boundary = _last_boundary(text, start, end)
            if boundary >= start + size * 0.5:
                end = boundary + 1

        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)

        # Window reached the end; another pass would only repeat the overlap
        if end >= length:
            break
        start = end - overlap

    return chunks
