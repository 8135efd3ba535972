"""Text extraction and normalization for uploaded files, links and snippets"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional
from urllib.parse import urlparse
import csv
import io
import logging
import re

import httpx
from bs4 import BeautifulSoup
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from app.exceptions import (
    FetchFailed,
    PayloadTooLarge,
    UnreadableContent,
    UnsupportedType,
    ValidationException,
)
from app.rag.config import rag_config
from app.utils.logger import log_event

logger = logging.getLogger(__name__)

PRINTABLE_RATIO = 0.7
MIN_PDF_CHARS = 100
MIN_PAGE_CHARS = 100
MIN_OCR_CHARS = 5
CSV_EXAMPLE_VALUES = 5

_PRINTABLE = re.compile(r"[\x20-\x7E\n\r\t]")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n\r\t]")
_INLINE_WHITESPACE = re.compile(r"[^\S\n]+")
_SPACES_AROUND_NEWLINE = re.compile(r" *\n *")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_WHITESPACE = re.compile(r"\s+")


class SourceKind(str, Enum):
    """Supported input variants"""
    PLAIN_TEXT = "text"
    PDF = "pdf"
    CSV = "csv"
    IMAGE = "image"
    LINK = "link"


MIME_KINDS: Dict[str, SourceKind] = {
    "text/plain": SourceKind.PLAIN_TEXT,
    "application/pdf": SourceKind.PDF,
    "application/x-pdf": SourceKind.PDF,
    "text/csv": SourceKind.CSV,
    "application/csv": SourceKind.CSV,
    "image/png": SourceKind.IMAGE,
    "image/jpeg": SourceKind.IMAGE,
    "image/jpg": SourceKind.IMAGE,
    "image/heic": SourceKind.IMAGE,
    "image/heif": SourceKind.IMAGE,
}

EXTENSION_KINDS: Dict[str, SourceKind] = {
    ".txt": SourceKind.PLAIN_TEXT,
    ".pdf": SourceKind.PDF,
    ".csv": SourceKind.CSV,
    ".png": SourceKind.IMAGE,
    ".jpg": SourceKind.IMAGE,
    ".jpeg": SourceKind.IMAGE,
    ".heic": SourceKind.IMAGE,
    ".heif": SourceKind.IMAGE,
}

# Declared types that say nothing about the content; the extension decides
GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


@dataclass
class ExtractedPage:
    """Text and display title of a fetched link"""
    title: str
    text: str


def detect_kind(filename: str, mime_type: Optional[str]) -> SourceKind:
    """
    Select the extraction variant for an uploaded file

    The declared MIME type wins; the filename extension is only consulted
    when the declared type is missing or generic.
    """
    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime in MIME_KINDS:
        return MIME_KINDS[mime]

    extension = Path(filename or "").suffix.lower()
    if mime in GENERIC_MIME_TYPES:
        if extension in EXTENSION_KINDS:
            return EXTENSION_KINDS[extension]
        rejected = extension or "(no extension)"
    else:
        rejected = mime

    raise UnsupportedType(
        f"Unsupported file type: {rejected}. Please upload PDF, TXT, CSV, or image files (PNG, JPG, JPEG, HEIC, HEIF).",
        details=f"filename={filename!r} mime_type={mime_type!r}",
    )


def is_readable(text: str) -> bool:
    """True when at least 70% of characters are printable ASCII or whitespace"""
    if not text:
        return True
    printable = len(_PRINTABLE.findall(text))
    return printable / len(text) >= PRINTABLE_RATIO


def clean_text(text: str) -> str:
    """Strip non-printables, collapse whitespace runs, keep at most one blank line"""
    text = _NON_PRINTABLE.sub("", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _INLINE_WHITESPACE.sub(" ", text)
    text = _SPACES_AROUND_NEWLINE.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def html_to_text(markup: str) -> str:
    """Visible text of an HTML page with script/style removed and whitespace collapsed"""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return _WHITESPACE.sub(" ", soup.get_text(" ")).strip()


def extract_title(markup: str, url: str) -> str:
    """Page ``<title>``, falling back to the URL host"""
    soup = BeautifulSoup(markup, "html.parser")
    if soup.title:
        title = _WHITESPACE.sub(" ", soup.title.get_text(" ")).strip()
        if title:
            return title[:500]
    return urlparse(url).hostname or url


def synthesize_csv(headers: List[str], rows: List[List[str]]) -> str:
    """
    Turn tabular data into prose for the chunk/embed/retrieve pipeline

    Produces a record count, a per-column summary (up to five distinct
    example values and the non-empty count), then every row flattened as
    ``column: value`` pairs.
    """
    lines = [
        f"CSV data with {len(rows)} records.",
        f"Columns: {', '.join(headers)}",
        "",
    ]

    for col, header in enumerate(headers):
        values = [row[col].strip() for row in rows if row[col].strip()]
        examples = list(dict.fromkeys(values))[:CSV_EXAMPLE_VALUES]
        lines.append(f"Column \"{header}\":")
        lines.append(f"Example values: {', '.join(examples) if examples else '(none)'}")
        lines.append(f"Total entries: {len(values)}")
        lines.append("")

    lines.append("Records:")
    for row in rows:
        lines.append(", ".join(f"{header}: {value.strip()}" for header, value in zip(headers, row)))

    return "\n".join(lines)


def _decode(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


class TextExtractor:
    """Convert raw documents into cleaned plain text"""

    def __init__(self, ocr=None, fetcher=None, ocr_max_bytes: int = None):
        """
        Args:
            ocr: OCR collaborator exposing ``ocr(image_bytes, mime_type) -> str``
            fetcher: Page fetch collaborator exposing ``fetch(url) -> FetchedPage``
            ocr_max_bytes: Largest image accepted for OCR
        """
        self.ocr = ocr
        self.fetcher = fetcher
        self.ocr_max_bytes = ocr_max_bytes or rag_config.ocr_max_bytes
        self._extractors: Dict[SourceKind, Callable[[bytes, str], str]] = {
            SourceKind.PLAIN_TEXT: self._extract_plain_text,
            SourceKind.PDF: self._extract_pdf,
            SourceKind.CSV: self._extract_csv,
            SourceKind.IMAGE: self._extract_image,
        }

    def extract_file(self, data: bytes, filename: str, mime_type: Optional[str] = None) -> str:
        """
        Extract cleaned text from an uploaded file

        Raises:
            UnsupportedType: file type not recognised
            UnreadableContent: nothing legible could be extracted
            PayloadTooLarge: image exceeds the OCR limit
        """
        kind = detect_kind(filename, mime_type)
        log_event(logger, "extraction.start", kind=kind.value, filename=filename, bytes=len(data))

        text = self._extractors[kind](data, mime_type or "")

        log_event(logger, "extraction.end", kind=kind.value, filename=filename, bytes=len(data), chars=len(text))
        return text

    def extract_snippet(self, content: str) -> str:
        """Apply the plain-text rules to pasted text"""
        log_event(logger, "extraction.start", kind="snippet", chars=len(content))
        text = self._clean_readable(content, "Text contains binary data or is not readable.")
        log_event(logger, "extraction.end", kind="snippet", chars=len(text))
        return text

    def extract_link(self, url: str) -> ExtractedPage:
        """
        Fetch a web page and reduce it to text plus a display title

        Raises:
            ValidationException: URL is malformed or not http(s)
            FetchFailed: transport error or non-2xx status
            UnreadableContent: page text under 100 characters
        """
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ValidationException("Please provide a valid http(s) link.", details=f"url={url!r} {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationException("Please provide a valid http(s) link.", details=f"url={url!r}")

        log_event(logger, "extraction.start", kind=SourceKind.LINK.value, url=url)
        try:
            page = self.fetcher.fetch(url)
        except httpx.InvalidURL as e:
            raise ValidationException("Please provide a valid http(s) link.", details=f"url={url!r} {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise FetchFailed(details=str(e)) from e

        if not page.ok:
            raise FetchFailed(
                f"Could not fetch the page (HTTP {page.status_code}).",
                details=f"url={url} status={page.status_code}",
            )

        text = html_to_text(page.text)
        if len(text) < MIN_PAGE_CHARS:
            raise UnreadableContent(
                "The page has too little readable text.",
                details=f"url={url} chars={len(text)}",
            )

        title = extract_title(page.text, url)
        log_event(
            logger, "extraction.end",
            kind=SourceKind.LINK.value, url=url, bytes=len(page.text.encode("utf-8")), chars=len(text)
        )
        return ExtractedPage(title=title, text=text)

    def _clean_readable(self, text: str, reason: str) -> str:
        if not is_readable(text):
            raise UnreadableContent(reason, details=f"chars={len(text)}")
        return clean_text(text)

    def _extract_plain_text(self, data: bytes, mime_type: str) -> str:
        return self._clean_readable(_decode(data), "TXT file contains binary data or is not readable.")

    def _extract_pdf(self, data: bytes, mime_type: str) -> str:
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PdfReadError, ValueError) as e:
            raise UnreadableContent("PDF could not be parsed.", details=str(e)) from e

        text = "\n\n".join(pages)
        if len(text.strip()) < MIN_PDF_CHARS:
            raise UnreadableContent(
                "PDF has too little extractable text. It may be scanned or image-based.",
                details=f"pages={len(pages)} chars={len(text.strip())}",
            )

        logger.info(f"Extracted {len(text)} characters from {len(pages)} PDF pages")
        return clean_text(text)

    def _extract_csv(self, data: bytes, mime_type: str) -> str:
        reader = csv.reader(io.StringIO(_decode(data)))
        try:
            records = [row for row in reader if any(field.strip() for field in row)]
        except csv.Error as e:
            raise UnreadableContent("CSV file could not be parsed.", details=str(e)) from e

        if not records:
            raise UnreadableContent("CSV file is empty.")

        headers = [h.strip() for h in records[0]]
        rows = []
        for line_number, row in enumerate(records[1:], start=2):
            if len(row) != len(headers):
                logger.warning(
                    f"Skipping CSV row {line_number}: {len(row)} fields, header has {len(headers)}"
                )
                continue
            rows.append(row)

        if not rows:
            raise UnreadableContent(
                "CSV file has no rows matching its header.",
                details=f"columns={len(headers)} rows={len(records) - 1}",
            )

        return clean_text(synthesize_csv(headers, rows))

    def _extract_image(self, data: bytes, mime_type: str) -> str:
        if len(data) > self.ocr_max_bytes:
            raise PayloadTooLarge(
                f"Images must be smaller than {self.ocr_max_bytes // 1024} KB for text recognition.",
                details=f"bytes={len(data)} limit={self.ocr_max_bytes}",
            )

        text = self.ocr.ocr(data, mime_type or "image/*")
        if len(text.strip()) < MIN_OCR_CHARS:
            raise UnreadableContent("No readable text was found in the image.", details=f"chars={len(text.strip())}")
        return clean_text(text)
