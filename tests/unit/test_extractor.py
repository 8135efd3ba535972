"""Test text extraction"""

import httpx
import pytest

from app.exceptions import (
    FetchFailed,
    PayloadTooLarge,
    UnreadableContent,
    UnsupportedType,
    ValidationException,
)
from app.rag import extractor as extractor_module
from app.rag.extractor import (
    SourceKind,
    TextExtractor,
    clean_text,
    detect_kind,
    html_to_text,
    is_readable,
)
from app.rag.fetcher import FetchedPage
from tests.fakes import FakeFetcher, FakeOCR, make_page


class TestDetectKind:
    """Test MIME/extension dispatch"""

    def test_mime_type_wins_over_extension(self):
        assert detect_kind("notes.pdf", "text/plain") == SourceKind.PLAIN_TEXT

    def test_extension_used_when_mime_missing(self):
        assert detect_kind("data.csv", None) == SourceKind.CSV
        assert detect_kind("scan.JPG", "") == SourceKind.IMAGE

    def test_extension_used_for_generic_mime(self):
        assert detect_kind("report.pdf", "application/octet-stream") == SourceKind.PDF

    def test_mime_parameters_ignored(self):
        assert detect_kind("a.txt", "text/plain; charset=utf-8") == SourceKind.PLAIN_TEXT

    def test_heic_accepted(self):
        assert detect_kind("photo.HEIC", None) == SourceKind.IMAGE
        assert detect_kind("photo", "image/heif") == SourceKind.IMAGE

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedType) as exc:
            detect_kind("report.docx", None)
        assert ".docx" in exc.value.message

    def test_unsupported_mime_is_named(self):
        with pytest.raises(UnsupportedType) as exc:
            detect_kind("report.txt", "application/msword")
        assert "application/msword" in exc.value.message


class TestCleaning:
    """Test readability and whitespace normalization"""

    def test_readable_ascii(self):
        assert is_readable("Plain old text\nwith lines")

    def test_binary_is_not_readable(self):
        assert not is_readable("\x00\x01\x02\x03\xff\xfe" * 10 + "ok")

    def test_empty_counts_as_readable(self):
        assert is_readable("")

    def test_clean_text(self):
        raw = "  Hello\t\tworld \r\n\r\n\r\n\r\nNext   line\x00 \n"
        assert clean_text(raw) == "Hello world\n\nNext line"

    def test_html_to_text(self):
        markup = "<html><script>var x = 1;</script><style>p{}</style><p>Fish &amp; chips</p></html>"
        assert html_to_text(markup) == "Fish & chips"

    def test_html_to_text_quoted_angle_bracket_in_attribute(self):
        markup = '<p data-x="a>b">Hello world</p><!-- hidden note -->'
        assert html_to_text(markup) == "Hello world"


class TestPlainText:

    def test_plain_text_file(self, extractor):
        text = extractor.extract_file(b"First line.\n\n\n\nSecond   line.", "notes.txt", "text/plain")
        assert text == "First line.\n\nSecond line."

    def test_binary_txt_rejected(self, extractor):
        with pytest.raises(UnreadableContent):
            extractor.extract_file(bytes(range(256)) * 4, "blob.txt", "text/plain")

    def test_snippet(self, extractor):
        assert extractor.extract_snippet("  pasted   text  ") == "pasted text"


class TestCSV:
    """CSV files become a prose summary"""

    def test_csv_synthesis(self, extractor):
        data = b"name,age\nAda,36\nAlan,41\n"

        text = extractor.extract_file(data, "people.csv", "text/csv")

        assert text.startswith("CSV data with 2 records.")
        assert "Columns: name, age" in text
        assert 'Column "name":' in text
        assert "Example values: Ada, Alan" in text
        assert "Total entries: 2" in text
        assert "name: Ada, age: 36" in text
        assert "name: Alan, age: 41" in text

    def test_example_values_are_distinct_and_capped(self, extractor):
        rows = "\n".join(f"city{i % 7},{i}" for i in range(20))
        text = extractor.extract_file(f"city,n\n{rows}\n".encode(), "c.csv", "text/csv")

        assert "Example values: city0, city1, city2, city3, city4\n" in text

    def test_mismatched_rows_skipped(self, extractor):
        text = extractor.extract_file(b"a,b\n1,2\n3\n4,5\n", "t.csv", "text/csv")

        assert text.startswith("CSV data with 2 records.")
        assert "a: 3" not in text

    def test_header_only_rejected(self, extractor):
        with pytest.raises(UnreadableContent):
            extractor.extract_file(b"a,b\n", "t.csv", "text/csv")

    def test_empty_csv_rejected(self, extractor):
        with pytest.raises(UnreadableContent):
            extractor.extract_file(b"\n\n", "t.csv", "text/csv")


class _FakePage:
    def __init__(self, text):
        self.text = text

    def extract_text(self):
        return self.text


class _FakeReader:
    pages = []

    def __init__(self, stream):
        pass


class TestPDF:

    def test_pages_joined(self, extractor, monkeypatch):
        reader = type("Reader", (_FakeReader,), {"pages": [_FakePage("Page one " * 10), _FakePage("Page two " * 10)]})
        monkeypatch.setattr(extractor_module, "PdfReader", reader)

        text = extractor.extract_file(b"%PDF-1.4", "doc.pdf", "application/pdf")

        assert "Page one" in text
        assert "\n\nPage two" in text

    def test_scanned_pdf_rejected(self, extractor, monkeypatch):
        reader = type("Reader", (_FakeReader,), {"pages": [_FakePage("  "), _FakePage(None)]})
        monkeypatch.setattr(extractor_module, "PdfReader", reader)

        with pytest.raises(UnreadableContent) as exc:
            extractor.extract_file(b"%PDF-1.4", "scan.pdf", "application/pdf")
        assert "scanned" in exc.value.message

    def test_corrupt_pdf_rejected(self, extractor):
        with pytest.raises(UnreadableContent):
            extractor.extract_file(b"not a pdf at all", "broken.pdf", "application/pdf")


class TestImage:

    def test_ocr_text_cleaned(self, fake_fetcher):
        extractor = TextExtractor(ocr=FakeOCR("  Receipt   total: 42  "), fetcher=fake_fetcher)
        assert extractor.extract_file(b"\x89PNG...", "r.png", "image/png") == "Receipt total: 42"

    def test_image_over_limit_rejected_before_ocr(self, fake_ocr, fake_fetcher):
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fake_fetcher, ocr_max_bytes=1024)

        with pytest.raises(PayloadTooLarge):
            extractor.extract_file(b"\x00" * 2048, "big.jpg", "image/jpeg")
        assert fake_ocr.calls == 0

    def test_image_without_text_rejected(self, fake_fetcher):
        extractor = TextExtractor(ocr=FakeOCR(" ab "), fetcher=fake_fetcher)
        with pytest.raises(UnreadableContent):
            extractor.extract_file(b"\x89PNG...", "blank.png", "image/png")


class TestLink:

    def test_page_text_and_title(self, fake_ocr):
        body = "Useful article text. " * 10
        fetcher = FakeFetcher(page=make_page("https://example.com/a", "An Article", body))
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fetcher)

        page = extractor.extract_link("https://example.com/a")

        assert page.title == "An Article"
        assert page.text.startswith("An Article Useful article text.")
        assert fetcher.calls == ["https://example.com/a"]

    def test_title_falls_back_to_host(self, fake_ocr):
        html = "<p>" + "words " * 40 + "</p>"
        fetcher = FakeFetcher(page=FetchedPage(url="https://docs.example.org/x", status_code=200, text=html))
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fetcher)

        assert extractor.extract_link("https://docs.example.org/x").title == "docs.example.org"

    def test_non_http_url_rejected(self, extractor, fake_fetcher):
        with pytest.raises(ValidationException):
            extractor.extract_link("ftp://example.com/file")
        assert fake_fetcher.calls == []

    def test_http_error_status(self, fake_ocr):
        fetcher = FakeFetcher(page=FetchedPage(url="https://example.com", status_code=404, text="missing"))
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fetcher)

        with pytest.raises(FetchFailed) as exc:
            extractor.extract_link("https://example.com")
        assert "404" in exc.value.message

    def test_transport_error(self, fake_ocr):
        fetcher = FakeFetcher(error=httpx.ConnectError("connection refused"))
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fetcher)

        with pytest.raises(FetchFailed):
            extractor.extract_link("https://example.com")

    def test_thin_page_rejected(self, fake_ocr):
        fetcher = FakeFetcher(page=make_page("https://example.com", "Hi", "Too short"))
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fetcher)

        with pytest.raises(UnreadableContent):
            extractor.extract_link("https://example.com")

    def test_malformed_url_rejected(self, extractor, fake_fetcher):
        with pytest.raises(ValidationException):
            extractor.extract_link("http://[::1/page")
        assert fake_fetcher.calls == []

    def test_invalid_url_from_transport_rejected(self, fake_ocr):
        fetcher = FakeFetcher(error=httpx.InvalidURL("Invalid non-printable ASCII character in URL"))
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fetcher)

        with pytest.raises(ValidationException):
            extractor.extract_link("https://example.com/\x01")

    def test_title_entities_decoded(self, fake_ocr):
        html = "<title>Guide\n  &amp; more</title><p>" + "words " * 40 + "</p>"
        fetcher = FakeFetcher(page=FetchedPage(url="https://example.com", status_code=200, text=html))
        extractor = TextExtractor(ocr=fake_ocr, fetcher=fetcher)

        assert extractor.extract_link("https://example.com").title == "Guide & more"
