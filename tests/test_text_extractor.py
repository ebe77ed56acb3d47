"""Tests for upload validation and text extraction."""

from io import BytesIO

import pytest
from docx import Document

from cv_pipeline.text_extractor import extract_text_from_file, validate_upload
from utils.errors import FileTooLargeError, UnsupportedFileTypeError


class TestValidateUpload:
    def test_accepts_supported_files(self):
        for name in ("cv.pdf", "CV.DOCX", "cv.doc", "notes.txt"):
            validate_upload(1024, name)

    def test_size_limit(self):
        with pytest.raises(FileTooLargeError, match="less than 5MB"):
            validate_upload(5 * 1024 * 1024 + 1, "cv.pdf")

    def test_exact_limit_is_allowed(self):
        validate_upload(5 * 1024 * 1024, "cv.pdf")

    @pytest.mark.parametrize("name", ["cv.png", "cv", "cv.pdf.exe"])
    def test_rejects_other_types(self, name):
        with pytest.raises(UnsupportedFileTypeError):
            validate_upload(10, name)


class TestExtractText:
    def test_txt_is_cleaned(self):
        raw = "Jane   Doe\r\n\r\n\r\n\r\nSupport\tlead\x00".encode("utf-8")
        assert extract_text_from_file(raw, "cv.txt") == "Jane Doe\n\nSupport lead"

    def test_latin1_fallback(self):
        assert extract_text_from_file("Résumé".encode("latin-1"), "cv.txt") == "Résumé"

    def test_docx_paragraphs_and_tables(self):
        doc = Document()
        doc.add_paragraph("Jane Doe")
        doc.add_paragraph("Customer support lead")
        table = doc.add_table(rows=1, cols=2)
        table.rows[0].cells[0].text = "English"
        table.rows[0].cells[1].text = "C2"
        buffer = BytesIO()
        doc.save(buffer)

        text = extract_text_from_file(buffer.getvalue(), "cv.docx")

        assert text == "Jane Doe\n\nCustomer support lead\n\nEnglish | C2"

    def test_legacy_doc_yields_nothing(self):
        assert extract_text_from_file(b"\xd0\xcf\x11\xe0 legacy binary", "cv.doc") is None

    def test_unsupported_and_empty(self):
        assert extract_text_from_file(b"data", "cv.png") is None
        assert extract_text_from_file(b"  \n ", "cv.txt") is None
