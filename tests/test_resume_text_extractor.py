import io
import unittest

from docx import Document
from PyPDF2 import PdfWriter

from app.services.resume_text_extractor import extract_text, get_file_extension


def _docx_bytes() -> bytes:
    document = Document()
    document.add_paragraph("Jane Doe")
    document.add_paragraph("Senior Python Developer")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Skills"
    table.rows[0].cells[1].text = "FastAPI, PostgreSQL"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _blank_pdf_bytes() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class ResumeTextExtractorTests(unittest.TestCase):
    def test_txt_is_decoded_as_utf8(self):
        content = "Résumé: Python, SQL".encode("utf-8")
        self.assertEqual(extract_text(content, "resume.txt", "text/plain"), "Résumé: Python, SQL")

    def test_docx_paragraphs_and_tables(self):
        text = extract_text(_docx_bytes(), "resume.DOCX")
        self.assertIn("Jane Doe", text)
        self.assertIn("Senior Python Developer", text)
        self.assertIn("Skills | FastAPI, PostgreSQL", text)

    def test_pdf_without_text_yields_empty_string(self):
        self.assertEqual(extract_text(_blank_pdf_bytes(), "resume.pdf", "application/pdf"), "")

    def test_unsupported_extension_is_not_an_error(self):
        self.assertEqual(extract_text(b"{\\rtf1 hello}", "resume.rtf"), "")
        self.assertEqual(extract_text(b"binary", "resume.doc", "application/msword"), "")
        self.assertEqual(extract_text(b"no extension", "resume"), "")

    def test_corrupt_files_degrade_to_empty_string(self):
        with self.assertLogs("app.services.resume_text_extractor", level="WARNING"):
            self.assertEqual(extract_text(b"%PDF-1.4 not really a pdf", "resume.pdf"), "")
        with self.assertLogs("app.services.resume_text_extractor", level="WARNING"):
            self.assertEqual(extract_text(b"not a zip archive", "resume.docx"), "")
        with self.assertLogs("app.services.resume_text_extractor", level="WARNING"):
            self.assertEqual(extract_text(b"\xff\xfe\xfa invalid", "resume.txt"), "")

    def test_get_file_extension(self):
        self.assertEqual(get_file_extension("My Resume.PDF"), ".pdf")
        self.assertEqual(get_file_extension("archive.tar.gz"), ".gz")
        self.assertEqual(get_file_extension(""), "")


if __name__ == "__main__":
    unittest.main()
