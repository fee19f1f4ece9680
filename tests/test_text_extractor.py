import io

import docx
import pytest

from app.services.text_extractor import (
    MAX_TEXT_LENGTH,
    TextExtractor,
    placeholder_text,
    regex_fallback,
)
from tests.conftest import FakeLLM, SAMPLE_RESUME_TEXT

PDF_WITH_TEXT_OPERATORS = (
    b"%PDF-1.4\n1 0 obj << /Length 200 >> stream\n"
    b"BT /F1 12 Tf (Jane Doe Senior Python Engineer) Tj ET\n"
    b"BT [(Built payment services with FastAPI) -250 (and PostgreSQL)] TJ ET\n"
    b"endstream endobj\n%%EOF"
)


def test_plain_text_is_decoded():
    extractor = TextExtractor(enable_vision=False)
    assert extractor.extract(SAMPLE_RESUME_TEXT.encode("utf-8"), "resume.txt") == SAMPLE_RESUME_TEXT.strip()


def test_short_text_becomes_placeholder():
    extractor = TextExtractor(enable_vision=False)
    assert extractor.extract(b"too short", "cv.txt") == placeholder_text("cv.txt")


def test_output_is_truncated():
    extractor = TextExtractor(enable_vision=False)
    text = extractor.extract(b"a" * (MAX_TEXT_LENGTH + 500), "long.txt")
    assert len(text) == MAX_TEXT_LENGTH


def test_docx_is_parsed():
    document = docx.Document()
    for line in SAMPLE_RESUME_TEXT.strip().splitlines():
        document.add_paragraph(line)
    buffer = io.BytesIO()
    document.save(buffer)

    text = TextExtractor(enable_vision=False).extract(buffer.getvalue(), "resume.docx")
    assert "Jane Doe" in text
    assert "FastAPI" in text


def test_broken_pdf_falls_back_to_regex_scan():
    text = TextExtractor(enable_vision=False).extract(PDF_WITH_TEXT_OPERATORS, "resume.pdf")
    assert "Jane Doe Senior Python Engineer" in text
    assert "Built payment services with FastAPI" in text


def test_vision_transcription_used_when_parsers_find_nothing():
    llm = FakeLLM(chat_text="Jane Doe. Senior Python Engineer with ten years of backend work at scale.")
    text = TextExtractor(llm, enable_vision=True).extract(PDF_WITH_TEXT_OPERATORS, "resume.pdf")

    assert text.startswith("Jane Doe. Senior Python Engineer")
    call = llm.chat_calls[0]
    assert call["retry"] is False
    image_part = call["messages"][1]["content"][1]
    assert image_part["image_url"]["url"].startswith("data:application/pdf;base64,")


def test_vision_failure_is_not_fatal():
    llm = FakeLLM(chat_text=RuntimeError("gateway down"))
    text = TextExtractor(llm, enable_vision=True).extract(PDF_WITH_TEXT_OPERATORS, "resume.pdf")
    assert "Jane Doe Senior Python Engineer" in text


def test_unreadable_binary_yields_placeholder():
    text = TextExtractor(enable_vision=False).extract(b"\x00\x01\x02\x03" * 10, "scan.pdf")
    assert text == placeholder_text("scan.pdf")


@pytest.mark.parametrize("extension", [".docx", ".doc"])
def test_regex_fallback_reads_word_xml(extension):
    xml = b'<w:p><w:r><w:t>Python developer with Django experience</w:t></w:r></w:p>'
    assert "Python developer with Django experience" in regex_fallback(xml, extension)


def test_regex_fallback_keeps_contact_details():
    data = b"\x00garbage jane@example.com \x00 https://github.com/janedoe \x01"
    text = regex_fallback(data, ".pdf")
    assert "jane@example.com" in text
    assert "https://github.com/janedoe" in text
