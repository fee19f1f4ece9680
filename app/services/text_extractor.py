"""
Best-effort resume text extraction.

Strategies, in order:
1. direct UTF-8 decode for plain text
2. format parsers (PyPDF2 for PDF, python-docx for DOCX)
3. multimodal LLM transcription with the file inlined as base64
4. regex scraping of readable substrings from the raw bytes
5. a placeholder naming the file

Extraction never raises: a broken file degrades to less text, not to an error.
"""
import base64
import io
import logging
import os
import re
from typing import List, Optional

import docx
import PyPDF2

from app.core import prompts
from app.core.config import settings

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50
MAX_TEXT_LENGTH = 12000

MIME_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".txt": "text/plain",
}

_BT_ET_RE = re.compile(rb"BT\s*([\s\S]*?)\s*ET")
_TJ_RE = re.compile(rb"\(([^)]*)\)\s*Tj")
_TJ_ARRAY_RE = re.compile(rb"\[([^\]]*)\]\s*TJ")
_PAREN_STRING_RE = re.compile(rb"\(([^)]*)\)")
_WORD_TEXT_RE = re.compile(r"<w:t[^>]*>([^<]*)</w:t>")
_XML_TEXT_RE = re.compile(r">([^<]{3,})<")
_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE_RE = re.compile(r"[+]?[(]?[0-9]{1,3}[)]?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}")
_URL_RE = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+")
_PRINTABLE_RUN_RE = re.compile(r"[A-Za-z][A-Za-z\s,.\-@0-9]{15,}")
_NUMERIC_ONLY_RE = re.compile(r"^[\s\d\-_.]+$")


def placeholder_text(file_name: str) -> str:
    return f"Resume file: {file_name}. Limited text extraction available."


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text.replace("\\n", "\n").replace("\\r", "")).strip()


def extract_pdf_text(data: bytes) -> str:
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    text = ""
    for page in reader.pages:
        text += (page.extract_text() or "") + "\n"
    return text.strip()


def extract_docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    text = ""
    for paragraph in document.paragraphs:
        text += paragraph.text + "\n"
    return text.strip()


def scrape_pdf_bytes(data: bytes) -> List[str]:
    """Text-show operators inside BT/ET blocks of an uncompressed content stream."""
    pieces = []
    for block in _BT_ET_RE.findall(data):
        pieces.extend(_TJ_RE.findall(block))
        for array in _TJ_ARRAY_RE.findall(block):
            pieces.extend(_PAREN_STRING_RE.findall(array))
    return [p.decode("latin-1") for p in pieces]


def scrape_xml_text(text: str) -> List[str]:
    pieces = [t for t in _WORD_TEXT_RE.findall(text) if t.strip()]
    for content in _XML_TEXT_RE.findall(text):
        content = content.strip()
        if (
            content
            and not _NUMERIC_ONLY_RE.match(content)
            and not content.startswith("w:")
            and "xmlns" not in content
        ):
            pieces.append(content)
    return pieces


def regex_fallback(data: bytes, extension: str) -> str:
    """Scan raw bytes for anything that looks like resume content."""
    text = data.decode("latin-1")
    pieces: List[str] = []
    if extension == ".pdf":
        pieces.extend(scrape_pdf_bytes(data))
    elif extension in (".docx", ".doc"):
        pieces.extend(scrape_xml_text(data.decode("utf-8", errors="ignore")))

    pieces.extend(_EMAIL_RE.findall(text))
    pieces.extend(_PHONE_RE.findall(text))
    pieces.extend(_URL_RE.findall(text))
    pieces.extend(_PRINTABLE_RUN_RE.findall(text))
    return _collapse(" ".join(pieces))


class TextExtractor:
    def __init__(self, llm=None, enable_vision: Optional[bool] = None):
        self.llm = llm
        self.enable_vision = settings.ai.enable_vision_extraction if enable_vision is None else enable_vision

    def transcribe_with_llm(self, data: bytes, file_name: str, extension: str) -> str:
        mime = MIME_TYPES.get(extension, "application/octet-stream")
        encoded = base64.b64encode(data).decode("ascii")
        messages = [
            {"role": "system", "content": prompts.RESUME_TRANSCRIBE_SYSTEM},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompts.get_prompt(prompts.RESUME_TRANSCRIBE_USER, file_name=file_name)},
                    {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{encoded}"}},
                ],
            },
        ]
        # Single shot: a failed call drops straight to the regex fallback
        return self.llm.chat(messages, model=settings.ai.vision_model_name, temperature=0.0, retry=False).strip()

    def _parse(self, data: bytes, extension: str) -> str:
        if extension == ".pdf":
            return extract_pdf_text(data)
        if extension == ".docx":
            return extract_docx_text(data)
        return ""

    def extract(self, data: bytes, file_name: str) -> str:
        extension = os.path.splitext(file_name or "")[1].lower()

        if extension not in (".pdf", ".docx", ".doc"):
            text = data.decode("utf-8", errors="replace").strip()
            logger.info(f"Decoded plain text resume ({len(text)} chars)")
            return self._finish(text, file_name)

        text = ""
        try:
            text = self._parse(data, extension)
            logger.info(f"Parser extracted {len(text)} chars from {extension} file")
        except Exception as e:
            logger.warning(f"Format parser failed for {file_name}: {e}")

        if len(text) < MIN_TEXT_LENGTH and self.enable_vision and self.llm is not None:
            try:
                text = self.transcribe_with_llm(data, file_name, extension)
                logger.info(f"LLM transcription returned {len(text)} chars")
            except Exception as e:
                logger.warning(f"LLM transcription failed, falling back to regex scan: {e}")
                text = ""

        if len(text) < MIN_TEXT_LENGTH:
            text = regex_fallback(data, extension)
            logger.info(f"Regex fallback recovered {len(text)} chars")

        return self._finish(text, file_name)

    @staticmethod
    def _finish(text: str, file_name: str) -> str:
        if len(text) < MIN_TEXT_LENGTH:
            logger.warning("Text extraction returned minimal content, using placeholder")
            text = placeholder_text(file_name)
        return text[:MAX_TEXT_LENGTH]
