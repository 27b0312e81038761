"""Tests for the tesseract OCR service without the tesseract binary."""

import asyncio

import pytesseract
import pytest

from budget_recus.config import OCRSettings
from budget_recus.services.ocr import RecognitionFailedError, TesseractOCRService


def make_service(read=None) -> TesseractOCRService:
    service = TesseractOCRService(OCRSettings())
    service._prepare = lambda image: image
    service._image_to_string = read or (lambda img, language: "TOTAL 1,00")
    return service


class TestTesseractOCRService:
    """Tests for progress reporting and failure handling."""

    def test_progress_sequence(self):
        """Test that progress moves forward between preparing and reading."""
        events = []
        text = asyncio.run(make_service().recognize(b"img", on_progress=events.append))

        assert text == "TOTAL 1,00"
        assert [e.progress for e in events] == [0.0, 0.5, 1.0, 1.0]
        assert [e.phase for e in events] == [
            "preparing", "recognizing text", "recognizing text", "done",
        ]

    def test_language_hint_passed(self):
        """Test that an explicit language overrides the configured one."""
        seen = []

        def read(img, language):
            seen.append(language)
            return ""

        asyncio.run(make_service(read).recognize(b"img", language="eng"))
        assert seen == ["eng"]

    def test_tesseract_error_asks_for_retake(self):
        """Test that a tesseract failure becomes a retake request."""
        def read(img, language):
            raise pytesseract.TesseractError(1, "bad")

        events = []
        with pytest.raises(RecognitionFailedError) as excinfo:
            asyncio.run(make_service(read).recognize(b"img", on_progress=events.append))
        assert "retake" in str(excinfo.value)
        assert all(e.phase != "done" for e in events)
