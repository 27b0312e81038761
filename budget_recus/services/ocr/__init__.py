"""OCR services package."""

from budget_recus.services.ocr.tesseract_service import (
    ImageInput,
    OCREngine,
    OCRError,
    ProgressCallback,
    RecognitionFailedError,
    TesseractOCRService,
)

__all__ = [
    "ImageInput",
    "OCREngine",
    "OCRError",
    "ProgressCallback",
    "RecognitionFailedError",
    "TesseractOCRService",
]
