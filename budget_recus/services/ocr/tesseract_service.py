"""
OCR Service using Tesseract

Receipts are read locally with Tesseract (through pytesseract); nothing
leaves the device. This service handles:
1. Loading the photo (bytes, path or PIL image) and fixing its orientation
2. Light preprocessing (grayscale, autocontrast) for thermal-paper tickets
3. Running recognition off the event loop
4. Reporting progress as (phase, fraction) events

The service returns plain text only. Interpreting it (amount, date,
merchant) is the job of budget_recus.parsing.
"""

import asyncio
from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Union

import pytesseract
import structlog
from PIL import Image, ImageOps

from budget_recus.config import OCRSettings, get_settings
from budget_recus.models.ledger import OCRProgress


ImageInput = Union[bytes, str, Path, Image.Image]
ProgressCallback = Callable[[OCRProgress], None]

PHASE_PREPARING = "preparing"
PHASE_RECOGNIZING = "recognizing text"
PHASE_DONE = "done"

RETAKE_GUIDANCE = (
    "❌ Could not read this receipt. "
    "Please retake the photo: sharp, well framed and without shadows."
)


class OCRError(Exception):
    """Base exception for OCR errors."""
    pass


class RecognitionFailedError(OCRError):
    """The recognition call failed; the user should retake the photo."""

    def __init__(self, reason: str, message: str = RETAKE_GUIDANCE):
        self.reason = reason
        super().__init__(message)


class OCREngine(ABC):
    """
    The OCR collaborator.

    Accepts an image and a language hint, returns the recognized text and
    reports progress through an optional callback.
    """

    @abstractmethod
    async def recognize(
        self,
        image: ImageInput,
        language: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Read the text of a receipt photo.

        Raises:
            RecognitionFailedError: If the image cannot be read
        """
        pass


def _emit(
    on_progress: Optional[ProgressCallback],
    phase: str,
    progress: float,
) -> None:
    if on_progress is not None:
        on_progress(OCRProgress(phase=phase, progress=progress))


class TesseractOCRService(OCREngine):
    """Local receipt OCR backed by the tesseract binary."""

    def __init__(self, settings: Optional[OCRSettings] = None):
        self._settings = settings or get_settings().ocr
        self._logger = structlog.get_logger(__name__)

        if self._settings.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._settings.tesseract_cmd

    def _load_image(self, image: ImageInput) -> Image.Image:
        if isinstance(image, Image.Image):
            return image
        if isinstance(image, bytes):
            return Image.open(BytesIO(image))
        return Image.open(Path(image))

    def _prepare(self, image: ImageInput) -> Image.Image:
        """Upright, grayscale, stretched contrast."""
        img = self._load_image(image)
        img = ImageOps.exif_transpose(img)
        img = img.convert("L")
        return ImageOps.autocontrast(img)

    def _image_to_string(self, img: Image.Image, language: str) -> str:
        return pytesseract.image_to_string(img, lang=language)

    async def recognize(
        self,
        image: ImageInput,
        language: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        language = language or self._settings.language

        _emit(on_progress, PHASE_PREPARING, 0.0)
        try:
            prepared = await asyncio.to_thread(self._prepare, image)
            _emit(on_progress, PHASE_RECOGNIZING, 0.5)
            text = await asyncio.to_thread(self._image_to_string, prepared, language)
        except pytesseract.TesseractNotFoundError as e:
            self._logger.error("tesseract_not_found", error=str(e))
            raise RecognitionFailedError(
                str(e),
                "❌ The OCR engine (tesseract) is not installed on this machine.",
            )
        except (pytesseract.TesseractError, OSError, ValueError) as e:
            self._logger.warning("ocr_failed", error=str(e), language=language)
            raise RecognitionFailedError(str(e))

        _emit(on_progress, PHASE_RECOGNIZING, 1.0)
        _emit(on_progress, PHASE_DONE, 1.0)
        self._logger.info("ocr_completed", characters=len(text or ""))
        return text or ""
