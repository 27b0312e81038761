"""Services package."""

from budget_recus.services.ocr import (
    OCREngine,
    OCRError,
    RecognitionFailedError,
    TesseractOCRService,
)
from budget_recus.services.storage import (
    CorruptValueError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    LedgerRepository,
    StorageError,
)
from budget_recus.services.transfer import (
    ImportDocumentError,
    export_document,
    parse_import_document,
)

__all__ = [
    # OCR services
    "OCREngine",
    "OCRError",
    "RecognitionFailedError",
    "TesseractOCRService",
    # Storage services
    "CorruptValueError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LedgerRepository",
    "StorageError",
    # Import / export
    "ImportDocumentError",
    "export_document",
    "parse_import_document",
]
