"""Import/export package."""

from budget_recus.services.transfer.json_transfer import (
    ImportDocumentError,
    export_document,
    export_filename,
    parse_import_document,
    state_from_document,
)

__all__ = [
    "ImportDocumentError",
    "export_document",
    "export_filename",
    "parse_import_document",
    "state_from_document",
]
