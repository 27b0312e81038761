"""Configuration package."""

from budget_recus.config.settings import (
    LedgerSettings,
    OCRSettings,
    Settings,
    get_settings,
)

__all__ = [
    "LedgerSettings",
    "OCRSettings",
    "Settings",
    "get_settings",
]
