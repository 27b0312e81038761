"""
Configuration Management for Budget Reçus

Uses pydantic-settings for type-safe configuration from environment variables.

All tunables of the ledger (default budget, recursion bound, storage
location) and of the OCR collaborator are centralized here.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Budget and rollover configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_budget: float = Field(
        default=2500.0,
        ge=0,
        description="Budget used for any month without a stored entry"
    )
    rollover_max_depth: int = Field(
        default=120,
        ge=1,
        description="Months of history the rollover may walk (10 years)"
    )
    default_card_name: str = Field(
        default="Carte parents",
        min_length=1,
        description="Name of the card created on first start"
    )
    data_dir: Path = Field(
        default=Path(".budget_recus"),
        description="Directory holding the persisted JSON keys"
    )
    max_plausible_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Amounts at or above this are ignored by the receipt fallback scan"
    )


class OCRSettings(BaseSettings):
    """Tesseract OCR configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OCR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    language: str = Field(
        default="fra",
        description="Tesseract language hint"
    )
    tesseract_cmd: Optional[str] = Field(
        default=None,
        description="Path to the tesseract binary if it is not on PATH"
    )

    @field_validator('tesseract_cmd')
    @classmethod
    def validate_tesseract_cmd(cls, v: Optional[str]) -> Optional[str]:
        """Warn if the configured binary doesn't exist (but don't fail)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Tesseract binary not found at {v}. "
                "Receipt scanning will fail until it is installed."
            )
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Sub-settings are loaded lazily so a missing OCR setup never blocks
    the ledger from starting.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def ocr(self) -> OCRSettings:
        return OCRSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
