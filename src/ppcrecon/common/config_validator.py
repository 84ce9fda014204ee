"""Configuration validation models using Pydantic."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from ..standards.column_resolver import BUSINESS_REPORT_SYNONYMS, SEARCH_TERM_TOKENS


def _copy_lists(mapping: Dict[str, List[str]]) -> Dict[str, List[str]]:
    return {k: list(v) for k, v in mapping.items()}


class ColumnsConfig(BaseModel):
    """Header synonym lists per canonical field, tried in order."""

    business_report: Dict[str, List[str]] = Field(
        default_factory=lambda: _copy_lists(BUSINESS_REPORT_SYNONYMS),
        description="Business Report synonyms (two-way substring match)",
    )
    search_term_report: Dict[str, List[str]] = Field(
        default_factory=lambda: _copy_lists(SEARCH_TERM_TOKENS),
        description="Search Term Report header tokens (header must contain the token)",
    )

    @field_validator("business_report", "search_term_report")
    @classmethod
    def validate_lists(cls, v):
        """Ensure every field keeps at least one non-blank synonym."""
        for name, synonyms in v.items():
            cleaned = [s for s in synonyms if str(s).strip()]
            if not cleaned:
                raise ValueError(f"Synonym list for '{name}' must not be empty")
            v[name] = cleaned
        return v

    def business_synonyms(self) -> Dict[str, List[str]]:
        """Built-in synonyms overlaid with configured ones, in built-in field order."""
        merged = _copy_lists(BUSINESS_REPORT_SYNONYMS)
        merged.update(self.business_report)
        return merged

    def search_term_tokens(self) -> Dict[str, List[str]]:
        merged = _copy_lists(SEARCH_TERM_TOKENS)
        merged.update(self.search_term_report)
        return merged


class AuditConfig(BaseModel):
    acos_threshold: float = Field(25.0, ge=0, description="ACoS percent above which a term is flagged")
    spend_threshold: float = Field(100.0, ge=0, description="Spend at or above which a term is flagged")


class LoggingConfig(BaseModel):
    level: str = Field("INFO", description="Root level for ppcrecon loggers")
    logs_dir: str = Field("logs", description="Directory for the log file")
    file_name: str = Field("ppcrecon.log", description="Log file name inside logs_dir")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        level = str(v).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown logging level: {v}")
        return level


class AppConfig(BaseModel):
    """Complete application configuration."""

    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_and_validate_config(config_dict: dict) -> AppConfig:
    """
    Validate a raw configuration mapping.

    Missing sections fall back to defaults.

    Args:
        config_dict: Dictionary loaded from YAML (may be empty or None)

    Returns:
        Validated AppConfig object

    Raises:
        ValidationError: If configuration is invalid
    """
    return AppConfig(**(config_dict or {}))
