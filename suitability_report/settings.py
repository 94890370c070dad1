"""Settings loaded from the bundled YAML file and validated with Pydantic."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import SettingsLoadError

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "config" / "report_settings.yaml"

# Values of models.report.ReportType that a filename can hint at.
REPORT_TYPE_NAMES = {"performance", "suitability", "viewability", "exclusion"}


class ColumnSpec(BaseModel):
    """Candidate header names for one semantic column."""

    model_config = ConfigDict(frozen=True)

    exact: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()


class ColumnRegistry(BaseModel):
    """Every semantic column the aggregator looks up."""

    model_config = ConfigDict(frozen=True)

    total_impressions: ColumnSpec
    suitable_impressions: ColumnSpec
    exclusion_impressions: ColumnSpec
    video_suitability: ColumnSpec
    category: ColumnSpec
    vcr: ColumnSpec
    ctr: ColumnSpec
    performance_viewability: ColumnSpec
    performance_impressions: ColumnSpec
    report_date: ColumnSpec
    suitability_rate: ColumnSpec
    viewability_rate: ColumnSpec
    gross_impressions: ColumnSpec
    device_type: ColumnSpec
    ivt_impressions: ColumnSpec
    account: ColumnSpec


class CategorySynonym(BaseModel):
    """Category label that absorbs every name containing one of its keywords."""

    model_config = ConfigDict(frozen=True)

    label: str
    keywords: tuple[str, ...]


class ReportSettings(BaseModel):
    """Tunables for classification, aggregation and output capping."""

    model_config = ConfigDict(frozen=True)

    cpm_default: float = Field(default=1500, ge=0)
    header_scan_limit: int = Field(default=30, gt=0)
    disclaimer_markers: tuple[str, ...] = ("disclaimer", "免責事項", "注記")

    performance_top_n: int = Field(default=8, gt=0)
    trend_window: Optional[int] = Field(default=14, gt=0)
    lift_baseline: float = 86.4
    ivt_benchmark: float = 1.0
    currency_symbol: str = "¥"
    max_chart_rows: int = Field(default=500, gt=0)
    default_account_name: str = "Account"

    columns: ColumnRegistry
    category_synonyms: tuple[CategorySynonym, ...] = ()
    device_aliases: dict[str, str] = Field(default_factory=dict)
    device_order: tuple[str, ...] = ()
    garm_categories: tuple[str, ...]
    filename_hints: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @field_validator("disclaimer_markers")
    @classmethod
    def _lowercase_markers(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(marker.lower() for marker in value)

    @field_validator("filename_hints")
    @classmethod
    def _known_report_types(
        cls, value: dict[str, tuple[str, ...]]
    ) -> dict[str, tuple[str, ...]]:
        unknown = set(value) - REPORT_TYPE_NAMES
        if unknown:
            raise ValueError(f"Unknown report types in filename_hints: {sorted(unknown)}")
        return value

    @field_validator("garm_categories")
    @classmethod
    def _require_categories(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("garm_categories must not be empty")
        return value


def load_settings(path: Path | None = None) -> ReportSettings:
    """Load settings from YAML.

    Args:
        path: Settings file. Defaults to the bundled report_settings.yaml,
            which is parsed once and cached.

    Raises:
        SettingsLoadError: If the file cannot be read or fails validation.
    """
    if path is None:
        return _load_default_settings()
    return _load_settings_file(Path(path))


@lru_cache(maxsize=1)
def _load_default_settings() -> ReportSettings:
    return _load_settings_file(DEFAULT_SETTINGS_PATH)


def _load_settings_file(path: Path) -> ReportSettings:
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise SettingsLoadError(f"Failed to load settings from {path}: {e}") from e

    if not isinstance(raw, dict):
        raise SettingsLoadError(f"Settings file {path} must contain a mapping")

    try:
        return ReportSettings.model_validate(raw)
    except ValidationError as e:
        raise SettingsLoadError(f"Invalid settings in {path}: {e}") from e
