"""YAML schema validation and config loading.

Provides centralized validation for the vectorizer configuration using
pydantic:
    - wb2svg.v1: smoothing, classification thresholds, thinning schedule,
      SVG output capacity/element style, debug snapshots, logging

Every section has defaults that reproduce the reference pipeline, so
``Wb2SvgV1()`` is a complete configuration and a YAML file only needs the
keys it overrides.

Usage:
    from wb2svg.utils import validators

    cfg = validators.load_wb2svg_config("configs/wb2svg.v1.yaml")
    cfg.thinning.rounds  # → 3
"""

from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# WB2SVG SCHEMA V1
# ============================================================================

class SmoothingConfig(BaseModel):
    """Gaussian pre-smoothing (fixed 5×5 kernel, normalization 159)."""
    enabled: bool = Field(True, description="Apply Gaussian smoothing before quantization")


class ClassificationConfig(BaseModel):
    """HSV thresholds for the five-way color bucketing."""
    value_low: float = Field(0.2, ge=0.0, le=1.0, description="Value at or below → black")
    value_high: float = Field(0.6, ge=0.0, le=1.0, description="Value at or above (with low saturation) → white")
    saturation: float = Field(0.2, ge=0.0, le=1.0, description="Saturation at or below → achromatic")

    @model_validator(mode='after')
    def validate_value_order(self) -> 'ClassificationConfig':
        if self.value_low >= self.value_high:
            raise ValueError(
                f"value_low ({self.value_low}) must be less than value_high ({self.value_high})"
            )
        return self


class ThinningConfig(BaseModel):
    """Guo-Hall thinning schedule."""
    rounds: int = Field(3, ge=0, le=1000, description="Fixed number of rounds (2 sub-iterations each)")
    until_stable: bool = Field(False, description="Ignore `rounds` and iterate to a fixed point")
    max_rounds: int = Field(100, ge=1, le=100000, description="Safety cap when until_stable is set")


class SvgConfig(BaseModel):
    """SVG serialization settings."""
    capacity_bytes: int = Field(16 * 1024 * 1024, gt=0, description="Output buffer capacity in bytes")
    element: Literal["path", "line"] = Field("path", description="One <path> per polyline, or one <line> per segment")
    line_stroke_width: int = Field(2, ge=1, le=100, description="stroke-width for element=line")


class DebugConfig(BaseModel):
    """Debug snapshot settings."""
    save_intermediates: bool = Field(False, description="Save gauss/quantized/thin/gradient PNGs")
    out_dir: str = Field("out", description="Directory for debug snapshots")


class LoggingConfig(BaseModel):
    """Arguments forwarded to logging_config.setup_logging()."""
    log_level: str = Field("INFO", description="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    log_file: Optional[str] = Field(None, description="Optional log file path")
    json_format: bool = Field(False, alias="json", description="JSON lines in the log file")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}, got '{v}'")
        return v.upper()


class Wb2SvgV1(BaseModel):
    """Vectorizer configuration (wb2svg.v1 schema)."""
    schema_version: str = Field("wb2svg.v1", alias="schema", description="Schema version")
    smoothing: SmoothingConfig = Field(default_factory=SmoothingConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    thinning: ThinningConfig = Field(default_factory=ThinningConfig)
    svg: SvgConfig = Field(default_factory=SvgConfig)
    debug: DebugConfig = Field(default_factory=DebugConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "wb2svg.v1":
            raise ValueError(f"Expected schema 'wb2svg.v1', got '{v}'")
        return v


# ============================================================================
# PUBLIC API
# ============================================================================

def load_wb2svg_config(path: Union[str, Path]) -> Wb2SvgV1:
    """Load and validate vectorizer config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to wb2svg.v1.yaml file

    Returns
    -------
    Wb2SvgV1
        Validated configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"wb2svg config not found: {path}")

    data = fs.load_yaml(path)
    if not isinstance(data, dict):
        raise ValueError(f"wb2svg config at {path} must be a mapping, got {type(data).__name__}")
    try:
        return Wb2SvgV1(**data)
    except Exception as e:
        raise ValueError(f"wb2svg config validation failed at {path}: {e}") from e
