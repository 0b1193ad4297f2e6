"""
Source configuration models and YAML I/O for sheet-ingest.

A source config names one input file, optionally the format to read it
with, and the backend options. It lets callers keep e.g. fixed-width column
widths next to the data instead of in code:

    input_path: data/report.txt
    format: fixed_width
    options:
      widths: [10, 4, 8]

Key functions:
- load_config(path) -> SourceConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

Why Pydantic + YAML:
- Pydantic gives strict validation and clear error messages.
- YAML is human-editable.
- Round-trip fidelity: load -> modify -> save preserves structure.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from sheet_ingest.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)


class SourceConfig(BaseModel):
    """One tabular source: file path, format and backend options."""

    input_path: str = Field(..., description="Path to the input file")
    format: str | None = Field(
        None, description="Registered format identifier; detected from the file if omitted"
    )
    options: dict[str, Any] = Field(
        default_factory=dict, description="Backend options (see sheet_ingest.options)"
    )

    def resolve_input_path(self, base_dir: str | Path | None = None) -> Path:
        """Resolve a relative ``input_path`` against ``base_dir``."""
        path = Path(self.input_path)
        if base_dir is not None and not path.is_absolute():
            return Path(base_dir) / path
        return path


def load_config(path: str | Path) -> SourceConfig:
    """Load and validate a source config YAML file.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    try:
        config = SourceConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid source config {path}:\n{exc}") from exc
    logger.info("Loaded config from %s", path)
    return config


def save_config(config: SourceConfig, path: str | Path) -> None:
    """Serialize a SourceConfig to YAML.

    Writes a human-readable YAML file with a header comment.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# sheet-ingest source configuration\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)
