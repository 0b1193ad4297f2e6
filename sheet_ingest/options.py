"""
Parse option models for sheet-ingest.

Every backend accepts a plain mapping of options (or keyword arguments in
the public API). Before parsing, the mapping is validated into one of the
frozen Pydantic models below. Unrecognized keys are ignored so the same
options dict can be handed to several backends.

Key models:
- ParseOptions: shared base (text ``encoding``).
- DelimitedOptions: ``field_separator`` / ``row_separator`` overrides.
- FixedWidthOptions: required ``widths`` plus ``row_separator``.
- ExcelOptions: ``worksheet`` index and temp-file placement.

Validation failures are converted to ``InvalidArgumentError`` by
``validate_options()`` so callers never see a raw pydantic error.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

from sheet_ingest.exceptions import InvalidArgumentError

DEFAULT_ENCODING = "utf-8-sig"
DEFAULT_TEMPFILE_NAME = "sheet-ingest-xls"

_OptionsT = TypeVar("_OptionsT", bound="ParseOptions")


class ParseOptions(BaseModel):
    """Options recognized by every backend."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    encoding: str = Field(
        DEFAULT_ENCODING,
        description="Text encoding used when reading files or decoding bytes",
    )


def _non_empty(value: str | None, field_name: str) -> str | None:
    if value is not None and value == "":
        raise ValueError(f"{field_name} must not be an empty string")
    return value


class DelimitedOptions(ParseOptions):
    """Options for the delimited-text backends.

    ``None`` means "use the tokenizer's own default".
    """

    field_separator: str | None = None
    row_separator: str | None = None

    @field_validator("field_separator", "row_separator")
    @classmethod
    def _check_separator(cls, value: str | None, info) -> str | None:
        return _non_empty(value, info.field_name)


class FixedWidthOptions(ParseOptions):
    """Options for the fixed-width backend. ``widths`` is mandatory."""

    widths: list[PositiveInt] = Field(..., min_length=1)
    row_separator: str = "\n"

    @field_validator("row_separator")
    @classmethod
    def _check_separator(cls, value: str, info) -> str:
        return _non_empty(value, info.field_name)


class ExcelOptions(ParseOptions):
    """Options for the workbook backend."""

    worksheet: int = Field(0, ge=0, description="Zero-based sheet index")
    tempfile_name: str = Field(
        DEFAULT_TEMPFILE_NAME,
        description="Name prefix of the temporary file used by parse()",
    )
    tempfile_dir: str | None = Field(
        None, description="Directory for the temporary file; system default if None"
    )


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "options"
        parts.append(f"'{loc}': {err['msg']}")
    return "; ".join(parts)


def validate_options(
    model: type[_OptionsT],
    options: Mapping[str, Any] | _OptionsT | None,
    parser_name: str,
) -> _OptionsT:
    """Validate a raw options mapping against ``model``.

    Args:
        model: The options class of the backend.
        options: A mapping, an already-validated model instance, or None.
        parser_name: Backend name, used in error messages.

    Returns:
        A frozen instance of ``model``.

    Raises:
        InvalidArgumentError: If a required option is missing or a value
            is malformed.
    """
    if isinstance(options, model):
        return options
    if options is None:
        raw: dict[str, Any] = {}
    elif isinstance(options, BaseModel):
        raw = options.model_dump()
    elif isinstance(options, Mapping):
        raw = dict(options)
    else:
        raise InvalidArgumentError(
            f"{parser_name} options must be a mapping, got {type(options).__name__}"
        )

    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        missing = [
            ".".join(str(p) for p in err["loc"])
            for err in exc.errors()
            if err["type"] == "missing"
        ]
        if missing:
            raise InvalidArgumentError(
                f"{parser_name} requires the option(s): {', '.join(missing)}"
            ) from exc
        raise InvalidArgumentError(
            f"Invalid {parser_name} options: {_describe(exc)}"
        ) from exc
