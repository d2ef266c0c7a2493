"""
DocPress — Request option models.

Options arrive as a JSON string in the ``options`` form field (image and
Word conversion) or as individual form fields (watermark, protect).
Names the front end sends are camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

import enum
import json
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from docpress.errors import InvalidFitPolicyError, InvalidOptionsError

OptionsT = TypeVar("OptionsT", bound=BaseModel)


class PageSize(str, enum.Enum):
    A4 = "a4"
    LETTER = "letter"
    LEGAL = "legal"

    @classmethod
    def parse(cls, value: Any) -> "PageSize":
        """Unknown or missing names fall back to A4."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.A4


class Orientation(str, enum.Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    @classmethod
    def parse(cls, value: Any) -> "Orientation":
        if isinstance(value, cls):
            return value
        if str(value).strip().lower() == cls.LANDSCAPE.value:
            return cls.LANDSCAPE
        return cls.PORTRAIT


class FitPolicy(str, enum.Enum):
    CONTAIN = "contain"
    COVER = "cover"
    STRETCH = "stretch"

    @classmethod
    def parse(cls, value: Any) -> "FitPolicy":
        """Strict: anything outside the closed set is rejected."""
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.CONTAIN
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidFitPolicyError(value) from None


class Quality(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ConversionOptions(BaseModel):
    """Read-only options for a conversion request."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    page_size: PageSize = PageSize.A4
    orientation: Orientation = Orientation.PORTRAIT
    quality: Quality | None = None
    fit: FitPolicy = FitPolicy.CONTAIN
    combine: bool = False

    @field_validator("page_size", mode="before")
    @classmethod
    def _lenient_page_size(cls, v: Any) -> PageSize:
        return PageSize.parse(v)

    @field_validator("orientation", mode="before")
    @classmethod
    def _lenient_orientation(cls, v: Any) -> Orientation:
        return Orientation.parse(v)

    @field_validator("quality", mode="before")
    @classmethod
    def _lenient_quality(cls, v: Any) -> Quality | None:
        if v is None:
            return None
        try:
            return Quality(str(v).strip().lower())
        except ValueError:
            return None

    @field_validator("combine", mode="before")
    @classmethod
    def _combine_flag(cls, v: Any) -> bool:
        # The front end sends "combine" / "separate".
        if isinstance(v, str):
            return v.strip().lower() in ("combine", "true", "1", "yes")
        return bool(v)

    @classmethod
    def from_json(cls, raw: str | None) -> "ConversionOptions":
        """
        Parse the ``options`` form field.

        Raises InvalidFitPolicyError for an unknown fit and
        InvalidOptionsError for anything that is not a JSON object.
        """
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidOptionsError([f"options is not valid JSON: {exc.msg}"]) from exc
        if not isinstance(data, dict):
            raise InvalidOptionsError(["options must be a JSON object"])

        fit = FitPolicy.parse(data.pop("fit", None))
        try:
            return cls.model_validate({**data, "fit": fit})
        except ValidationError as exc:
            raise InvalidOptionsError(validation_messages(exc)) from exc


class WatermarkOptions(BaseModel):
    text: str = Field(default="CONFIDENTIAL", min_length=1, max_length=200)
    color: str = Field(default="#FF0000", pattern=r"^#[0-9A-Fa-f]{6}$")
    opacity: float = Field(default=0.3, ge=0.0, le=1.0)
    font_size: int = Field(default=50, gt=0, le=500)
    diagonal: bool = False
    repeat: bool = False

    def rgb(self) -> tuple[float, float, float]:
        return (
            int(self.color[1:3], 16) / 255,
            int(self.color[3:5], 16) / 255,
            int(self.color[5:7], 16) / 255,
        )


class ProtectOptions(BaseModel):
    user_password: str = Field(min_length=1, max_length=128)
    owner_password: str | None = Field(default=None, max_length=128)
    allow_printing: bool = False
    allow_modifying: bool = False
    allow_copying: bool = False
    allow_annotating: bool = False
    allow_filling_forms: bool = True
    allow_accessibility: bool = True
    allow_assembly: bool = False

    @property
    def effective_owner_password(self) -> str:
        return self.owner_password or self.user_password


def validation_messages(exc: ValidationError) -> list[str]:
    return [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]


def build_options(model: type[OptionsT], **values: Any) -> OptionsT:
    """Instantiate an options model, reporting problems as InvalidOptionsError."""
    try:
        return model(**values)
    except ValidationError as exc:
        raise InvalidOptionsError(validation_messages(exc)) from exc
