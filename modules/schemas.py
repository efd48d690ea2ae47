"""
Input records: template settings and AI-suggested promotional components
"""

import math
import re
from numbers import Real
from typing import Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.geometry import CORNERS
from modules.text_layout import TEXT_ALIGNMENTS, TEXT_POSITIONS


PROMOTION_NAME_RE = re.compile(r"%|off|discount|promo", re.IGNORECASE)


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _known_or_none(value, allowed, field: str):
    if value is None or value in allowed:
        return value
    logger.warning(f"Ignoring unknown {field} {value!r} (expected one of {', '.join(allowed)})")
    return None


class TemplateSettings(BaseModel):
    """User-configured brand overlay. A missing field disables that layer."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    logo_preview: Optional[str] = Field(None, alias="logoPreview")
    selected_position: Optional[str] = Field(None, alias="selectedPosition")
    selected_color: Optional[str] = Field(None, alias="selectedColor")
    company_text: Optional[str] = Field(None, alias="companyText")
    text_color: Optional[str] = Field(None, alias="textColor")
    text_size: Optional[float] = Field(None, alias="textSize")
    text_position: Optional[str] = Field(None, alias="textPosition")
    text_alignment: Optional[str] = Field(None, alias="textAlignment")

    @field_validator("selected_position", mode="before")
    @classmethod
    def _check_position(cls, value):
        return _known_or_none(value, CORNERS, "selectedPosition")

    @field_validator("text_position", mode="before")
    @classmethod
    def _check_text_position(cls, value):
        return _known_or_none(value, TEXT_POSITIONS, "textPosition")

    @field_validator("text_alignment", mode="before")
    @classmethod
    def _check_alignment(cls, value):
        return _known_or_none(value, TEXT_ALIGNMENTS, "textAlignment")

    @property
    def has_logo(self) -> bool:
        return bool(self.logo_preview)

    @property
    def has_company_text(self) -> bool:
        return bool(self.company_text)

    @property
    def has_color(self) -> bool:
        return bool(self.selected_color) and self.selected_color.strip().lower() != "transparent"

    @property
    def is_noop(self) -> bool:
        """True when no layer would be drawn"""
        return not (self.has_logo or self.has_company_text or self.has_color)


class PositionPair(BaseModel):
    """Normalized (0, 1] fractions or absolute pixels, decided at anchor parse time"""

    x: float
    y: float


class PromotionalComponent(BaseModel):
    """AI-suggested overlay candidate"""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    position: Optional[Union[PositionPair, str]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return None if value is None else str(value)

    @field_validator("name", "title", "category", mode="before")
    @classmethod
    def _coerce_label(cls, value):
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float, bool)):
            return str(value)
        logger.debug(f"Ignoring non-text component label {value!r}")
        return None

    @field_validator("color", mode="before")
    @classmethod
    def _drop_non_string_color(cls, value):
        # Non-string colors fall back to the palette
        return value if isinstance(value, str) else None

    @field_validator("position", mode="before")
    @classmethod
    def _drop_unusable_position(cls, value):
        if value is None or isinstance(value, (str, PositionPair)):
            return value
        if isinstance(value, Mapping):
            x, y = value.get("x"), value.get("y")
            if _is_number(x) and _is_number(y):
                return {"x": x, "y": y}
        logger.debug(f"Ignoring unusable component position {value!r}")
        return None

    @property
    def display_name(self) -> str:
        return self.name or self.title or "Offer"

    @property
    def is_promotion(self) -> bool:
        if self.category and "promotion" in self.category.lower():
            return True
        return bool(self.name and PROMOTION_NAME_RE.search(self.name))
