"""
Template Store - read-only access to the saved brand template
"""

import json
from pathlib import Path
from typing import Any, Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from config import settings
from modules.schemas import TemplateSettings


class TemplateStore:
    """
    Read-only template source

    Subclasses provide the raw record; parsing and validation live here so
    every store degrades the same way: any problem means "no template".
    """

    def _read_raw(self) -> Optional[Any]:
        raise NotImplementedError

    def get(self) -> Optional[TemplateSettings]:
        """
        Load the current template settings

        Returns:
            TemplateSettings, or None when nothing usable is stored
        """
        try:
            raw = self._read_raw()
        except (OSError, ValueError) as e:  # incl. bad JSON, bad UTF-8
            logger.error(f"Failed to read template settings: {e}")
            return None

        if raw is None:
            logger.debug("No template settings stored")
            return None

        if isinstance(raw, TemplateSettings):
            return raw

        if not isinstance(raw, Mapping):
            logger.error(f"Template settings must be an object, got {type(raw).__name__}")
            return None

        try:
            template = TemplateSettings.model_validate(dict(raw))
        except ValidationError as e:
            logger.error(f"Invalid template settings: {e}")
            return None

        logger.debug(
            f"Template loaded (logo={template.has_logo}, text={template.has_company_text}, "
            f"color={template.has_color})"
        )
        return template


class JsonTemplateStore(TemplateStore):
    """
    Key-value JSON file: ``{"<key>": {...template...}}``

    The stored value may itself be a JSON string, matching how browser
    storage serialises it.
    """

    def __init__(self, path: Path = None, key: str = None):
        """
        Initialize JSON template store

        Args:
            path: JSON file (default: settings.TEMPLATE_STORE_PATH)
            key: Record key (default: settings.TEMPLATE_STORE_KEY)
        """
        self.path = Path(path or settings.TEMPLATE_STORE_PATH)
        self.key = key or settings.TEMPLATE_STORE_KEY

    def _read_raw(self) -> Optional[Any]:
        if not self.path.exists():
            return None

        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            logger.error(f"Template store {self.path} is not a key-value object")
            return None

        value = data.get(self.key)
        if isinstance(value, str):
            value = json.loads(value) if value.strip() else None
        return value


class InMemoryTemplateStore(TemplateStore):
    """Serves a fixed record (or nothing)."""

    def __init__(self, record: Optional[Any] = None):
        self.record = record

    def _read_raw(self) -> Optional[Any]:
        return self.record
