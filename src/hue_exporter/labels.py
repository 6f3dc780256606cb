"""Static mapping from sensor identifiers to descriptive labels (e.g., room names)"""

import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from .exceptions import ConfigError

UNKNOWN_LABEL = "Unknown"


class LabelMapping:
    """
    Read-only identifier -> label mapping, loaded once at startup.

    Identifiers missing from the mapping resolve to the fallback label,
    so an unmapped sensor is still exported rather than dropped.
    """

    def __init__(self, mapping: Optional[Mapping[str, str]] = None, fallback: str = UNKNOWN_LABEL):
        self._mapping = MappingProxyType(dict(mapping or {}))
        self.fallback = fallback

    @classmethod
    def from_json(cls, text: str, fallback: str = UNKNOWN_LABEL) -> "LabelMapping":
        """
        Parse a JSON object of identifier -> label.

        Raises:
            ConfigError: If the text is not a JSON object of strings
        """
        if not text or not text.strip():
            return cls(fallback=fallback)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Label mapping is not valid JSON: {e}") from e
        return cls.from_dict(data, fallback=fallback)

    @classmethod
    def from_dict(cls, data: object, fallback: str = UNKNOWN_LABEL) -> "LabelMapping":
        if not isinstance(data, dict):
            raise ConfigError("Label mapping must be a JSON object of identifier -> label")
        for key, value in data.items():
            if not isinstance(value, str):
                raise ConfigError(f"Label for {key!r} must be a string, got {type(value).__name__}")
        return cls({str(k): v for k, v in data.items()}, fallback=fallback)

    def resolve(self, *keys: Optional[str]) -> str:
        """Return the label of the first mapped key, or the fallback"""
        for key in keys:
            if key is not None and key in self._mapping:
                return self._mapping[key]
        return self.fallback

    def as_dict(self) -> dict[str, str]:
        return dict(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __contains__(self, key: object) -> bool:
        return key in self._mapping
