"""
Configuration for entity sets and package logging.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class EntitySetConfig(BaseModel):
    """Settings shared by an entity set and every derivative built from it."""

    model_config = ConfigDict(frozen=True)

    identity_key: str = "id"
    name: Optional[str] = None
    path: Optional[str] = None

    @field_validator("identity_key")
    @classmethod
    def _identity_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("identity_key must not be blank")
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_path(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("path") and data.get("name"):
            data = {**data, "path": f"/{data['name']}"}
        return data


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


_handler: Optional[logging.Handler] = None


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Attach a stream handler to the package logger, once."""
    global _handler
    config = config or LoggingConfig()
    logger = logging.getLogger("ledgermodel")
    logger.setLevel(config.level)

    if _handler is None:
        _handler = logging.StreamHandler()
    if _handler not in logger.handlers:
        logger.addHandler(_handler)
    _handler.setFormatter(logging.Formatter(config.format))
    return logger


__all__ = ["EntitySetConfig", "LoggingConfig", "configure_logging"]
