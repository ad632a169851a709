"""YAML config loading into pydantic models."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel

ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


def load_config(config_path: Path, config_class: type[ConfigT]) -> ConfigT:
    """Load a YAML config file into its pydantic model.

    An empty file yields the model defaults.
    """
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    logger.debug(f"Loaded {config_class.__name__} from {config_path}")
    return config_class(**raw)
