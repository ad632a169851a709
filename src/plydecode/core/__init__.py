"""plydecode core: base step, config loading, errors, logging."""

from .step_base import BaseStep
from .config import load_config
from .errors import (
    InvalidParameterError,
    MissingRequiredElementError,
    PlyDecodeError,
    PlyIOError,
)
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "load_config",
    "InvalidParameterError",
    "MissingRequiredElementError",
    "PlyDecodeError",
    "PlyIOError",
    "setup_logging",
]
