"""Base class for steps that turn an input file into artifacts under a data root."""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """One file-level step with pydantic input, output and config models.

    Artifacts go to ``<data_root>/interim/<name>``.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)

    @property
    def step_name(self) -> str:
        return self.name or self.__class__.__name__

    @property
    def output_dir(self) -> Path:
        return self.data_root / "interim" / self.step_name

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """False if an input file is missing or unusable; log the reason."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Validate, run and time the step.

        Raises:
            ValueError: ``validate_inputs`` rejected the inputs.
        """
        if not self.validate_inputs(inputs):
            raise ValueError(f"[{self.step_name}] Input validation failed")

        logger.info(f"[{self.step_name}] Writing to {self.output_dir}")
        t0 = time.perf_counter()
        result = self.run(inputs)
        logger.info(f"[{self.step_name}] Done in {time.perf_counter() - t0:.2f}s")
        return result
