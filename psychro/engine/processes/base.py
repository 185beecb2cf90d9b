"""
Abstract base class for psychrometric process solvers.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from psychro.models.constants import PsychrometricConstants
from psychro.models.process import OperationMode, ProcessOutput, ProcessType
from psychro.models.state_point import AirState


class ProcessSolver(ABC):
    """Base class for all process solvers."""

    process_type: ProcessType
    params_model: type[BaseModel]
    declared_mode: Optional[OperationMode] = None

    @abstractmethod
    def solve(
        self,
        inlet: AirState,
        params: BaseModel,
        pressure: float,
        constants: PsychrometricConstants,
    ) -> ProcessOutput:
        """Solve the process for a resolved inlet state and return the result."""
        ...
