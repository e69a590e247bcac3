"""Core abstract base classes and shared data structures.

Defines the interface contracts shared across the solver:
- ``StepResult`` — scalar summary of one simulation step
- ``DiagnosticsBase`` — ABC for diagnostics recorders
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class StepResult:
    """Result of a single simulation timestep.

    Attributes:
        time: Simulation time after this step [s].
        step: Step number after this step.
        dt: Timestep size used [s].
        envelope: Forcing time-envelope factor at the start of the step.
        max_speed: Peak flow speed over interior cells [m/s].
        max_vorticity: Peak |vorticity| over interior cells [1/s].
        total_mass: Sum of interior density times cell area [kg/m].
        kinetic_energy: Interior kinetic energy per unit depth [J/m].
        min_rho: Smallest interior density [kg/m^3].
        min_T: Smallest interior temperature [K].
        nonphysical_cells: Cells with non-positive or non-finite density/temperature.
        finished: True when sim_time reached or max_steps exceeded.
    """

    time: float = 0.0
    step: int = 0
    dt: float = 0.0
    envelope: float = 0.0
    max_speed: float = 0.0
    max_vorticity: float = 0.0
    total_mass: float = 0.0
    kinetic_energy: float = 0.0
    min_rho: float = 0.0
    min_T: float = 0.0
    nonphysical_cells: int = 0
    finished: bool = False


class DiagnosticsBase(ABC):
    """Abstract base for diagnostics recorders."""

    @abstractmethod
    def record(
        self,
        state: dict[str, Any],
        time: float,
    ) -> None:
        """Record diagnostic quantities at the current timestep.

        Args:
            state: Simulation field dictionary.
            time: Current simulation time [s].
        """

    def finalize(self) -> None:
        """Clean up resources (close files, flush buffers)."""
