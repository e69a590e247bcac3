"""Fluid module — conserved state, derived diagnostics, forcing, RHS and RK4 integrator."""

from smokering.fluid.derived import FlowDiagnostics
from smokering.fluid.forcing import Forcing, time_envelope
from smokering.fluid.integrator import RK4Integrator, SimulationClock, cfl_timestep
from smokering.fluid.rhs import RHSEvaluator
from smokering.fluid.state import FieldState, apply_periodic_bc

__all__ = [
    "FieldState",
    "FlowDiagnostics",
    "Forcing",
    "RHSEvaluator",
    "RK4Integrator",
    "SimulationClock",
    "apply_periodic_bc",
    "cfl_timestep",
    "time_envelope",
]
