"""Classical RK4 time integration with a periodically refreshed CFL timestep.

One :meth:`RK4Integrator.advance` call runs a single pass through

    Snapshot -> Stage0 -> Stage1 -> Stage2 -> Stage3 -> Combine -> Boundary + Diagnostics

    U1 = U^n + k0/2         (k0 evaluated at t)
    U2 = U^n + k1/2         (k1 evaluated at t + dt/2)
    U3 = U^n + k2           (k2 evaluated at t + dt/2)
    U^{n+1} = U^n + (k0 + 2 k1 + 2 k2 + k3) / 6   (k3 evaluated at t + dt)

where every k is a dt-scaled increment from :class:`RHSEvaluator`. Each
partial update is followed by periodic boundary enforcement and a full
diagnostics recompute before the next derivative is taken.

The timestep is the most restrictive of the advective, acoustic, viscous
and thermal limits. It is set before the first step and then only every
``recompute_interval`` steps, since stability changes slowly relative to
the flow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from smokering.core.grid import Grid
from smokering.fluid.derived import FlowDiagnostics
from smokering.fluid.forcing import Forcing
from smokering.fluid.rhs import RHSEvaluator
from smokering.fluid.state import FieldState

logger = logging.getLogger(__name__)


@dataclass
class SimulationClock:
    """Elapsed simulation time, completed steps and current timestep."""

    time: float = 0.0
    step: int = 0
    dt: float = 0.0


def cfl_timestep(
    diag: FlowDiagnostics,
    grid: Grid,
    gamma: float,
    viscosity: float,
    thermal_diffusivity: float,
    advective_cfl: float = 0.8,
    diffusive_cfl: float = 0.2,
    speed_floor: float = 1e-10,
) -> float:
    """Stable explicit timestep from the current diagnostics.

    dt = min(C_a dmin / |v|max, C_a dmin / c_max, C_d dmin^2 / nu, C_d dmin^2 / kappa)

    A zero diffusion coefficient removes its limit.

    Args:
        diag: Diagnostics of the current state.
        grid: Grid geometry.
        gamma: Ratio of specific heats.
        viscosity: Momentum diffusion coefficient nu.
        thermal_diffusivity: Thermal coefficient kappa.
        advective_cfl: Safety factor C_a for the flow and sound limits.
        diffusive_cfl: Safety factor C_d for the diffusion limits.
        speed_floor: Added to speed denominators so a fluid at rest stays finite.

    Returns:
        Timestep [s].
    """
    speed_max = diag.max_speed()
    sound_max = diag.max_sound_speed(gamma)

    dt_flow = advective_cfl * grid.dmin / (speed_max + speed_floor)
    dt_sound = advective_cfl * grid.dmin / (sound_max + speed_floor)
    dt_visc = diffusive_cfl * grid.dmin2 / viscosity if viscosity > 0 else np.inf
    dt_heat = diffusive_cfl * grid.dmin2 / thermal_diffusivity if thermal_diffusivity > 0 else np.inf

    # A NaN in any limit must reach the caller
    return float(np.min([dt_flow, dt_sound, dt_visc, dt_heat]))


class RK4Integrator:
    """Owns the flow state and advances it with classical RK4.

    The integrator holds the only writeable references to the conserved
    fields, the derived diagnostics and the stage buffers; everything it
    hands outward is a read-only view.

    Args:
        grid: Grid geometry.
        state: Initial conserved fields; ownership passes to the integrator.
        forcing: Driving force (``Forcing.none(grid)`` for an unforced run).
        viscosity: Momentum diffusion coefficient nu.
        thermal_diffusivity: Thermal coefficient kappa.
        gamma: Ratio of specific heats.
        gas_constant: Specific gas constant R.
        recompute_interval: Steps between CFL timestep updates (K).
        advective_cfl: Safety factor for the flow and sound limits.
        diffusive_cfl: Safety factor for the diffusion limits.
        speed_floor: Added to speed denominators [m/s].
        dt_fixed: Constant timestep; when set the CFL controller is never run.
        time: Initial simulation time [s].
    """

    def __init__(
        self,
        grid: Grid,
        state: FieldState,
        forcing: Forcing,
        viscosity: float,
        thermal_diffusivity: float,
        gamma: float,
        gas_constant: float,
        recompute_interval: int = 20,
        advective_cfl: float = 0.8,
        diffusive_cfl: float = 0.2,
        speed_floor: float = 1e-10,
        dt_fixed: float | None = None,
        time: float = 0.0,
    ) -> None:
        if recompute_interval < 1:
            raise ValueError(f"recompute_interval must be >= 1, got {recompute_interval}")
        if dt_fixed is not None and dt_fixed <= 0:
            raise ValueError(f"dt_fixed must be positive, got {dt_fixed}")

        self.grid = grid
        self.state = state
        self.forcing = forcing
        self.viscosity = viscosity
        self.thermal_diffusivity = thermal_diffusivity
        self.gamma = gamma
        self.recompute_interval = recompute_interval
        self.advective_cfl = advective_cfl
        self.diffusive_cfl = diffusive_cfl
        self.speed_floor = speed_floor
        self.dt_fixed = dt_fixed

        self.diagnostics = FlowDiagnostics(grid, gas_constant)
        self.rhs = RHSEvaluator(grid, viscosity, thermal_diffusivity, gamma)
        self._base = np.empty_like(state.data)

        self.clock = SimulationClock(time=time)
        self.timestep_updates = 0
        self.last_envelope = 0.0
        self.last_nonphysical = 0

        self.state.enforce_boundaries()
        self.diagnostics.recompute(self.state)

        if dt_fixed is None:
            self.set_timestep()
        else:
            self.clock.dt = dt_fixed

    def set_timestep(self) -> float:
        """Recompute ``clock.dt`` from the current diagnostics and return it."""
        dt = cfl_timestep(
            self.diagnostics,
            self.grid,
            gamma=self.gamma,
            viscosity=self.viscosity,
            thermal_diffusivity=self.thermal_diffusivity,
            advective_cfl=self.advective_cfl,
            diffusive_cfl=self.diffusive_cfl,
            speed_floor=self.speed_floor,
        )
        if not np.isfinite(dt) or dt <= 0.0:
            logger.warning("CFL controller produced a non-physical timestep dt=%r", dt)
        self.clock.dt = dt
        self.timestep_updates += 1
        logger.debug(
            "Timestep updated at step %d: dt=%.4e s (update #%d)",
            self.clock.step, dt, self.timestep_updates,
        )
        return dt

    def _partial_update(self, stage_buffer: np.ndarray, weight: float) -> None:
        np.add(self._base, weight * stage_buffer, out=self.state.data)
        self.state.enforce_boundaries()
        self.diagnostics.recompute(self.state)

    def advance(self) -> float:
        """Advance the state by one RK4 step.

        Returns:
            The timestep used [s].
        """
        clock = self.clock
        if (
            self.dt_fixed is None
            and clock.step > 0
            and clock.step % self.recompute_interval == 0
        ):
            self.set_timestep()

        dt = clock.dt
        t0 = clock.time
        rhs = self.rhs
        state, diag, forcing = self.state, self.diagnostics, self.forcing

        # Snapshot
        self._base[...] = state.data
        self.last_envelope = forcing.envelope(t0)

        # Stage 0 at t
        k0 = rhs.evaluate(0, state, diag, forcing, clock.time, dt)
        self._partial_update(k0, 0.5)

        # Stage 1 at t + dt/2
        clock.time = t0 + 0.5 * dt
        k1 = rhs.evaluate(1, state, diag, forcing, clock.time, dt)
        self._partial_update(k1, 0.5)

        # Stage 2 at t + dt/2
        k2 = rhs.evaluate(2, state, diag, forcing, clock.time, dt)
        self._partial_update(k2, 1.0)

        # Stage 3 at t + dt
        clock.time = t0 + dt
        rhs.evaluate(3, state, diag, forcing, clock.time, dt)

        # Combine
        np.add(self._base, rhs.combined(), out=state.data)
        state.enforce_boundaries()
        diag.recompute(state)

        clock.step += 1
        self.last_nonphysical = diag.check_physical_ranges(state, f"step {clock.step}")
        return dt

    # --- Read-only access ---

    def fields(self) -> np.ndarray:
        """Read-only ``(4, nx, ny)`` view of the conserved fields."""
        return self.state.readonly()

    def derived(self, name: str) -> np.ndarray:
        """Read-only view of a derived grid (``vx``, ``vy``, ``v2``, ``temp``, ``div``, ``vort``)."""
        return self.diagnostics.readonly(name)
