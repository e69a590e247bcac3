"""Simulation engine — orchestrates the smoke-ring simulation loop.

Wires together: config -> grid -> initial state -> forcing -> RK4 integrator
-> diagnostics into a construction / step / run / close lifecycle.

This is the central coordination layer that ensures:
1. Every solver object is built once from an immutable configuration
2. Each step advances the flow by exactly one RK4 pass
3. Scalar diagnostics are recorded at the configured interval
4. Frames batch several physics steps per rendered view
5. The simulation terminates cleanly at sim_time or max_steps
"""

from __future__ import annotations

import logging
import time as wall_time
from typing import Any

import numpy as np

from smokering.config import SimulationConfig
from smokering.core.bases import StepResult
from smokering.core.grid import Grid
from smokering.diagnostics.derived import kinetic_energy, total_mass
from smokering.diagnostics.hdf5_writer import HDF5Writer
from smokering.fluid.forcing import Forcing
from smokering.fluid.integrator import RK4Integrator
from smokering.fluid.state import FieldState
from smokering.view import RenderView

logger = logging.getLogger(__name__)


class SimulationEngine:
    """Smoke-ring simulation engine.

    Orchestrates the solver loop:
    1. Build grid, uniform initial state, forcing and integrator from config
    2. Time loop:
       a. Advance the flow by one RK4 step (timestep refreshed every K steps)
       b. Check density and temperature ranges
       c. Record diagnostics
    3. Finalize and write output

    Args:
        config: Validated SimulationConfig.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config.model_copy(deep=True)
        cfg = self.config

        self.grid = Grid.from_config(cfg.grid)
        state = FieldState.uniform(self.grid, cfg.initial.rho0, cfg.initial.p0)
        self.forcing = Forcing.from_config(self.grid, cfg.forcing)

        fc = cfg.fluid
        ic = cfg.integrator
        self.integrator = RK4Integrator(
            self.grid,
            state,
            self.forcing,
            viscosity=fc.viscosity,
            thermal_diffusivity=fc.thermal_diffusivity,
            gamma=fc.gamma,
            gas_constant=fc.gas_constant,
            recompute_interval=ic.recompute_interval,
            advective_cfl=ic.advective_cfl,
            diffusive_cfl=ic.diffusive_cfl,
            speed_floor=ic.speed_floor,
            dt_fixed=ic.dt_fixed,
        )
        self.steps_per_frame = ic.steps_per_frame

        # Diagnostics
        dc = cfg.diagnostics
        self.diagnostics: HDF5Writer | None = None
        if dc.hdf5_filename is not None:
            self.diagnostics = HDF5Writer(
                filename=dc.hdf5_filename,
                grid=self.grid,
                gamma=fc.gamma,
                gas_constant=fc.gas_constant,
                field_output_interval=dc.field_output_interval,
            )
        self.diag_interval = dc.output_interval

        self.initial_mass = total_mass(state.rho, self.grid)
        self._closed = False

        logger.info(
            "SimulationEngine initialized: grid=(%d,%d), dx=%.3e, dy=%.3e, "
            "sim_time=%.2e s, dt0=%.3e s, forcing=%s, nu=%.3e, kappa=%.3e",
            self.grid.nx, self.grid.ny, self.grid.dx, self.grid.dy,
            cfg.sim_time, self.integrator.clock.dt, cfg.forcing.enabled,
            fc.viscosity, fc.thermal_diffusivity,
        )

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def time(self) -> float:
        return self.integrator.clock.time

    @property
    def step_count(self) -> int:
        return self.integrator.clock.step

    @property
    def dt(self) -> float:
        return self.integrator.clock.dt

    def _finished(self, max_steps: int | None) -> bool:
        if self.time >= self.config.sim_time:
            return True
        limit = max_steps if max_steps is not None else self.config.max_steps
        return limit is not None and self.step_count >= limit

    # ------------------------------------------------------------------
    # Single-step interface
    # ------------------------------------------------------------------

    def step(self, *, _max_steps: int | None = None) -> StepResult:
        """Advance the simulation by a single timestep.

        Returns:
            StepResult with scalar diagnostics and ``finished`` flag.
        """
        if self._finished(_max_steps):
            return self._make_step_result(dt=0.0, finished=True)

        dt = self.integrator.advance()

        if self.diagnostics is not None and self.step_count % self.diag_interval == 0:
            self.diagnostics.record(self._record_state(), self.time)

        return self._make_step_result(dt=dt, finished=self._finished(_max_steps))

    def _make_step_result(self, *, dt: float, finished: bool) -> StepResult:
        integ = self.integrator
        diag = integ.diagnostics
        state = integ.state
        interior = self.grid.interior
        return StepResult(
            time=self.time,
            step=self.step_count,
            dt=dt,
            envelope=integ.last_envelope,
            max_speed=diag.max_speed(),
            max_vorticity=diag.max_vorticity(),
            total_mass=total_mass(state.rho, self.grid),
            kinetic_energy=kinetic_energy(state.rho, diag.v2, self.grid),
            min_rho=float(np.min(state.rho[interior])),
            min_T=float(np.min(diag.temp[interior])),
            nonphysical_cells=integ.last_nonphysical,
            finished=finished,
        )

    def _record_state(self) -> dict[str, Any]:
        integ = self.integrator
        fields: dict[str, Any] = {}
        fields.update(integ.state.as_dict())
        fields.update(integ.diagnostics.as_dict())
        fields["dt"] = integ.clock.dt
        return fields

    # ------------------------------------------------------------------
    # Frames (batched steps for a renderer)
    # ------------------------------------------------------------------

    def render_view(self) -> RenderView:
        """Read-only vorticity/velocity view of the current state."""
        return RenderView.from_integrator(self.integrator)

    def frame(self) -> RenderView:
        """Advance ``steps_per_frame`` steps (or until finished) and return the view."""
        for _ in range(self.steps_per_frame):
            if self.step().finished:
                break
        return self.render_view()

    def get_field_snapshot(self) -> dict[str, np.ndarray]:
        """Return copies of the conserved and derived grids.

        Returns:
            Dictionary with mx, my, rho, prs, vx, vy, v2, temp, div, vort.
        """
        snapshot = self.integrator.state.as_dict()
        snapshot.update(self.integrator.diagnostics.as_dict())
        return snapshot

    # ------------------------------------------------------------------
    # Batch run (uses step() internally)
    # ------------------------------------------------------------------

    def run(self, max_steps: int | None = None) -> dict[str, Any]:
        """Execute the simulation loop.

        Args:
            max_steps: Maximum number of timesteps (None = config limit or sim_time).

        Returns:
            Dictionary with summary statistics.
        """
        t_wall_start = wall_time.monotonic()
        logger.info("Starting simulation: t_end=%.2e s", self.config.sim_time)

        n_warn_steps = 0
        while True:
            result = self.step(_max_steps=max_steps)
            if result.nonphysical_cells > 0:
                n_warn_steps += 1
            if result.finished:
                break

        self.close()

        t_wall = wall_time.monotonic() - t_wall_start
        final_mass = total_mass(self.integrator.state.rho, self.grid)
        mass_drift = (final_mass - self.initial_mass) / max(abs(self.initial_mass), 1e-30)

        summary = {
            "steps": self.step_count,
            "sim_time": self.time,
            "wall_time_s": t_wall,
            "final_dt": self.dt,
            "timestep_updates": self.integrator.timestep_updates,
            "mass_drift": mass_drift,
            "kinetic_energy": result.kinetic_energy,
            "max_vorticity": result.max_vorticity,
            "nonphysical_steps": n_warn_steps,
        }

        logger.info(
            "Simulation complete: %d steps in %.2f s (%.1f steps/s), mass drift=%.3e",
            self.step_count,
            t_wall,
            self.step_count / max(t_wall, 1e-10),
            mass_drift,
        )

        return summary

    def close(self) -> None:
        """Finalize the simulation and flush the diagnostics writer."""
        if self._closed:
            return
        self._closed = True
        if self.diagnostics is not None:
            self.diagnostics.finalize()
