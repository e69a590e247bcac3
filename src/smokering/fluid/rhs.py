"""Right-hand side of the compressible Navier-Stokes system.

Per interior cell, with centred differences on the periodic grid:

    d(mx)  = dt * ( -div(mx v) - dp/dx + fx*env + nu*(lap(vx) + (1/3) d(div v)/dx) )
    d(my)  = dt * ( -div(my v) - dp/dy + fy*env + nu*(lap(vy) + (1/3) d(div v)/dy) )
    d(rho) = dt * ( -div(m) )
    d(p)   = dt * ( -(v . grad) p - gamma * p * div(v) + (gamma - 1) * kappa * lap(T) )

Results are increments (already multiplied by dt) written into one of
four stage buffers. Ghost cells of the output are never written.
"""

from __future__ import annotations

import numpy as np
from numba import njit

from smokering.core.grid import Grid
from smokering.fluid.derived import FlowDiagnostics
from smokering.fluid.forcing import Forcing
from smokering.fluid.state import MX, MY, PRS, FieldState

N_STAGES = 4


# ============================================================
# Stencil kernel
# ============================================================

@njit(cache=True)
def _rhs_kernel(
    mx: np.ndarray,
    my: np.ndarray,
    prs: np.ndarray,
    vx: np.ndarray,
    vy: np.ndarray,
    temp: np.ndarray,
    div: np.ndarray,
    fx: np.ndarray,
    fy: np.ndarray,
    envelope: float,
    dt: float,
    dx1: float,
    dy1: float,
    dx2: float,
    dy2: float,
    viscosity: float,
    gamma: float,
    heat_coeff: float,
    out: np.ndarray,
) -> None:
    """Fill ``out[:, 1:-1, 1:-1]`` with dt-scaled increments.

    Args:
        mx, my, prs: Conserved mass fluxes and pressure, shape (nx, ny).
        vx, vy, temp, div: Derived velocity, temperature, divergence, shape (nx, ny).
        fx, fy: Force template, shape (nx, ny).
        envelope: Forcing time-envelope factor.
        dt: Timestep [s].
        dx1, dy1: 1/(2dx), 1/(2dy).
        dx2, dy2: 1/dx^2, 1/dy^2.
        viscosity: Momentum diffusion coefficient nu.
        gamma: Ratio of specific heats.
        heat_coeff: (gamma - 1) * kappa.
        out: Output increments, shape (4, nx, ny).
    """
    nx, ny = prs.shape
    third = 1.0 / 3.0

    for i in range(1, nx - 1):
        for j in range(1, ny - 1):
            # Pressure gradient
            dpdx = (prs[i + 1, j] - prs[i - 1, j]) * dx1
            dpdy = (prs[i, j + 1] - prs[i, j - 1]) * dy1

            # Gradient of velocity divergence
            ddivdx = (div[i + 1, j] - div[i - 1, j]) * dx1
            ddivdy = (div[i, j + 1] - div[i, j - 1]) * dy1

            # Divergence of the flux-velocity outer product
            fluxdiv_x = (
                (mx[i + 1, j] * vx[i + 1, j] - mx[i - 1, j] * vx[i - 1, j]) * dx1
                + (mx[i, j + 1] * vy[i, j + 1] - mx[i, j - 1] * vy[i, j - 1]) * dy1
            )
            fluxdiv_y = (
                (my[i + 1, j] * vx[i + 1, j] - my[i - 1, j] * vx[i - 1, j]) * dx1
                + (my[i, j + 1] * vy[i, j + 1] - my[i, j - 1] * vy[i, j - 1]) * dy1
            )

            # Laplacians
            lap_vx = (
                (vx[i + 1, j] - 2.0 * vx[i, j] + vx[i - 1, j]) * dx2
                + (vx[i, j + 1] - 2.0 * vx[i, j] + vx[i, j - 1]) * dy2
            )
            lap_vy = (
                (vy[i + 1, j] - 2.0 * vy[i, j] + vy[i - 1, j]) * dx2
                + (vy[i, j + 1] - 2.0 * vy[i, j] + vy[i, j - 1]) * dy2
            )
            lap_T = (
                (temp[i + 1, j] - 2.0 * temp[i, j] + temp[i - 1, j]) * dx2
                + (temp[i, j + 1] - 2.0 * temp[i, j] + temp[i, j - 1]) * dy2
            )

            # Continuity: divergence of the mass flux
            mass_div = (mx[i + 1, j] - mx[i - 1, j]) * dx1 + (my[i, j + 1] - my[i, j - 1]) * dy1

            out[0, i, j] = dt * (
                -fluxdiv_x - dpdx + fx[i, j] * envelope
                + viscosity * (lap_vx + third * ddivdx)
            )
            out[1, i, j] = dt * (
                -fluxdiv_y - dpdy + fy[i, j] * envelope
                + viscosity * (lap_vy + third * ddivdy)
            )
            out[2, i, j] = -dt * mass_div
            out[3, i, j] = dt * (
                -(vx[i, j] * dpdx + vy[i, j] * dpdy)
                - gamma * prs[i, j] * div[i, j]
                + heat_coeff * lap_T
            )


# ============================================================
# Evaluator
# ============================================================

class RHSEvaluator:
    """Evaluates dt-scaled time derivatives into per-stage buffers.

    The evaluator owns the four stage buffers, each of shape ``(4, nx, ny)``
    in conserved-field order. Buffer ghost cells stay zero for the whole run.

    Args:
        grid: Grid the fields live on.
        viscosity: Momentum diffusion coefficient nu.
        thermal_diffusivity: Thermal coefficient kappa.
        gamma: Ratio of specific heats.
    """

    def __init__(
        self,
        grid: Grid,
        viscosity: float,
        thermal_diffusivity: float,
        gamma: float,
    ) -> None:
        self.grid = grid
        self.viscosity = viscosity
        self.gamma = gamma
        self.heat_coeff = (gamma - 1.0) * thermal_diffusivity
        self.stages = np.zeros((N_STAGES, 4, grid.nx, grid.ny))

    def evaluate(
        self,
        stage: int,
        state: FieldState,
        diag: FlowDiagnostics,
        forcing: Forcing,
        time: float,
        dt: float,
    ) -> np.ndarray:
        """Compute increments for ``stage`` from the current state.

        Args:
            stage: Stage buffer index, 0..3.
            state: Conserved fields with ghost cells enforced.
            diag: Diagnostics recomputed from ``state``.
            forcing: Driving force; its envelope is evaluated at ``time``.
            time: Simulation time of this evaluation [s].
            dt: Timestep [s].

        Returns:
            The filled stage buffer, shape ``(4, nx, ny)``.
        """
        if not 0 <= stage < N_STAGES:
            raise IndexError(f"stage must be in [0, {N_STAGES - 1}], got {stage}")

        g = self.grid
        data = state.data
        out = self.stages[stage]
        _rhs_kernel(
            data[MX], data[MY], data[PRS],
            diag.vx, diag.vy, diag.temp, diag.div,
            forcing.fx, forcing.fy,
            forcing.envelope(time), dt,
            g.dx1, g.dy1, g.dx2, g.dy2,
            self.viscosity, self.gamma, self.heat_coeff,
            out,
        )
        return out

    def combined(self) -> np.ndarray:
        """Classical RK4 weighting (k0 + 2 k1 + 2 k2 + k3) / 6 of the stage buffers."""
        k = self.stages
        return (k[0] + 2.0 * k[1] + 2.0 * k[2] + k[3]) / 6.0
