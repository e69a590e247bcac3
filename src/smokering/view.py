"""Read-only per-cell view handed to a frame renderer.

The renderer colours cells by vorticity (normalised against a fixed
reference magnitude) and draws velocity arrows scaled by a
visualisation-only length factor. Nothing here draws; it only prepares
arrays, which are non-writeable views into the solver's own grids.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from smokering.fluid.integrator import RK4Integrator


def _frozen(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


@dataclass(frozen=True)
class RenderView:
    """Interior vorticity and velocity at one instant.

    Attributes:
        time: Simulation time [s].
        x: Interior cell-centre x coordinates, shape (nx-2,).
        y: Interior cell-centre y coordinates, shape (ny-2,).
        vorticity: Shape (nx-2, ny-2) [1/s].
        vx: Shape (nx-2, ny-2) [m/s].
        vy: Shape (nx-2, ny-2) [m/s].
    """

    time: float
    x: np.ndarray
    y: np.ndarray
    vorticity: np.ndarray
    vx: np.ndarray
    vy: np.ndarray

    @classmethod
    def from_integrator(cls, integrator: RK4Integrator) -> RenderView:
        grid = integrator.grid
        interior = grid.interior
        diag = integrator.diagnostics
        return cls(
            time=integrator.clock.time,
            x=_frozen(grid.x[1:-1]),
            y=_frozen(grid.y[1:-1]),
            vorticity=_frozen(diag.vort[interior]),
            vx=_frozen(diag.vx[interior]),
            vy=_frozen(diag.vy[interior]),
        )

    def normalized_vorticity(self, reference: float) -> np.ndarray:
        """Vorticity divided by ``reference`` and clamped to [-1, 1]."""
        if reference <= 0:
            raise ValueError(f"reference must be positive, got {reference}")
        return np.clip(self.vorticity / reference, -1.0, 1.0)

    def arrows(
        self, scale: float, stride: int = 1,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Arrow glyph bases and scaled components.

        Args:
            scale: Length factor applied to the velocity [s].
            stride: Keep every ``stride``-th cell along each axis.

        Returns:
            ``(X, Y, U, V)`` arrays of equal shape.
        """
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")
        X, Y = np.meshgrid(self.x[::stride], self.y[::stride], indexing="ij")
        U = scale * self.vx[::stride, ::stride]
        V = scale * self.vy[::stride, ::stride]
        return X, Y, U, V
