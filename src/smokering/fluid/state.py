"""Conserved-field storage and periodic boundary enforcement.

The four conserved quantities live in one array of shape ``(4, nx, ny)``
indexed by :data:`MX`, :data:`MY`, :data:`RHO`, :data:`PRS`:

    mx:  mass flux along x [kg/(m^2 s)]
    my:  mass flux along y [kg/(m^2 s)]
    rho: density [kg/m^3]
    prs: pressure [Pa]
"""

from __future__ import annotations

import numpy as np

from smokering.core.grid import Grid

MX, MY, RHO, PRS = 0, 1, 2, 3
N_CONSERVED = 4
FIELD_NAMES = ("mx", "my", "rho", "prs")


def apply_periodic_bc(field: np.ndarray) -> np.ndarray:
    """Fill ghost cells of the last two axes with periodic images, in place.

    Ghost index 0 receives interior index n-2 and ghost index n-1 receives
    interior index 1, along x first and then along y. The y pass runs over
    all x indices so the corner cells pick up the diagonal image as well.

    Args:
        field: Array of shape ``(..., nx, ny)``.

    Returns:
        The same array, for chaining.
    """
    field[..., 0, :] = field[..., -2, :]
    field[..., -1, :] = field[..., 1, :]
    field[..., :, 0] = field[..., :, -2]
    field[..., :, -1] = field[..., :, 1]
    return field


class FieldState:
    """Mass flux, density and pressure over the full grid, ghost cells included.

    Args:
        grid: Grid the fields live on.
        data: Optional initial array of shape ``(4, nx, ny)``; copied.
    """

    def __init__(self, grid: Grid, data: np.ndarray | None = None) -> None:
        self.grid = grid
        shape = (N_CONSERVED, grid.nx, grid.ny)
        if data is None:
            self.data = np.zeros(shape)
        else:
            if data.shape != shape:
                raise ValueError(f"state data must have shape {shape}, got {data.shape}")
            self.data = np.array(data, dtype=np.float64)

    @classmethod
    def uniform(cls, grid: Grid, rho: float, prs: float) -> FieldState:
        """Quiescent state: constant density and pressure, zero mass flux."""
        state = cls(grid)
        state.data[RHO] = rho
        state.data[PRS] = prs
        return state

    # --- Named component views ---

    @property
    def mx(self) -> np.ndarray:
        return self.data[MX]

    @property
    def my(self) -> np.ndarray:
        return self.data[MY]

    @property
    def rho(self) -> np.ndarray:
        return self.data[RHO]

    @property
    def prs(self) -> np.ndarray:
        return self.data[PRS]

    # --- Boundaries ---

    def enforce_boundaries(self) -> None:
        """Refresh every conserved quantity's ghost cells from its periodic image."""
        apply_periodic_bc(self.data)

    # --- Copies and views ---

    def copy(self) -> FieldState:
        return FieldState(self.grid, self.data)

    def readonly(self) -> np.ndarray:
        """Non-writeable view of the ``(4, nx, ny)`` data."""
        view = self.data.view()
        view.flags.writeable = False
        return view

    def as_dict(self) -> dict[str, np.ndarray]:
        return {name: self.data[k].copy() for k, name in enumerate(FIELD_NAMES)}
