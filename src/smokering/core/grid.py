"""Uniform periodic grid — static geometry shared by every solver component.

Arrays are indexed ``[i, j]`` with ``i`` along x and ``j`` along y.
Indices ``1..n-2`` are interior cells; ``0`` and ``n-1`` are ghost cells
holding periodic images (cell 0 mirrors cell n-2, cell n-1 mirrors cell 1).
The periodic length is therefore ``n-2`` cells per axis.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class Grid:
    """Cell spacing, coordinates and finite-difference coefficients.

    Attributes:
        nx: Cells along x, including both ghost cells.
        ny: Cells along y, including both ghost cells.
        xmin, xmax: Physical extent along x [m].
        ymin, ymax: Physical extent along y [m].
        dx, dy: Cell spacing [m].
        dx1, dy1: Centred first-derivative coefficients 1/(2dx), 1/(2dy).
        dx2, dy2: Second-derivative coefficients 1/dx^2, 1/dy^2.
        dmin, dmin2: Smallest spacing and its square (CFL).
        x, y: Cell-centre coordinates, ghost cells included (read-only).

    Raises:
        ValueError: If a dimension is below 4 or a bound pair is degenerate.
    """

    nx: int
    ny: int
    xmin: float
    xmax: float
    ymin: float
    ymax: float

    dx: float = field(init=False)
    dy: float = field(init=False)
    dx1: float = field(init=False)
    dy1: float = field(init=False)
    dx2: float = field(init=False)
    dy2: float = field(init=False)
    dmin: float = field(init=False)
    dmin2: float = field(init=False)
    x: np.ndarray = field(init=False, repr=False, compare=False)
    y: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.nx < 4 or self.ny < 4:
            raise ValueError(f"grid dimensions must be at least 4x4, got {self.nx}x{self.ny}")
        if self.xmin >= self.xmax:
            raise ValueError(f"xmin must be less than xmax, got [{self.xmin}, {self.xmax}]")
        if self.ymin >= self.ymax:
            raise ValueError(f"ymin must be less than ymax, got [{self.ymin}, {self.ymax}]")

        dx = (self.xmax - self.xmin) / (self.nx - 2)
        dy = (self.ymax - self.ymin) / (self.ny - 2)
        dmin = min(dx, dy)

        x = self.xmin + (np.arange(self.nx) - 0.5) * dx
        y = self.ymin + (np.arange(self.ny) - 0.5) * dy
        x.flags.writeable = False
        y.flags.writeable = False

        derived = {
            "dx": dx,
            "dy": dy,
            "dx1": 1.0 / (2.0 * dx),
            "dy1": 1.0 / (2.0 * dy),
            "dx2": 1.0 / dx**2,
            "dy2": 1.0 / dy**2,
            "dmin": dmin,
            "dmin2": dmin**2,
            "x": x,
            "y": y,
        }
        for name, value in derived.items():
            object.__setattr__(self, name, value)

    @classmethod
    def from_config(cls, cfg) -> Grid:
        """Build from a :class:`~smokering.config.GridConfig`."""
        return cls(cfg.nx, cfg.ny, cfg.xmin, cfg.xmax, cfg.ymin, cfg.ymax)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nx, self.ny)

    @property
    def interior(self) -> tuple[slice, slice]:
        """Index pair selecting interior cells."""
        return (slice(1, self.nx - 1), slice(1, self.ny - 1))

    @property
    def cell_area(self) -> float:
        return self.dx * self.dy

    def mesh(self) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(X, Y)`` cell-centre coordinates with ``indexing="ij"``."""
        return np.meshgrid(self.x, self.y, indexing="ij")
