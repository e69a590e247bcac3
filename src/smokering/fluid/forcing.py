"""Driving force: a static spatial template switched on by a time envelope.

The template pushes along +x inside one rectangular band near the left
edge of the domain, weighted across the band by ``exp(-2 y'^2 / r^2)``.
The envelope is a trapezoid in time: a linear ramp up over the first
quarter of the active window, flat through the middle half, linear ramp
down over the last quarter. The force never switches on or off
discontinuously.
"""

from __future__ import annotations

import logging

import numpy as np

from smokering.core.grid import Grid

logger = logging.getLogger(__name__)


def time_envelope(t: float, t_start: float, t_end: float) -> float:
    """Trapezoidal pulse factor in [0, 1].

    Args:
        t: Simulation time [s].
        t_start: Window start [s]; envelope is 0 at and before it.
        t_end: Window end [s]; envelope is 0 at and after it.

    Returns:
        Envelope factor.
    """
    if t <= t_start or t >= t_end:
        return 0.0
    ramp = 0.25 * (t_end - t_start)
    if t < t_start + ramp:
        return (t - t_start) / ramp
    if t > t_end - ramp:
        return (t_end - t) / ramp
    return 1.0


def band_template(
    grid: Grid,
    magnitude: float,
    x_start: float,
    width: float,
    y_center: float,
    half_height: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Build the ``(fx, fy)`` force-density grids.

    Interior cells with ``x_start <= x <= x_start + width`` and
    ``|y - y_center| <= half_height`` receive
    ``magnitude * exp(-2 * (y - y_center)^2 / half_height^2)`` along x.
    Ghost cells and ``fy`` stay zero.

    Args:
        grid: Grid to build on.
        magnitude: Peak force density [N/m^3].
        x_start: Left edge of the band [m].
        width: Band extent along x [m].
        y_center: Band centreline [m].
        half_height: Band half-height r [m].

    Returns:
        ``(fx, fy)``, each of shape ``(nx, ny)``.
    """
    if half_height <= 0:
        raise ValueError(f"half_height must be positive, got {half_height}")
    if width <= 0:
        raise ValueError(f"width must be positive, got {width}")

    X, Y = grid.mesh()
    dy = Y - y_center
    in_band = (X >= x_start) & (X <= x_start + width) & (np.abs(dy) <= half_height)

    interior = np.zeros(grid.shape, dtype=bool)
    interior[grid.interior] = True

    fx = np.where(in_band & interior, magnitude * np.exp(-2.0 * dy**2 / half_height**2), 0.0)
    fy = np.zeros(grid.shape)
    return fx, fy


class Forcing:
    """Static force template combined with its time envelope.

    Args:
        grid: Grid to build on.
        magnitude: Peak force density along x [N/m^3].
        t_start: Pulse start [s].
        t_end: Pulse end [s].
        x_start: Left edge of the band [m].
        width: Band extent along x [m].
        y_center: Band centreline [m].
        half_height: Band half-height r [m].
        enabled: When False the envelope is identically zero.
    """

    def __init__(
        self,
        grid: Grid,
        magnitude: float,
        t_start: float,
        t_end: float,
        x_start: float,
        width: float,
        y_center: float,
        half_height: float,
        enabled: bool = True,
    ) -> None:
        if t_start >= t_end:
            raise ValueError(f"t_start must be less than t_end, got [{t_start}, {t_end}]")
        self.t_start = t_start
        self.t_end = t_end
        self.enabled = enabled
        self.fx, self.fy = band_template(grid, magnitude, x_start, width, y_center, half_height)

        n_cells = int(np.count_nonzero(self.fx))
        if enabled and n_cells == 0:
            logger.warning("Forcing band covers no interior cells; check band geometry")
        logger.debug(
            "Forcing template: %d cells, peak=%.3e N/m^3, window=[%.3e, %.3e] s",
            n_cells, magnitude, t_start, t_end,
        )

    @classmethod
    def from_config(cls, grid: Grid, cfg) -> Forcing:
        """Build from a :class:`~smokering.config.ForcingConfig`."""
        return cls(
            grid,
            magnitude=cfg.magnitude,
            t_start=cfg.t_start,
            t_end=cfg.t_end,
            x_start=cfg.x_start,
            width=cfg.width,
            y_center=cfg.y_center,
            half_height=cfg.half_height,
            enabled=cfg.enabled,
        )

    @classmethod
    def none(cls, grid: Grid) -> Forcing:
        """A forcing that never acts (zero template, disabled envelope)."""
        return cls(
            grid,
            magnitude=0.0,
            t_start=0.0,
            t_end=1.0,
            x_start=grid.xmin,
            width=grid.xmax - grid.xmin,
            y_center=0.5 * (grid.ymin + grid.ymax),
            half_height=0.5 * (grid.ymax - grid.ymin),
            enabled=False,
        )

    def envelope(self, t: float) -> float:
        if not self.enabled:
            return 0.0
        return time_envelope(t, self.t_start, self.t_end)
