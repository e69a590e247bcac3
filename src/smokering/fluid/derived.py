"""Flow diagnostics derived from the conserved fields.

Velocity, speed squared and temperature are computed on every cell,
ghost cells included. Divergence and vorticity use centred differences
on interior cells and then receive their own periodic boundary pass,
since the right-hand side differentiates the divergence again.

Nothing here guards against non-positive density: a zero density is a
numerical blow-up and propagates as inf/NaN. :meth:`FlowDiagnostics.check_physical_ranges`
reports such cells without repairing them.
"""

from __future__ import annotations

import logging

import numpy as np

from smokering.core.grid import Grid
from smokering.fluid.state import FieldState, apply_periodic_bc

logger = logging.getLogger(__name__)

DERIVED_NAMES = ("vx", "vy", "v2", "temp", "div", "vort")


class FlowDiagnostics:
    """Derived grids, always a pure function of the latest :class:`FieldState`.

    Args:
        grid: Grid the fields live on.
        gas_constant: Specific gas constant R [J/(kg*K)].
    """

    def __init__(self, grid: Grid, gas_constant: float) -> None:
        self.grid = grid
        self.gas_constant = gas_constant
        shape = grid.shape
        self.vx = np.zeros(shape)
        self.vy = np.zeros(shape)
        self.v2 = np.zeros(shape)
        self.temp = np.zeros(shape)
        self.div = np.zeros(shape)
        self.vort = np.zeros(shape)

    def recompute(self, state: FieldState) -> None:
        """Recompute every derived grid from ``state``.

        ``state`` must already have its ghost cells enforced.
        """
        g = self.grid
        rho = state.rho

        np.divide(state.mx, rho, out=self.vx)
        np.divide(state.my, rho, out=self.vy)
        np.divide(state.prs, self.gas_constant * rho, out=self.temp)
        np.add(self.vx * self.vx, self.vy * self.vy, out=self.v2)

        vx, vy = self.vx, self.vy
        c = (slice(1, -1), slice(1, -1))
        xp = (slice(2, None), slice(1, -1))
        xm = (slice(None, -2), slice(1, -1))
        yp = (slice(1, -1), slice(2, None))
        ym = (slice(1, -1), slice(None, -2))

        self.div[c] = (vx[xp] - vx[xm]) * g.dx1 + (vy[yp] - vy[ym]) * g.dy1
        self.vort[c] = (vy[xp] - vy[xm]) * g.dx1 - (vx[yp] - vx[ym]) * g.dy1
        apply_periodic_bc(self.div)
        apply_periodic_bc(self.vort)

    # --- Reductions over interior cells ---

    def max_speed(self) -> float:
        return float(np.sqrt(np.max(self.v2[self.grid.interior])))

    def max_sound_speed(self, gamma: float) -> float:
        """Peak local sound speed sqrt(gamma * R * T) [m/s]."""
        T_max = np.max(self.temp[self.grid.interior])
        return float(np.sqrt(gamma * self.gas_constant * T_max))

    def max_vorticity(self) -> float:
        return float(np.max(np.abs(self.vort[self.grid.interior])))

    def check_physical_ranges(self, state: FieldState, label: str = "") -> int:
        """Count interior cells whose density or temperature left its valid range.

        Logs a warning when any are found; values are left untouched.

        Args:
            state: Conserved fields the diagnostics were computed from.
            label: Context for the log message (e.g. ``"step 120"``).

        Returns:
            Number of offending cells.
        """
        interior = self.grid.interior
        rho = state.rho[interior]
        temp = self.temp[interior]
        bad = ~(np.isfinite(rho) & np.isfinite(temp) & (rho > 0.0) & (temp > 0.0))
        count = int(np.count_nonzero(bad))
        if count > 0:
            logger.warning(
                "%s: %d cells outside the physical range (min rho=%.3e, min T=%.3e)",
                label or "flow state", count, np.nanmin(rho), np.nanmin(temp),
            )
        return count

    # --- Views ---

    def readonly(self, name: str) -> np.ndarray:
        """Non-writeable view of one derived grid."""
        if name not in DERIVED_NAMES:
            raise KeyError(f"Unknown derived field '{name}'. Available: {', '.join(DERIVED_NAMES)}")
        view = getattr(self, name).view()
        view.flags.writeable = False
        return view

    def as_dict(self) -> dict[str, np.ndarray]:
        return {name: getattr(self, name).copy() for name in DERIVED_NAMES}
