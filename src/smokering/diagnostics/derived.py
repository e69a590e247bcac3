"""Scalar diagnostic reductions for monitoring and output.

Computes integral flow quantities from the interior cells of the
conserved and derived grids for logging, step results and the HDF5
time series.

Functions are pure numpy. No Numba here: these run
once per recorded step, not per stage.
"""

from __future__ import annotations

import numpy as np

from smokering.core.grid import Grid


def total_mass(rho: np.ndarray, grid: Grid) -> float:
    """Mass per unit depth, sum(rho) * dx * dy over interior cells [kg/m]."""
    return float(np.sum(rho[grid.interior]) * grid.cell_area)


def kinetic_energy(rho: np.ndarray, v2: np.ndarray, grid: Grid) -> float:
    """Kinetic energy per unit depth, sum(0.5 * rho * |v|^2) dA [J/m]."""
    interior = grid.interior
    return float(0.5 * np.sum(rho[interior] * v2[interior]) * grid.cell_area)


def enstrophy(vort: np.ndarray, grid: Grid) -> float:
    """Enstrophy, sum(0.5 * omega^2) dA [m^2/s^2]."""
    return float(0.5 * np.sum(vort[grid.interior] ** 2) * grid.cell_area)


def circulation(vort: np.ndarray, grid: Grid, sign: int = 1) -> float:
    """Circulation of one sign, sum(omega) dA over cells where sign*omega > 0 [m^2/s].

    The net circulation of a periodic domain is zero, so the positive and
    negative lobes of a vortex pair are reported separately.

    Args:
        vort: Vorticity grid.
        grid: Grid geometry.
        sign: +1 for counter-clockwise lobes, -1 for clockwise lobes.

    Returns:
        Circulation carried by the selected lobes (signed).
    """
    if sign not in (1, -1):
        raise ValueError(f"sign must be +1 or -1, got {sign}")
    w = vort[grid.interior]
    return float(np.sum(np.where(sign * w > 0.0, w, 0.0)) * grid.cell_area)


def mach_number(
    v2: np.ndarray,
    temp: np.ndarray,
    gamma: float,
    gas_constant: float,
) -> np.ndarray:
    """Local Mach number |v| / sqrt(gamma * R * T).

    Args:
        v2: Speed squared [m^2/s^2].
        temp: Temperature [K].
        gamma: Ratio of specific heats.
        gas_constant: Specific gas constant [J/(kg*K)].

    Returns:
        Mach number array, same shape as ``v2`` (dimensionless).
    """
    c_s = np.sqrt(gamma * gas_constant * np.maximum(temp, 0.0))
    return np.sqrt(v2) / np.maximum(c_s, 1e-30)
