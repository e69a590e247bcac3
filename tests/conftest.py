"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from smokering.config import SimulationConfig
from smokering.constants import R_air, gamma_air, p_air, rho_air
from smokering.core.grid import Grid
from smokering.fluid.state import MX, MY, PRS, RHO, FieldState
from smokering.presets import get_preset


@pytest.fixture
def grid():
    """Small non-square grid for fast unit tests (16 x 12 interior cells)."""
    return Grid(18, 14, 0.0, 0.032, 0.0, 0.024)


@pytest.fixture
def air():
    """Air coefficients keyed the way the solver constructors take them."""
    return {
        "viscosity": 1.8e-5,
        "thermal_diffusivity": 0.0257,
        "gamma": gamma_air,
        "gas_constant": R_air,
    }


@pytest.fixture
def quiescent_state(grid):
    """Uniform air at rest."""
    return FieldState.uniform(grid, rho_air, p_air)


@pytest.fixture
def perturbed_state(grid):
    """Smooth periodic perturbation of air at rest: a pressure bump plus a shear flow."""
    X, Y = grid.mesh()
    Lx = grid.xmax - grid.xmin
    Ly = grid.ymax - grid.ymin
    kx = 2.0 * np.pi / Lx
    ky = 2.0 * np.pi / Ly

    state = FieldState(grid)
    state.data[RHO] = rho_air * (1.0 + 0.01 * np.sin(kx * X) * np.cos(ky * Y))
    state.data[PRS] = p_air * (1.0 + 0.01 * np.cos(kx * X))
    state.data[MX] = state.data[RHO] * 2.0 * np.sin(ky * Y)
    state.data[MY] = state.data[RHO] * 1.0 * np.cos(kx * X)
    state.enforce_boundaries()
    return state


@pytest.fixture
def small_config():
    """Small SimulationConfig for fast engine tests."""
    preset = get_preset("small")
    preset["max_steps"] = 10
    return SimulationConfig(**preset)
