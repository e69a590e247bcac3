"""Tests for the pydantic configuration models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from smokering.config import (
    FluidConfig,
    ForcingConfig,
    GridConfig,
    IntegratorConfig,
    SimulationConfig,
)
from smokering.constants import R_air, gamma_air, kappa_air, mu_air


class TestDefaults:
    def test_air_defaults(self):
        fluid = FluidConfig()
        assert fluid.viscosity == mu_air
        assert fluid.thermal_diffusivity == kappa_air
        assert fluid.gamma == gamma_air
        assert fluid.gas_constant == R_air

    def test_smoke_ring_defaults(self):
        cfg = SimulationConfig()
        assert (cfg.grid.nx, cfg.grid.ny) == (130, 66)
        assert cfg.integrator.recompute_interval == 20
        assert cfg.integrator.dt_fixed is None
        assert cfg.forcing.enabled
        assert cfg.diagnostics.hdf5_filename is None


class TestValidation:
    def test_grid_bounds(self):
        with pytest.raises(ValidationError, match="xmin"):
            GridConfig(xmin=1.0, xmax=0.5)
        with pytest.raises(ValidationError, match="ymin"):
            GridConfig(ymin=0.2, ymax=0.2)

    def test_grid_too_small(self):
        with pytest.raises(ValidationError):
            GridConfig(nx=3)

    def test_forcing_window(self):
        with pytest.raises(ValidationError, match="t_start"):
            ForcingConfig(t_start=2.0e-3, t_end=1.0e-3)

    @pytest.mark.parametrize("field", ["viscosity", "thermal_diffusivity"])
    def test_negative_coefficients(self, field):
        with pytest.raises(ValidationError):
            FluidConfig(**{field: -1.0})

    def test_zero_coefficients_allowed(self):
        fluid = FluidConfig(viscosity=0.0, thermal_diffusivity=0.0)
        assert fluid.viscosity == 0.0

    def test_gamma_above_one(self):
        with pytest.raises(ValidationError):
            FluidConfig(gamma=1.0)

    def test_integrator_limits(self):
        with pytest.raises(ValidationError):
            IntegratorConfig(recompute_interval=0)
        with pytest.raises(ValidationError):
            IntegratorConfig(dt_fixed=0.0)

    def test_nested_dict(self):
        cfg = SimulationConfig(grid={"nx": 10, "ny": 10}, fluid={"viscosity": 0.0})
        assert cfg.grid.nx == 10
        assert cfg.fluid.viscosity == 0.0


class TestIO:
    def test_json_round_trip(self, tmp_path):
        cfg = SimulationConfig(sim_time=1.0e-3, grid={"nx": 20, "ny": 12})
        path = tmp_path / "cfg.json"
        cfg.to_json(path)
        loaded = SimulationConfig.from_file(path)
        assert loaded == cfg

    def test_to_json_string(self):
        data = json.loads(SimulationConfig().to_json())
        assert data["grid"]["nx"] == 130
        assert data["forcing"]["t_end"] == pytest.approx(4.0e-3)

    def test_from_file_invalid(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"grid": {"xmin": 1.0, "xmax": 0.0}}))
        with pytest.raises(ValidationError):
            SimulationConfig.from_file(path)
