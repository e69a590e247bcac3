"""Pydantic v2 configuration system for smoke-ring simulations.

Provides validated, typed configuration with submodels for each solver
component. Supports JSON I/O and cross-field validation.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from smokering.constants import R_air, gamma_air, kappa_air, mu_air, p_air, rho_air


class GridConfig(BaseModel):
    """Uniform periodic grid, ghost cells included in ``nx`` / ``ny``."""

    nx: int = Field(130, ge=4, description="Cells along x, including one ghost layer per side")
    ny: int = Field(66, ge=4, description="Cells along y, including one ghost layer per side")
    xmin: float = Field(0.0, description="Lower x bound [m]")
    xmax: float = Field(0.256, description="Upper x bound [m]")
    ymin: float = Field(0.0, description="Lower y bound [m]")
    ymax: float = Field(0.128, description="Upper y bound [m]")

    @model_validator(mode="after")
    def check_bounds(self) -> GridConfig:
        if self.xmin >= self.xmax:
            raise ValueError(f"xmin must be less than xmax, got [{self.xmin}, {self.xmax}]")
        if self.ymin >= self.ymax:
            raise ValueError(f"ymin must be less than ymax, got [{self.ymin}, {self.ymax}]")
        return self


class FluidConfig(BaseModel):
    """Transport and thermodynamic coefficients (defaults: air)."""

    viscosity: float = Field(mu_air, ge=0, description="Momentum diffusion coefficient [Pa*s]")
    thermal_diffusivity: float = Field(
        kappa_air, ge=0,
        description="Thermal coefficient; pressure source is (gamma-1)*kappa*lap(T)",
    )
    gamma: float = Field(gamma_air, gt=1, description="Ratio of specific heats")
    gas_constant: float = Field(R_air, gt=0, description="Specific gas constant [J/(kg*K)]")


class InitialConfig(BaseModel):
    """Uniform quiescent initial state."""

    rho0: float = Field(rho_air, gt=0, description="Initial density [kg/m^3]")
    p0: float = Field(p_air, gt=0, description="Initial pressure [Pa]")


class ForcingConfig(BaseModel):
    """Driving-force pulse: a Gaussian-weighted band switched on by a time envelope."""

    enabled: bool = Field(True, description="Apply the driving force")
    magnitude: float = Field(4.0e3, description="Peak force density along x [N/m^3]")
    t_start: float = Field(0.0, ge=0, description="Pulse start [s]")
    t_end: float = Field(4.0e-3, gt=0, description="Pulse end [s]")
    x_start: float = Field(0.016, description="Left edge of the forced band [m]")
    width: float = Field(0.008, gt=0, description="Band extent along x [m]")
    y_center: float = Field(0.064, description="Band centreline [m]")
    half_height: float = Field(0.016, gt=0, description="Band half-height r [m]")

    @model_validator(mode="after")
    def check_window(self) -> ForcingConfig:
        if self.t_start >= self.t_end:
            raise ValueError(
                f"t_start must be less than t_end, got [{self.t_start}, {self.t_end}]"
            )
        return self


class IntegratorConfig(BaseModel):
    """RK4 integrator and CFL controller parameters."""

    recompute_interval: int = Field(20, ge=1, description="Steps between CFL timestep updates")
    advective_cfl: float = Field(0.8, gt=0, description="Safety factor for flow/sound limits")
    diffusive_cfl: float = Field(0.2, gt=0, description="Safety factor for diffusion limits")
    speed_floor: float = Field(1e-10, gt=0, description="Added to speed denominators [m/s]")
    dt_fixed: float | None = Field(
        None, gt=0, description="Fixed timestep [s]; disables the CFL controller",
    )
    steps_per_frame: int = Field(10, ge=1, description="Physics steps per rendered frame")


class DiagnosticsConfig(BaseModel):
    """Diagnostics output parameters."""

    hdf5_filename: str | None = Field(None, description="Output HDF5 file (None = no output)")
    output_interval: int = Field(10, gt=0, description="Steps between scalar records")
    field_output_interval: int = Field(
        0, ge=0,
        description="Records between vorticity/velocity snapshots (0 = off)",
    )


class SimulationConfig(BaseModel):
    """Top-level simulation configuration."""

    sim_time: float = Field(0.02, gt=0, description="Total simulation time [s]")
    max_steps: int | None = Field(None, gt=0, description="Step limit (None = run to sim_time)")

    grid: GridConfig = Field(default_factory=GridConfig)
    fluid: FluidConfig = Field(default_factory=FluidConfig)
    initial: InitialConfig = Field(default_factory=InitialConfig)
    forcing: ForcingConfig = Field(default_factory=ForcingConfig)
    integrator: IntegratorConfig = Field(default_factory=IntegratorConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)

    # --- I/O helpers ---

    @classmethod
    def from_file(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a JSON file."""
        path = Path(path)
        with path.open() as f:
            data = json.load(f)
        return cls(**data)

    def to_json(self, path: str | Path | None = None) -> str:
        """Serialize to JSON string, optionally writing to file."""
        out = self.model_dump_json(indent=2)
        if path is not None:
            Path(path).write_text(out)
        return out
