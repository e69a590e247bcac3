"""HDF5 time-series diagnostics writer.

Records scalar flow quantities at each output step, plus optional
vorticity/velocity snapshots, into an HDF5 file for post-processing.
The file is an output artefact only; it is never read back as
simulation state.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from smokering.core.bases import DiagnosticsBase
from smokering.core.grid import Grid
from smokering.diagnostics.derived import (
    circulation,
    enstrophy,
    kinetic_energy,
    mach_number,
    total_mass,
)

logger = logging.getLogger(__name__)

try:
    import h5py

    HAS_H5PY = True
except ImportError:
    HAS_H5PY = False
    logger.warning("h5py not available; HDF5 diagnostics disabled")

# Field names to include in snapshots
_SNAPSHOT_FIELDS = ("vort", "vx", "vy", "rho", "prs")


class HDF5Writer(DiagnosticsBase):
    """Write simulation diagnostics to an HDF5 file.

    Creates datasets for:
    - Scalar time series: time, dt, total_mass, kinetic_energy, enstrophy,
      circulation_pos, circulation_neg, max_vorticity, max_speed, max_mach,
      min_rho, min_T
    - Field snapshots (optional): vort, vx, vy, rho, prs over interior cells

    Args:
        filename: Output HDF5 file path.
        grid: Grid geometry (for area weights and coordinates).
        gamma: Ratio of specific heats (for the Mach number).
        gas_constant: Specific gas constant (for the Mach number).
        field_output_interval: Write field data every N record calls (0 = never).
    """

    def __init__(
        self,
        filename: str,
        grid: Grid,
        gamma: float,
        gas_constant: float,
        field_output_interval: int = 0,
    ) -> None:
        self.filename = filename
        self.grid = grid
        self.gamma = gamma
        self.gas_constant = gas_constant
        self.field_output_interval = field_output_interval
        self._call_count = 0
        self._scalars: dict[str, list] = {
            "time": [],
            "dt": [],
            "total_mass": [],
            "kinetic_energy": [],
            "enstrophy": [],
            "circulation_pos": [],
            "circulation_neg": [],
            "max_vorticity": [],
            "max_speed": [],
            "max_mach": [],
            "min_rho": [],
            "min_T": [],
        }
        self._field_snapshots: list[dict[str, Any]] = []

    @property
    def num_records(self) -> int:
        return self._call_count

    def record(self, state: dict[str, Any], time: float) -> None:
        """Record diagnostics from the current flow fields.

        Args:
            state: Dictionary with the conserved grids ('rho', 'prs', ...),
                   the derived grids ('vx', 'vy', 'v2', 'temp', 'vort', ...)
                   and the scalar 'dt'.
            time: Current simulation time [s].
        """
        self._call_count += 1
        g = self.grid
        interior = g.interior

        rho = state["rho"]
        v2 = state["v2"]
        temp = state["temp"]
        vort = state["vort"]

        self._scalars["time"].append(time)
        self._scalars["dt"].append(float(state.get("dt", 0.0)))
        self._scalars["total_mass"].append(total_mass(rho, g))
        self._scalars["kinetic_energy"].append(kinetic_energy(rho, v2, g))
        self._scalars["enstrophy"].append(enstrophy(vort, g))
        self._scalars["circulation_pos"].append(circulation(vort, g, sign=1))
        self._scalars["circulation_neg"].append(circulation(vort, g, sign=-1))
        self._scalars["max_vorticity"].append(float(np.max(np.abs(vort[interior]))))
        self._scalars["max_speed"].append(float(np.sqrt(np.max(v2[interior]))))
        mach = mach_number(v2[interior], temp[interior], self.gamma, self.gas_constant)
        self._scalars["max_mach"].append(float(np.max(mach)))
        self._scalars["min_rho"].append(float(np.min(rho[interior])))
        self._scalars["min_T"].append(float(np.min(temp[interior])))

        # === Field snapshots ===
        if (
            self.field_output_interval > 0
            and self._call_count % self.field_output_interval == 0
        ):
            snapshot: dict[str, Any] = {"time": time}
            for field_name in _SNAPSHOT_FIELDS:
                arr = state.get(field_name)
                if arr is not None and isinstance(arr, np.ndarray):
                    snapshot[field_name] = arr[interior].copy()
            self._field_snapshots.append(snapshot)
            logger.debug(
                "Captured field snapshot %d at t=%.4e",
                len(self._field_snapshots), time,
            )

    def finalize(self) -> None:
        """Write all accumulated data to the HDF5 file."""
        if not HAS_H5PY:
            logger.warning("Cannot write HDF5: h5py not installed")
            return

        logger.info("Writing diagnostics to %s", self.filename)
        with h5py.File(self.filename, "w") as f:
            # Write scalar time series
            grp = f.create_group("scalars")
            for key, values in self._scalars.items():
                grp.create_dataset(key, data=np.array(values))

            # Interior cell-centre coordinates
            coords = f.create_group("grid")
            coords.create_dataset("x", data=np.asarray(self.grid.x[1:-1]))
            coords.create_dataset("y", data=np.asarray(self.grid.y[1:-1]))

            # Write field snapshots
            if self._field_snapshots:
                fields_grp = f.create_group("fields")
                for idx, snap in enumerate(self._field_snapshots):
                    snap_grp = fields_grp.create_group(f"snapshot_{idx:04d}")
                    snap_grp.attrs["time"] = snap["time"]
                    for key, val in snap.items():
                        if key != "time" and isinstance(val, np.ndarray):
                            snap_grp.create_dataset(key, data=val)
                fields_grp.attrs["num_snapshots"] = len(self._field_snapshots)
                logger.info(
                    "Wrote %d field snapshots", len(self._field_snapshots),
                )

            f.attrs["num_records"] = self._call_count

        logger.info("Wrote %d diagnostic records to %s", self._call_count, self.filename)
