"""Diagnostics module — scalar reductions and HDF5 output."""

from smokering.diagnostics.derived import (
    circulation,
    enstrophy,
    kinetic_energy,
    mach_number,
    total_mass,
)
from smokering.diagnostics.hdf5_writer import HDF5Writer

__all__ = [
    "HDF5Writer",
    "circulation",
    "enstrophy",
    "kinetic_energy",
    "mach_number",
    "total_mass",
]
