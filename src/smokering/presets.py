"""Named configuration presets.

Each preset is a dictionary that can be unpacked into SimulationConfig(**preset).
Presets provide meaningful starting points for:
- The full smoke-ring demonstration
- A small, fast grid for quick looks and tests
- A quiescent box with the forcing disabled

Usage:
    from smokering.presets import get_preset, list_presets
    config = SimulationConfig(**get_preset("smoke_ring"))
"""

from __future__ import annotations

import copy
from typing import Any

_PRESETS: dict[str, dict[str, Any]] = {
    "smoke_ring": {
        "_meta": {
            "description": "128x64 air box, 4 ms Gaussian push rolling up a vortex pair",
        },
        "sim_time": 0.02,
        "grid": {"nx": 130, "ny": 66, "xmin": 0.0, "xmax": 0.256, "ymin": 0.0, "ymax": 0.128},
        "forcing": {
            "enabled": True,
            "magnitude": 4.0e3,
            "t_start": 0.0,
            "t_end": 4.0e-3,
            "x_start": 0.016,
            "width": 0.008,
            "y_center": 0.064,
            "half_height": 0.016,
        },
        "integrator": {"recompute_interval": 20, "steps_per_frame": 10},
    },
    "small": {
        "_meta": {
            "description": "32x32 air box for quick runs and tests",
        },
        "sim_time": 2.0e-3,
        "grid": {"nx": 34, "ny": 34, "xmin": 0.0, "xmax": 0.064, "ymin": 0.0, "ymax": 0.064},
        "forcing": {
            "enabled": True,
            "magnitude": 4.0e3,
            "t_start": 0.0,
            "t_end": 1.0e-3,
            "x_start": 0.008,
            "width": 0.006,
            "y_center": 0.032,
            "half_height": 0.008,
        },
        "integrator": {"recompute_interval": 20, "steps_per_frame": 5},
    },
    "quiescent": {
        "_meta": {
            "description": "Unforced uniform air at rest; must stay exactly at rest",
        },
        "sim_time": 1.0e-3,
        "grid": {"nx": 34, "ny": 34, "xmin": 0.0, "xmax": 0.064, "ymin": 0.0, "ymax": 0.064},
        "forcing": {"enabled": False},
    },
}


def list_presets() -> list[dict[str, Any]]:
    """Return summary info for all available presets.

    Returns:
        List of dicts with keys: name, description, grid.
    """
    result = []
    for name, preset in _PRESETS.items():
        meta = preset.get("_meta", {})
        grid = preset.get("grid", {})
        result.append({
            "name": name,
            "description": meta.get("description", ""),
            "grid": (grid.get("nx"), grid.get("ny")),
        })
    return result


def get_preset(name: str) -> dict[str, Any]:
    """Return a preset config dict (without _meta) suitable for SimulationConfig.

    Args:
        name: Preset name.

    Returns:
        Config dict ready for ``SimulationConfig(**preset)``.

    Raises:
        KeyError: If the preset name is not found.
    """
    if name not in _PRESETS:
        available = ", ".join(_PRESETS.keys())
        raise KeyError(f"Unknown preset '{name}'. Available: {available}")
    preset = copy.deepcopy(_PRESETS[name])
    preset.pop("_meta", None)
    return preset


def get_preset_names() -> list[str]:
    """Return list of all preset names."""
    return list(_PRESETS.keys())
