"""Core module — grid geometry and shared interface types."""

from smokering.core.bases import DiagnosticsBase, StepResult
from smokering.core.grid import Grid

__all__ = ["DiagnosticsBase", "Grid", "StepResult"]
