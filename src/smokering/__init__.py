"""smokering — compressible vortex-sheet (smoke ring) solver on a periodic 2D grid."""

__version__ = "0.1.0"
