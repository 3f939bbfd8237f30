"""Triangle mesh cleanup: binary STL reading, duplicate-vertex merging, OBJ/PLY export."""

__version__ = "0.1.0"
__all__ = ["__version__"]