"""I/O utilities for resolving dimension descriptors at configuration time.

This module provides functions for reading robot descriptions and YAML
configuration files and converting them to the immutable dimension
descriptors consumed by the mappings.
"""

from .config import dimensions_from_dict, load_dimensions
from .urdf_parser import load_urdf_dimensions, load_urdf_joint_names

__all__ = [
    "load_urdf_joint_names",
    "load_urdf_dimensions",
    "load_dimensions",
    "dimensions_from_dict",
]
