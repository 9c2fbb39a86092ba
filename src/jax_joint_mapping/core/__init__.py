"""Core dimension descriptors for JAX Joint Mapping.

This module provides the immutable descriptors that fix the layout of the
optimizer's state/input vectors and of the physics engine's joint vectors.
"""

from .dimensions import OBSTACLE_DIMENSIONS, OptimizationDimensions, RobotDimensions

__all__ = ["RobotDimensions", "OptimizationDimensions", "OBSTACLE_DIMENSIONS"]
