"""
JAX Joint Mapping: state/input to joint-space coordinate mapping.

This library translates an optimizer's stacked robot-plus-obstacles state and
input vectors to a physics engine's joint vectors, and remaps joint-space
Jacobians back onto the optimizer's variables, using JAX.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import core
from . import io
from . import mapping

__version__ = "0.1.0"
__all__ = ["core", "io", "mapping"]
