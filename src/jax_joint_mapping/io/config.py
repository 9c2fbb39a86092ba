"""YAML configuration loader for optimization dimensions.

Expected layout::

    robot:
      urdf_path: robot.urdf          # or explicit dims: {q: 7, v: 7, x: 21, u: 7}
    obstacles:
      enabled: true
      dynamic:
        - name: ball
        - name: box

The order of ``obstacles.dynamic`` is the tracking order, which is also the
order in which the obstacles are appended to the physics model.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from jax_joint_mapping.core.dimensions import OptimizationDimensions, RobotDimensions
from jax_joint_mapping.io.urdf_parser import load_urdf_dimensions

logger = logging.getLogger(__name__)


def _robot_dimensions(robot: Dict[str, Any], base_dir: Path) -> RobotDimensions:
    if "dims" in robot:
        dims = robot["dims"]
        try:
            return RobotDimensions(q=dims["q"], v=dims["v"], x=dims["x"], u=dims["u"])
        except KeyError as e:
            raise ValueError(f"robot.dims is missing key {e.args[0]!r}") from e
        except TypeError as e:
            raise ValueError(f"robot.dims must be a mapping, got {dims!r}") from e

    if "urdf_path" in robot:
        urdf_path = Path(robot["urdf_path"])
        if not urdf_path.is_absolute():
            urdf_path = base_dir / urdf_path
        return load_urdf_dimensions(str(urdf_path))

    raise ValueError("robot section must contain either 'dims' or 'urdf_path'")


def _obstacle_count(obstacles: Optional[Dict[str, Any]]) -> int:
    if not obstacles:
        return 0
    if not isinstance(obstacles, dict):
        raise ValueError(f"obstacles must be a mapping, got {obstacles!r}")
    if not obstacles.get("enabled", True):
        return 0

    dynamic = obstacles.get("dynamic") or []
    if not isinstance(dynamic, list):
        raise ValueError(f"obstacles.dynamic must be a list, got {dynamic!r}")
    for i, obstacle in enumerate(dynamic):
        if not isinstance(obstacle, dict) or "name" not in obstacle:
            raise ValueError(f"obstacles.dynamic[{i}] must be a mapping with a 'name'")
    return len(dynamic)


def dimensions_from_dict(data: Dict[str, Any], base_dir: Union[str, Path] = ".") -> OptimizationDimensions:
    """Build optimization dimensions from an already parsed configuration.

    Args:
        data: Configuration dictionary with a ``robot`` and optional
              ``obstacles`` section.
        base_dir: Directory that relative paths are resolved against.

    Returns:
        The combined optimization dimensions.
    """
    if not isinstance(data, dict) or not isinstance(data.get("robot"), dict):
        raise ValueError("configuration must contain a 'robot' section")

    robot = _robot_dimensions(data["robot"], Path(base_dir))
    dims = OptimizationDimensions(robot=robot, o=_obstacle_count(data.get("obstacles")))

    logger.info("Resolved dimensions: robot=%s, obstacles=%d, x=%d, u=%d",
                robot, dims.o, dims.x, dims.u)
    return dims


def load_dimensions(config_path: Union[str, Path]) -> OptimizationDimensions:
    """Load optimization dimensions from a YAML configuration file."""
    config_path = Path(config_path)
    with open(config_path, "r") as f:
        data = yaml.safe_load(f)
    return dimensions_from_dict(data, base_dir=config_path.parent)
