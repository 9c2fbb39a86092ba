"""URDF parser for resolving a robot's joint layout.

This module reads the actuated joints of a URDF file so that the robot's
dimension descriptor can be derived from the same description the physics
model is built from. Joint names are returned in document order, which need
not match the engine's own joint ordering; only their count is used for the
dimensions.
"""

import logging
from typing import List, Tuple

from lxml import etree

from jax_joint_mapping.core.dimensions import RobotDimensions

logger = logging.getLogger(__name__)

# Joint types with a single degree of freedom and q == v
_SINGLE_DOF_JOINTS = ("revolute", "continuous", "prismatic")


def load_urdf_joint_names(urdf_path: str) -> Tuple[str, ...]:
    """Load the actuated joint names of a URDF file.

    Args:
        urdf_path: Path to the URDF file to load.

    Returns:
        Names of all non-fixed joints in document order.

    Raises:
        ValueError: If the URDF does not have exactly one root link, or uses a
            joint type that does not have one degree of freedom.
    """
    tree = etree.parse(urdf_path)
    root = tree.getroot()

    all_links = {link.get('name') for link in root.findall('.//link')}
    child_links = set()
    actuated_joint_names: List[str] = []

    for joint in root.findall('.//joint'):
        joint_name = joint.get('name')
        joint_type = joint.get('type')

        child_elem = joint.find('child')
        if child_elem is not None:
            child_links.add(child_elem.get('link'))

        if joint_type == 'fixed':
            continue
        if joint_type not in _SINGLE_DOF_JOINTS:
            raise ValueError(
                f"Joint '{joint_name}' has unsupported type '{joint_type}'; "
                f"expected one of {_SINGLE_DOF_JOINTS} or 'fixed'"
            )
        actuated_joint_names.append(joint_name)

    # Find root link (not a child of any joint)
    root_links = all_links - child_links
    if len(root_links) != 1:
        raise ValueError(f"Expected exactly one root link, found: {sorted(root_links)}")

    logger.debug("Parsed %d actuated joints from %s: %s",
                 len(actuated_joint_names), urdf_path, actuated_joint_names)
    return tuple(actuated_joint_names)


def load_urdf_dimensions(urdf_path: str) -> RobotDimensions:
    """Triple-integrator robot dimensions for the actuated joints of a URDF."""
    return RobotDimensions.triple_integrator(len(load_urdf_joint_names(urdf_path)))
