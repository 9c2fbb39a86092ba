"""State/input to joint-space mappings and Jacobian remapping.

This module translates between the optimizer's flat state/input vectors and
the physics engine's joint position, velocity and acceleration vectors, and
maps Jacobians computed in joint space back onto the optimizer's variables.
All mappings are immutable PyTrees built from JAX primitives, so they work on
plain floats as well as under ``jit``, ``vmap`` and automatic differentiation.
"""

import abc
import copy
from typing import Callable, Tuple

import jax.numpy as jnp
from flax import struct
from jax import Array

from .core import OBSTACLE_DIMENSIONS, OptimizationDimensions, RobotDimensions


class StateInputMapping(abc.ABC):
    """Capability set shared by every state/input to joint-space mapping.

    Robot-specific kinematic structures are supported by subclassing this
    interface; the system mapping only ever calls these methods.

    Subclasses that are passed as arguments to a ``jax.jit``-compiled
    function, directly or as the robot mapping of a :class:`SystemMapping`,
    must be PyTrees, e.g. flax ``struct.dataclass`` types with their
    dimensions as static fields. Other subclasses only work when closed over.
    """

    @abc.abstractmethod
    def joint_position(self, state: Array) -> Array:
        """Generalized joint positions for ``state``."""

    @abc.abstractmethod
    def joint_velocity(self, state: Array, input_: Array) -> Array:
        """Generalized joint velocities for ``state`` and ``input_``."""

    @abc.abstractmethod
    def joint_acceleration(self, state: Array, input_: Array) -> Array:
        """Generalized joint accelerations for ``state`` and ``input_``."""

    @abc.abstractmethod
    def jacobian_remap(self, state: Array, Jq: Array, Jv: Array) -> Tuple[Array, Array]:
        """Map joint-space Jacobians ``Jq``, ``Jv`` to ``(dfdx, dfdu)``."""

    def clone(self) -> "StateInputMapping":
        """Independent deep copy, safe to hand to another evaluation context."""
        return copy.deepcopy(self)


@struct.dataclass
class TripleIntegratorMapping(StateInputMapping):
    """Mapping for a body whose state is ``[q, v, a]`` with no articulation.

    The joint position, velocity and acceleration are read directly from the
    state; the input does not enter the joint-space quantities.

    Attributes:
        dims: Dimensions of the body. Marked as a static field for JIT
              compilation.
    """
    dims: RobotDimensions = struct.field(pytree_node=False)

    def joint_position(self, state: Array) -> Array:
        return state[: self.dims.q]

    def joint_velocity(self, state: Array, input_: Array) -> Array:
        return state[self.dims.q : self.dims.q + self.dims.v]

    def joint_acceleration(self, state: Array, input_: Array) -> Array:
        # Explicit start index so that v == 0 yields an empty slice
        return state[state.shape[-1] - self.dims.v :]

    def jacobian_remap(self, state: Array, Jq: Array, Jv: Array) -> Tuple[Array, Array]:
        """Map the Jacobians of a function f w.r.t. q and v to the state and input.

        The function is assumed not to depend on acceleration, so the
        acceleration columns of ``dfdx`` are zero.

        Note:
            ``dfdu`` is always zero. This only holds for functions of the
            joint position and velocity alone, such as collision distances,
            which is the only place this remap is used. A call site that needs
            the sensitivity to the input requires its own remap.

        Args:
            state: State vector of the body (unused).
            Jq: Jacobian of f w.r.t. joint positions, shape (rows, q).
            Jv: Jacobian of f w.r.t. joint velocities, shape (rows, v).

        Returns:
            Tuple ``(dfdx, dfdu)`` of shapes (rows, q + 2v) and (rows, u).
        """
        output_dim = Jq.shape[0]
        dtype = jnp.result_type(Jq, Jv)
        dfdx = jnp.concatenate(
            [Jq, Jv, jnp.zeros((output_dim, self.dims.v), dtype=dtype)], axis=1
        )
        dfdu = jnp.zeros((output_dim, self.dims.u), dtype=dtype)
        return dfdx, dfdu


# Obstacles are stateless point masses, so a single instance is shared.
OBSTACLE_MAPPING = TripleIntegratorMapping(OBSTACLE_DIMENSIONS)


def _check_shape(name: str, value: Array, expected: Tuple[int, ...]) -> None:
    # Shapes are static under jit, so this only runs while tracing.
    if tuple(jnp.shape(value)) != expected:
        raise ValueError(f"{name} must have shape {expected}, got {tuple(jnp.shape(value))}")


@struct.dataclass
class SystemMapping(StateInputMapping):
    """Mapping for a robot plus a number of point-mass obstacles.

    The state vector is the robot state followed by one 9-element
    ``[position, velocity, acceleration]`` block per obstacle; the input
    vector is the robot input only. The joint vectors hold the robot joints
    first and then three translational joints per obstacle, in tracking
    order, matching the order in which obstacles are appended to the physics
    model.

    Attributes:
        dims: Combined dimensions. Marked as a static field for JIT
              compilation.
        robot_mapping: Mapping for the robot block.
    """
    dims: OptimizationDimensions = struct.field(pytree_node=False)
    robot_mapping: StateInputMapping

    @classmethod
    def for_triple_integrator(cls, dims: OptimizationDimensions) -> "SystemMapping":
        """System mapping whose robot is itself a triple integrator."""
        return cls(dims=dims, robot_mapping=TripleIntegratorMapping(dims.robot))

    def joint_position(self, state: Array) -> Array:
        dims = self.dims
        _check_shape("state", state, (dims.x,))

        q_pin = jnp.zeros(dims.q, dtype=state.dtype)

        # Physics model order: robot joints first, then appended obstacles
        x_robot = state[dims.robot_state_slice()]
        q_robot = self.robot_mapping.joint_position(x_robot)
        _check_shape("robot joint position", q_robot, (dims.robot.q,))
        q_pin = q_pin.at[: dims.robot.q].set(q_robot)

        for i in range(dims.o):
            x_obs = state[dims.obstacle_state_slice(i)]
            q_pin = q_pin.at[dims.obstacle_position_slice(i)].set(
                OBSTACLE_MAPPING.joint_position(x_obs)
            )

        return q_pin

    def joint_velocity(self, state: Array, input_: Array) -> Array:
        return self._velocity_level(
            self.robot_mapping.joint_velocity, OBSTACLE_MAPPING.joint_velocity, state, input_
        )

    def joint_acceleration(self, state: Array, input_: Array) -> Array:
        return self._velocity_level(
            self.robot_mapping.joint_acceleration, OBSTACLE_MAPPING.joint_acceleration, state, input_
        )

    def _velocity_level(
        self, robot_fn: Callable, obstacle_fn: Callable, state: Array, input_: Array
    ) -> Array:
        """Assemble a velocity-sized joint vector from the robot and obstacle functions."""
        dims = self.dims
        _check_shape("state", state, (dims.x,))
        _check_shape("input", input_, (dims.u,))

        out = jnp.zeros(dims.v, dtype=jnp.result_type(state, input_))
        # Obstacles have no input; the point-mass mapping ignores it anyway
        u_obs = jnp.zeros(OBSTACLE_DIMENSIONS.v, dtype=state.dtype)

        x_robot = state[dims.robot_state_slice()]
        u_robot = input_[dims.robot_input_slice()]
        v_robot = robot_fn(x_robot, u_robot)
        _check_shape("robot output", v_robot, (dims.robot.v,))
        out = out.at[: dims.robot.v].set(v_robot)

        for i in range(dims.o):
            x_obs = state[dims.obstacle_state_slice(i)]
            out = out.at[dims.obstacle_velocity_slice(i)].set(obstacle_fn(x_obs, u_obs))

        return out

    def jacobian_remap(self, state: Array, Jq: Array, Jv: Array) -> Tuple[Array, Array]:
        """Map the Jacobians of a function f w.r.t. the joint vectors to state and input.

        ``Jq`` and ``Jv`` are split by the same robot-then-obstacles column
        layout as the joint vectors, each block is remapped by its body's
        mapping, and the results are placed at the body's state columns.

        Note:
            Obstacles contribute no input columns, and the robot's input
            columns are whatever its own mapping reports (zero for
            :class:`TripleIntegratorMapping`). Only valid for functions that do
            not depend on the input, such as collision distances.

        Args:
            state: Combined state vector, shape (dims.x,).
            Jq: Jacobian of f w.r.t. joint positions, shape (rows, dims.q).
            Jv: Jacobian of f w.r.t. joint velocities, shape (rows, dims.v).

        Returns:
            Tuple ``(dfdx, dfdu)`` of shapes (rows, dims.x) and (rows, dims.u).
        """
        dims = self.dims
        _check_shape("state", state, (dims.x,))
        output_dim = Jq.shape[0] if jnp.ndim(Jq) == 2 else -1
        _check_shape("Jq", Jq, (output_dim, dims.q))
        _check_shape("Jv", Jv, (output_dim, dims.v))

        dtype = jnp.result_type(Jq, Jv)
        dfdx = jnp.zeros((output_dim, dims.x), dtype=dtype)
        dfdu = jnp.zeros((output_dim, dims.u), dtype=dtype)

        # Robot contribution: robot columns are at the beginning
        x_robot = state[dims.robot_state_slice()]
        dfdx_robot, dfdu_robot = self.robot_mapping.jacobian_remap(
            x_robot, Jq[:, : dims.robot.q], Jv[:, : dims.robot.v]
        )
        _check_shape("robot dfdx", dfdx_robot, (output_dim, dims.robot.x))
        _check_shape("robot dfdu", dfdu_robot, (output_dim, dims.robot.u))
        dfdx = dfdx.at[:, dims.robot_state_slice()].set(dfdx_robot)
        dfdu = dfdu.at[:, dims.robot_input_slice()].set(dfdu_robot)

        # Obstacles follow the robot columns in physics model order
        for i in range(dims.o):
            x_obs = state[dims.obstacle_state_slice(i)]
            dfdx_obs, _ = OBSTACLE_MAPPING.jacobian_remap(
                x_obs,
                Jq[:, dims.obstacle_position_slice(i)],
                Jv[:, dims.obstacle_velocity_slice(i)],
            )
            dfdx = dfdx.at[:, dims.obstacle_state_slice(i)].set(dfdx_obs)

        return dfdx, dfdu
