"""Dimension descriptors for robot, obstacle and combined optimization vectors.

The optimizer works with a flat state vector laid out as the robot state block
followed by one ``[position(3), velocity(3), acceleration(3)]`` block per
tracked obstacle, and an input vector holding only the robot input. The
physics engine works with joint vectors laid out as the robot joints followed
by three translational joints per obstacle. All offset arithmetic between the
two layouts lives here.
"""

from dataclasses import dataclass

# State of a point-mass obstacle: position, velocity and acceleration in 3D.
OBSTACLE_DOF = 3
OBSTACLE_STATE_DIM = 3 * OBSTACLE_DOF


def _check_count(name: str, value) -> None:
    # bool is an int subclass but never a valid dimension
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Dimension '{name}' must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"Dimension '{name}' must be non-negative, got {value}")


@dataclass(frozen=True)
class RobotDimensions:
    """Sizes of a single body's joint-space and state/input vectors.

    Attributes:
        q: Size of the generalized position vector.
        v: Size of the generalized velocity vector.
        x: Size of the optimizer state vector.
        u: Size of the optimizer input vector.
    """
    q: int
    v: int
    x: int
    u: int

    def __post_init__(self):
        for name in ("q", "v", "x", "u"):
            _check_count(name, getattr(self, name))

    @classmethod
    def triple_integrator(cls, n: int) -> "RobotDimensions":
        """Dimensions of an ``n``-DOF body with state ``[q, v, a]`` and jerk input."""
        _check_count("n", n)
        return cls(q=n, v=n, x=3 * n, u=n)

    @property
    def is_triple_integrator(self) -> bool:
        return self.x == self.q + 2 * self.v


OBSTACLE_DIMENSIONS = RobotDimensions(
    q=OBSTACLE_DOF, v=OBSTACLE_DOF, x=OBSTACLE_STATE_DIM, u=0
)


@dataclass(frozen=True)
class OptimizationDimensions:
    """Dimensions of the combined robot-plus-obstacles system.

    Attributes:
        robot: Dimensions of the robot block.
        o: Number of tracked obstacles. Obstacles appear in the joint vectors
           and in the state vector in ascending tracking order.
    """
    robot: RobotDimensions
    o: int = 0

    def __post_init__(self):
        if not isinstance(self.robot, RobotDimensions):
            raise ValueError(
                f"robot must be a RobotDimensions instance, got {type(self.robot).__name__}"
            )
        _check_count("o", self.o)

    @property
    def q(self) -> int:
        """Size of the combined joint position vector."""
        return self.robot.q + OBSTACLE_DIMENSIONS.q * self.o

    @property
    def v(self) -> int:
        """Size of the combined joint velocity vector."""
        return self.robot.v + OBSTACLE_DIMENSIONS.v * self.o

    @property
    def x(self) -> int:
        """Size of the combined optimizer state vector."""
        return self.robot.x + OBSTACLE_DIMENSIONS.x * self.o

    @property
    def u(self) -> int:
        """Size of the combined optimizer input vector (obstacles have no input)."""
        return self.robot.u + OBSTACLE_DIMENSIONS.u * self.o

    # Index helpers
    def robot_state_slice(self) -> slice:
        return slice(0, self.robot.x)

    def robot_input_slice(self) -> slice:
        return slice(0, self.robot.u)

    def _check_obstacle(self, i: int) -> None:
        if not 0 <= i < self.o:
            raise IndexError(f"Obstacle index {i} out of range for {self.o} obstacles")

    def obstacle_state_slice(self, i: int) -> slice:
        """Columns of obstacle ``i``'s 9-element block in the state vector."""
        self._check_obstacle(i)
        start = self.robot.x + OBSTACLE_DIMENSIONS.x * i
        return slice(start, start + OBSTACLE_DIMENSIONS.x)

    def obstacle_position_slice(self, i: int) -> slice:
        """Entries of obstacle ``i`` in the joint position vector."""
        self._check_obstacle(i)
        start = self.robot.q + OBSTACLE_DIMENSIONS.q * i
        return slice(start, start + OBSTACLE_DIMENSIONS.q)

    def obstacle_velocity_slice(self, i: int) -> slice:
        """Entries of obstacle ``i`` in the joint velocity (and acceleration) vector."""
        self._check_obstacle(i)
        start = self.robot.v + OBSTACLE_DIMENSIONS.v * i
        return slice(start, start + OBSTACLE_DIMENSIONS.v)
