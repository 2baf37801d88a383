"""
Robot kinematic description for robik.

Holds the value types shared by the solvers: the OPW link geometry, the
per-axis sign/offset corrections, joint positions, ABB configuration data
and the robot description that ties them together.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from compas.geometry import Frame, Point, Vector

from robik.core.exceptions import ConfigurationError, KinematicsError
from robik.core.geometry import FrameUtilities

#: Reserved value marking an empty ("no solution") joint position slot.
SENTINEL = 9e9

NUM_AXES = 6

#: Offsets (radians) reconciling ABB's zero position with the OPW frame.
ABB_OFFSETS = (0.0, 0.0, -math.pi / 2, 0.0, 0.0, 0.0)
ABB_SIGNS = (1, 1, 1, 1, 1, 1)


@dataclass(frozen=True)
class RobotKinematicParameters:
    """
    OPW link geometry of a six-axis robot.

    Attributes:
        a1: Shoulder offset (axis 1 to axis 2, horizontal)
        a2: Elbow offset (axis 3 to axis 4, vertical)
        b: Lateral offset
        c1: Base height (axis 2 above the base)
        c2: Lower arm length
        c3: Upper arm length
        c4: Wrist to flange length
        a3: Wrist offset; zero for a spherical wrist
    """

    a1: float = 0.0
    a2: float = 0.0
    b: float = 0.0
    c1: float = 0.0
    c2: float = 0.0
    c3: float = 0.0
    c4: float = 0.0
    a3: float = 0.0

    def __post_init__(self) -> None:
        for name in ("a1", "a2", "a3", "b", "c1", "c2", "c3", "c4"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(
                    f"Kinematic parameter '{name}' must be a finite number",
                    details={name: getattr(self, name)},
                )

    @property
    def has_spherical_wrist(self) -> bool:
        """True when the wrist axes intersect (no wrist offset)."""
        return self.a3 == 0.0

    @classmethod
    def from_axis_frames(
        cls, base_frame: Frame, axis_frames: Sequence[Frame]
    ) -> "RobotKinematicParameters":
        """
        Derive the link geometry from the six axis frames of a robot.

        Args:
            base_frame: Robot base frame the axis frames are placed relative to
            axis_frames: Six frames located on the rotation axes

        Returns:
            RobotKinematicParameters instance

        Raises:
            ConfigurationError: If not exactly six axis frames are given
        """
        if len(axis_frames) != NUM_AXES:
            raise ConfigurationError(
                f"Expected {NUM_AXES} axis frames, got {len(axis_frames)}"
            )

        local = [
            FrameUtilities.change_basis(frame, base_frame, Frame.worldXY())
            for frame in axis_frames
        ]
        origins = [frame.point for frame in local]

        return cls(
            a1=origins[1].x,
            a2=-(origins[4].z - origins[2].z),
            a3=-(origins[5].z - origins[4].z),
            b=origins[0].y - origins[5].y,
            c1=origins[1].z,
            c2=origins[2].z - origins[1].z,
            c3=origins[4].x - origins[2].x,
            c4=origins[5].x - origins[4].x,
        )

    def get_axis_frames(self, base_frame: Frame) -> tuple[list[Frame], Frame]:
        """
        Place the six axis frames and the mounting frame in the zero pose.

        The Z axis of every axis frame is the rotation axis.

        Args:
            base_frame: Robot base frame

        Returns:
            Tuple of (six axis frames, mounting frame)
        """
        x = Vector(1, 0, 0)
        y = Vector(0, 1, 0)
        z = Vector(0, 0, 1)

        # Frames with Z along world Y and world X respectively
        about_y = (x, Vector(0, 0, -1))
        about_x = (y, z)

        reach = self.c1 + self.c2 - self.a2
        frames = [
            Frame(Point(0, 0, 0), x, y),
            Frame(Point(self.a1, 0, self.c1), *about_y),
            Frame(Point(self.a1, 0, self.c1 + self.c2), *about_y),
            Frame(Point(self.a1, -self.b, reach), *about_x),
            Frame(Point(self.a1 + self.c3, -self.b, reach), *about_y),
            Frame(
                Point(self.a1 + self.c3 + self.c4, -self.b, reach - self.a3),
                *about_x,
            ),
        ]
        mounting_frame = Frame(frames[5].point, Vector(0, 0, -1), y)

        world = Frame.worldXY()
        frames = [FrameUtilities.change_basis(f, world, base_frame) for f in frames]
        mounting_frame = FrameUtilities.change_basis(mounting_frame, world, base_frame)
        return frames, mounting_frame


@dataclass
class AxisCorrections:
    """
    Per-axis sign and offset corrections.

    Reconciles a physical robot's zero position and rotation directions
    with the canonical OPW derivation frame.

    Attributes:
        signs: Six rotation direction signs, each -1 or 1
        offsets: Six zero offsets in radians
    """

    signs: list[int] = field(default_factory=lambda: list(ABB_SIGNS))
    offsets: list[float] = field(default_factory=lambda: list(ABB_OFFSETS))

    def __post_init__(self) -> None:
        if len(self.signs) != NUM_AXES or len(self.offsets) != NUM_AXES:
            raise ConfigurationError(
                "Axis corrections need six signs and six offsets",
                details={"signs": len(self.signs), "offsets": len(self.offsets)},
            )
        # Zero counts as a positive direction
        self.signs = [int(math.copysign(1, s)) for s in self.signs]
        self.offsets = [float(o) for o in self.offsets]

    @classmethod
    def identity(cls) -> "AxisCorrections":
        """Corrections that leave every axis untouched."""
        return cls(signs=[1] * NUM_AXES, offsets=[0.0] * NUM_AXES)


class RobotJointPosition:
    """
    Six robot axis values, index-addressable 0..5.

    Units are whatever the producer uses (degrees for everything exposed
    by the robot-level solvers). Unset axes default to 0.
    """

    def __init__(self, *values: float) -> None:
        if len(values) == 1 and isinstance(values[0], Iterable):
            values = tuple(values[0])
        if len(values) > NUM_AXES:
            raise KinematicsError(
                f"A robot joint position holds {NUM_AXES} values, got {len(values)}"
            )
        self._values = [0.0] * NUM_AXES
        for i, value in enumerate(values):
            self[i] = value

    @classmethod
    def sentinel(cls) -> "RobotJointPosition":
        """A joint position marking a missing solution."""
        return cls([SENTINEL] * NUM_AXES)

    @property
    def is_sentinel(self) -> bool:
        """True if every axis carries the reserved 'no solution' value."""
        return all(value == SENTINEL for value in self._values)

    def distance_to(self, other: "RobotJointPosition") -> float:
        """Euclidean distance between two joint positions."""
        return math.sqrt(sum((a - b) ** 2 for a, b in zip(self, other)))

    def reset(self) -> None:
        """Set every axis back to 0."""
        self._values = [0.0] * NUM_AXES

    def copy(self) -> "RobotJointPosition":
        return RobotJointPosition(self._values)

    def to_list(self) -> list[float]:
        return list(self._values)

    def __getitem__(self, index: int) -> float:
        return self._values[index]

    def __setitem__(self, index: int, value: float) -> None:
        value = float(value)
        # NaN falls back to the default axis value
        self._values[index] = 0.0 if math.isnan(value) else value

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __len__(self) -> int:
        return NUM_AXES

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RobotJointPosition):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        values = ", ".join(f"{v:.4g}" for v in self._values)
        return f"RobotJointPosition({values})"


@dataclass(frozen=True)
class ConfigurationData:
    """
    ABB robot configuration data (confdata).

    Attributes:
        cf1: Quadrant of axis 1
        cf4: Quadrant of axis 4
        cf6: Quadrant of axis 6
        cfx: Index of the kinematic solution (0..7)
        name: Optional variable name
    """

    cf1: int = 0
    cf4: int = 0
    cf6: int = 0
    cfx: int = 0
    name: str = ""

    @classmethod
    def from_joint_position(
        cls, position: RobotJointPosition, cfx: int, name: str = ""
    ) -> "ConfigurationData":
        """
        Compute the quadrants of axes 1, 4 and 6 of a position in degrees.

        Args:
            position: Joint position in degrees
            cfx: Selected solution index
            name: Optional variable name

        Returns:
            ConfigurationData instance
        """
        return cls(
            cf1=math.floor(position[0] / 90),
            cf4=math.floor(position[3] / 90),
            cf6=math.floor(position[5] / 90),
            cfx=cfx,
            name=name,
        )


@dataclass
class RobotDescription:
    """
    Everything the solvers need to know about one robot.

    Attributes:
        name: Robot name
        parameters: OPW link geometry
        corrections: Axis sign/offset corrections
        axis_limits: Six (min, max) intervals in degrees
    """

    name: str
    parameters: RobotKinematicParameters
    corrections: AxisCorrections = field(default_factory=AxisCorrections)
    axis_limits: list[tuple[float, float]] = field(
        default_factory=lambda: [(-180.0, 180.0)] * NUM_AXES
    )

    def __post_init__(self) -> None:
        if len(self.axis_limits) != NUM_AXES:
            raise ConfigurationError(
                f"Robot '{self.name}' needs {NUM_AXES} axis limits",
                details={"axis_limits": len(self.axis_limits)},
            )
        for i, (lower, upper) in enumerate(self.axis_limits):
            if lower > upper:
                raise ConfigurationError(
                    f"Axis {i + 1} of robot '{self.name}' has an empty limit interval",
                    details={"lower": lower, "upper": upper},
                )

    def limit_violations(self, position: RobotJointPosition) -> list[int]:
        """
        Get the indices of the axes outside their limits.

        Args:
            position: Joint position in degrees

        Returns:
            Zero-based axis indices, empty if all axes are within limits
        """
        return [
            i
            for i, (value, (lower, upper)) in enumerate(zip(position, self.axis_limits))
            if not (lower <= value <= upper)
        ]

    def __repr__(self) -> str:
        return f"RobotDescription(name='{self.name}', parameters={self.parameters})"
