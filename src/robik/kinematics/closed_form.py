"""
Wrapper around a robot-specific closed-form IK routine.

The routine itself is a generated native library (one per robot model)
exporting::

    Vector6d *computeInverseKinematics(const Vector3d *pos,
                                       const Quaternion *ori,
                                       int *n_sol);

This module matches the routine's pose convention, converts its radian
output to degrees and optionally ranks the solutions with the
ConfigurationComparer. Any callable taking ``(position, quaternion)`` and
returning a sequence of six-value tuples can stand in for the library.
"""

import ctypes
import functools
import math
import platform
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from compas.geometry import Frame

from robik.core.exceptions import (
    KinematicsError,
    NativeLibraryError,
    PlatformUnsupportedError,
)
from robik.core.geometry import FrameUtilities
from robik.core.logging import get_logger
from robik.core.robot import NUM_AXES, RobotJointPosition
from robik.kinematics.comparer import ConfigurationComparer

logger = get_logger(__name__)

IkRoutine = Callable[[Sequence[float], Sequence[float]], Sequence[Sequence[float]]]


@functools.lru_cache(maxsize=None)
def is_64bit_process() -> bool:
    """True if the running interpreter is a 64-bit process."""
    return sys.maxsize > 2**32


def require_64bit_process() -> None:
    """
    Fail fast when the native routine cannot be hosted.

    Raises:
        PlatformUnsupportedError: If the interpreter is not a 64-bit process
    """
    if not is_64bit_process():
        architecture = platform.architecture()[0]
        raise PlatformUnsupportedError(
            "The closed-form IK routine is only built for 64-bit processes",
            platform=architecture,
            details={"architecture": architecture, "machine": platform.machine()},
        )


class _Vector3d(ctypes.Structure):
    _fields_ = [("x", ctypes.c_double), ("y", ctypes.c_double), ("z", ctypes.c_double)]


class _Quaternion(ctypes.Structure):
    _fields_ = [
        ("x", ctypes.c_double),
        ("y", ctypes.c_double),
        ("z", ctypes.c_double),
        ("w", ctypes.c_double),
    ]


class _Vector6d(ctypes.Structure):
    _fields_ = [(f"x{i + 1}", ctypes.c_double) for i in range(NUM_AXES)]


class NativeIkRoutine:
    """
    ctypes binding of a native ``computeInverseKinematics`` export.

    The returned buffer belongs to the library and is only valid until the
    next call, so every solution is copied out before returning.
    """

    EXPORT = "computeInverseKinematics"

    def __init__(self, library_path: str | Path) -> None:
        """
        Load the native library.

        Args:
            library_path: Path to the shared library (e.g. ``rcik.dll``)

        Raises:
            PlatformUnsupportedError: If the interpreter is not 64-bit
            NativeLibraryError: If the library or its export cannot be loaded
        """
        require_64bit_process()
        self.library_path = Path(library_path)

        try:
            library = ctypes.CDLL(str(self.library_path))
        except OSError as e:
            raise NativeLibraryError(
                f"Failed to load IK library from {self.library_path}: {e}",
                library=str(self.library_path),
            ) from e

        try:
            function = getattr(library, self.EXPORT)
        except AttributeError as e:
            raise NativeLibraryError(
                f"IK library {self.library_path} does not export {self.EXPORT}",
                library=str(self.library_path),
            ) from e

        function.argtypes = [
            ctypes.POINTER(_Vector3d),
            ctypes.POINTER(_Quaternion),
            ctypes.POINTER(ctypes.c_int),
        ]
        function.restype = ctypes.POINTER(_Vector6d)
        self._library = library
        self._function = function

    def __call__(
        self, position: Sequence[float], quaternion: Sequence[float]
    ) -> list[tuple[float, ...]]:
        """
        Solve for an end-effector position and (x, y, z, w) quaternion.

        Returns:
            Joint value tuples in radians, possibly including sentinel slots
        """
        pos = _Vector3d(*position)
        ori = _Quaternion(*quaternion)
        n_sol = ctypes.c_int(0)

        joints = self._function(ctypes.byref(pos), ctypes.byref(ori), ctypes.byref(n_sol))
        if n_sol.value <= 0 or not joints:
            return []

        return [
            tuple(getattr(joints[i], name) for name, _ in _Vector6d._fields_)
            for i in range(n_sol.value)
        ]

    def __repr__(self) -> str:
        return f"NativeIkRoutine(library_path='{self.library_path}')"


class ClosedFormSolver:
    """
    Inverse kinematics through an external closed-form routine.

    ``compute`` fills the solution list in the routine's emission order;
    ranking is opt-in through ``sort_joint_positions``. Slots the routine
    marks as empty (all six values 9e9) are dropped, so ``num_solutions``
    always equals ``len(robot_joint_positions)``.
    """

    def __init__(
        self,
        routine: IkRoutine,
        reference_frame: Optional[Frame] = None,
        correction_axis: str = "z",
        correction_angle: float = math.pi / 2,
    ) -> None:
        """
        Initialize the solver.

        Args:
            routine: Closed-form IK routine (e.g. a NativeIkRoutine)
            reference_frame: Frame the target orientation is expressed
                against (default: world YZ)
            correction_axis: Local axis of the fixed end-effector correction
            correction_angle: Angle of the fixed end-effector correction in radians
        """
        self._routine = routine
        self.reference_frame = reference_frame or Frame.worldYZ()
        self.correction_axis = correction_axis
        self.correction_angle = correction_angle
        self._comparer = ConfigurationComparer()

        self._num_solutions = 0
        self._robot_joint_positions: list[RobotJointPosition] = []
        self._robot_joint_position = RobotJointPosition()

    def compute(self, end_frame: Frame) -> list[RobotJointPosition]:
        """
        Compute all solutions for an end-effector frame.

        Axis limits are not taken into account.

        Args:
            end_frame: Target end-effector frame

        Returns:
            The solutions in degrees (also available as ``robot_joint_positions``)

        Raises:
            PlatformUnsupportedError: If the interpreter is not 64-bit
            KinematicsError: If the routine returns malformed solutions
        """
        require_64bit_process()

        self._num_solutions = 0
        self._robot_joint_positions = []
        self._robot_joint_position = RobotJointPosition()

        # The generated routine expects the end effector turned about its own axis
        corrected = FrameUtilities.rotated_about_local_axis(
            end_frame, self.correction_axis, -self.correction_angle
        )
        position = [float(v) for v in corrected.point]
        quaternion = FrameUtilities.relative_quaternion(self.reference_frame, corrected)

        skipped = 0
        for values in self._routine(position, quaternion):
            values = [float(v) for v in values]
            if len(values) != NUM_AXES:
                raise KinematicsError(
                    "IK routine returned a solution without six joint values",
                    details={"values": values},
                )
            position = RobotJointPosition(values)
            if position.is_sentinel:
                skipped += 1
                continue
            self._robot_joint_positions.append(
                RobotJointPosition([math.degrees(v) for v in position])
            )

        if skipped:
            logger.debug("closed_form_sentinel_skipped", count=skipped)

        self._num_solutions = len(self._robot_joint_positions)
        if self._robot_joint_positions:
            self._robot_joint_position = self._robot_joint_positions[-1].copy()

        logger.debug("closed_form_solutions_computed", num_solutions=self._num_solutions)
        return self._robot_joint_positions

    def sort_joint_positions(self) -> None:
        """
        Rank the current solutions with the ConfigurationComparer.

        The sort is stable; solutions with equal quadrants keep the routine's
        emission order. ``robot_joint_position`` is not affected.

        Raises:
            InvalidAngleDomainError: If a key axis lies outside (-180, 180]
        """
        self._comparer.sort(self._robot_joint_positions)

    @property
    def num_solutions(self) -> int:
        """Number of solutions found by the last ``compute``."""
        return self._num_solutions

    @property
    def robot_joint_positions(self) -> list[RobotJointPosition]:
        """All solutions of the last ``compute``, in degrees."""
        return self._robot_joint_positions

    @property
    def robot_joint_position(self) -> RobotJointPosition:
        """The last solution added by ``compute`` (all zero if there is none)."""
        return self._robot_joint_position

    def __repr__(self) -> str:
        return f"ClosedFormSolver(routine={self._routine!r})"
