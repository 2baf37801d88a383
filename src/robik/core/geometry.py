"""
Pose and angle utilities for robik using COMPAS.

Poses are COMPAS frames throughout: an origin point plus an orthonormal
X/Y axis pair, with Z implied by the right-hand rule. The helpers here move
between frames, rotation matrices and quaternions, and keep angles in the
half-open ranges the solvers rely on.
"""

import math

import numpy as np
from compas.geometry import Frame, Quaternion, Rotation, Transformation

_LOCAL_AXES = ("x", "y", "z")


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle in radians into the half-open range (-pi, pi].

    Args:
        angle: Angle in radians

    Returns:
        Equivalent angle in (-pi, pi]
    """
    return angle - 2.0 * math.pi * math.ceil((angle - math.pi) / (2.0 * math.pi))


def normalize_degrees(angle: float) -> float:
    """Wrap an angle in degrees into the half-open range (-180, 180]."""
    return angle - 360.0 * math.ceil((angle - 180.0) / 360.0)


class FrameUtilities:
    """
    Conversions between COMPAS frames and plain numeric representations.
    """

    @staticmethod
    def to_matrix(frame: Frame) -> np.ndarray:
        """
        Get the orientation of a frame as a rotation matrix.

        Args:
            frame: COMPAS Frame

        Returns:
            3x3 array whose columns are the frame's X, Y and Z axes
        """
        return np.column_stack(
            [list(frame.xaxis), list(frame.yaxis), list(frame.zaxis)]
        ).astype(float)

    @staticmethod
    def rotated_about_local_axis(frame: Frame, axis: str, angle: float) -> Frame:
        """
        Rotate a frame about one of its own axes, keeping its origin.

        Args:
            frame: Frame to rotate
            axis: Local axis name ('x', 'y' or 'z')
            angle: Rotation angle in radians (right-hand rule)

        Returns:
            Rotated frame (new instance)
        """
        if axis not in _LOCAL_AXES:
            raise ValueError(f"Unknown local axis '{axis}', expected one of x, y, z")

        rotation = Rotation.from_axis_and_angle(
            getattr(frame, f"{axis}axis"), angle, frame.point
        )
        return frame.transformed(rotation)

    @staticmethod
    def relative_quaternion(
        reference: Frame, frame: Frame
    ) -> tuple[float, float, float, float]:
        """
        Get the unit quaternion of the rotation taking one frame onto another.

        Args:
            reference: Frame the rotation starts from
            frame: Frame the rotation ends at

        Returns:
            Quaternion as (x, y, z, w)
        """
        rotation = FrameUtilities.to_matrix(frame) @ FrameUtilities.to_matrix(reference).T

        matrix = np.eye(4)
        matrix[:3, :3] = rotation
        quaternion = Quaternion.from_matrix(matrix.tolist())

        values = np.array([quaternion.x, quaternion.y, quaternion.z, quaternion.w])
        values /= np.linalg.norm(values)
        return tuple(float(v) for v in values)

    @staticmethod
    def change_basis(frame: Frame, source: Frame, target: Frame) -> Frame:
        """
        Re-express a frame defined relative to ``source`` relative to ``target``.

        Args:
            frame: Frame to transform
            source: Frame the input is expressed in
            target: Frame the output is expressed in

        Returns:
            Transformed frame (new instance)
        """
        transformation = Transformation.from_frame_to_frame(source, target)
        return frame.transformed(transformation)
