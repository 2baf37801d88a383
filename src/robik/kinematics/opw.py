"""
Analytical kinematics for robots with an ortho-parallel basis and a spherical wrist.

Based on the paper 'An Analytical Solution of the Inverse Kinematics Problem
of Industrial Serial Manipulators with an Ortho-parallel Basis and a Spherical
Wrist' by Mathias Brandstötter, Arthur Angerer and Michael Hofbaur.

Solution order:

    Sol.    Wrist center            Wrist center            Axis 5 angle
            relative to axis 1      relative to lower arm

    0       In front of             In front of             Positive
    1       In front of             Behind                  Positive
    2       Behind                  In front of             Positive
    3       Behind                  Behind                  Positive
    4       In front of             In front of             Negative
    5       In front of             Behind                  Negative
    6       Behind                  In front of             Negative
    7       Behind                  Behind                  Negative
"""

import math
from typing import Optional, Sequence

import numpy as np
from compas.geometry import Frame, Point, Vector

from robik.core.exceptions import ConfigurationError, KinematicsError
from robik.core.geometry import FrameUtilities, normalize_angle
from robik.core.logging import get_logger
from robik.core.robot import NUM_AXES, AxisCorrections, RobotKinematicParameters

logger = get_logger(__name__)

NUM_SOLUTIONS = 8

#: Axis 5 angle (radians) below which the wrist axes count as aligned.
WRIST_SINGULARITY_TOLERANCE = 1e-3

#: Distance of the wrist center to axis 1 below which it counts as on the axis.
SHOULDER_SINGULARITY_TOLERANCE = 1e-3

#: Margin on an acos argument for it to count as being on the [-1, 1] boundary.
ELBOW_SINGULARITY_TOLERANCE = 1e-9

# Below this the wrist rotation no longer separates axis 4 from axis 6
_DEGENERATE_WRIST = 1e-9


def _clamped_acos(numerator: float, denominator: float) -> tuple[float, bool]:
    """
    acos of a ratio clamped to [-1, 1].

    Returns:
        Tuple of (angle, whether the ratio reached the domain boundary)
    """
    if denominator == 0.0:
        return 0.0, True
    ratio = numerator / denominator
    at_boundary = abs(ratio) >= 1.0 - ELBOW_SINGULARITY_TOLERANCE
    return math.acos(max(-1.0, min(1.0, ratio))), at_boundary


class OPWKinematics:
    """
    Closed-form forward and inverse kinematics of an OPW robot.

    The solver owns its link geometry and axis corrections. Every call to
    :meth:`inverse` overwrites the eight solutions and the singularity flags
    of the previous call, so an instance must not be shared between threads
    without external locking.

    Example:
        >>> opw = OPWKinematics(RobotKinematicParameters(a1=175, a2=-175, c1=495, c2=900, c3=960, c4=135))
        >>> frame, wrist = opw.forward([0.0] * 6)
        >>> solutions = opw.inverse(frame)
    """

    def __init__(
        self,
        parameters: Optional[RobotKinematicParameters] = None,
        corrections: Optional[AxisCorrections] = None,
    ) -> None:
        """
        Initialize OPW kinematics.

        Args:
            parameters: Link geometry (default: all zero)
            corrections: Axis sign/offset corrections (default: none)

        Raises:
            ConfigurationError: If the robot has a wrist offset (a3 != 0)
        """
        self._solutions = [[0.0] * NUM_AXES for _ in range(NUM_SOLUTIONS)]
        self._shoulder_singularities = [False] * NUM_SOLUTIONS
        self._elbow_singularities = [False] * NUM_SOLUTIONS
        self._wrist_singularities = [False] * NUM_SOLUTIONS

        self.parameters = parameters or RobotKinematicParameters()
        self.corrections = corrections or AxisCorrections.identity()

    @property
    def parameters(self) -> RobotKinematicParameters:
        """The link geometry."""
        return self._parameters

    @parameters.setter
    def parameters(self, parameters: RobotKinematicParameters) -> None:
        if not parameters.has_spherical_wrist:
            raise ConfigurationError(
                "OPW kinematics requires a spherical wrist (a3 == 0)",
                details={"a3": parameters.a3},
            )
        self._parameters = parameters
        self._psi3 = math.atan2(parameters.a2, parameters.c3)
        self._k2 = parameters.a2 * parameters.a2 + parameters.c3 * parameters.c3
        self._k = math.sqrt(self._k2)

    @property
    def signs(self) -> list[int]:
        """Axis sign corrections."""
        return self.corrections.signs

    @signs.setter
    def signs(self, signs: Sequence[int]) -> None:
        self.corrections = AxisCorrections(signs=list(signs), offsets=self.offsets)

    @property
    def offsets(self) -> list[float]:
        """Axis offset corrections in radians."""
        return self.corrections.offsets

    @offsets.setter
    def offsets(self, offsets: Sequence[float]) -> None:
        self.corrections = AxisCorrections(signs=self.signs, offsets=list(offsets))

    def forward(self, joint_angles: Sequence[float]) -> tuple[Frame, Point]:
        """
        Calculate the end frame of axis 6 for the given joint angles.

        Joint limits are not checked.

        Args:
            joint_angles: Six axis values in radians

        Returns:
            Tuple of (end frame of axis 6, wrist center position)

        Raises:
            KinematicsError: If fewer than six joint angles are given
        """
        if len(joint_angles) < NUM_AXES:
            raise KinematicsError(
                "Pose does not contain six rotation values.",
                details={"count": len(joint_angles)},
            )

        p = self._parameters
        signs, offsets = self.corrections.signs, self.corrections.offsets
        theta = [joint_angles[i] * signs[i] - offsets[i] for i in range(NUM_AXES)]

        sin = [math.sin(t) for t in theta]
        cos = [math.cos(t) for t in theta]

        # Wrist position in the plane of the arm
        phi = theta[1] + theta[2] + self._psi3
        cx1 = p.c2 * sin[1] + self._k * math.sin(phi) + p.a1
        cy1 = p.b
        cz1 = p.c2 * cos[1] + self._k * math.cos(phi)

        # Wrist position
        cx0 = cx1 * cos[0] - cy1 * sin[0]
        cy0 = cx1 * sin[0] + cy1 * cos[0]
        cz0 = cz1 + p.c1

        # Wrist orientation
        rce = np.array(
            [
                [cos[3] * cos[4] * cos[5] - sin[3] * sin[5], -cos[3] * cos[4] * sin[5] - sin[3] * cos[5], cos[3] * sin[4]],
                [sin[3] * cos[4] * cos[5] + cos[3] * sin[5], -sin[3] * cos[4] * sin[5] + cos[3] * cos[5], sin[3] * sin[4]],
                [-sin[4] * cos[5], sin[4] * sin[5], cos[4]],
            ]
        )

        # Arm orientation: Rz(theta1) * Ry(theta2 + theta3)
        sin23 = math.sin(theta[1] + theta[2])
        cos23 = math.cos(theta[1] + theta[2])
        roc = np.array(
            [
                [cos[0] * cos23, -sin[0], cos[0] * sin23],
                [sin[0] * cos23, cos[0], sin[0] * sin23],
                [-sin23, 0.0, cos23],
            ]
        )

        roe = roc @ rce
        wrist = np.array([cx0, cy0, cz0])
        origin = wrist + p.c4 * roe[:, 2]

        end_frame = Frame(
            Point(*origin.tolist()),
            Vector(*roe[:, 0].tolist()),
            Vector(*roe[:, 1].tolist()),
        )
        return end_frame, Point(cx0, cy0, cz0)

    def inverse(self, end_frame: Frame) -> list[list[float]]:
        """
        Calculate the eight inverse kinematics solutions.

        Unreachable or boundary poses do not raise: out-of-domain terms are
        clamped and the corresponding singularity flags are set.

        Args:
            end_frame: Target end frame of axis 6

        Returns:
            The eight solutions in radians (also available as ``solutions``)
        """
        p = self._parameters
        e = FrameUtilities.to_matrix(end_frame).tolist()
        ux0, uy0, uz0 = (float(v) for v in end_frame.point)

        # Wrist position
        cx0 = ux0 - e[0][2] * p.c4
        cy0 = uy0 - e[1][2] * p.c4
        cz0 = uz0 - e[2][2] * p.c4

        # Positioning parameters for axis 1, 2 and 3
        radicand = cx0 * cx0 + cy0 * cy0 - p.b * p.b
        unreachable = radicand < 0.0
        nx1 = math.sqrt(max(radicand, 0.0)) - p.a1
        dz = cz0 - p.c1
        s1_2 = nx1 * nx1 + dz * dz
        s2_2 = (nx1 + 2.0 * p.a1) ** 2 + dz * dz
        s1 = math.sqrt(s1_2)
        s2 = math.sqrt(s2_2)
        c2_2 = p.c2 * p.c2

        psi1 = math.atan2(nx1, dz)
        psi2_i, edge_psi2_i = _clamped_acos(s1_2 + c2_2 - self._k2, 2.0 * s1 * p.c2)
        psi2_ii, edge_psi2_ii = _clamped_acos(s2_2 + c2_2 - self._k2, 2.0 * s2 * p.c2)
        acos1, edge_acos1 = _clamped_acos(s1_2 - c2_2 - self._k2, 2.0 * self._k * p.c2)
        acos2, edge_acos2 = _clamped_acos(s2_2 - c2_2 - self._k2, 2.0 * self._k * p.c2)
        atan1 = math.atan2(cy0, cx0)
        atan2 = math.atan2(p.b, nx1 + p.a1)
        atan3 = math.atan2(nx1 + 2.0 * p.a1, dz)

        # Axis 1
        theta1_i = atan1 - atan2
        theta1_ii = atan1 + atan2 - math.pi

        # Axis 2
        theta2_i = -psi2_i + psi1
        theta2_ii = psi2_i + psi1
        theta2_iii = -psi2_ii - atan3
        theta2_iv = psi2_ii - atan3

        # Axis 3
        theta3_i = acos1 - self._psi3
        theta3_ii = -acos1 - self._psi3
        theta3_iii = acos2 - self._psi3
        theta3_iv = -acos2 - self._psi3

        arm = [
            (theta1_i, theta2_i, theta3_i),
            (theta1_i, theta2_ii, theta3_ii),
            (theta1_ii, theta2_iii, theta3_iii),
            (theta1_ii, theta2_iv, theta3_iv),
        ]

        # Axis 4, 5 and 6
        for i in range(NUM_SOLUTIONS):
            theta1, theta2, theta3 = arm[i % 4]
            self._solutions[i][0:3] = [theta1, theta2, theta3]

            sin1, cos1 = math.sin(theta1), math.cos(theta1)
            sin23, cos23 = math.sin(theta2 + theta3), math.cos(theta2 + theta3)
            m = e[0][2] * sin23 * cos1 + e[1][2] * sin23 * sin1 + e[2][2] * cos23

            y4 = e[1][2] * cos1 - e[0][2] * sin1
            x4 = e[0][2] * cos23 * cos1 + e[1][2] * cos23 * sin1 - e[2][2] * sin23
            y6 = e[0][1] * sin23 * cos1 + e[1][1] * sin23 * sin1 + e[2][1] * cos23
            x6 = -e[0][0] * sin23 * cos1 - e[1][0] * sin23 * sin1 - e[2][0] * cos23

            theta5_p = math.atan2(math.sqrt(max(0.0, 1.0 - m * m)), m)

            if math.hypot(y4, x4) < _DEGENERATE_WRIST or math.hypot(y6, x6) < _DEGENERATE_WRIST:
                # Axis 4 and 6 coincide; only their combination is determined
                r00 = e[0][0] * cos23 * cos1 + e[1][0] * cos23 * sin1 - e[2][0] * sin23
                r10 = -e[0][0] * sin1 + e[1][0] * cos1
                theta4_p = 0.0
                theta6_p = math.atan2(r10, math.copysign(1.0, m) * r00)
            else:
                theta4_p = math.atan2(y4, x4)
                theta6_p = math.atan2(y6, x6)

            if i < 4:
                self._solutions[i][3:6] = [theta4_p, theta5_p, theta6_p]
            else:
                self._solutions[i][3:6] = [theta4_p + math.pi, -theta5_p, theta6_p - math.pi]

            self._wrist_singularities[i] = abs(self._solutions[i][4]) < WRIST_SINGULARITY_TOLERANCE

        # Elbow singularities
        singularity1 = edge_psi2_i or edge_acos1
        singularity2 = edge_psi2_ii or edge_acos2
        for i in range(NUM_SOLUTIONS):
            self._elbow_singularities[i] = bool(singularity1 if i % 4 < 2 else singularity2)

        # Shoulder singularity
        on_axis1 = (
            abs(cx0) < SHOULDER_SINGULARITY_TOLERANCE
            and abs(cy0) < SHOULDER_SINGULARITY_TOLERANCE
        )
        self._shoulder_singularities = [bool(on_axis1 or unreachable)] * NUM_SOLUTIONS

        # Corrections
        signs, offsets = self.corrections.signs, self.corrections.offsets
        for solution in self._solutions:
            for j in range(NUM_AXES):
                solution[j] = signs[j] * (normalize_angle(solution[j]) + offsets[j])

        logger.debug(
            "opw_inverse_solved",
            unreachable=unreachable,
            shoulder_singular=self._shoulder_singularities[0],
            elbow_singular=sum(self._elbow_singularities),
            wrist_singular=sum(self._wrist_singularities),
        )
        return self.solutions

    @property
    def solutions(self) -> list[list[float]]:
        """The eight inverse kinematics solutions of the last call, in radians."""
        return [list(solution) for solution in self._solutions]

    @property
    def is_shoulder_singularity(self) -> list[bool]:
        """Per solution: the wrist center lies on axis 1 (or out of reach of it)."""
        return list(self._shoulder_singularities)

    @property
    def is_elbow_singularity(self) -> list[bool]:
        """Per solution: the elbow is fully stretched or folded."""
        return list(self._elbow_singularities)

    @property
    def is_wrist_singularity(self) -> list[bool]:
        """Per solution: axis 4 and axis 6 are aligned."""
        return list(self._wrist_singularities)

    def __repr__(self) -> str:
        return f"OPWKinematics(parameters={self._parameters})"
