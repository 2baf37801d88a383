"""
Robot-level inverse kinematics on top of the OPW solver.

Turns the eight raw OPW solutions of a configured robot into ABB joint
positions (degrees, ``cfx`` order), selects one of them from configuration
data or from proximity to a previous position, and reports axis limit and
singularity problems.
"""

import math
from typing import Optional

from compas.geometry import Frame

from robik.core.exceptions import KinematicsError
from robik.core.logging import get_logger
from robik.core.robot import ConfigurationData, RobotDescription, RobotJointPosition
from robik.kinematics.opw import NUM_SOLUTIONS, OPWKinematics

logger = get_logger(__name__)

#: OPW solution index for each ABB cfx value.
CFX_ORDER = (0, 4, 1, 5, 2, 6, 3, 7)


def _full_rotations(previous: float, current: float) -> int:
    """Whole turns to add to ``current`` to land closest to ``previous``."""
    return round((previous - current) / 360)


class InverseKinematics:
    """
    Inverse kinematics of one robot.

    Example:
        >>> ik = InverseKinematics(config.get_robot("abb_irb4600_40_255").to_description())
        >>> position = ik.calculate(target_frame, ConfigurationData(cfx=2))
        >>> ik.is_in_limits
        True
    """

    def __init__(self, robot: RobotDescription) -> None:
        """
        Initialize inverse kinematics.

        Args:
            robot: Robot description with link geometry, corrections and limits

        Raises:
            ConfigurationError: If the robot has no spherical wrist
        """
        self.robot = robot
        self._opw = OPWKinematics(robot.parameters, robot.corrections)

        self._robot_joint_positions = [RobotJointPosition() for _ in range(NUM_SOLUTIONS)]
        self._robot_joint_position = RobotJointPosition()
        self._configuration_data = ConfigurationData()
        self._selected_solution = -1

        self._shoulder_singularities = [False] * NUM_SOLUTIONS
        self._elbow_singularities = [False] * NUM_SOLUTIONS
        self._wrist_singularities = [False] * NUM_SOLUTIONS
        self._shoulder_singularity = False
        self._elbow_singularity = False
        self._wrist_singularity = False

        self._error_text: list[str] = []
        self._is_in_limits = True

    def calculate(
        self,
        end_frame: Frame,
        configuration: Optional[ConfigurationData] = None,
    ) -> RobotJointPosition:
        """
        Calculate all solutions and select one by configuration data.

        Axis 1, 4 and 6 of the selected solution are turned by whole
        revolutions to match the requested quadrants where possible.

        Args:
            end_frame: Target end frame of axis 6 in the robot base frame
            configuration: Requested configuration (default: cfx 0, quadrants 0)

        Returns:
            The selected joint position in degrees

        Raises:
            KinematicsError: If cfx is not a valid solution index
        """
        configuration = configuration or ConfigurationData()
        if not 0 <= configuration.cfx < NUM_SOLUTIONS:
            raise KinematicsError(
                f"Configuration cfx must be between 0 and {NUM_SOLUTIONS - 1}",
                details={"cfx": configuration.cfx},
            )

        self._clear_current_solutions()
        solutions = self._opw.inverse(end_frame)

        for i, index in enumerate(CFX_ORDER):
            self._robot_joint_positions[i] = RobotJointPosition(
                [math.degrees(value) for value in solutions[index]]
            )
        self._shoulder_singularities = [self._opw.is_shoulder_singularity[i] for i in CFX_ORDER]
        self._elbow_singularities = [self._opw.is_elbow_singularity[i] for i in CFX_ORDER]
        self._wrist_singularities = [self._opw.is_wrist_singularity[i] for i in CFX_ORDER]

        self._select(configuration.cfx, self._robot_joint_positions[configuration.cfx].copy())

        self._adjust_joint(0, configuration.cf1)
        self._adjust_joint(3, configuration.cf4)
        self._adjust_joint(5, configuration.cf6)

        self._configuration_data = ConfigurationData.from_joint_position(
            self._robot_joint_position, self._selected_solution, configuration.name
        )
        self._check_axis_limits()

        logger.debug(
            "inverse_kinematics_calculated",
            robot=self.robot.name,
            cfx=self._selected_solution,
            in_limits=self._is_in_limits,
        )
        return self._robot_joint_position

    def calculate_closest(
        self,
        previous: RobotJointPosition,
        include_joint1: bool = True,
        include_joint4: bool = True,
        include_joint6: bool = True,
    ) -> RobotJointPosition:
        """
        Select the solution closest to a previous joint position.

        Must be called after :meth:`calculate`. Candidates on axis 1, 4 and 6
        may be turned by whole revolutions towards the previous position.

        Args:
            previous: Previous joint position in degrees
            include_joint1: Allow whole turns on axis 1
            include_joint4: Allow whole turns on axis 4
            include_joint6: Allow whole turns on axis 6

        Returns:
            The selected joint position in degrees
        """
        turnable = {0: include_joint1, 3: include_joint4, 5: include_joint6}
        minimum = previous.distance_to(self._robot_joint_position)

        for i, solution in enumerate(self._robot_joint_positions):
            candidate = solution.copy()
            for axis, allowed in turnable.items():
                if allowed:
                    candidate[axis] += _full_rotations(previous[axis], candidate[axis]) * 360

            distance = previous.distance_to(candidate)
            if distance < minimum:
                self._select(i, candidate)
                minimum = distance

        self._error_text.clear()
        self._is_in_limits = True
        self._configuration_data = ConfigurationData.from_joint_position(
            self._robot_joint_position, self._selected_solution, self._configuration_data.name
        )
        self._check_axis_limits()
        return self._robot_joint_position

    def _select(self, index: int, position: RobotJointPosition) -> None:
        self._robot_joint_position = position
        self._selected_solution = index
        self._shoulder_singularity = self._shoulder_singularities[index]
        self._elbow_singularity = self._elbow_singularities[index]
        self._wrist_singularity = self._wrist_singularities[index]

    def _adjust_joint(self, axis: int, target_cf: int) -> None:
        """
        Turn one axis by whole revolutions into the target quadrant.

        Only applies when the current and target quadrant differ by a
        multiple of four; values on a quadrant boundary may also count as
        the end of the previous quadrant.
        """
        value = self._robot_joint_position[axis]
        cf = math.floor(value / 90)
        diff = target_cf - cf

        if target_cf != cf and diff % 4 == 0:
            self._robot_joint_position[axis] = value + diff / 4 * 360
        elif (value / 90) % 1 == 0:
            if target_cf != cf + 1 and (diff + 1) % 4 == 0:
                self._robot_joint_position[axis] = value + (diff + 1) / 4 * 360

    def _check_axis_limits(self) -> None:
        for axis in self.robot.limit_violations(self._robot_joint_position):
            self._error_text.append(f"The position of robot joint {axis + 1} is not in range.")
            self._is_in_limits = False

        if self._wrist_singularity:
            self._error_text.append("The robot is near a wrist singularity.")

        if self._elbow_singularity:
            self._error_text.append("The target is out of reach (elbow singularity).")
            self._is_in_limits = False

        if self._shoulder_singularity:
            self._error_text.append("The robot is near a shoulder singularity.")

    def _clear_current_solutions(self) -> None:
        for position in self._robot_joint_positions:
            position.reset()
        self._error_text.clear()
        self._is_in_limits = True
        self._shoulder_singularity = False
        self._elbow_singularity = False
        self._wrist_singularity = False

    @property
    def robot_joint_positions(self) -> list[RobotJointPosition]:
        """All eight solutions in degrees, in cfx order."""
        return self._robot_joint_positions

    @property
    def robot_joint_position(self) -> RobotJointPosition:
        """The selected solution in degrees."""
        return self._robot_joint_position

    @property
    def configuration_data(self) -> ConfigurationData:
        """Configuration data of the selected solution."""
        return self._configuration_data

    @property
    def selected_solution(self) -> int:
        """cfx index of the selected solution, -1 before the first calculation."""
        return self._selected_solution

    @property
    def shoulder_singularities(self) -> list[bool]:
        return list(self._shoulder_singularities)

    @property
    def elbow_singularities(self) -> list[bool]:
        return list(self._elbow_singularities)

    @property
    def wrist_singularities(self) -> list[bool]:
        return list(self._wrist_singularities)

    @property
    def shoulder_singularity(self) -> bool:
        return self._shoulder_singularity

    @property
    def elbow_singularity(self) -> bool:
        return self._elbow_singularity

    @property
    def wrist_singularity(self) -> bool:
        return self._wrist_singularity

    @property
    def is_in_limits(self) -> bool:
        """False if the selected solution violates an axis limit or is out of reach."""
        return self._is_in_limits

    @property
    def error_text(self) -> list[str]:
        """Messages describing limit violations and singularities."""
        return list(self._error_text)

    def __repr__(self) -> str:
        return f"InverseKinematics(robot='{self.robot.name}')"
