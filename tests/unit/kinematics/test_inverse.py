"""
Unit tests for robot-level inverse kinematics.
"""

import math

import pytest
from compas.geometry import Frame, Point, Vector

from robik.core.exceptions import ConfigurationError, KinematicsError
from robik.core.robot import (
    ConfigurationData,
    RobotDescription,
    RobotJointPosition,
    RobotKinematicParameters,
)
from robik.kinematics.inverse import CFX_ORDER, InverseKinematics

JOINTS = [5, 20, -30, 40, 50, 60]


@pytest.fixture
def ik(irb4600_robot):
    return InverseKinematics(irb4600_robot)


@pytest.fixture
def target(opw):
    frame, _ = opw.forward([math.radians(v) for v in JOINTS])
    return frame


def _find_cfx(ik, joints):
    for cfx, position in enumerate(ik.robot_joint_positions):
        if position.to_list() == pytest.approx(joints, abs=1e-6):
            return cfx
    raise AssertionError(f"No solution matches {joints}")


class TestCalculate:
    """Tests for InverseKinematics.calculate."""

    def test_rejects_wrist_offset(self):
        """Test a robot with an offset wrist cannot use the OPW solver."""
        robot = RobotDescription(
            name="offset wrist",
            parameters=RobotKinematicParameters(
                a1=175.0, a2=-175.0, c1=495.0, c2=900.0, c3=960.0, c4=135.0, a3=50.0
            ),
        )
        with pytest.raises(ConfigurationError, match="spherical wrist"):
            InverseKinematics(robot)

    def test_initial_state(self, ik):
        """Test nothing is selected before the first calculation."""
        assert ik.selected_solution == -1
        assert ik.is_in_limits
        assert ik.error_text == []

    def test_solutions_in_cfx_order(self, ik, opw, target):
        """Test the eight OPW solutions are reordered by cfx."""
        ik.calculate(target)
        raw = opw.inverse(target)

        assert len(ik.robot_joint_positions) == 8
        for cfx, index in enumerate(CFX_ORDER):
            expected = [math.degrees(v) for v in raw[index]]
            assert ik.robot_joint_positions[cfx].to_list() == pytest.approx(expected)

    def test_select_by_configuration(self, ik, target):
        """Test the requested cfx reproduces the known joints."""
        ik.calculate(target)
        cfx = _find_cfx(ik, JOINTS)

        configuration = ConfigurationData.from_joint_position(RobotJointPosition(JOINTS), cfx)
        position = ik.calculate(target, configuration)

        assert position.to_list() == pytest.approx(JOINTS, abs=1e-6)
        assert ik.selected_solution == cfx
        assert ik.configuration_data == ConfigurationData(cf1=0, cf4=0, cf6=0, cfx=cfx)
        assert ik.is_in_limits
        assert ik.error_text == []

    def test_whole_turn_on_axis4(self, ik, target):
        """Test axis 4 is turned into the requested quadrant."""
        ik.calculate(target)
        cfx = _find_cfx(ik, JOINTS)

        position = ik.calculate(target, ConfigurationData(cf4=-4, cfx=cfx))

        assert position[3] == pytest.approx(40 - 360, abs=1e-6)
        assert ik.configuration_data.cf4 == -4

    def test_unreachable_quadrant_is_ignored(self, ik, target):
        """Test a quadrant not a whole number of turns away leaves the axis."""
        ik.calculate(target)
        cfx = _find_cfx(ik, JOINTS)

        position = ik.calculate(target, ConfigurationData(cf6=1, cfx=cfx))

        assert position[5] == pytest.approx(60, abs=1e-6)

    def test_configuration_name_is_kept(self, ik, target):
        """Test the confdata name survives the calculation."""
        ik.calculate(target, ConfigurationData(cfx=3, name="conf_1"))
        assert ik.configuration_data.name == "conf_1"
        assert ik.configuration_data.cfx == 3

    @pytest.mark.parametrize("cfx", [-1, 8])
    def test_invalid_cfx(self, ik, target, cfx):
        """Test cfx must address one of the eight solutions."""
        with pytest.raises(KinematicsError):
            ik.calculate(target, ConfigurationData(cfx=cfx))

    def test_axis_limit_violations(self, irb4600_parameters, target):
        """Test every axis outside its limits is reported."""
        robot = RobotDescription(
            name="narrow",
            parameters=irb4600_parameters,
            axis_limits=[(-10.0, 10.0)] * 6,
        )
        ik = InverseKinematics(robot)
        ik.calculate(target)
        cfx = _find_cfx(ik, JOINTS)

        ik.calculate(target, ConfigurationData(cfx=cfx))

        assert not ik.is_in_limits
        assert ik.error_text == [
            f"The position of robot joint {axis} is not in range." for axis in range(2, 7)
        ]

    def test_out_of_reach(self, ik):
        """Test an unreachable target is flagged without raising."""
        frame = Frame(Point(5000, 0, 1000), Vector(0, 0, -1), Vector(0, 1, 0))

        ik.calculate(frame)

        assert ik.elbow_singularity
        assert all(ik.elbow_singularities)
        assert not ik.is_in_limits
        assert "The target is out of reach (elbow singularity)." in ik.error_text

    def test_wrist_singularity_message(self, ik, opw):
        """Test a selected wrist singular solution is reported but allowed."""
        joints = [5, 20, -30, 40, 0, 60]
        frame, _ = opw.forward([math.radians(v) for v in joints])

        ik.calculate(frame)
        cfx = next(i for i, flagged in enumerate(ik.wrist_singularities) if flagged)
        ik.calculate(frame, ConfigurationData(cfx=cfx))

        assert ik.wrist_singularity
        assert "The robot is near a wrist singularity." in ik.error_text

    def test_messages_reset_between_calls(self, ik, target):
        """Test error text only describes the last calculation."""
        ik.calculate(Frame(Point(5000, 0, 1000), Vector(0, 0, -1), Vector(0, 1, 0)))
        ik.calculate(target, ConfigurationData(cfx=0))

        assert "The target is out of reach (elbow singularity)." not in ik.error_text


class TestCalculateClosest:
    """Tests for InverseKinematics.calculate_closest."""

    def test_selects_closest_solution(self, ik, target):
        """Test the solution nearest to the previous position is selected."""
        ik.calculate(target)
        cfx = _find_cfx(ik, JOINTS)
        ik.calculate(target, ConfigurationData(cfx=(cfx + 1) % 8))

        position = ik.calculate_closest(RobotJointPosition(JOINTS))

        assert ik.selected_solution == cfx
        assert position.to_list() == pytest.approx(JOINTS, abs=1e-6)
        assert ik.configuration_data.cfx == cfx

    def test_turns_axis6_towards_previous(self, ik, target):
        """Test axis 6 follows a previous position one turn away."""
        ik.calculate(target)
        previous = RobotJointPosition(5, 20, -30, 40, 50, 420)

        position = ik.calculate_closest(previous)

        assert position[5] == pytest.approx(420, abs=1e-6)
        assert ik.configuration_data.cf6 == 4

    def test_excluded_axis_is_not_turned(self, ik, target):
        """Test whole turns can be disabled per axis."""
        ik.calculate(target)
        previous = RobotJointPosition(5, 20, -30, 40, 50, 420)

        position = ik.calculate_closest(previous, include_joint6=False)

        assert -180.0 < position[5] <= 180.0
