"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from robik.core.robot import (
    AxisCorrections,
    RobotDescription,
    RobotKinematicParameters,
)
from robik.kinematics.opw import OPWKinematics

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_dir(temp_dir):
    """Create a sample configuration directory structure."""
    config_dir = temp_dir / "config"
    (config_dir / "robots").mkdir(parents=True)

    robot_config = """
robot:
  name: "Test Robot"
  manufacturer: "Test Manufacturer"

kinematics:
  a1: 175.0
  a2: -175.0
  b: 0.0
  c1: 495.0
  c2: 900.0
  c3: 960.0
  c4: 135.0

corrections:
  signs: [1, 1, 1, 1, 1, 1]
  offsets: [0.0, 0.0, -90.0, 0.0, 0.0, 0.0]

limits:
  joints:
    joint_1:
      lower: -180
      upper: 180
    joint_5:
      lower: -125
      upper: 120
"""
    (config_dir / "robots" / "test_robot.yaml").write_text(robot_config)

    return config_dir


@pytest.fixture
def irb4600_parameters():
    """OPW link geometry of an ABB IRB 4600-40/2.55 in millimetres."""
    return RobotKinematicParameters(
        a1=175.0, a2=-175.0, b=0.0, c1=495.0, c2=900.0, c3=960.0, c4=135.0
    )


@pytest.fixture
def irb4600_robot(irb4600_parameters):
    """Robot description with ABB corrections and IRB 4600 axis limits."""
    return RobotDescription(
        name="IRB4600-40/2.55",
        parameters=irb4600_parameters,
        corrections=AxisCorrections(),
        axis_limits=[
            (-180.0, 180.0),
            (-90.0, 150.0),
            (-180.0, 75.0),
            (-400.0, 400.0),
            (-125.0, 120.0),
            (-400.0, 400.0),
        ],
    )


@pytest.fixture
def opw(irb4600_parameters):
    """OPW solver with ABB axis corrections."""
    return OPWKinematics(irb4600_parameters, AxisCorrections())
