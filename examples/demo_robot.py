"""
Demonstration of robik inverse kinematics.

This script shows how to:
1. Load a robot description from the shipped configuration
2. Compute the end frame of a joint position
3. List all eight inverse kinematics solutions with their singularities
4. Select a solution by configuration data or by closeness
5. Rank solutions by ABB quadrant coding
"""

import math
from pathlib import Path

from robik.core.config import ConfigManager
from robik.core.robot import ConfigurationData, RobotJointPosition
from robik.kinematics.comparer import ConfigurationComparer
from robik.kinematics.inverse import InverseKinematics
from robik.kinematics.opw import OPWKinematics

CONFIG_DIR = Path(__file__).parent.parent / "config"


def main():
    """Run inverse kinematics demonstration."""
    print("=" * 60)
    print("robik Inverse Kinematics Demo")
    print("=" * 60)

    # 1. Load robot description
    print("\n1. Loading robot description")
    manager = ConfigManager(CONFIG_DIR)
    robot = manager.get_robot("abb_irb4600_40_255").to_description()
    print(f"   [OK] Loaded: {robot.name}")
    print(f"   [OK] Link geometry: {robot.parameters}")

    # 2. Forward kinematics
    print("\n2. Forward kinematics")
    joints = [30.0, 20.0, -10.0, 45.0, 60.0, -30.0]
    opw = OPWKinematics(robot.parameters, robot.corrections)
    frame, wrist = opw.forward([math.radians(v) for v in joints])
    print(f"   Joints (deg): {joints}")
    print(f"   End frame origin: {[f'{v:.2f}' for v in frame.point]}")
    print(f"   Wrist center:     {[f'{v:.2f}' for v in wrist]}")

    # 3. All solutions
    print("\n3. Inverse kinematics solutions (cfx order)")
    ik = InverseKinematics(robot)
    ik.calculate(frame)
    for cfx, solution in enumerate(ik.robot_joint_positions):
        flags = "elbow" if ik.elbow_singularities[cfx] else ""
        print(f"   cfx {cfx}: {[f'{v:8.2f}' for v in solution]} {flags}")

    # 4. Selection
    print("\n4. Selecting a solution")
    previous = RobotJointPosition(joints)
    selected = ik.calculate_closest(previous)
    data = ik.configuration_data
    print(f"   Closest to previous: cfx {ik.selected_solution}")
    print(f"   confdata: [{data.cf1}, {data.cf4}, {data.cf6}, {data.cfx}]")
    print(f"   Joints (deg): {[f'{v:.2f}' for v in selected]}")

    ik.calculate(frame, ConfigurationData(cf1=data.cf1, cf4=data.cf4, cf6=data.cf6, cfx=data.cfx))
    print(f"   Same solution from confdata: {ik.robot_joint_position == selected}")
    for message in ik.error_text:
        print(f"   [WARN] {message}")

    # 5. Ranking
    print("\n5. Ranking by quadrant of axis 1, 4 and 6")
    positions = [p.copy() for p in ik.robot_joint_positions]
    ConfigurationComparer().sort(positions)
    for position in positions:
        print(f"   {[f'{v:8.2f}' for v in position]}")

    print("\n" + "=" * 60)
    print("[SUCCESS] Inverse kinematics demo completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
