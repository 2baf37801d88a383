"""
Kinematics module - Closed-form solvers and solution ranking.

This module provides:
- OPW analytical forward and inverse kinematics (8 solutions per pose)
- A wrapper for generated closed-form IK libraries (ctypes binding)
- The ConfigurationComparer quadrant ranking of joint positions
- Robot-level inverse kinematics with ABB configuration data
"""

from robik.kinematics.closed_form import ClosedFormSolver, NativeIkRoutine
from robik.kinematics.comparer import ConfigurationComparer, configuration_key, quadrant
from robik.kinematics.inverse import CFX_ORDER, InverseKinematics
from robik.kinematics.opw import OPWKinematics

__all__ = [
    "OPWKinematics",
    "ClosedFormSolver",
    "NativeIkRoutine",
    "ConfigurationComparer",
    "configuration_key",
    "quadrant",
    "InverseKinematics",
    "CFX_ORDER",
]
