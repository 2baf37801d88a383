"""
robik - Closed-form inverse kinematics for ABB industrial robots.

Analytical forward and inverse kinematics for ortho-parallel robots with a
spherical wrist, a wrapper for generated closed-form IK libraries, and the
quadrant-based ranking of their solutions.
"""

__version__ = "0.1.0"
__author__ = "robik Contributors"

from robik.core.config import ConfigManager
from robik.kinematics.opw import OPWKinematics

__all__ = [
    "__version__",
    "ConfigManager",
    "OPWKinematics",
]
