"""
Core module - Shared utilities, configuration, and robot description types.
"""

from robik.core.config import ConfigManager, RobotConfig
from robik.core.exceptions import (
    ConfigurationError,
    InvalidAngleDomainError,
    KinematicsError,
    NativeLibraryError,
    PlatformUnsupportedError,
    RobikError,
)
from robik.core.geometry import FrameUtilities, normalize_angle, normalize_degrees
from robik.core.robot import (
    SENTINEL,
    AxisCorrections,
    ConfigurationData,
    RobotDescription,
    RobotJointPosition,
    RobotKinematicParameters,
)

__all__ = [
    # Config
    "ConfigManager",
    "RobotConfig",
    # Exceptions
    "RobikError",
    "ConfigurationError",
    "KinematicsError",
    "PlatformUnsupportedError",
    "InvalidAngleDomainError",
    "NativeLibraryError",
    # Geometry
    "FrameUtilities",
    "normalize_angle",
    "normalize_degrees",
    # Robot
    "SENTINEL",
    "AxisCorrections",
    "ConfigurationData",
    "RobotDescription",
    "RobotJointPosition",
    "RobotKinematicParameters",
]
