"""
Configuration management for robik.

Handles loading and validation of robot kinematic descriptions.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from robik.core.exceptions import ConfigurationError
from robik.core.robot import (
    NUM_AXES,
    AxisCorrections,
    RobotDescription,
    RobotKinematicParameters,
)


class KinematicsConfig(BaseModel):
    """OPW link geometry in millimetres."""

    a1: float = 0.0
    a2: float = 0.0
    a3: float = 0.0
    b: float = 0.0
    c1: float = 0.0
    c2: float = 0.0
    c3: float = 0.0
    c4: float = 0.0


class CorrectionsConfig(BaseModel):
    """Axis sign and offset corrections (offsets in degrees)."""

    signs: list[int] = Field(default_factory=lambda: [1] * NUM_AXES)
    offsets: list[float] = Field(default_factory=lambda: [0.0, 0.0, -90.0, 0.0, 0.0, 0.0])


class RobotConfig(BaseModel):
    """Robot configuration model."""

    name: str
    manufacturer: str = "ABB"
    kinematics: KinematicsConfig = Field(default_factory=KinematicsConfig)
    corrections: CorrectionsConfig = Field(default_factory=CorrectionsConfig)
    joint_limits: dict[str, dict[str, float]] = Field(default_factory=dict)

    def axis_limits(self) -> list[tuple[float, float]]:
        """
        Get the six axis limit intervals in degrees.

        Axes missing from ``joint_limits`` default to (-180, 180).

        Returns:
            List of (lower, upper) tuples
        """
        limits = []
        for i in range(NUM_AXES):
            joint = self.joint_limits.get(f"joint_{i + 1}", {})
            limits.append((joint.get("lower", -180.0), joint.get("upper", 180.0)))
        return limits

    def to_description(self) -> RobotDescription:
        """
        Build the solver-facing robot description.

        Returns:
            RobotDescription instance

        Raises:
            ConfigurationError: If the configured values are inconsistent
        """
        return RobotDescription(
            name=self.name,
            parameters=RobotKinematicParameters(**self.kinematics.model_dump()),
            corrections=AxisCorrections(
                signs=list(self.corrections.signs),
                offsets=[math.radians(o) for o in self.corrections.offsets],
            ),
            axis_limits=self.axis_limits(),
        )


@dataclass
class ConfigManager:
    """
    Central configuration manager for robik.

    Loads and validates robot descriptions from YAML files.

    Example:
        >>> config = ConfigManager(config_dir=Path("config"))
        >>> robot = config.get_robot("abb_irb4600_40_255")
        >>> robot.kinematics.c2
        900.0
    """

    config_dir: Path
    _robots: dict[str, RobotConfig] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        """Initialize configuration manager."""
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    def load(self) -> None:
        """Load all configurations from disk."""
        self._load_robots()
        self._loaded = True

    def _load_robots(self) -> None:
        """Load robot configurations."""
        robots_dir = self.config_dir / "robots"
        if not robots_dir.exists():
            return

        for config_file in sorted(robots_dir.glob("*.yaml")):
            try:
                with open(config_file) as f:
                    data = yaml.safe_load(f)

                if data and "robot" in data:
                    robot_data = dict(data["robot"])
                    # Merge with other sections
                    if "kinematics" in data:
                        robot_data["kinematics"] = data["kinematics"]
                    if "corrections" in data:
                        robot_data["corrections"] = data["corrections"]
                    if "limits" in data:
                        robot_data["joint_limits"] = data["limits"].get("joints", {})

                    robot = RobotConfig(**robot_data)
                    # Catch inconsistent geometry or corrections at load time
                    robot.to_description()
                    self._robots[config_file.stem] = robot
            except (yaml.YAMLError, ValidationError) as e:
                raise ConfigurationError(
                    f"Failed to load robot config: {config_file}",
                    details={"error": str(e)},
                )

    def get_robot(self, name: str) -> RobotConfig:
        """
        Get robot configuration by name.

        Args:
            name: Robot configuration name (without .yaml extension)

        Returns:
            RobotConfig instance

        Raises:
            ConfigurationError: If robot not found
        """
        if not self._loaded:
            self.load()

        if name not in self._robots:
            available = list(self._robots.keys())
            raise ConfigurationError(
                f"Robot configuration not found: {name}",
                details={"available": available},
            )
        return self._robots[name]

    def list_robots(self) -> list[str]:
        """List available robot configurations."""
        if not self._loaded:
            self.load()
        return list(self._robots.keys())
