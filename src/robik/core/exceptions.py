"""
Custom exceptions for robik.

All robik exceptions inherit from RobikError for easy catching.
"""

from typing import Any


class RobikError(Exception):
    """Base exception for all robik errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(RobikError):
    """Raised when configuration is invalid or missing."""

    pass


class KinematicsError(RobikError):
    """Raised when a kinematics computation cannot be carried out."""

    pass


class PlatformUnsupportedError(KinematicsError):
    """Raised when the interpreter cannot host the native IK routine."""

    def __init__(
        self,
        message: str,
        platform: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.platform = platform


class InvalidAngleDomainError(KinematicsError, ValueError):
    """Raised when an angle outside (-180, 180] degrees reaches the comparer."""

    def __init__(
        self,
        message: str,
        angle: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.angle = angle


class NativeLibraryError(KinematicsError):
    """Raised when the native IK library cannot be loaded or bound."""

    def __init__(
        self,
        message: str,
        library: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.library = library
