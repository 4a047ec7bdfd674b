"""
Input validation utilities for the force-directed graph engine.

Provides centralized validation functions for viewport size, camera scale
range, and simulation parameters. Raises descriptive exceptions on invalid
configuration. Data-quality issues inside snapshots (dangling edges,
duplicate ids) are not validation errors; the engine absorbs them.
"""

from __future__ import annotations

import math
from typing import Sequence


class ValidationError(ValueError):
    """Base exception for engine validation errors."""

    pass


class InvalidViewportError(ValidationError):
    """Raised when viewport dimensions are invalid."""

    pass


class InvalidScaleExtentError(ValidationError):
    """Raised when the camera scale range is invalid."""

    pass


class InvalidParameterError(ValidationError):
    """Raised when a simulation parameter is out of range."""

    pass


class InvalidNodeError(ValidationError):
    """Raised when a node is malformed."""

    pass


class InvalidEdgeError(ValidationError):
    """Raised when an edge is malformed."""

    pass


def validate_viewport_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate viewport dimensions.

    Zero is allowed: a collapsed viewport suspends centering rather than
    failing.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidViewportError: If dimensions are negative or not finite
    """
    if len(size) < 2:
        raise InvalidViewportError(
            f"Viewport size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if not math.isfinite(width) or width < 0:
        raise InvalidViewportError(f"Viewport width must be >= 0, got {width}")
    if not math.isfinite(height) or height < 0:
        raise InvalidViewportError(f"Viewport height must be >= 0, got {height}")

    return width, height


def validate_scale_extent(extent: Sequence[float]) -> tuple[float, float]:
    """
    Validate a (min_scale, max_scale) camera range.

    Raises:
        InvalidScaleExtentError: If bounds are not positive or min > max
    """
    if len(extent) < 2:
        raise InvalidScaleExtentError(
            f"Scale extent must have 2 elements [min, max], got {len(extent)}"
        )

    lo, hi = float(extent[0]), float(extent[1])

    if not (math.isfinite(lo) and lo > 0):
        raise InvalidScaleExtentError(f"Minimum scale must be positive, got {lo}")
    if not (math.isfinite(hi) and hi > 0):
        raise InvalidScaleExtentError(f"Maximum scale must be positive, got {hi}")
    if lo > hi:
        raise InvalidScaleExtentError(f"Minimum scale {lo} exceeds maximum scale {hi}")

    return lo, hi


def validate_iterations(iterations: int) -> int:
    """
    Validate iteration count is positive.

    Raises:
        InvalidParameterError: If iterations < 1
    """
    if iterations < 1:
        raise InvalidParameterError(f"iterations must be >= 1, got {iterations}")
    return int(iterations)


def validate_alpha(alpha: float, name: str = "alpha") -> float:
    """
    Validate an alpha-like value is in [0, 1].

    Raises:
        InvalidParameterError: If value not in [0, 1]
    """
    alpha = float(alpha)
    if not (0.0 <= alpha <= 1.0):
        raise InvalidParameterError(f"{name} must be in [0, 1], got {alpha}")
    return alpha


def validate_positive(value: float, name: str) -> float:
    """
    Validate a value is strictly positive and finite.

    Raises:
        InvalidParameterError: If value <= 0 or not finite
    """
    value = float(value)
    if not (math.isfinite(value) and value > 0):
        raise InvalidParameterError(f"{name} must be positive, got {value}")
    return value


def validate_non_negative(value: float, name: str) -> float:
    """
    Validate a value is finite and >= 0.

    Raises:
        InvalidParameterError: If value < 0 or not finite
    """
    value = float(value)
    if not (math.isfinite(value) and value >= 0):
        raise InvalidParameterError(f"{name} must be >= 0, got {value}")
    return value


__all__ = [
    "ValidationError",
    "InvalidViewportError",
    "InvalidScaleExtentError",
    "InvalidParameterError",
    "InvalidNodeError",
    "InvalidEdgeError",
    "validate_viewport_size",
    "validate_scale_extent",
    "validate_iterations",
    "validate_alpha",
    "validate_positive",
    "validate_non_negative",
]
