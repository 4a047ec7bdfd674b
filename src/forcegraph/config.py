"""
Engine configuration.

Every tunable of the engine lives here with its default. Components also
accept these values as keyword arguments; the engine builds them from one
EngineConfig.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .validation import (
    InvalidParameterError,
    validate_alpha,
    validate_iterations,
    validate_non_negative,
    validate_positive,
    validate_scale_extent,
    validate_viewport_size,
)

# Decay that takes alpha from 1 to alpha_min in `iterations` steps.
DEFAULT_ALPHA_DECAY = 1.0 - 0.001 ** (1.0 / 300)


@dataclass
class EngineConfig:
    """Configuration for the layout engine."""

    # Viewport
    width: float = 800.0
    height: float = 600.0

    # Link force
    link_distance: float = 120.0
    link_strength: Optional[float] = None  # None = 1 / min(degree)

    # Charge force
    charge_strength: float = 400.0  # positive repels
    charge_min_distance: float = 1.0
    charge_max_distance: float = math.inf
    barnes_hut_threshold: int = 200  # exact pairwise up to this node count
    barnes_hut_theta: float = 0.9

    # Centering force
    center_strength: float = 0.1

    # Collision force
    collision_radius: float = 45.0
    collision_strength: float = 0.7

    # Integrator
    alpha: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = DEFAULT_ALPHA_DECAY
    velocity_damping: float = 0.4
    time_step: float = 1.0
    max_velocity: Optional[float] = 100.0
    iterations: int = 300
    warmup_ticks: int = 0  # silent ticks before the first frame of a fresh layout

    # Reheating
    reheat_alpha: float = 0.3  # drag start
    change_alpha: float = 0.3  # structural snapshot change

    # Continuity
    jitter: float = 10.0
    random_seed: Optional[int] = None

    # Interaction
    min_scale: float = 0.1
    max_scale: float = 8.0
    click_distance: float = 3.0
    click_duration: float = 0.5

    # Rendering
    node_radius: float = 20.0
    node_label_offset: float = 32.0
    edge_label_offset: float = -5.0
    show_edge_labels: bool = True

    def validate(self) -> EngineConfig:
        """
        Check every field.

        Returns:
            self (for chaining)

        Raises:
            ValidationError: If any value is out of range.
        """
        validate_viewport_size((self.width, self.height))
        validate_scale_extent((self.min_scale, self.max_scale))
        validate_iterations(self.iterations)
        validate_alpha(self.alpha)
        validate_alpha(self.alpha_decay, "alpha_decay")
        validate_alpha(self.velocity_damping, "velocity_damping")
        validate_alpha(self.reheat_alpha, "reheat_alpha")
        validate_alpha(self.change_alpha, "change_alpha")
        validate_positive(self.alpha_min, "alpha_min")
        validate_positive(self.link_distance, "link_distance")
        validate_positive(self.charge_min_distance, "charge_min_distance")
        validate_positive(self.time_step, "time_step")
        validate_non_negative(self.center_strength, "center_strength")
        validate_non_negative(self.collision_radius, "collision_radius")
        validate_non_negative(self.collision_strength, "collision_strength")
        validate_non_negative(self.barnes_hut_theta, "barnes_hut_theta")
        validate_non_negative(self.jitter, "jitter")
        validate_non_negative(self.click_distance, "click_distance")
        validate_non_negative(self.click_duration, "click_duration")
        validate_positive(self.node_radius, "node_radius")
        if self.link_strength is not None:
            validate_non_negative(self.link_strength, "link_strength")
        if self.max_velocity is not None:
            validate_positive(self.max_velocity, "max_velocity")
        if self.charge_max_distance <= self.charge_min_distance:
            raise InvalidParameterError(
                f"charge_max_distance ({self.charge_max_distance}) must exceed "
                f"charge_min_distance ({self.charge_min_distance})"
            )
        if self.barnes_hut_threshold < 0:
            raise InvalidParameterError(
                f"barnes_hut_threshold must be >= 0, got {self.barnes_hut_threshold}"
            )
        if self.warmup_ticks < 0:
            raise InvalidParameterError(f"warmup_ticks must be >= 0, got {self.warmup_ticks}")
        return self


__all__ = ["EngineConfig", "DEFAULT_ALPHA_DECAY"]
