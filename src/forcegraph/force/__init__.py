"""
Force contributors for the layout simulation.

This module provides the four forces summed every step:
- LinkForce: Springs along edges toward a rest distance
- ChargeForce: Pairwise repulsion (exact or Barnes-Hut)
- CenteringForce: Keeps the layout's centroid at the viewport center
- CollisionForce: Removes overlaps between node radii
- ForceModel: Sums the contributors, zeroing pinned nodes
"""

from .base import Force
from .center import CenteringForce
from .charge import ChargeForce
from .collide import CollisionForce
from .link import LinkForce
from .model import ForceModel

__all__ = [
    "Force",
    "LinkForce",
    "ChargeForce",
    "CenteringForce",
    "CollisionForce",
    "ForceModel",
]
