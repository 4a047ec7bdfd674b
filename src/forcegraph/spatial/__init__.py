"""
Spatial data structures for efficient force calculations.

Provides a quadtree for Barnes-Hut O(n log n) charge approximation,
nearest-node hit testing, and radius queries.
"""

from .quadtree import Body, QuadTree, QuadTreeNode

__all__ = ["Body", "QuadTree", "QuadTreeNode"]
