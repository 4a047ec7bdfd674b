"""
forcegraph: An incremental force-directed layout engine.

This package turns a mutable graph of labeled nodes and edges into 2D
coordinates that update continuously, and keeps the picture stable when
the graph is edited.

Components:
- engine: GraphEngine, the frame-driven facade a UI shell talks to
- force: Link, charge, centering and collision forces
- simulation: Damped integrator with pins and cooling
- continuity: Position cache carried across graph replacements
- interaction: Camera, node drags, pans and zoom
- render: Screen-space draw primitives
"""

__version__ = "0.1.0"

# Base classes
from .base import IterativeSimulation

# Configuration
from .config import DEFAULT_ALPHA_DECAY, EngineConfig

# Continuity
from .continuity import ContinuityManager, PositionCache, WorkingGraph

# Facade
from .engine import GraphEngine

# Forces
from .force import (
    CenteringForce,
    ChargeForce,
    CollisionForce,
    Force,
    ForceModel,
    LinkForce,
)

# Interaction
from .interaction import CameraTransform, InteractionController

# Metrics
from .metrics import (
    bounding_box,
    bounding_diagonal,
    displacements,
    edge_crossings,
    edge_length_stats,
    max_displacement,
    mean_displacement,
)

# Rendering
from .render import (
    CirclePrimitive,
    DrawList,
    LinePrimitive,
    RenderProjector,
    TextPrimitive,
)
from .simulation import ForceSimulation

# Spatial indexing
from .spatial import QuadTree

# Shared types
from .types import (
    CATEGORY_COLORS,
    CATEGORY_LABELS,
    Edge,
    Event,
    EventType,
    GraphSnapshot,
    Node,
    NodeCategory,
    NodeState,
)

# Validation
from .validation import (
    InvalidEdgeError,
    InvalidNodeError,
    InvalidParameterError,
    InvalidScaleExtentError,
    InvalidViewportError,
    ValidationError,
)

__all__ = [
    # Facade
    "GraphEngine",
    "EngineConfig",
    "DEFAULT_ALPHA_DECAY",
    # Types
    "Node",
    "Edge",
    "NodeCategory",
    "NodeState",
    "GraphSnapshot",
    "CATEGORY_COLORS",
    "CATEGORY_LABELS",
    "EventType",
    "Event",
    # Simulation
    "IterativeSimulation",
    "ForceSimulation",
    "Force",
    "ForceModel",
    "LinkForce",
    "ChargeForce",
    "CenteringForce",
    "CollisionForce",
    "QuadTree",
    # Continuity
    "ContinuityManager",
    "PositionCache",
    "WorkingGraph",
    # Interaction
    "CameraTransform",
    "InteractionController",
    # Rendering
    "RenderProjector",
    "DrawList",
    "LinePrimitive",
    "CirclePrimitive",
    "TextPrimitive",
    # Metrics
    "bounding_box",
    "bounding_diagonal",
    "displacements",
    "mean_displacement",
    "max_displacement",
    "edge_crossings",
    "edge_length_stats",
    # Validation
    "ValidationError",
    "InvalidViewportError",
    "InvalidScaleExtentError",
    "InvalidParameterError",
    "InvalidNodeError",
    "InvalidEdgeError",
]
