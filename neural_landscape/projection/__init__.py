"""
Projection Module
=================
Coordinate mapping, camera control and the presentation seam.
"""

from .engine import (
    ViewMode,
    NodeTier,
    NODE_TIER_COLORS,
    MeshSegment,
    project_node,
    project_field,
    project_packet,
    packet_opacity,
    mesh_connectors,
    node_tier,
    node_color
)

from .camera import (
    CameraController,
    CameraConfig,
    CameraState,
    PAN_KEYBINDS
)

from .engine_interface import (
    FrameState,
    PacketSprite,
    PresentationAdapter,
    HeadlessAdapter,
    create_adapter
)

__all__ = [
    # Engine
    'ViewMode',
    'NodeTier',
    'NODE_TIER_COLORS',
    'MeshSegment',
    'project_node',
    'project_field',
    'project_packet',
    'packet_opacity',
    'mesh_connectors',
    'node_tier',
    'node_color',
    # Camera
    'CameraController',
    'CameraConfig',
    'CameraState',
    'PAN_KEYBINDS',
    # Presentation
    'FrameState',
    'PacketSprite',
    'PresentationAdapter',
    'HeadlessAdapter',
    'create_adapter',
]
