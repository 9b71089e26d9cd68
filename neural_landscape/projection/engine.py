"""
Projection Engine
=================
Maps abstract node and packet state into 3D coordinates.

VIEW MODES:
- TERRAIN: Grid with the node value as height field
- VORTEX: Polar spiral that slowly rotates with time
- NETWORK: Shares the terrain baseline
- CLUSTER: 100-node super-clusters on a coarse grid
- FLOW: Shares the terrain baseline

Node coordinates are centred on the surface; packet coordinates are in
surface space (offset by SURFACE_OFFSET from node coordinates).
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..telemetry.packets import Packet


CELL_SIZE = 40.0            # Grid pitch
SURFACE_OFFSET = 400.0      # Half the 800-unit surface
VORTEX_OMEGA = 0.0002       # rad/ms
VORTEX_TURNS = 15 * np.pi   # Total spiral sweep over the field
CLUSTER_SIZE = 100
CLUSTER_PITCH = 200.0
CLUSTER_ORIGIN = -300.0
CLUSTER_SPACING = 12.0
PACKET_BASE_Z = 40.0
PACKET_ARC_HEIGHT = 120.0
MESH_TILT_GAIN = 0.6        # Degrees per unit of height difference


class ViewMode(Enum):
    """Selectable projection policies"""
    TERRAIN = "TERRAIN"
    VORTEX = "VORTEX"
    NETWORK = "NETWORK"
    CLUSTER = "CLUSTER"
    FLOW = "FLOW"

    @classmethod
    def parse(cls, name: str) -> 'ViewMode':
        try:
            return cls[name.strip().upper()]
        except KeyError:
            options = ', '.join(m.value for m in cls)
            raise ValueError(f"Unknown view mode: {name!r} (options: {options})")


class NodeTier(Enum):
    """Visual intensity class of a node"""
    IDLE = "idle"
    ACTIVE = "active"
    HOT = "hot"


NODE_TIER_COLORS = {
    NodeTier.IDLE: '#334155',
    NodeTier.ACTIVE: '#60a5fa',
    NodeTier.HOT: '#f87171',
}


@dataclass(frozen=True)
class MeshSegment:
    """Connector between two adjacent same-row nodes (TERRAIN only)"""
    index: int
    left: float          # Surface x of the segment origin
    top: float           # Surface y of the segment origin
    z: float             # Lifted to the left node's value
    tilt_deg: float      # Rotation about the segment origin
    width: float = CELL_SIZE


def grid_cell(index: int, grid_size: int) -> Tuple[int, int]:
    """Return (col, row) of a node index."""
    return index % grid_size, index // grid_size


def vortex_angle(index: int, node_count: int, time_ms: float,
                 omega: float = VORTEX_OMEGA) -> float:
    return (index / node_count) * VORTEX_TURNS + time_ms * omega


def project_node(index: int,
                 value: float,
                 view_mode: ViewMode,
                 time_ms: float = 0.0,
                 node_count: Optional[int] = None,
                 grid_size: int = 20,
                 omega: float = VORTEX_OMEGA,
                 cell_size: float = CELL_SIZE) -> Tuple[float, float, float]:
    """
    Project one node into 3D.

    node_count defaults to a full grid (grid_size ** 2).

    Returns: (x, y, z)
    """
    if node_count is None:
        node_count = grid_size * grid_size
    col, row = grid_cell(index, grid_size)

    if view_mode in (ViewMode.TERRAIN, ViewMode.NETWORK, ViewMode.FLOW):
        x = col * cell_size - SURFACE_OFFSET
        y = row * cell_size - SURFACE_OFFSET
        z = value

    elif view_mode == ViewMode.VORTEX:
        angle = vortex_angle(index, node_count, time_ms, omega)
        radius = 10 + index * 0.9
        x = radius * np.cos(angle)
        y = radius * np.sin(angle)
        z = value * 0.4 + index * 0.05

    elif view_mode == ViewMode.CLUSTER:
        cluster_x = (index // CLUSTER_SIZE) * CLUSTER_PITCH + CLUSTER_ORIGIN
        cluster_y = (index % 4) * CLUSTER_PITCH + CLUSTER_ORIGIN
        x = cluster_x + (col % 10) * CLUSTER_SPACING
        y = cluster_y + (row % 10) * CLUSTER_SPACING
        z = value * 1.8

    else:
        raise ValueError(f"No projection policy for view mode: {view_mode!r}")

    return float(x), float(y), float(z)


def project_field(field: np.ndarray,
                  view_mode: ViewMode,
                  time_ms: float = 0.0,
                  grid_size: int = 20,
                  omega: float = VORTEX_OMEGA,
                  cell_size: float = CELL_SIZE) -> np.ndarray:
    """
    Vectorised projection of the whole node field.

    Returns an (N, 3) array; row i matches project_node(i, field[i], ...).
    """
    values = np.asarray(field, dtype=np.float64)
    n = values.shape[0]
    index = np.arange(n)
    col = index % grid_size
    row = index // grid_size

    if view_mode in (ViewMode.TERRAIN, ViewMode.NETWORK, ViewMode.FLOW):
        x = col * cell_size - SURFACE_OFFSET
        y = row * cell_size - SURFACE_OFFSET
        z = values

    elif view_mode == ViewMode.VORTEX:
        angle = (index / n) * VORTEX_TURNS + time_ms * omega
        radius = 10 + index * 0.9
        x = radius * np.cos(angle)
        y = radius * np.sin(angle)
        z = values * 0.4 + index * 0.05

    elif view_mode == ViewMode.CLUSTER:
        x = (index // CLUSTER_SIZE) * CLUSTER_PITCH + CLUSTER_ORIGIN + (col % 10) * CLUSTER_SPACING
        y = (index % 4) * CLUSTER_PITCH + CLUSTER_ORIGIN + (row % 10) * CLUSTER_SPACING
        z = values * 1.8

    else:
        raise ValueError(f"No projection policy for view mode: {view_mode!r}")

    return np.column_stack([x, y, z]).astype(np.float64)


def project_packet(packet: Packet, cell_size: float = CELL_SIZE) -> Tuple[float, float, float]:
    """
    Interpolate a packet along its flight arc.

    The arc rises from PACKET_BASE_Z and peaks at t = 0.5.
    """
    t = packet.progress
    x = (packet.start_x + (packet.end_x - packet.start_x) * t) * cell_size
    y = (packet.start_y + (packet.end_y - packet.start_y) * t) * cell_size
    z = PACKET_BASE_Z + np.sin(t * np.pi) * PACKET_ARC_HEIGHT
    return float(x), float(y), float(z)


def packet_opacity(progress: float) -> float:
    """Fully transparent at spawn and expiry, opaque at mid-flight."""
    return 1.0 - abs(progress - 0.5) * 2


def mesh_connectors(field: np.ndarray, grid_size: int = 20,
                    cell_size: float = CELL_SIZE) -> List[MeshSegment]:
    """Derive TERRAIN mesh lines between same-row neighbours."""
    n = len(field)
    segments = []
    for i in range(n):
        if i % grid_size == grid_size - 1 or i >= n - grid_size:
            continue
        col, row = grid_cell(i, grid_size)
        value = float(field[i])
        segments.append(MeshSegment(
            index=i,
            left=col * cell_size,
            top=row * cell_size,
            z=value,
            tilt_deg=(float(field[i + 1]) - value) * MESH_TILT_GAIN,
            width=cell_size
        ))
    return segments


def node_tier(value: float) -> NodeTier:
    if value > 100:
        return NodeTier.HOT
    if value > 50:
        return NodeTier.ACTIVE
    return NodeTier.IDLE


def node_color(value: float) -> str:
    """Display colour of a node's tier."""
    return NODE_TIER_COLORS[node_tier(value)]
