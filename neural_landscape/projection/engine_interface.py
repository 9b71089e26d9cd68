"""
Presentation Adapter Interface
==============================

Pluggable presentation abstraction.
Swap painting backends without touching the simulation.

Supported adapters:
- Headless - No painting, just frame bookkeeping

Usage:
    from neural_landscape.projection.engine_interface import create_adapter

    adapter = create_adapter('headless')
    sim.attach(adapter)
    sim.run()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from .camera import CameraState
from .engine import MeshSegment, NodeTier, ViewMode
from ..interaction.investigation import DetailRecord, TelemetryChart
from ..telemetry.generator import MarketSnapshot
from ..telemetry.packets import Packet


@dataclass(frozen=True)
class PacketSprite:
    """A packet with its projected position for this frame"""
    packet: Packet
    position: Tuple[float, float, float]
    opacity: float


@dataclass(frozen=True)
class FrameState:
    """Everything the presentation layer needs for one frame."""

    time_ms: float
    view_mode: ViewMode

    # Nodes
    field: np.ndarray                  # (N,) values
    node_positions: np.ndarray         # (N, 3) projected
    node_tiers: Tuple[NodeTier, ...]
    node_colors: Tuple[str, ...]      # Tier colour per node

    # Packets
    packets: Tuple[PacketSprite, ...]

    # Decoration (TERRAIN only, empty otherwise)
    mesh: Tuple[MeshSegment, ...]

    # Camera
    camera: CameraState
    camera_transform: np.ndarray       # 4x4

    # Investigation
    selected_index: Optional[int] = None
    detail: Optional[DetailRecord] = None
    chart: Optional[TelemetryChart] = None

    # HUD
    market: Optional[MarketSnapshot] = None
    active_node: str = ""
    full_screen: bool = False


class PresentationAdapter(ABC):
    """Abstract base for all presentation backends."""

    @abstractmethod
    def initialize(self):
        """Initialize the backend."""
        pass

    @abstractmethod
    def update_state(self, frame: FrameState):
        """Push a new frame to the backend."""
        pass

    @abstractmethod
    def render_frame(self, dt: float):
        """Paint one frame."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the backend is still active."""
        pass

    @abstractmethod
    def shutdown(self):
        """Clean up resources."""
        pass


class HeadlessAdapter(PresentationAdapter):
    """No-op backend that keeps the frames it is given."""

    def __init__(self, verbose: bool = False, history: int = 0):
        self._running = False
        self.verbose = verbose
        self.frame_count = 0
        self.last_frame: Optional[FrameState] = None
        self.history = history
        self.frames: List[FrameState] = []

    def initialize(self):
        self._running = True
        if self.verbose:
            print("[Headless] Adapter initialized (no display)")

    def update_state(self, frame: FrameState):
        self.last_frame = frame
        if self.history:
            self.frames.append(frame)
            del self.frames[:-self.history]

    def render_frame(self, dt: float):
        self.frame_count += 1

    def is_running(self) -> bool:
        return self._running

    def shutdown(self):
        self._running = False
        if self.verbose:
            print(f"[Headless] Shutdown after {self.frame_count} frames")


def create_adapter(name: str = 'headless', **kwargs) -> PresentationAdapter:
    """Factory for presentation adapters."""
    if name == 'headless':
        return HeadlessAdapter(**kwargs)
    raise ValueError(f"Unknown presentation adapter: {name!r}")
