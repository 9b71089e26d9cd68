"""
Neural Landscape - Main Simulation
==================================
Entry point for the landscape simulation core.

This component ties together:
1. Telemetry random walk on a slow tick
2. Packet spawning and flight physics on a fast tick
3. View-mode projection of nodes and packets
4. Camera orbit/pan/zoom from input events
5. Single-node investigation
"""

import copy
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import numpy as np
import yaml

# Data sources
from .telemetry import (
    TelemetryGenerator, TelemetryConfig, MarketSnapshot,
    PacketPool, PacketConfig
)

# Projection
from .projection import (
    ViewMode, CameraController, CameraConfig,
    FrameState, PacketSprite, PresentationAdapter,
    project_field, project_packet, packet_opacity, mesh_connectors, node_tier, node_color
)

# Interaction
from .interaction import (
    EventLoop, TimerHandle, ListenerHandle,
    KeyEvent, PointerEvent, InvestigationStateMachine, DetailRecord
)


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "landscape_params.yaml"


def _default_config() -> Dict:
    """Default configuration if no file provided"""
    return {
        'grid': {
            'size': 20
        },
        'telemetry': {
            'interval_ms': 1000.0,
            'walk_step': 5.0,
            'min_value': 5.0,
            'max_value': 120.0,
            'initial_max': 50.0,
            'base_price': 52000.0,
            'price_spread': 2000.0,
            'change_range': 3.0
        },
        'packets': {
            'physics_interval_ms': 32.0,
            'spawn_probability': 0.6,
            'capacity': 21,
            'progress_step': 0.02,
            'max_value': 50.0
        },
        'camera': {
            'pan_step': 10.0,
            'drag_sensitivity': 0.4,
            'wheel_sensitivity': 0.001,
            'min_rotation_x': 5.0,
            'max_rotation_x': 175.0,
            'min_zoom': 0.2,
            'max_zoom': 5.0,
            'initial_rotation_x': 65.0,
            'initial_rotation_z': 45.0
        },
        'projection': {
            'cell_size': 40.0,
            'vortex_omega': 0.0002
        },
        'simulation': {
            'active_node': 'BTC',
            'seed': None,
            'full_screen': False,
            'duration_ms': 10000.0
        }
    }


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict:
    """
    Load a YAML config and merge it section by section over the defaults.

    Raises FileNotFoundError for a missing path and ValueError for a
    document that is not a mapping; YAML errors propagate.
    """
    if config_path is None:
        return _default_config()

    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f)

    return merge_config(loaded, source=str(config_path))


def merge_config(overrides: Optional[Dict], source: str = "config") -> Dict:
    """
    Merge a partial config over the defaults, section by section.

    Empty sections (None) keep their defaults. Raises ValueError when the
    document or a known section is not a mapping.
    """
    config = _default_config()
    if overrides is None:
        return config
    if not isinstance(overrides, dict):
        raise ValueError(f"{source}: top level must be a mapping, got {type(overrides).__name__}")

    for section, values in overrides.items():
        if values is None:
            continue
        if isinstance(config.get(section), dict):
            if not isinstance(values, dict):
                raise ValueError(f"{source}: section '{section}' must be a mapping, "
                                 f"got {type(values).__name__}")
            config[section].update(copy.deepcopy(values))
        else:
            config[section] = copy.deepcopy(values)
    return config


class LandscapeSimulation:
    """
    Main controller for the landscape component.

    Orchestrates:
    - Slow tick: telemetry walk + packet spawn
    - Fast tick: packet physics
    - Window listeners: keyboard pan, global pointer release
    - Surface input: drag orbit, wheel zoom, node investigation
    - Frame publication to a presentation adapter
    """

    def __init__(self,
                 config_path: Optional[Union[str, Path]] = None,
                 config: Optional[Dict] = None,
                 loop: Optional[EventLoop] = None,
                 verbose: bool = False):
        # Load configuration
        if config is not None:
            self.config = merge_config(config)
        else:
            self.config = load_config(config_path)

        sim_cfg = self.config['simulation']
        self.verbose = verbose
        self.rng = np.random.default_rng(sim_cfg.get('seed'))
        self.grid_size = int(self.config['grid']['size'])

        # Data sources
        self.telemetry = TelemetryGenerator(
            TelemetryConfig(grid_size=self.grid_size, **self.config['telemetry']),
            self.rng
        )
        self.packet_pool = PacketPool(PacketConfig(**self.config['packets']), self.rng)

        # Interaction
        self.camera = CameraController(CameraConfig(**self.config['camera']))
        self.investigation = InvestigationStateMachine(self.rng)
        self.loop = loop or EventLoop(verbose=verbose)

        # View state
        self.view_mode = ViewMode.TERRAIN
        self.cell_size = float(self.config['projection']['cell_size'])
        self.vortex_omega = float(self.config['projection']['vortex_omega'])
        self.active_node = str(sim_cfg['active_node'])
        self.full_screen = bool(sim_cfg.get('full_screen', False))
        self.market: Optional[MarketSnapshot] = None

        # Presentation
        self.adapter: Optional[PresentationAdapter] = None
        self._last_publish_ms = 0.0

        # Scoped registrations
        self._timers: List[TimerHandle] = []
        self._listeners: List[ListenerHandle] = []
        self.mounted = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def mount(self):
        """Register timers and window-level listeners."""
        if self.mounted:
            raise RuntimeError("Landscape is already mounted")
        self._listeners = [
            self.loop.add_listener('keydown', self._on_keydown),
            self.loop.add_listener('pointerup', self._on_pointer_up),
        ]
        self._subscribe_timers()
        self.mounted = True
        if self.verbose:
            print(f"[LANDSCAPE] Mounted on {self.active_node}")

    def unmount(self):
        """Tear down every timer and listener registered by mount()."""
        if not self.mounted:
            return
        self._unsubscribe_timers()
        for handle in self._listeners:
            self.loop.remove_listener(handle)
        self._listeners = []
        self.camera.release()
        self.mounted = False
        if self.verbose:
            print("[LANDSCAPE] Unmounted")

    def _subscribe_timers(self):
        self._timers = [
            self.loop.set_interval(
                self._on_data_tick,
                self.telemetry.config.interval_ms,
                name=f"telemetry:{self.active_node}"
            ),
            self.loop.set_interval(
                self._on_physics_tick,
                self.packet_pool.config.physics_interval_ms,
                name=f"physics:{self.active_node}"
            ),
        ]

    def _unsubscribe_timers(self):
        for handle in self._timers:
            self.loop.clear_interval(handle)
        self._timers = []

    def set_active_node(self, name: str):
        """Switch the monitored entity, re-subscribing the simulation timers."""
        if name == self.active_node:
            return
        self.active_node = name
        if self.mounted:
            self._unsubscribe_timers()
            self._subscribe_timers()
        if self.verbose:
            print(f"[LANDSCAPE] Active node: {name}")

    def attach(self, adapter: PresentationAdapter):
        """Connect a presentation adapter and push the current frame."""
        self.adapter = adapter
        adapter.initialize()
        self._publish()

    def detach(self):
        if self.adapter is not None:
            self.adapter.shutdown()
        self.adapter = None

    # =========================================================================
    # TIMER CALLBACKS
    # =========================================================================

    def _on_data_tick(self):
        self.market = self.telemetry.tick(self.active_node)
        self.packet_pool.maybe_spawn(self.telemetry.node_count, self.grid_size)
        self._publish()

    def _on_physics_tick(self):
        self.packet_pool.advance()
        self._publish()

    # =========================================================================
    # WINDOW LISTENERS
    # =========================================================================

    def _on_keydown(self, event: KeyEvent):
        if self.camera.handle_key(event.key):
            self._publish()

    def _on_pointer_up(self, event: Optional[PointerEvent] = None):
        self.camera.release()

    def key_down(self, key: str) -> int:
        """Deliver a key press through the window listeners."""
        return self.loop.dispatch('keydown', KeyEvent(key))

    def pointer_up(self, x: float = 0.0, y: float = 0.0) -> int:
        """Deliver a pointer release anywhere in the window."""
        return self.loop.dispatch('pointerup', PointerEvent(x, y))

    # =========================================================================
    # SURFACE INPUT
    # =========================================================================

    def pointer_down(self, x: float, y: float):
        self.camera.press(x, y)

    def pointer_move(self, x: float, y: float):
        if self.camera.move(x, y):
            self._publish()

    def wheel(self, delta_y: float):
        self.camera.wheel(delta_y)
        self._publish()

    def set_view_mode(self, mode: Union[ViewMode, str]):
        if isinstance(mode, str):
            mode = ViewMode.parse(mode)
        self.view_mode = mode
        if self.verbose:
            print(f"[CAMERA] View mode: {mode.name}")
        self._publish()

    def click_node(self, index: int) -> DetailRecord:
        """Investigate a node. Raises IndexError for an index outside the field."""
        detail = self.investigation.select(index, self.telemetry.field, self.active_node)
        if self.verbose:
            print(f"[INVESTIGATE] {detail.id} magnitude={detail.magnitude_label}")
        self._publish()
        return detail

    def dismiss(self):
        self.investigation.dismiss()
        self._publish()

    # =========================================================================
    # FRAMES
    # =========================================================================

    def frame(self) -> FrameState:
        """Project the current snapshot into a render-ready frame."""
        field = self.telemetry.field
        now = self.loop.now

        sprites = tuple(
            PacketSprite(packet=p, position=project_packet(p, self.cell_size), opacity=packet_opacity(p.progress))
            for p in self.packet_pool.packets
        )
        if self.view_mode == ViewMode.TERRAIN:
            mesh = tuple(mesh_connectors(field, self.grid_size, self.cell_size))
        else:
            mesh = ()

        return FrameState(
            time_ms=now,
            view_mode=self.view_mode,
            field=field,
            node_positions=project_field(field, self.view_mode, now, self.grid_size,
                                         self.vortex_omega, self.cell_size),
            node_tiers=tuple(node_tier(v) for v in field),
            node_colors=tuple(node_color(v) for v in field),
            packets=sprites,
            mesh=mesh,
            camera=self.camera.state,
            camera_transform=np.asarray(self.camera.transform()),
            selected_index=self.investigation.selected_index,
            detail=self.investigation.detail,
            chart=self.investigation.chart,
            market=self.market,
            active_node=self.active_node,
            full_screen=self.full_screen
        )

    def _publish(self):
        if self.adapter is None or not self.adapter.is_running():
            return
        self.adapter.update_state(self.frame())
        self.adapter.render_frame((self.loop.now - self._last_publish_ms) / 1000.0)
        self._last_publish_ms = self.loop.now

    # =========================================================================
    # RUNNING
    # =========================================================================

    def step(self, ms: float) -> int:
        """Advance simulated time; returns the number of timer firings."""
        return self.loop.advance(ms)

    def run(self,
            duration_ms: Optional[float] = None,
            frame_ms: float = 16.0,
            callback: Optional[Callable[[FrameState], None]] = None):
        """
        Run the landscape for a span of simulated time.

        Args:
            duration_ms: Simulated time to run (default from config)
            frame_ms: Frame interval at which callback sees a frame
            callback: Optional function called each frame with the FrameState
        """
        if duration_ms is None:
            duration_ms = float(self.config['simulation']['duration_ms'])

        # A run that mounts also unmounts
        mounted_here = not self.mounted
        if mounted_here:
            self.mount()

        start_time = time.time()
        end_ms = self.loop.now + duration_ms
        last_second = int(self.loop.now // 1000)

        print(f"Starting Neural Landscape - Node: {self.active_node} - Duration: {duration_ms / 1000:.1f}s")
        print("=" * 50)

        try:
            while self.loop.now < end_ms:
                self.loop.advance(min(frame_ms, end_ms - self.loop.now))

                if callback:
                    callback(self.frame())

                # Status line every simulated second
                second = int(self.loop.now // 1000)
                if second != last_second:
                    last_second = second
                    self._print_status()
        finally:
            if mounted_here:
                self.unmount()

        real_time = max(time.time() - start_time, 1e-9)
        print("=" * 50)
        print(f"Run complete. Sim time: {duration_ms / 1000:.2f}s, Real time: {real_time:.2f}s")
        print(f"Speed ratio: {(duration_ms / 1000) / real_time:.1f}x realtime")

    def _print_status(self):
        """Print compact status line"""
        field = self.telemetry.field
        cam = self.camera.state
        price = f"{self.market.price:9.2f}" if self.market else "      n/a"
        print(f"T={self.loop.now / 1000:6.1f}s | "
              f"Mode: {self.view_mode.name:<7} | "
              f"Price: {price} | "
              f"Field: {field.mean():5.1f} avg | "
              f"Packets: {len(self.packet_pool):2d}/{self.packet_pool.config.capacity} | "
              f"Zoom: {cam.zoom:.2f}")


def demo_orbit():
    """
    Demonstration: Scripted camera input.

    Pans, drags and zooms, then prints the resulting camera.
    """
    print("\n" + "=" * 60)
    print("DEMO: CAMERA ORBIT")
    print("=" * 60 + "\n")

    sim = LandscapeSimulation(verbose=True)
    sim.mount()

    for key in "wwaad":
        sim.key_down(key)

    sim.pointer_down(100, 100)
    for i in range(1, 11):
        sim.pointer_move(100 + i * 5, 100 - i * 2)
    sim.pointer_up(900, 900)  # Released outside the surface

    for _ in range(5):
        sim.wheel(-250)

    cam = sim.camera.state
    print(f"Position: ({cam.position_x:.0f}, {cam.position_y:.0f})")
    print(f"Rotation: x={cam.rotation_x:.1f} z={cam.rotation_z:.1f}")
    print(f"Zoom: {cam.zoom:.2f}")
    sim.unmount()


def demo_investigate():
    """
    Demonstration: Node investigation.

    Lets the field evolve, then investigates a few nodes.
    """
    print("\n" + "=" * 60)
    print("DEMO: NODE INVESTIGATION")
    print("=" * 60 + "\n")

    sim = LandscapeSimulation(verbose=True)
    sim.mount()
    sim.step(3000)

    for index in (0, 210, 399):
        detail = sim.click_node(index)
        print(f"  {detail.id}: {detail.origin_link} -> {detail.target_link} "
              f"{detail.magnitude_label} @ {detail.timestamp_label}")
        print(f"  Chart: {dict(zip(sim.investigation.chart.categories, np.round(sim.investigation.chart.values, 1)))}")

    sim.dismiss()
    print(f"\nPhase after dismiss: {sim.investigation.phase.value}")
    sim.unmount()


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        if sys.argv[1] == "orbit":
            demo_orbit()
        elif sys.argv[1] == "investigate":
            demo_investigate()
        else:
            print("Unknown demo. Options: 'orbit', 'investigate'")
    else:
        # Run main simulation
        if DEFAULT_CONFIG_PATH.exists():
            sim = LandscapeSimulation(str(DEFAULT_CONFIG_PATH))
        else:
            sim = LandscapeSimulation()

        sim.run(duration_ms=10000.0)
