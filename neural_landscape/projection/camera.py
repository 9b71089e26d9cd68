"""
Camera Controller
=================
Orbit, pan and zoom state for the landscape view.

INPUTS:
- WASD: Pan the camera position (unbounded)
- Drag: Orbit, incremental from the last pointer position
- Wheel: Zoom in/out (bounded)

Rotation about X (tilt) and zoom are clamped; rotation about Z and the
pan position accumulate freely.
"""

import numpy as np
from dataclasses import dataclass, replace
from typing import Optional, Tuple
from pyrr import Matrix44, matrix44


@dataclass
class CameraConfig:
    """Camera input sensitivities and bounds"""
    pan_step: float = 10.0              # Position change per key press
    drag_sensitivity: float = 0.4       # Degrees per pixel of drag
    wheel_sensitivity: float = 0.001    # Zoom change per wheel unit
    min_rotation_x: float = 5.0         # deg
    max_rotation_x: float = 175.0       # deg
    min_zoom: float = 0.2
    max_zoom: float = 5.0
    initial_rotation_x: float = 65.0    # deg
    initial_rotation_z: float = 45.0    # deg


@dataclass(frozen=True)
class CameraState:
    """Current camera state."""
    position_x: float = 0.0
    position_y: float = 0.0
    rotation_x: float = 65.0    # Tilt, degrees
    rotation_z: float = 45.0    # Heading, degrees
    zoom: float = 1.0


# Pan direction per key as (dx, dy) in units of pan_step
PAN_KEYBINDS = {
    'w': (0, 1),
    's': (0, -1),
    'a': (1, 0),
    'd': (-1, 0),
}


class CameraController:
    """
    Accumulates discrete input events into a camera state.

    Replaying the same event sequence always produces the same state.
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self.state = self._initial_state()

        # Drag state
        self.dragging = False
        self.last_pointer: Tuple[float, float] = (0.0, 0.0)

    def _initial_state(self) -> CameraState:
        return CameraState(
            rotation_x=self._clamp_rotation_x(self.config.initial_rotation_x),
            rotation_z=self.config.initial_rotation_z
        )

    def reset(self):
        """Restore the initial camera and end any drag."""
        self.state = self._initial_state()
        self.dragging = False

    def _clamp_rotation_x(self, value: float) -> float:
        return float(np.clip(value, self.config.min_rotation_x, self.config.max_rotation_x))

    def _clamp_zoom(self, value: float) -> float:
        return float(np.clip(value, self.config.min_zoom, self.config.max_zoom))

    # =========================================================================
    # USER INPUT HANDLERS
    # =========================================================================

    def handle_key(self, key: str) -> bool:
        """
        Pan on a directional key.

        Returns True if the key was recognized.
        """
        direction = PAN_KEYBINDS.get(key.lower())
        if direction is None:
            return False
        step = self.config.pan_step
        self.state = replace(
            self.state,
            position_x=self.state.position_x + direction[0] * step,
            position_y=self.state.position_y + direction[1] * step
        )
        return True

    def press(self, x: float, y: float):
        """Start an orbit drag anchored at the pointer."""
        self.dragging = True
        self.last_pointer = (x, y)

    def move(self, x: float, y: float) -> bool:
        """Handle pointer motion; only orbits while a drag is active."""
        if not self.dragging:
            return False
        dx = x - self.last_pointer[0]
        dy = y - self.last_pointer[1]
        sensitivity = self.config.drag_sensitivity
        self.state = replace(
            self.state,
            rotation_z=self.state.rotation_z + dx * sensitivity,
            rotation_x=self._clamp_rotation_x(self.state.rotation_x - dy * sensitivity)
        )
        self.last_pointer = (x, y)
        return True

    def release(self):
        """End the drag regardless of pointer location."""
        self.dragging = False

    def wheel(self, delta_y: float):
        """Handle a wheel event (positive delta zooms out)."""
        self.state = replace(
            self.state,
            zoom=self._clamp_zoom(self.state.zoom - delta_y * self.config.wheel_sensitivity)
        )

    # =========================================================================
    # TRANSFORM
    # =========================================================================

    def transform(self) -> Matrix44:
        """
        Compose scale . rotateX . rotateZ . translate into one matrix.

        Points are translated first, then rotated about Z, then X, then
        scaled (pyrr row-vector order).
        """
        s = self.state
        translate = matrix44.create_from_translation([s.position_x, s.position_y, 0.0])
        rot_z = matrix44.create_from_z_rotation(np.radians(s.rotation_z))
        rot_x = matrix44.create_from_x_rotation(np.radians(s.rotation_x))
        scale = matrix44.create_from_scale([s.zoom, s.zoom, s.zoom])

        combined = matrix44.multiply(translate, rot_z)
        combined = matrix44.multiply(combined, rot_x)
        combined = matrix44.multiply(combined, scale)
        return Matrix44(combined)

    def apply(self, point) -> np.ndarray:
        """Transform a single 3D point into view space."""
        mat = np.asarray(self.transform(), dtype=np.float64)
        return np.asarray(matrix44.apply_to_vector(mat, np.asarray(point, dtype=np.float64)))
