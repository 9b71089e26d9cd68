"""
Telemetry Generator
===================
Synthetic node telemetry driven by a bounded random walk.

Each slow tick replaces the whole node field:

    v' = clip(v + U(-step, step), min_value, max_value)

The new field is computed from the previous snapshot only and handed out
read-only, so anything holding an older snapshot keeps seeing old values.
"""

import numpy as np
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class TelemetryConfig:
    """Random walk and market snapshot parameters"""
    grid_size: int = 20            # Nodes per row (field is grid_size²)
    interval_ms: float = 1000.0    # Slow tick period
    walk_step: float = 5.0         # Max absolute change per tick
    min_value: float = 5.0         # Field floor
    max_value: float = 120.0       # Field ceiling
    initial_max: float = 50.0      # Upper bound of initial draw
    base_price: float = 52000.0    # Synthetic price floor
    price_spread: float = 2000.0   # Synthetic price range above floor
    change_range: float = 3.0      # 24h change drawn from ±range percent

    @property
    def node_count(self) -> int:
        return self.grid_size * self.grid_size


@dataclass(frozen=True)
class MarketSnapshot:
    """Display-only summary emitted on every telemetry tick."""
    symbol: str
    price: float
    change_24h: float
    volume: np.ndarray
    last_update: datetime


def _freeze(values: np.ndarray) -> np.ndarray:
    values.flags.writeable = False
    return values


class TelemetryGenerator:
    """
    Bounded random-walk generator for the node field.

    The field length never changes after construction; only reset()
    draws a fresh field.
    """

    def __init__(self,
                 config: Optional[TelemetryConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or TelemetryConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.tick_count = 0
        self._field = self._initial_field()

    def _initial_field(self) -> np.ndarray:
        cfg = self.config
        values = self.rng.uniform(cfg.min_value, cfg.initial_max, size=cfg.node_count)
        return _freeze(values.astype(np.float64))

    @property
    def field(self) -> np.ndarray:
        """Current node field (read-only snapshot)."""
        return self._field

    @property
    def node_count(self) -> int:
        return self._field.shape[0]

    def reset(self):
        """Re-initialize the node field."""
        self._field = self._initial_field()
        self.tick_count = 0

    def step_field(self) -> np.ndarray:
        """Advance the random walk by one tick and return the new snapshot."""
        cfg = self.config
        deltas = self.rng.uniform(-cfg.walk_step, cfg.walk_step, size=self.node_count)
        updated = np.clip(self._field + deltas, cfg.min_value, cfg.max_value)
        self._field = _freeze(updated)
        self.tick_count += 1
        return self._field

    def tick(self, symbol: str) -> MarketSnapshot:
        """
        Execute one telemetry tick.

        Returns the derived market snapshot for display. The snapshot has
        no feedback into the field.
        """
        field = self.step_field()
        cfg = self.config
        return MarketSnapshot(
            symbol=symbol,
            price=cfg.base_price + self.rng.uniform(0.0, cfg.price_spread),
            change_24h=self.rng.uniform(-cfg.change_range, cfg.change_range),
            volume=field,
            last_update=datetime.now()
        )
