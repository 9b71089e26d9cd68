"""
Investigation State Machine
===========================
Single-node selection with a synthetic detail record.

STATES:
- IDLE: Nothing selected
- SELECTED: One node highlighted with its detail record and chart

Selecting while already selected replaces the selection directly;
there is never an intermediate IDLE.
"""

import numpy as np
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


CHART_CATEGORIES = ('Flux', 'Density', 'Latency', 'Resonance')
CHART_COLORS = ('#3b82f6', '#8b5cf6', '#ef4444', '#10b981')
CHART_MAX = 100.0


class InvestigationPhase(Enum):
    IDLE = "idle"
    SELECTED = "selected"


@dataclass(frozen=True)
class DetailRecord:
    """Presentation data for the selected node"""
    id: str
    origin_link: str
    target_link: str
    magnitude: float
    timestamp_label: str
    status: str = "confirmed"

    @property
    def magnitude_label(self) -> str:
        return f"{self.magnitude:.4f} GWh"


@dataclass(frozen=True)
class TelemetryChart:
    """Categorical column series for the detail panel"""
    values: Tuple[float, ...]
    categories: Tuple[str, ...] = CHART_CATEGORIES
    colors: Tuple[str, ...] = CHART_COLORS
    name: str = "Node Telemetry"

    def to_options(self) -> Dict:
        """Options payload for the external 3D column chart."""
        return {
            'chart': {
                'type': 'column',
                'backgroundColor': 'transparent',
                'options3d': {
                    'enabled': True,
                    'alpha': 15,
                    'beta': 15,
                    'depth': 50,
                    'viewDistance': 25
                }
            },
            'title': {'text': None},
            'xAxis': {'categories': list(self.categories)},
            'yAxis': {'title': {'text': None}},
            'series': [{
                'name': self.name,
                'data': list(self.values),
                'colorByPoint': True,
                'colors': list(self.colors)
            }],
            'legend': {'enabled': False},
            'credits': {'enabled': False}
        }


class InvestigationStateMachine:
    """
    Tracks at most one investigated node.

    Reads the node field only to copy the selected magnitude; never
    touches simulation state.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.selected_index: Optional[int] = None
        self.detail: Optional[DetailRecord] = None
        self.chart: Optional[TelemetryChart] = None

    @property
    def phase(self) -> InvestigationPhase:
        if self.selected_index is None:
            return InvestigationPhase.IDLE
        return InvestigationPhase.SELECTED

    @property
    def is_selected(self) -> bool:
        return self.selected_index is not None

    def _origin_link(self) -> str:
        digits = self.rng.integers(0, 16, size=10)
        return '0x' + ''.join(f'{int(d):x}' for d in digits) + '...'

    def select(self, index: int, field: np.ndarray, active_node: str) -> DetailRecord:
        """
        Investigate a node, replacing any previous selection.

        Raises IndexError if the index is outside the node field.
        """
        if not 0 <= index < len(field):
            raise IndexError(f"Node index {index} outside field of {len(field)} nodes")

        self.detail = DetailRecord(
            id=f"NODE-{index}-{active_node}",
            origin_link=self._origin_link(),
            target_link=f"Node_{index}",
            magnitude=float(field[index]),
            timestamp_label=datetime.now().strftime('%H:%M:%S')
        )
        self.chart = TelemetryChart(
            values=tuple(float(v) for v in self.rng.uniform(0.0, CHART_MAX, size=len(CHART_CATEGORIES)))
        )
        self.selected_index = index
        return self.detail

    def dismiss(self):
        """Return to IDLE."""
        self.selected_index = None
        self.detail = None
        self.chart = None
