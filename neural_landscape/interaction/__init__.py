"""
Interaction Module
==================
Input handling and selection for the landscape.

- EventLoop: Cooperative timers and window listeners
- InvestigationStateMachine: Single-node investigation
"""

from .event_loop import (
    EventLoop,
    TimerHandle,
    ListenerHandle,
    KeyEvent,
    PointerEvent,
    WheelEvent
)

from .investigation import (
    InvestigationStateMachine,
    InvestigationPhase,
    DetailRecord,
    TelemetryChart,
    CHART_CATEGORIES
)

__all__ = [
    'EventLoop',
    'TimerHandle',
    'ListenerHandle',
    'KeyEvent',
    'PointerEvent',
    'WheelEvent',
    'InvestigationStateMachine',
    'InvestigationPhase',
    'DetailRecord',
    'TelemetryChart',
    'CHART_CATEGORIES',
]
