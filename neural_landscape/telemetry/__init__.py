"""
Telemetry Module
================
Synthetic data sources for the landscape.

Submodules:
- generator: Bounded random-walk node field and market snapshot
- packets: Transient packet pool with FIFO cap and timed eviction
"""

from .generator import (
    TelemetryGenerator,
    TelemetryConfig,
    MarketSnapshot
)

from .packets import (
    PacketPool,
    PacketConfig,
    Packet,
    PACKET_PALETTE
)

__all__ = [
    # Generator
    'TelemetryGenerator',
    'TelemetryConfig',
    'MarketSnapshot',
    # Packets
    'PacketPool',
    'PacketConfig',
    'Packet',
    'PACKET_PALETTE',
]
