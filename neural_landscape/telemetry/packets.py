"""
Packet Pool
===========
Transient directed packets flying between grid nodes.

This module handles:
- Probabilistic spawning on the slow telemetry tick
- FIFO capacity cap (oldest dropped first)
- Deterministic progress stepping on the fast physics tick
- Eviction once a packet completes its flight

With the default step of 0.02 every packet lives exactly 50 physics ticks.
"""

import numpy as np
from dataclasses import dataclass, replace
from typing import Optional, Tuple


PACKET_PALETTE = ('#60a5fa', '#a78bfa')

_ID_ALPHABET = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'
_HEX_ALPHABET = '0123456789abcdef'

# Decimal places kept on progress so repeated steps land exactly on 1.0
_PROGRESS_DECIMALS = 9


@dataclass
class PacketConfig:
    """Packet spawn and physics parameters"""
    physics_interval_ms: float = 32.0   # Fast tick period
    spawn_probability: float = 0.6      # Chance of a spawn per slow tick
    capacity: int = 21                  # Max live packets
    progress_step: float = 0.02         # Progress added per fast tick
    max_value: float = 50.0             # Upper bound of packet magnitude


@dataclass(frozen=True)
class Packet:
    """A single directed packet. Only progress changes, by replacement."""
    id: str
    value: float
    start_x: int
    start_y: int
    end_x: int
    end_y: int
    progress: float
    color: str
    hash: str


class PacketPool:
    """
    Bounded pool of in-flight packets.

    The pool is held as a tuple and replaced wholesale on every change,
    so a snapshot taken by a reader never changes underneath it.
    """

    def __init__(self,
                 config: Optional[PacketConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or PacketConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._packets: Tuple[Packet, ...] = ()

        # Lifetime counters
        self.spawned = 0
        self.evicted = 0
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._packets)

    @property
    def packets(self) -> Tuple[Packet, ...]:
        return self._packets

    def clear(self):
        self._packets = ()

    def _random_token(self, alphabet: str, length: int) -> str:
        picks = self.rng.integers(0, len(alphabet), size=length)
        return ''.join(alphabet[i] for i in picks)

    def create_packet(self, node_count: int, grid_size: int) -> Packet:
        """Build a packet between two independent random nodes."""
        start_idx = int(self.rng.integers(0, node_count))
        end_idx = int(self.rng.integers(0, node_count))  # May equal start_idx

        return Packet(
            id=self._random_token(_ID_ALPHABET, 6),
            value=float(self.rng.uniform(0.0, self.config.max_value)),
            start_x=start_idx % grid_size,
            start_y=start_idx // grid_size,
            end_x=end_idx % grid_size,
            end_y=end_idx // grid_size,
            progress=0.0,
            color=PACKET_PALETTE[int(self.rng.integers(0, len(PACKET_PALETTE)))],
            hash='0x' + self._random_token(_HEX_ALPHABET, 32)
        )

    def push(self, packet: Packet):
        """Append a packet, keeping only the most recent `capacity` entries."""
        capacity = self.config.capacity
        pool = self._packets + (packet,)
        if len(pool) > capacity:
            self.dropped += len(pool) - capacity
            pool = pool[-capacity:]
        self._packets = pool
        self.spawned += 1

    def maybe_spawn(self, node_count: int, grid_size: int) -> Optional[Packet]:
        """
        Spawn one packet with the configured probability.

        Returns the new packet, or None when the draw fails.
        """
        if self.rng.random() >= self.config.spawn_probability:
            return None
        packet = self.create_packet(node_count, grid_size)
        self.push(packet)
        return packet

    def advance(self) -> int:
        """
        Execute one physics tick.

        Returns the number of packets evicted because they finished.
        """
        step = self.config.progress_step
        moved = [
            replace(p, progress=round(p.progress + step, _PROGRESS_DECIMALS))
            for p in self._packets
        ]
        live = tuple(p for p in moved if p.progress < 1.0)
        finished = len(moved) - len(live)

        self._packets = live
        self.evicted += finished
        return finished

    def get_status(self) -> dict:
        return {
            'live': len(self._packets),
            'capacity': self.config.capacity,
            'spawned': self.spawned,
            'evicted': self.evicted,
            'dropped': self.dropped,
        }
