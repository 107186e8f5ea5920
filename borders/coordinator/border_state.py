"""Authoritative border/game state.

One BorderState instance lives for the whole process. It is built at
startup, optionally replaced by a loaded snapshot, and written back at
shutdown. Every policy receives it by reference and mutates it in place.
"""

import math
from dataclasses import dataclass, field, asdict


MIN_BORDER_SIZE = 16.0          # starting diameter and shrink floor
CELL_SIZE = 16                  # border is centered on a 16x16 cell
TICKS_PER_SECOND = 20
DEFAULT_FAILSAFE_DELAY_TICKS = 6000   # 5 minutes at 20 TPS

DEFAULT_DIMENSIONS: tuple[str, ...] = ('overworld', 'the_nether', 'the_end')


@dataclass(frozen=True)
class Position:
    """World position; y is vertical."""
    x: float
    y: float
    z: float

    def block(self) -> 'Position':
        """Floor every axis to the containing block."""
        return Position(float(math.floor(self.x)), float(math.floor(self.y)),
                        float(math.floor(self.z)))

    def block_center(self) -> 'Position':
        """Horizontal center of this block, same height."""
        return Position(self.x + 0.5, self.y, self.z + 0.5)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class BorderState:
    """All mutable border configuration and counters."""
    border_initialized: bool = False
    border_size: float = MIN_BORDER_SIZE
    border_center_x: float = 0.0
    border_center_z: float = 0.0
    initial_spawn_pos: Position | None = None

    game_active: bool = False
    failsafe_enabled: bool = True

    global_tick: int = 0
    last_discovery_tick: int = 0
    failsafe_delay_ticks: int = DEFAULT_FAILSAFE_DELAY_TICKS

    discovery_growth_per_side: int = 1
    death_shrink_enabled: bool = True
    death_shrink_per_side: int = 5

    ignored_discoveries_remaining: int = 0
    obtained_items: set[str] = field(default_factory=set)

    # player_id -> item_id -> count; volatile, never persisted
    last_inventory_snapshot: dict[str, dict[str, int]] = field(default_factory=dict)

    def rebase_discovery_timer(self) -> None:
        self.last_discovery_tick = self.global_tick

    def ticks_since_discovery(self) -> int:
        return max(0, self.global_tick - self.last_discovery_tick)
