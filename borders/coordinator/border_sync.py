"""Border geometry: cross-dimension sync, floor clamp, init, join clamp, reset.

Every change to border_size or the center goes through BorderSync.apply()
so all dimensions always show the same size and center.
"""

import logging
import math

from .border_state import BorderState, Position, CELL_SIZE, MIN_BORDER_SIZE, DEFAULT_DIMENSIONS
from .sinks import HostSink

logger = logging.getLogger(__name__)


def cell_center(coord: float) -> float:
    """Center of the 16-wide cell containing ``coord`` on one axis."""
    return float(math.floor(coord / CELL_SIZE) * CELL_SIZE + CELL_SIZE // 2)


def clamp_size(size: float) -> float:
    """Apply the shrink floor. There is no upper bound."""
    return max(MIN_BORDER_SIZE, size)


def is_inside_border(state: BorderState, x: float, z: float) -> bool:
    half = state.border_size / 2.0
    return (state.border_center_x - half <= x <= state.border_center_x + half
            and state.border_center_z - half <= z <= state.border_center_z + half)


class BorderSync:
    """Pushes the state's size and center to every dimension of the host.

    Args:
        sink: Host sink receiving set_border / refresh_border_label.
        dimensions: Dimension names to keep in sync.
    """

    def __init__(self, sink: HostSink, dimensions: tuple[str, ...] = DEFAULT_DIMENSIONS):
        self.sink = sink
        self.dimensions = tuple(dimensions)

    def apply(self, state: BorderState) -> list[str]:
        """Send the current border to all available dimensions.

        Returns the dimensions that were updated; missing ones are skipped.
        """
        updated = []
        for dimension in self.dimensions:
            if not self.sink.has_dimension(dimension):
                continue
            self.sink.set_border(dimension, state.border_size,
                                 state.border_center_x, state.border_center_z)
            updated.append(dimension)
        return updated

    def refresh_label(self, state: BorderState) -> None:
        self.sink.refresh_border_label(state.border_size)

    def resize(self, state: BorderState, diameter_delta: float) -> float:
        """Change the diameter by a signed delta, clamp, sync and relabel.

        Returns the new size.
        """
        state.border_size = clamp_size(state.border_size + diameter_delta)
        self.apply(state)
        self.refresh_label(state)
        return state.border_size


def initialize_on_first_join(state: BorderState, sync: BorderSync,
                             player_id: str, position: Position) -> bool:
    """Center the border on the first joining player's cell.

    Returns False (and does nothing) once the border is initialized.
    """
    if state.border_initialized:
        return False

    spawn = position.block()
    state.initial_spawn_pos = spawn
    state.border_center_x = cell_center(spawn.x)
    state.border_center_z = cell_center(spawn.z)
    state.border_size = MIN_BORDER_SIZE
    sync.apply(state)

    sync.sink.teleport_player(
        player_id, Position(state.border_center_x, spawn.y, state.border_center_z))

    state.border_initialized = True
    state.rebase_discovery_timer()

    logger.info('[Borders] Border initialized around (%s, %s) by %s',
                state.border_center_x, state.border_center_z, player_id)
    return True


def clamp_player_on_join(state: BorderState, sink: HostSink,
                         player_id: str, position: Position) -> bool:
    """Teleport a joining player back to spawn if they are outside the border.

    Never resizes. Returns True when the player was moved.
    """
    if not state.border_initialized or state.initial_spawn_pos is None:
        return False
    if is_inside_border(state, position.x, position.z):
        return False
    sink.teleport_player(player_id, state.initial_spawn_pos.block_center())
    return True


def reset_border(state: BorderState, sync: BorderSync) -> None:
    """Recenter on the spawn cell (when known) and return to the starting size."""
    if state.initial_spawn_pos is not None:
        state.border_center_x = cell_center(state.initial_spawn_pos.x)
        state.border_center_z = cell_center(state.initial_spawn_pos.z)
    state.border_size = MIN_BORDER_SIZE
    sync.apply(state)
