"""Death-driven border shrink, clamped to the starting size."""

import logging

from .border_state import BorderState
from .border_sync import BorderSync

logger = logging.getLogger(__name__)


class DeathPolicy:

    def __init__(self, sync: BorderSync):
        self.sync = sync

    def should_shrink(self, state: BorderState) -> bool:
        return (state.border_initialized
                and state.game_active
                and state.death_shrink_enabled
                and state.death_shrink_per_side > 0)

    def handle(self, state: BorderState, player_id: str) -> dict | None:
        """Shrink the border for a player death. Never touches the discovery timer."""
        if not self.should_shrink(state):
            return None

        per_side = state.death_shrink_per_side
        before = state.border_size
        new_size = self.sync.resize(state, -per_side * 2.0)
        self.sync.sink.notify_players('death_shrink', {
            'player': player_id,
            'blocks_per_side': per_side,
            'size': new_size,
        })

        logger.info('[Borders] Death shrink triggered by %s: %d per side. Size %.1f -> %.1f',
                    player_id, per_side, before, new_size)
        return {
            'type': 'death_shrink',
            'tick': state.global_tick,
            'player': player_id,
            'border_size': new_size,
            'description': f'{player_id} died, border {before:g} -> {new_size:g}',
        }
