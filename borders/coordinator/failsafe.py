"""Inactivity failsafe: grow the border when nobody discovers anything.

Level-triggered on ``global_tick - last_discovery_tick``; there is no
timer object. A long pause fires once, after which the rebase holds it
off for another full delay.
"""

import logging

from .border_state import BorderState
from .border_sync import BorderSync

logger = logging.getLogger(__name__)


class FailsafeEvaluator:

    def __init__(self, sync: BorderSync):
        self.sync = sync

    def is_due(self, state: BorderState) -> bool:
        return (state.border_initialized
                and state.game_active
                and state.failsafe_enabled
                and state.global_tick - state.last_discovery_tick >= state.failsafe_delay_ticks)

    def evaluate(self, state: BorderState) -> dict | None:
        """Run once per tick, after discoveries. Returns the event when it fires."""
        if not self.is_due(state):
            return None
        per_side = state.discovery_growth_per_side
        if per_side <= 0:
            return None

        idle_ticks = state.global_tick - state.last_discovery_tick
        new_size = self.sync.resize(state, per_side * 2.0)
        state.rebase_discovery_timer()
        self.sync.sink.notify_players('failsafe_expansion', {
            'idle_ticks': idle_ticks,
            'size': new_size,
        })

        logger.info('[Borders] Failsafe: no new items for %d ticks, border expanded to %.1f',
                    idle_ticks, new_size)
        return {
            'type': 'failsafe_expansion',
            'tick': state.global_tick,
            'border_size': new_size,
            'description': f'No discoveries for {idle_ticks} ticks, border grew to {new_size:g}',
        }
