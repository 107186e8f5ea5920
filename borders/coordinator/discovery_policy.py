"""Discovery-driven border growth.

A discovery is a player holding more of an item than last tick, for an
item nobody has obtained before. While the backlog counter is positive,
discoveries are recorded as obtained but otherwise ignored, so a
mid-game restart can pre-seed items that are already known.
"""

import logging

from .border_state import BorderState
from .border_sync import BorderSync

logger = logging.getLogger(__name__)


class DiscoveryPolicy:
    """Applies score, timer and growth effects of new item discoveries."""

    def __init__(self, sync: BorderSync):
        self.sync = sync

    @property
    def sink(self):
        return self.sync.sink

    def handle(self, state: BorderState, player_id: str, item: str) -> dict | None:
        """Process one newly observed item.

        Returns the emitted event dict, or None when the item was already
        obtained.
        """
        if item in state.obtained_items:
            return None

        # Backlog: record first so the item can never trigger growth later
        if state.ignored_discoveries_remaining > 0:
            state.ignored_discoveries_remaining -= 1
            state.obtained_items.add(item)
            logger.info('[Borders] Ignored discovery for backlog (%d remaining). Item=%s',
                        state.ignored_discoveries_remaining, item)
            return {
                'type': 'discovery_ignored',
                'tick': state.global_tick,
                'player': player_id,
                'item': item,
                'description': f'Backlog discovery of {item} by {player_id} '
                               f'({state.ignored_discoveries_remaining} remaining)',
            }

        state.obtained_items.add(item)
        self.sink.notify_players('discovery', {'player': player_id, 'item': item})
        self.sink.add_score(player_id, 1)
        state.rebase_discovery_timer()

        event = {
            'type': 'discovery',
            'tick': state.global_tick,
            'player': player_id,
            'item': item,
            'description': f'{player_id} found {item}',
        }

        per_side = state.discovery_growth_per_side
        if state.border_initialized and per_side > 0:
            new_size = self.sync.resize(state, per_side * 2.0)
            event['border_size'] = new_size
            logger.info('[Borders] Border expanded by %d per side (%.1f diameter). New size: %.1f',
                        per_side, per_side * 2.0, new_size)
        return event
