"""Per-player inventory diffing.

Compares each player's inventory with the previous tick's snapshot and
reports the items whose held count went up. A player with no previous
snapshot (first tick after joining) reports nothing.
"""

from .border_state import BorderState
from .items import parse_item_id
from .sinks import InventorySource


def detect_increased_items(previous: dict[str, int] | None,
                           current: dict[str, int]) -> dict[str, int]:
    """Return item -> increase for every item whose count grew.

    Order follows ``current``.
    """
    if previous is None:
        return {}
    increased: dict[str, int] = {}
    for item, count in current.items():
        before = previous.get(item, 0)
        if count > before:
            increased[item] = count - before
    return increased


def normalize_inventory(raw: dict[str, int]) -> dict[str, int]:
    """Canonicalize item ids and merge duplicates; drop malformed ids and empty stacks."""
    counts: dict[str, int] = {}
    for item, count in raw.items():
        item_id = parse_item_id(item)
        if item_id is None or count <= 0:
            continue
        counts[item_id] = counts.get(item_id, 0) + int(count)
    return counts


class InventoryDiffTracker:
    """Diffs every online player's inventory once per tick."""

    def __init__(self, source: InventorySource):
        self.source = source

    def scan(self, state: BorderState) -> list[tuple[str, str]]:
        """Diff all players, then replace the stored snapshots wholesale.

        Returns (player_id, item_id) pairs in player-then-item order.
        """
        increases: list[tuple[str, str]] = []
        snapshots: dict[str, dict[str, int]] = {}
        for player_id in self.source.online_players():
            current = normalize_inventory(self.source.scan_inventory(player_id))
            previous = state.last_inventory_snapshot.get(player_id)
            for item in detect_increased_items(previous, current):
                increases.append((player_id, item))
            snapshots[player_id] = current
        state.last_inventory_snapshot = snapshots
        return increases
