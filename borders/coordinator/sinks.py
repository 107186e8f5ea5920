"""Collaborator interfaces consumed by the coordinator.

HostSink receives every outbound effect (border geometry, chat,
scoreboard, teleports). InventorySource supplies the online player list
and their inventory counts. Both are fire-and-forget from the core's
point of view: no return value other than has_dimension() is consumed.
"""

from .border_state import Position


class HostSink:
    """Base sink. Every effect is a no-op; subclasses override what they need."""

    def has_dimension(self, dimension: str) -> bool:
        return True

    def set_border(self, dimension: str, size: float,
                   center_x: float, center_z: float) -> None:
        pass

    def notify_players(self, kind: str, params: dict) -> None:
        pass

    def add_score(self, player_id: str, delta: int) -> None:
        pass

    def refresh_border_label(self, size: float) -> None:
        pass

    def reset_scores(self) -> None:
        pass

    def teleport_player(self, player_id: str, position: Position) -> None:
        pass


class RecordingSink(HostSink):
    """In-memory sink: keeps the last border per dimension and a call log.

    Args:
        dimensions: Dimensions that exist. None means every dimension.
    """

    def __init__(self, dimensions: set[str] | None = None):
        self.available: set[str] | None = set(dimensions) if dimensions is not None else None
        self.borders: dict[str, tuple[float, float, float]] = {}
        self.notifications: list[tuple[str, dict]] = []
        self.scores: dict[str, int] = {}
        self.labels: list[float] = []
        self.teleports: list[tuple[str, Position]] = []
        self.calls: list[tuple] = []

    def has_dimension(self, dimension: str) -> bool:
        return self.available is None or dimension in self.available

    def set_border(self, dimension, size, center_x, center_z):
        self.borders[dimension] = (size, center_x, center_z)
        self.calls.append(('set_border', dimension, size, center_x, center_z))

    def notify_players(self, kind, params):
        self.notifications.append((kind, dict(params)))
        self.calls.append(('notify_players', kind, dict(params)))

    def add_score(self, player_id, delta):
        self.scores[player_id] = self.scores.get(player_id, 0) + delta
        self.calls.append(('add_score', player_id, delta))

    def refresh_border_label(self, size):
        self.labels.append(size)
        self.calls.append(('refresh_border_label', size))

    def reset_scores(self):
        self.scores.clear()
        self.calls.append(('reset_scores',))

    def teleport_player(self, player_id, position):
        self.teleports.append((player_id, position))
        self.calls.append(('teleport_player', player_id, position))


class OutboxSink(HostSink):
    """Collects effects as JSON-ready action dicts for the caller to apply."""

    def __init__(self):
        self._actions: list[dict] = []

    def set_border(self, dimension, size, center_x, center_z):
        self._actions.append({'action': 'set_border', 'dimension': dimension,
                              'size': size, 'centerX': center_x, 'centerZ': center_z})

    def notify_players(self, kind, params):
        self._actions.append({'action': 'notify', 'kind': kind, 'params': dict(params)})

    def add_score(self, player_id, delta):
        self._actions.append({'action': 'add_score', 'player': player_id, 'delta': delta})

    def refresh_border_label(self, size):
        self._actions.append({'action': 'border_label', 'size': size})

    def reset_scores(self):
        self._actions.append({'action': 'reset_scores'})

    def teleport_player(self, player_id, position):
        self._actions.append({'action': 'teleport', 'player': player_id,
                              'position': position.to_dict()})

    def drain(self) -> list[dict]:
        """Return and forget the collected actions."""
        actions, self._actions = self._actions, []
        return actions


class InventorySource:
    """Base inventory adapter: no players online."""

    def online_players(self) -> list[str]:
        return []

    def scan_inventory(self, player_id: str) -> dict[str, int]:
        return {}


class StaticInventorySource(InventorySource):
    """Inventory adapter fed by the host once per tick.

    The host pushes ``{player_id: {item_id: count}}``; players absent from
    the latest push are treated as offline.
    """

    def __init__(self):
        self._inventories: dict[str, dict[str, int]] = {}

    def update(self, inventories: dict[str, dict[str, int]]) -> None:
        self._inventories = {
            str(pid): {str(item): int(count) for item, count in (items or {}).items()}
            for pid, items in inventories.items()
        }

    def online_players(self) -> list[str]:
        return list(self._inventories)

    def scan_inventory(self, player_id: str) -> dict[str, int]:
        return dict(self._inventories.get(player_id, {}))
