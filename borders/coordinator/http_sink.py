"""HostSink that forwards every effect to the game host over HTTP.

Each call is a short fire-and-forget POST; an unreachable host is
logged and skipped, never raised into the coordinator.
"""

import logging

import requests

from .border_state import DEFAULT_DIMENSIONS
from .sinks import HostSink

logger = logging.getLogger(__name__)


class HttpHostSink(HostSink):
    """
    Args:
        base_url: Host API root, e.g. ``http://localhost:25580``.
        dimensions: Dimensions the host has loaded; others are skipped.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, base_url: str, dimensions: tuple[str, ...] = DEFAULT_DIMENSIONS,
                 timeout: float = 1):
        self.base_url = base_url.rstrip('/')
        self.dimensions = set(dimensions)
        self.timeout = timeout
        self.failures = 0

    def _post(self, path: str, payload: dict) -> bool:
        try:
            requests.post(f'{self.base_url}{path}', json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            self.failures += 1
            logger.warning('[Borders] Push to %s failed: %s', path, e)
            return False
        return True

    def has_dimension(self, dimension):
        return dimension in self.dimensions

    def set_border(self, dimension, size, center_x, center_z):
        self._post('/border', {'dimension': dimension, 'size': size,
                               'centerX': center_x, 'centerZ': center_z})

    def notify_players(self, kind, params):
        self._post('/notify', {'kind': kind, 'params': params})

    def add_score(self, player_id, delta):
        self._post('/score', {'player': player_id, 'delta': delta})

    def refresh_border_label(self, size):
        self._post('/label', {'size': size})

    def reset_scores(self):
        self._post('/scores/reset', {})

    def teleport_player(self, player_id, position):
        self._post('/teleport', {'player': player_id, 'position': position.to_dict()})
