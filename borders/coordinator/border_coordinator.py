"""BorderCoordinator: the single entry point host adapters talk to.

Owns the BorderState and the policies that mutate it. Every public
method takes the coordinator lock, so adapters running handlers on
several threads still see one writer at a time.

Per tick:
    1. global_tick += 1
    2. diff every online player's inventory
    3. feed new items to the discovery policy (player-then-item order)
    4. evaluate the failsafe exactly once
"""

import logging
import threading

from .border_state import BorderState, Position, DEFAULT_DIMENSIONS
from .border_sync import BorderSync, initialize_on_first_join, clamp_player_on_join
from .commands import CommandError, CommandHandler, CommandResult
from .death_policy import DeathPolicy
from .discovery_policy import DiscoveryPolicy
from .failsafe import FailsafeEvaluator
from .inventory_tracker import InventoryDiffTracker
from .items import ItemRegistry
from .persistence import BorderSnapshot, DEFAULT_STATE_PATH, load_from_disk, save_to_disk
from .sinks import HostSink, InventorySource

logger = logging.getLogger(__name__)


class BorderCoordinator:
    """Routes host events to the border policies.

    Args:
        sink: Receives border, chat, score and teleport effects.
        source: Supplies online players and their inventories.
        state: Initial state; a fresh default state when None.
        dimensions: Dimensions kept in sync.
        state_path: Snapshot file used by on_startup/on_shutdown. None
            disables persistence.
        registry: Resolves persisted item ids on load.
    """

    def __init__(self, sink: HostSink | None = None,
                 source: InventorySource | None = None,
                 state: BorderState | None = None,
                 dimensions: tuple[str, ...] = DEFAULT_DIMENSIONS,
                 state_path: str | None = DEFAULT_STATE_PATH,
                 registry: ItemRegistry | None = None):
        self.sink = sink or HostSink()
        self.source = source or InventorySource()
        self.state = state or BorderState()
        self.state_path = state_path
        self.registry = registry or ItemRegistry()

        self.sync = BorderSync(self.sink, dimensions)
        self.tracker = InventoryDiffTracker(self.source)
        self.discovery = DiscoveryPolicy(self.sync)
        self.death = DeathPolicy(self.sync)
        self.failsafe = FailsafeEvaluator(self.sync)
        self.commands = CommandHandler(self.sync, self.source)

        self.lock = threading.RLock()

    # ── Host events ────────────────────────────────────────────────────

    def on_tick(self) -> list[dict]:
        """Advance one game tick. Returns the events emitted this tick."""
        with self.lock:
            state = self.state
            state.global_tick += 1
            events: list[dict] = []

            for player_id, item in self.tracker.scan(state):
                if not state.game_active or item in state.obtained_items:
                    continue
                event = self.discovery.handle(state, player_id, item)
                if event:
                    events.append(event)

            event = self.failsafe.evaluate(state)
            if event:
                events.append(event)
            return events

    def on_player_join(self, player_id: str, position: Position) -> list[dict]:
        with self.lock:
            state = self.state
            if initialize_on_first_join(state, self.sync, player_id, position):
                return [{
                    'type': 'border_initialized',
                    'player': player_id,
                    'center': (state.border_center_x, state.border_center_z),
                    'border_size': state.border_size,
                }]
            if clamp_player_on_join(state, self.sink, player_id, position):
                logger.info('[Borders] %s joined outside the border, returned to spawn',
                            player_id)
                return [{'type': 'player_returned', 'player': player_id}]
            return []

    def on_player_death(self, player_id: str) -> list[dict]:
        with self.lock:
            event = self.death.handle(self.state, player_id)
            return [event] if event else []

    def on_command(self, kind: str, args: dict | None = None) -> CommandResult:
        with self.lock:
            try:
                return self.commands.execute(self.state, kind, args)
            except CommandError as e:
                return CommandResult(False, str(e))

    # ── Lifecycle ──────────────────────────────────────────────────────

    def on_startup(self) -> bool:
        """Restore the saved snapshot, if any, and re-push the border.

        Returns True when a snapshot was loaded.
        """
        with self.lock:
            if self.state_path is None:
                return False
            loaded = load_from_disk(self.state_path, self.registry)
            if loaded is None:
                return False
            self.state = loaded
            if loaded.border_initialized:
                self.sync.apply(loaded)
                self.sync.refresh_label(loaded)
            return True

    def on_shutdown(self) -> bool:
        with self.lock:
            if self.state_path is None:
                return False
            return save_to_disk(self.state, self.state_path)

    def snapshot(self) -> dict:
        """Persisted view of the current state (camelCase keys)."""
        with self.lock:
            return BorderSnapshot.from_state(self.state).model_dump(by_alias=True)
