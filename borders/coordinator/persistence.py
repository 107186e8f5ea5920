"""Snapshot codec for BorderState.

The snapshot is a single JSON document with camelCase keys. Items are
stored as stable ``namespace:path`` ids and resolved through an
ItemRegistry on load; ids that no longer resolve are dropped. The
per-player inventory snapshot is volatile and never written.

Loading never raises: any failure is logged and treated as "no saved
state", so the caller keeps its fresh default state.
"""

import contextlib
import json
import logging
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .border_state import BorderState, Position, MIN_BORDER_SIZE, DEFAULT_FAILSAFE_DELAY_TICKS
from .items import ItemRegistry

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = os.path.join('config', 'borders_state.json')


class SpawnPos(BaseModel):
    x: float
    y: float
    z: float


class BorderSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    border_initialized: bool = Field(False, alias='borderInitialized')
    border_size: float = Field(MIN_BORDER_SIZE, alias='borderSize', ge=MIN_BORDER_SIZE)
    border_center_x: float = Field(0.0, alias='borderCenterX')
    border_center_z: float = Field(0.0, alias='borderCenterZ')
    initial_spawn_pos: SpawnPos | None = Field(None, alias='initialSpawnPos')
    game_active: bool = Field(False, alias='gameActive')
    failsafe_enabled: bool = Field(True, alias='failsafeEnabled')
    global_tick: int = Field(0, alias='globalTick', ge=0)
    last_discovery_tick: int = Field(0, alias='lastDiscoveryTick', ge=0)
    failsafe_delay_ticks: int = Field(DEFAULT_FAILSAFE_DELAY_TICKS, alias='failsafeDelayTicks', ge=0)
    discovery_growth_per_side: int = Field(1, alias='discoveryGrowthPerSide')
    death_shrink_enabled: bool = Field(True, alias='deathShrinkEnabled')
    death_shrink_per_side: int = Field(5, alias='deathShrinkPerSide')
    ignored_discoveries_remaining: int = Field(0, alias='ignoredDiscoveriesRemaining', ge=0)
    obtained_item_ids: list[str] = Field(default_factory=list, alias='obtainedItemIds')

    @model_validator(mode='after')
    def _discovery_not_in_future(self):
        if self.last_discovery_tick > self.global_tick:
            raise ValueError('lastDiscoveryTick is ahead of globalTick')
        return self

    @classmethod
    def from_state(cls, state: BorderState) -> 'BorderSnapshot':
        spawn = state.initial_spawn_pos
        return cls(
            border_initialized=state.border_initialized,
            border_size=state.border_size,
            border_center_x=state.border_center_x,
            border_center_z=state.border_center_z,
            initial_spawn_pos=SpawnPos(**spawn.to_dict()) if spawn else None,
            game_active=state.game_active,
            failsafe_enabled=state.failsafe_enabled,
            global_tick=state.global_tick,
            last_discovery_tick=state.last_discovery_tick,
            failsafe_delay_ticks=state.failsafe_delay_ticks,
            discovery_growth_per_side=state.discovery_growth_per_side,
            death_shrink_enabled=state.death_shrink_enabled,
            death_shrink_per_side=state.death_shrink_per_side,
            ignored_discoveries_remaining=state.ignored_discoveries_remaining,
            obtained_item_ids=sorted(state.obtained_items),
        )

    def to_state(self, registry: ItemRegistry) -> BorderState:
        items = set()
        for item_id in self.obtained_item_ids:
            resolved = registry.resolve(item_id)
            if resolved is not None:
                items.add(resolved)
        spawn = self.initial_spawn_pos
        return BorderState(
            border_initialized=self.border_initialized,
            border_size=self.border_size,
            border_center_x=self.border_center_x,
            border_center_z=self.border_center_z,
            initial_spawn_pos=Position(spawn.x, spawn.y, spawn.z) if spawn else None,
            game_active=self.game_active,
            failsafe_enabled=self.failsafe_enabled,
            global_tick=self.global_tick,
            last_discovery_tick=self.last_discovery_tick,
            failsafe_delay_ticks=self.failsafe_delay_ticks,
            discovery_growth_per_side=self.discovery_growth_per_side,
            death_shrink_enabled=self.death_shrink_enabled,
            death_shrink_per_side=self.death_shrink_per_side,
            ignored_discoveries_remaining=self.ignored_discoveries_remaining,
            obtained_items=items,
        )


def save(state: BorderState) -> bytes:
    snapshot = BorderSnapshot.from_state(state)
    return json.dumps(snapshot.model_dump(by_alias=True), indent=2).encode('utf-8')


def load(data: bytes, registry: ItemRegistry | None = None) -> BorderState | None:
    """Decode a snapshot. Returns None (and logs) on malformed input."""
    registry = registry or ItemRegistry()
    try:
        raw = json.loads(data.decode('utf-8'))
        snapshot = BorderSnapshot.model_validate(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning('[Borders] Snapshot is not valid JSON: %s', e)
        return None
    except ValidationError as e:
        logger.warning('[Borders] Snapshot rejected: %d schema error(s)', e.error_count())
        return None
    state = snapshot.to_state(registry)
    dropped = len(snapshot.obtained_item_ids) - len(state.obtained_items)
    if dropped:
        logger.info('[Borders] Dropped %d unknown item id(s) from snapshot', dropped)
    return state


def load_from_disk(path: str = DEFAULT_STATE_PATH,
                   registry: ItemRegistry | None = None) -> BorderState | None:
    if not os.path.exists(path):
        logger.info('[Borders] No saved state at %s', path)
        return None
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        logger.warning('[Borders] Could not read %s: %s', path, e)
        return None
    state = load(data, registry)
    if state is not None:
        logger.info('[Borders] Loaded state from %s (%d items, size %.1f)',
                    path, len(state.obtained_items), state.border_size)
    return state


def save_to_disk(state: BorderState, path: str = DEFAULT_STATE_PATH) -> bool:
    """Write the snapshot, creating the parent directory. Returns success.

    The snapshot goes to a sibling temp file first and is swapped in with
    os.replace, so a failed write leaves the previous snapshot intact.
    """
    tmp_path = f'{path}.tmp'
    try:
        data = save(state)
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(tmp_path, 'wb') as f:
            f.write(data)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        logger.warning('[Borders] Could not save state to %s: %s', path, e)
        with contextlib.suppress(OSError):
            os.remove(tmp_path)
        return False
    logger.info('[Borders] Saved state to %s', path)
    return True
