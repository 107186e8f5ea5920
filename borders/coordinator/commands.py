"""Operator commands.

Each handler validates its arguments, mutates the state and returns a
CommandResult. Invalid input raises CommandError; BorderCoordinator
turns that into a failed result so nothing propagates to the host.
"""

import logging
from dataclasses import dataclass, field

from .border_state import BorderState, TICKS_PER_SECOND
from .border_sync import BorderSync, reset_border
from .sinks import InventorySource

logger = logging.getLogger(__name__)


class CommandError(ValueError):
    """Bad command name or argument."""


@dataclass
class CommandResult:
    ok: bool
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {'ok': self.ok, 'message': self.message, 'data': self.data}


# ── Argument parsing ───────────────────────────────────────────────────

_TRUE = {'true', 'on', 'yes', '1'}
_FALSE = {'false', 'off', 'no', '0'}


def _int_arg(args: dict, name: str, minimum: int, required: bool = True) -> int | None:
    if name not in args or args[name] is None:
        if required:
            raise CommandError(f'missing argument: {name}')
        return None
    value = args[name]
    if isinstance(value, bool):
        raise CommandError(f'{name} must be an integer')
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise CommandError(f'{name} must be an integer') from None
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise CommandError(f'{name} must be an integer')
    if value < minimum:
        raise CommandError(f'{name} must be >= {minimum}')
    return value


def _bool_arg(args: dict, name: str, required: bool = True) -> bool | None:
    if name not in args or args[name] is None:
        if required:
            raise CommandError(f'missing argument: {name}')
        return None
    value = args[name]
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise CommandError(f'{name} must be true or false')


# ── Handlers ───────────────────────────────────────────────────────────

class CommandHandler:
    """Dispatches operator commands against one state.

    Args:
        sync: Border sync helper (carries the host sink).
        source: Inventory source, used to find online players on reset.
    """

    def __init__(self, sync: BorderSync, source: InventorySource):
        self.sync = sync
        self.source = source
        self._handlers = {
            'start': self.start,
            'stop': self.stop,
            'settimer': self.set_timer,
            'setgrowth': self.set_growth,
            'deathshrink': self.death_shrink,
            'failsafe': self.failsafe,
            'ignore': self.ignore,
            'grow': self.grow,
            'shrink': self.shrink,
            'reset': self.reset,
            'info': self.info,
        }

    @property
    def kinds(self) -> list[str]:
        return list(self._handlers)

    def execute(self, state: BorderState, kind: str, args: dict | None = None) -> CommandResult:
        handler = self._handlers.get(str(kind).lower())
        if handler is None:
            raise CommandError(f'unknown command: {kind}')
        if args is not None and not isinstance(args, dict):
            raise CommandError('command arguments must be a mapping')
        return handler(state, args or {})

    def start(self, state, args):
        state.game_active = True
        state.failsafe_enabled = True
        state.rebase_discovery_timer()
        self.sync.refresh_label(state)
        logger.info('[Borders] Game started')
        return CommandResult(True, 'Game started. Failsafe enabled.')

    def stop(self, state, args):
        state.game_active = False
        state.failsafe_enabled = False
        logger.info('[Borders] Game stopped')
        return CommandResult(True, 'Game stopped. Failsafe disabled.')

    def set_timer(self, state, args):
        seconds = _int_arg(args, 'seconds', 0)
        state.failsafe_delay_ticks = seconds * TICKS_PER_SECOND
        state.rebase_discovery_timer()
        return CommandResult(True, f'Failsafe timer set to {seconds} seconds.',
                             {'failsafe_delay_ticks': state.failsafe_delay_ticks})

    def set_growth(self, state, args):
        blocks = _int_arg(args, 'blocks_per_side', 1)
        state.discovery_growth_per_side = blocks
        return CommandResult(True, f'Border growth set to {blocks} block(s) per side.')

    def death_shrink(self, state, args):
        enabled = _bool_arg(args, 'enabled', required=False)
        blocks = _int_arg(args, 'blocks_per_side', 0, required=False)
        if enabled is not None:
            state.death_shrink_enabled = enabled
        if blocks is not None:
            state.death_shrink_per_side = blocks
        status = 'enabled' if state.death_shrink_enabled else 'disabled'
        return CommandResult(
            True,
            f'Death shrink {status}, {state.death_shrink_per_side} block(s) per side.',
            {'enabled': state.death_shrink_enabled,
             'blocks_per_side': state.death_shrink_per_side})

    def failsafe(self, state, args):
        state.failsafe_enabled = _bool_arg(args, 'enabled')
        status = 'enabled' if state.failsafe_enabled else 'disabled'
        return CommandResult(True, f'Failsafe {status}.')

    def ignore(self, state, args):
        count = _int_arg(args, 'count', 0)
        state.ignored_discoveries_remaining = count
        return CommandResult(True, f'Next {count} discoveries will be ignored.')

    def grow(self, state, args):
        blocks = _int_arg(args, 'blocks', 1)
        new_size = self.sync.resize(state, blocks * 2.0)
        return CommandResult(True, f'Border grown to {new_size:g}.', {'size': new_size})

    def shrink(self, state, args):
        blocks = _int_arg(args, 'blocks', 1)
        new_size = self.sync.resize(state, -blocks * 2.0)
        return CommandResult(True, f'Border shrunk to {new_size:g}.', {'size': new_size})

    def reset(self, state, args):
        reset_border(state, self.sync)
        self.sync.refresh_label(state)
        state.obtained_items.clear()
        state.last_inventory_snapshot = {}
        state.global_tick = 0
        state.last_discovery_tick = 0
        state.game_active = False
        state.failsafe_enabled = False
        self.sync.sink.reset_scores()

        teleported = []
        if state.initial_spawn_pos is not None:
            target = state.initial_spawn_pos.block_center()
            for player_id in self.source.online_players():
                self.sync.sink.teleport_player(player_id, target)
                teleported.append(player_id)

        logger.info('[Borders] Reset: border %.1f at (%s, %s), %d player(s) returned to spawn',
                    state.border_size, state.border_center_x, state.border_center_z,
                    len(teleported))
        return CommandResult(True, 'Game reset. Use start to begin.',
                             {'teleported': teleported})

    def info(self, state, args):
        data = build_info(state)
        lines = [
            f"Game active: {data['game_active']}",
            f"Failsafe enabled: {data['failsafe_enabled']}",
            f"Border size: {data['border_size']:g}",
            f"Border center: ({data['center_x']:g}, {data['center_z']:g})",
            f"Unique items discovered: {data['unique_items']}",
            f"Growth per item: {data['growth_per_side']} block(s) per side",
            f"Death shrink: {'on' if data['death_shrink_enabled'] else 'off'}, "
            f"{data['death_shrink_per_side']} block(s) per side",
            f"Failsafe delay: {data['failsafe_delay_seconds']}s",
            f"Since last discovery: {data['seconds_since_discovery']}s",
            f"Ignored discoveries remaining: {data['ignored_remaining']}",
            f"Global tick: {data['global_tick']}",
        ]
        return CommandResult(True, '\n'.join(lines), data)


def build_info(state: BorderState) -> dict:
    return {
        'game_active': state.game_active,
        'failsafe_enabled': state.failsafe_enabled,
        'border_size': state.border_size,
        'center_x': state.border_center_x,
        'center_z': state.border_center_z,
        'unique_items': len(state.obtained_items),
        'growth_per_side': state.discovery_growth_per_side,
        'death_shrink_enabled': state.death_shrink_enabled,
        'death_shrink_per_side': state.death_shrink_per_side,
        'failsafe_delay_seconds': state.failsafe_delay_ticks // TICKS_PER_SECOND,
        'seconds_since_discovery': state.ticks_since_discovery() // TICKS_PER_SECOND,
        'ignored_remaining': state.ignored_discoveries_remaining,
        'global_tick': state.global_tick,
    }
