"""
Borders Engine — drive the border coordinator from a host event stream

Reads one JSON object per line from stdin and pushes every resulting
border, chat, score and teleport effect to the host's HTTP API.

Event lines:
  {"event": "tick", "inventories": {"<player>": {"minecraft:dirt": 3}}}
  {"event": "join", "player": "<player>", "x": 100.2, "y": 64, "z": 200.7}
  {"event": "death", "player": "<player>"}
  {"event": "command", "command": "grow", "args": {"blocks": 3}}

Usage:
  python border_engine.py --host http://localhost:25580 < events.jsonl
"""

import argparse
import json
import logging
import math
import sys

from coordinator.border_coordinator import BorderCoordinator
from coordinator.border_state import Position, DEFAULT_DIMENSIONS
from coordinator.http_sink import HttpHostSink
from coordinator.items import ItemRegistry
from coordinator.persistence import DEFAULT_STATE_PATH
from coordinator.sinks import StaticInventorySource


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Borders Engine')
    parser.add_argument('--host', default='http://localhost:25580',
                        help='Host game API base URL')
    parser.add_argument('--state-file', default=DEFAULT_STATE_PATH,
                        help='Snapshot file loaded at start and saved at end of input')
    parser.add_argument('--dimensions', default=','.join(DEFAULT_DIMENSIONS),
                        help='Comma-separated dimensions kept in sync')
    parser.add_argument('--item-registry', default=None,
                        help='Optional newline-separated list of known item ids')
    parser.add_argument('--verbose', action='store_true',
                        help='Log coordinator activity to stderr')
    return parser.parse_args(argv)


def _inventories_arg(event: dict) -> dict[str, dict[str, int]]:
    raw = event.get('inventories') or {}
    if not isinstance(raw, dict):
        raise ValueError('tick inventories must be an object')
    for player, items in raw.items():
        if not isinstance(items, dict):
            raise ValueError(f'inventory for {player} must be an object')
        for item, count in items.items():
            if isinstance(count, bool) or not isinstance(count, int):
                raise ValueError(f'count for {item} ({player}) must be an integer')
    return raw


def _player_arg(event: dict) -> str:
    player = event.get('player')
    if not isinstance(player, str) or not player.strip():
        raise ValueError(f"{event.get('event')} event without player")
    return player


def dispatch_event(coordinator: BorderCoordinator, inventories: StaticInventorySource,
                   event: dict) -> list[dict]:
    """Apply one host event. Returns the coordinator events it produced.

    Raises ValueError for events that cannot be applied.
    """
    kind = event.get('event')
    if kind == 'tick':
        inventories.update(_inventories_arg(event))
        return coordinator.on_tick()
    if kind == 'join':
        player = _player_arg(event)
        try:
            coords = [float(event[axis]) for axis in ('x', 'y', 'z')]
        except (KeyError, TypeError, ValueError):
            raise ValueError(f'join event for {player} has no valid position') from None
        if not all(math.isfinite(c) for c in coords):
            raise ValueError(f'join event for {player} has a non-finite position')
        return coordinator.on_player_join(player, Position(*coords))
    if kind == 'death':
        return coordinator.on_player_death(_player_arg(event))
    if kind == 'command':
        args = event.get('args') or {}
        if not isinstance(args, dict):
            raise ValueError('command args must be an object')
        result = coordinator.on_command(str(event.get('command', '')), args)
        return [{'type': 'command_result', **result.to_dict()}]
    raise ValueError(f'unknown event: {kind}')


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(message)s', stream=sys.stderr)

    dimensions = tuple(d.strip() for d in args.dimensions.split(',') if d.strip())
    registry = ItemRegistry()
    if args.item_registry:
        try:
            registry = ItemRegistry.from_file(args.item_registry)
            print(f'[Borders] Item registry: {len(registry.known_ids)} ids', file=sys.stderr)
        except OSError as e:
            print(f'[Borders] Failed to read item registry: {e}', file=sys.stderr)

    sink = HttpHostSink(args.host, dimensions or DEFAULT_DIMENSIONS)
    inventories = StaticInventorySource()
    coordinator = BorderCoordinator(sink=sink, source=inventories,
                                    dimensions=dimensions or DEFAULT_DIMENSIONS,
                                    state_path=args.state_file, registry=registry)

    print(f'[Borders] Starting, host {args.host}', file=sys.stderr)
    if coordinator.on_startup():
        print(f'[Borders] Restored state from {args.state_file}', file=sys.stderr)

    line_count = 0
    try:
        for line in sys.stdin:
            line = line.strip()
            if not line:
                continue
            line_count += 1
            try:
                event = json.loads(line)
                if not isinstance(event, dict):
                    raise ValueError('event is not an object')
                results = dispatch_event(coordinator, inventories, event)
            except ValueError as e:
                print(f'[Borders] Skipped line {line_count}: {e}', file=sys.stderr)
                continue
            for result in results:
                if result.get('type') == 'command_result':
                    print(f"[Borders] {result['message']}", file=sys.stderr)
                elif 'description' in result:
                    print(f"[Borders] {result['description']}", file=sys.stderr)
        print('[Borders] End of input stream', file=sys.stderr)
    finally:
        if coordinator.on_shutdown():
            print(f'[Borders] Saved state to {args.state_file}', file=sys.stderr)
        if sink.failures:
            print(f'[Borders] {sink.failures} host push(es) failed', file=sys.stderr)


if __name__ == '__main__':
    main()
