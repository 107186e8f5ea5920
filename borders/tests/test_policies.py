"""Unit tests for DiscoveryPolicy, DeathPolicy and FailsafeEvaluator.

Key nuances:
- Backlog: decrement, then record the item; no score, message, growth or
  timer rebase for ignored discoveries
- Discovery growth is 2 x discovery_growth_per_side, additive per item,
  and only applied once the border is initialized
- Death shrink never touches last_discovery_tick and is clamped at 16.0
- Failsafe is a level check on global_tick - last_discovery_tick; firing
  rebases the timer so the next tick does not fire again
- Non-positive growth: discovery skips growth, failsafe does nothing
"""
import sys
from pathlib import Path

BORDERS_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BORDERS_DIR))

from coordinator.border_state import BorderState
from coordinator.border_sync import BorderSync
from coordinator.death_policy import DeathPolicy
from coordinator.discovery_policy import DiscoveryPolicy
from coordinator.failsafe import FailsafeEvaluator
from coordinator.sinks import RecordingSink


def _active_state(**overrides):
    fields = dict(border_initialized=True, game_active=True, failsafe_enabled=True,
                  border_size=16.0, border_center_x=104.0, border_center_z=200.0)
    fields.update(overrides)
    return BorderState(**fields)


# ── DiscoveryPolicy ───────────────────────────────────────────────────────────

class TestDiscovery:

    def test_new_item_scores_grows_and_rebases(self):
        sink = RecordingSink()
        state = _active_state(global_tick=300, last_discovery_tick=10)
        event = DiscoveryPolicy(BorderSync(sink)).handle(state, 'alice', 'minecraft:dirt')
        assert event['type'] == 'discovery'
        assert state.border_size == 18.0
        assert state.last_discovery_tick == 300
        assert sink.scores == {'alice': 1}
        assert sink.notifications == [('discovery', {'player': 'alice', 'item': 'minecraft:dirt'})]
        assert sink.labels == [18.0]
        assert 'minecraft:dirt' in state.obtained_items

    def test_already_obtained_is_noop(self):
        sink = RecordingSink()
        state = _active_state(obtained_items={'minecraft:dirt'})
        assert DiscoveryPolicy(BorderSync(sink)).handle(state, 'alice', 'minecraft:dirt') is None
        assert sink.calls == []

    def test_backlog_scenario(self):
        sink = RecordingSink()
        policy = DiscoveryPolicy(BorderSync(sink))
        state = _active_state(ignored_discoveries_remaining=2, discovery_growth_per_side=3)

        first = policy.handle(state, 'alice', 'minecraft:dirt')
        second = policy.handle(state, 'alice', 'minecraft:stone')
        assert first['type'] == second['type'] == 'discovery_ignored'
        assert state.ignored_discoveries_remaining == 0
        assert state.border_size == 16.0
        assert sink.scores == {}
        assert sink.notifications == []

        third = policy.handle(state, 'bob', 'minecraft:log')
        assert third['type'] == 'discovery'
        assert state.border_size == 22.0
        assert sink.scores == {'bob': 1}
        assert state.obtained_items == {'minecraft:dirt', 'minecraft:stone', 'minecraft:log'}

    def test_backlog_does_not_rebase_timer(self):
        state = _active_state(global_tick=500, last_discovery_tick=0,
                              ignored_discoveries_remaining=1)
        DiscoveryPolicy(BorderSync(RecordingSink())).handle(state, 'alice', 'minecraft:dirt')
        assert state.last_discovery_tick == 0

    def test_uninitialized_records_without_growth(self):
        sink = RecordingSink()
        state = BorderState(game_active=True, global_tick=40)
        DiscoveryPolicy(BorderSync(sink)).handle(state, 'alice', 'minecraft:dirt')
        assert state.border_size == 16.0
        assert sink.borders == {}
        assert sink.scores == {'alice': 1}
        assert state.last_discovery_tick == 40

    def test_non_positive_growth_skips_growth(self):
        sink = RecordingSink()
        state = _active_state(discovery_growth_per_side=0)
        event = DiscoveryPolicy(BorderSync(sink)).handle(state, 'alice', 'minecraft:dirt')
        assert event['type'] == 'discovery'
        assert state.border_size == 16.0
        assert sink.scores == {'alice': 1}

    def test_growth_is_uncapped_and_additive(self):
        policy = DiscoveryPolicy(BorderSync(RecordingSink()))
        state = _active_state(discovery_growth_per_side=1000)
        for i in range(5):
            policy.handle(state, 'alice', f'minecraft:item_{i}')
        assert state.border_size == 16.0 + 5 * 2000.0

    def test_logs_expansion(self, caplog):
        caplog.set_level('INFO')
        state = _active_state()
        DiscoveryPolicy(BorderSync(RecordingSink())).handle(state, 'alice', 'minecraft:dirt')
        assert 'Border expanded by 1 per side' in caplog.text


# ── DeathPolicy ───────────────────────────────────────────────────────────────

class TestDeath:

    def test_scenario_shrink_clamped_at_floor(self):
        sink = RecordingSink()
        state = _active_state(border_size=16.0, death_shrink_per_side=5)
        event = DeathPolicy(BorderSync(sink)).handle(state, 'alice')
        assert state.border_size == 16.0
        assert event['border_size'] == 16.0
        assert sink.notifications[0][0] == 'death_shrink'
        assert sink.notifications[0][1]['player'] == 'alice'

    def test_shrinks_by_twice_per_side(self):
        state = _active_state(border_size=40.0, death_shrink_per_side=5)
        DeathPolicy(BorderSync(RecordingSink())).handle(state, 'alice')
        assert state.border_size == 30.0

    def test_does_not_touch_discovery_timer(self):
        state = _active_state(border_size=40.0, global_tick=900, last_discovery_tick=100)
        DeathPolicy(BorderSync(RecordingSink())).handle(state, 'alice')
        assert state.last_discovery_tick == 100

    def test_gated_conditions(self):
        policy = DeathPolicy(BorderSync(RecordingSink()))
        for overrides in ({'game_active': False}, {'border_initialized': False},
                          {'death_shrink_enabled': False}, {'death_shrink_per_side': 0}):
            state = _active_state(border_size=40.0, **overrides)
            assert policy.handle(state, 'alice') is None
            assert state.border_size == 40.0


# ── FailsafeEvaluator ─────────────────────────────────────────────────────────

class TestFailsafe:

    def test_scenario_fires_once(self):
        sink = RecordingSink()
        evaluator = FailsafeEvaluator(BorderSync(sink))
        state = _active_state(global_tick=100, last_discovery_tick=0, failsafe_delay_ticks=100)

        event = evaluator.evaluate(state)
        assert event['type'] == 'failsafe_expansion'
        assert state.last_discovery_tick == 100
        assert state.border_size == 18.0
        assert [n[0] for n in sink.notifications] == ['failsafe_expansion']

        state.global_tick = 101
        assert evaluator.evaluate(state) is None
        assert state.border_size == 18.0

    def test_long_pause_fires_once(self):
        evaluator = FailsafeEvaluator(BorderSync(RecordingSink()))
        state = _active_state(global_tick=10_000, last_discovery_tick=0, failsafe_delay_ticks=100)
        evaluator.evaluate(state)
        assert evaluator.evaluate(state) is None
        assert state.border_size == 18.0

    def test_below_delay_does_not_fire(self):
        state = _active_state(global_tick=99, last_discovery_tick=0, failsafe_delay_ticks=100)
        assert FailsafeEvaluator(BorderSync(RecordingSink())).evaluate(state) is None

    def test_gated_conditions(self):
        evaluator = FailsafeEvaluator(BorderSync(RecordingSink()))
        for overrides in ({'game_active': False}, {'failsafe_enabled': False},
                          {'border_initialized': False}):
            state = _active_state(global_tick=500, failsafe_delay_ticks=100, **overrides)
            assert evaluator.evaluate(state) is None

    def test_non_positive_growth_does_nothing(self):
        sink = RecordingSink()
        state = _active_state(global_tick=500, failsafe_delay_ticks=100,
                              discovery_growth_per_side=0)
        assert FailsafeEvaluator(BorderSync(sink)).evaluate(state) is None
        assert state.last_discovery_tick == 0
        assert sink.calls == []

    def test_zero_delay_fires_every_tick(self):
        evaluator = FailsafeEvaluator(BorderSync(RecordingSink()))
        state = _active_state(failsafe_delay_ticks=0)
        for tick in (1, 2, 3):
            state.global_tick = tick
            assert evaluator.evaluate(state) is not None
        assert state.border_size == 22.0
