"""
Tests for StoryPlayer - timed progression, pause, drag navigation, segments.
"""
import random
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from weatherstories.models import (
    PlayerState, Effect,
    Start, Tick, NextSlide, TogglePauseResume,
    DragChanged, DragEnded, SetProgress, SetTestState,
)
from weatherstories.managers.story import StoryPlayer, reduce, recompute_segments, drag_direction


def expected_segments(state: PlayerState):
    """completed[i] iff i < current, or i == current and (paused or done)."""
    return [
        i < state.current_index or
        (i == state.current_index and (state.is_paused or state.progress >= 1))
        for i in range(state.slide_count)
    ]


def tick_after(player, clock, seconds):
    clock.advance(seconds)
    return player.dispatch(Tick())


class TestInitialState:
    """Tests for a freshly created session."""

    def test_initial_state(self, player):
        """New session starts on the first slide with only its segment seeded."""
        state = player.state
        assert state.current_index == 0
        assert state.progress == 0
        assert state.drag_offset == 0
        assert state.is_paused is False
        assert state.slides == ('image1', 'image2', 'image3')
        assert state.transition_duration == 3.0
        assert state.completed_segments == [True, False, False]
        assert state.last_tick_timestamp is None

    def test_not_ticking_before_start(self, player, timers):
        """The tick source is created lazily."""
        assert player.ticking is False
        assert timers.created == []

    @pytest.mark.parametrize('duration', [0, -1.5])
    def test_non_positive_duration_rejected(self, duration):
        """Callers must supply a positive transition duration."""
        with pytest.raises(ValueError):
            StoryPlayer(['a'], duration, timer_factory=None)


class TestStart:
    """Tests for the Start action."""

    def test_start_records_time_and_starts_timer(self, player, clock, timers):
        state = player.dispatch(Start())

        assert state.last_tick_timestamp == clock.now
        assert player.ticking is True
        assert len(timers.created) == 1
        assert timers.timer.running is True

    def test_start_twice_reuses_timer(self, player, timers):
        """Starting again does not create a second tick source."""
        player.dispatch(Start())
        player.dispatch(Start())

        assert len(timers.created) == 1
        assert timers.timer.running is True

    def test_start_without_timer_factory(self, clock):
        """Externally driven players never tick on their own."""
        player = StoryPlayer(['a', 'b'], 2.0, clock=clock, timer_factory=None)
        player.dispatch(Start())
        assert player.ticking is False

        clock.advance(1.0)
        state = player.dispatch(Tick())
        assert state.progress == pytest.approx(0.5)


class TestAutoProgression:
    """Tests for tick-driven progress."""

    def test_auto_progression(self, player, clock):
        """Four one-second ticks plus 100ms move to the second slide with progress."""
        player.dispatch(Start())

        for _ in range(4):
            tick_after(player, clock, 1.0)
        state = tick_after(player, clock, 0.1)

        assert state.current_index == 1
        assert state.progress > 0
        assert state.is_paused is False
        assert state.slides == ('image1', 'image2', 'image3')
        assert state.transition_duration == 3.0

    def test_progress_increases_with_each_tick(self, player, clock):
        """Progress grows with elapsed time and stays on the first slide before the end."""
        player.dispatch(Start())
        initial = player.state.progress

        first = tick_after(player, clock, 1.0).progress
        assert first > initial

        second = tick_after(player, clock, 1.0).progress
        assert second > first
        assert second < 1
        assert player.state.current_index == 0

    def test_progress_is_elapsed_over_duration(self, player, clock):
        player.dispatch(Start())
        state = tick_after(player, clock, 0.75)
        assert state.progress == pytest.approx(0.25)
        assert state.last_tick_timestamp == clock.now

    def test_late_tick_advances_one_slide_only(self, player, clock):
        """A tick implying several slide boundaries still moves exactly one slide."""
        player.dispatch(Start())
        state = tick_after(player, clock, 10.0)

        assert state.current_index == 1
        assert state.progress == 0
        assert state.last_tick_timestamp == clock.now
        assert state.completed_segments == [True, False, False]

    def test_tick_before_start_only_records_time(self, player, clock):
        """Without a previous timestamp there is no delta to apply."""
        state = player.dispatch(Tick())
        assert state.progress == 0
        assert state.last_tick_timestamp == clock.now
        assert state.completed_segments == [False, False, False]

    def test_last_slide_wraps_to_first(self, player, clock):
        player.dispatch(Start())
        for _ in range(3):
            tick_after(player, clock, 3.0)
        assert player.state.current_index == 0

    def test_segments_follow_progression(self, player, clock):
        player.dispatch(Start())
        tick_after(player, clock, 3.0)
        tick_after(player, clock, 3.0)

        state = tick_after(player, clock, 1.0)
        assert state.current_index == 2
        assert state.completed_segments == [True, True, False]


class TestNextSlide:
    """Tests for NextSlide and the wrap law."""

    def test_next_slide_resets_progress(self, player, clock):
        player.dispatch(Start())
        tick_after(player, clock, 1.0)

        clock.advance(0.5)
        state = player.dispatch(NextSlide())
        assert state.current_index == 1
        assert state.progress == 0
        assert state.last_tick_timestamp == clock.now
        assert state.completed_segments == [True, False, False]

    @pytest.mark.parametrize('start_index', [0, 1, 2])
    def test_wrap_law(self, player, start_index):
        """N NextSlides from any index come back to that index."""
        player.dispatch(SetTestState(current_index=start_index, is_paused=False))
        for _ in range(3):
            player.dispatch(NextSlide())
        assert player.state.current_index == start_index

    def test_wrap_law_single_slide(self, make_player):
        player = make_player(slides=['only'])
        state = player.dispatch(NextSlide())
        assert state.current_index == 0
        assert state.completed_segments == [False]


class TestPauseResume:
    """Tests for the long press pause toggle."""

    def test_pause_freezes_progress(self, player, clock):
        """Ticks while paused leave index and progress untouched."""
        player.dispatch(Start())
        tick_after(player, clock, 1.0)
        player.dispatch(TogglePauseResume())
        frozen = player.state

        for _ in range(20):
            state = tick_after(player, clock, 0.5)
            assert state.current_index == frozen.current_index
            assert state.progress == frozen.progress
            assert state.is_paused is True

    def test_pause_completes_current_segment(self, player, clock):
        player.dispatch(Start())
        player.dispatch(NextSlide())
        state = player.dispatch(TogglePauseResume())

        assert state.is_paused is True
        assert state.completed_segments == [True, True, False]

    def test_pause_stops_and_resume_restarts_timer(self, player, timers):
        player.dispatch(Start())
        timer = timers.timer

        player.dispatch(TogglePauseResume())
        assert timer.running is False
        assert player.ticking is False

        player.dispatch(TogglePauseResume())
        assert timer.running is True
        assert player.ticking is True
        assert len(timers.created) == 1

    def test_toggle_twice_restores_unpaused(self, player, clock):
        """Pause state round-trips, but progress does not: resume restarts the slide."""
        player.dispatch(Start())
        tick_after(player, clock, 1.5)
        assert player.state.progress == pytest.approx(0.5)

        player.dispatch(TogglePauseResume())
        clock.advance(2.0)
        state = player.dispatch(TogglePauseResume())

        assert state.is_paused is False
        assert state.progress == 0
        assert state.last_tick_timestamp == clock.now

    def test_resume_does_not_count_paused_time(self, player, clock):
        player.dispatch(Start())
        player.dispatch(TogglePauseResume())
        clock.advance(100.0)
        player.dispatch(TogglePauseResume())

        state = tick_after(player, clock, 1.5)
        assert state.current_index == 0
        assert state.progress == pytest.approx(0.5)

    def test_progression_after_resume(self, player, clock):
        player.dispatch(Start())
        player.dispatch(TogglePauseResume())
        tick_after(player, clock, 3.0)
        assert player.state.progress == 0

        player.dispatch(TogglePauseResume())
        for _ in range(5):
            tick_after(player, clock, 0.5)

        state = player.state
        assert state.is_paused is False
        assert 0 < state.progress < 1
        assert state.current_index == 0
        assert state.completed_segments == [False, False, False]


class TestDrag:
    """Tests for drag navigation."""

    def test_drag_changed_only_moves_offset(self, player):
        before = player.state
        state = player.dispatch(DragChanged(-37.5))

        assert state.drag_offset == -37.5
        assert state.current_index == before.current_index
        assert state.progress == before.progress
        assert state.completed_segments == before.completed_segments
        assert state.last_tick_timestamp == before.last_tick_timestamp

    @pytest.mark.parametrize('delta_x', [50, -50, 0, 12.5, -49.9])
    def test_drag_within_threshold_stays(self, player, delta_x):
        """The 50px threshold is exclusive."""
        player.dispatch(SetTestState(current_index=1, is_paused=False))
        state = player.dispatch(DragEnded(delta_x))
        assert state.current_index == 1

    def test_drag_right_past_threshold_goes_back(self, player):
        player.dispatch(SetTestState(current_index=1, is_paused=False))
        assert player.dispatch(DragEnded(51)).current_index == 0

    def test_drag_left_past_threshold_goes_forward(self, player):
        player.dispatch(SetTestState(current_index=1, is_paused=False))
        assert player.dispatch(DragEnded(-51)).current_index == 2

    def test_drag_right_from_first_wraps_to_last(self, player):
        assert player.dispatch(DragEnded(51)).current_index == 2

    def test_drag_end_resets_offset_and_progress(self, player, clock):
        player.dispatch(Start())
        tick_after(player, clock, 1.0)
        player.dispatch(DragChanged(-80))

        state = player.dispatch(DragEnded(-80))
        assert state.drag_offset == 0
        assert state.progress == 0
        assert state.last_tick_timestamp == clock.now
        assert state.completed_segments == [True, False, False]

    def test_drag_end_while_paused_fills_current(self, player):
        player.dispatch(TogglePauseResume())
        state = player.dispatch(DragEnded(-100))

        assert state.current_index == 1
        assert state.progress == 1
        assert state.completed_segments == [True, True, False]

    def test_manual_navigation_while_paused(self, player):
        player.dispatch(SetTestState(current_index=0, is_paused=True,
                                     completed_segments=(True, False, False)))

        state = player.dispatch(DragEnded(-100))
        assert state.current_index == 1
        assert state.is_paused is True
        assert state.completed_segments[0] is True

        state = player.dispatch(DragEnded(-100))
        assert state.current_index == 2
        assert state.is_paused is True
        assert state.completed_segments[0] is True

        state = player.dispatch(DragEnded(100))
        assert state.current_index == 1
        assert state.is_paused is True
        assert state.completed_segments[0] is True

    def test_wrap_around_while_paused(self, player):
        player.dispatch(SetTestState(current_index=2, is_paused=True,
                                     completed_segments=(True, True, True)))

        state = player.dispatch(DragEnded(-100))
        assert state.current_index == 0
        assert state.is_paused is True
        assert state.completed_segments[0] is True

    @pytest.mark.parametrize('delta_x,step', [(51, -1), (-51, 1), (50, 0), (-50, 0)])
    def test_drag_direction(self, delta_x, step):
        assert drag_direction(delta_x) == step


class TestSetProgress:
    """Tests for the manual progress override."""

    def test_set_progress(self, player, clock):
        state = player.dispatch(SetProgress(0.4))
        assert state.progress == pytest.approx(0.4)
        assert state.last_tick_timestamp == clock.now
        assert state.completed_segments == [False, False, False]

    def test_set_progress_full_completes_segment_without_advancing(self, player):
        state = player.dispatch(SetProgress(1.0))
        assert state.current_index == 0
        assert state.completed_segments == [True, False, False]

    @pytest.mark.parametrize('value,expected', [(1.7, 1.0), (-0.3, 0.0)])
    def test_set_progress_is_clamped(self, player, value, expected):
        assert player.dispatch(SetProgress(value)).progress == expected


class TestSetTestState:
    """Tests for the raw state override."""

    def test_segments_taken_as_given(self, player):
        state = player.dispatch(SetTestState(current_index=1, is_paused=True,
                                             completed_segments=(True, True, True)))
        assert state.current_index == 1
        assert state.is_paused is True
        assert state.completed_segments == [True, True, True]

    def test_missing_segments_recomputed(self, player):
        state = player.dispatch(SetTestState(current_index=2, is_paused=False))
        assert state.completed_segments == [True, True, False]

    def test_index_wrapped_into_range(self, player):
        assert player.dispatch(SetTestState(current_index=5, is_paused=False)).current_index == 2

    def test_unpausing_restarts_ticking(self, player, clock, timers):
        """Restoring a playing session keeps progress moving."""
        player.dispatch(Start())
        player.dispatch(TogglePauseResume())
        player.dispatch(SetTestState(current_index=0, is_paused=False))

        assert player.ticking is True
        assert timers.timer.running is True

        clock.advance(1.5)
        timers.timer.fire()
        player.process_pending()
        assert player.state.progress == pytest.approx(0.5)

    def test_pausing_stops_ticking(self, player, timers):
        player.dispatch(Start())
        state = player.dispatch(SetTestState(current_index=1, is_paused=True))

        assert state.is_paused is True
        assert player.ticking is False
        assert timers.timer.running is False

    def test_same_pause_state_leaves_timer_alone(self, player, timers):
        player.dispatch(Start())
        player.dispatch(SetTestState(current_index=2, is_paused=False))
        assert timers.timer.start_count == 1
        assert timers.timer.cancel_count == 0


class TestEmptySequence:
    """Tests for a player without slides."""

    def test_actions_are_no_ops(self, make_player, timers, clock):
        player = make_player(slides=[])

        actions = [Start(), NextSlide(), DragEnded(100), Tick(), TogglePauseResume(),
                   DragChanged(30), SetProgress(0.5), SetTestState(1, True)]
        for action in actions:
            clock.advance(1.0)
            state = player.dispatch(action)
            assert state.current_index == 0
            assert state.progress == 0
            assert state.completed_segments == []
            assert state.is_paused is False
            assert state.drag_offset == 0

        assert timers.created == []
        assert player.ticking is False

    def test_start_still_records_time(self, make_player, clock):
        player = make_player(slides=[])
        assert player.dispatch(Start()).last_tick_timestamp == clock.now


class TestSegmentConsistency:
    """Segment flags stay consistent under arbitrary interleavings."""

    @pytest.mark.parametrize('seed', range(5))
    def test_random_action_sequences(self, make_player, clock, seed):
        rng = random.Random(seed)
        player = make_player(slides=[f'slide{i}' for i in range(4)], transition_duration=2.0)
        player.dispatch(Start())
        # First tick replaces the initial rendering seed
        player.dispatch(Tick())

        for _ in range(300):
            clock.advance(rng.choice([0.0, 0.016, 0.3, 1.1, 2.5, 7.0]))
            action = rng.choice([
                Tick(), Tick(), Tick(), NextSlide(), TogglePauseResume(),
                DragChanged(rng.uniform(-200, 200)),
                DragEnded(rng.uniform(-200, 200)),
                SetProgress(rng.uniform(-0.5, 1.5)),
            ])
            before = player.state
            state = player.dispatch(action)

            assert 0 <= state.current_index < state.slide_count
            assert 0 <= state.progress <= 1
            assert state.completed_segments == expected_segments(state)
            if before.is_paused and isinstance(action, Tick):
                assert state.current_index == before.current_index
                assert state.progress == before.progress


class TestSession:
    """Tests for the session wrapper: queueing, listeners, teardown."""

    def test_timer_ticks_are_queued_until_processed(self, player, clock, timers):
        player.dispatch(Start())
        clock.advance(1.5)
        timers.timer.fire()

        assert player.state.progress == 0
        assert player.process_pending() == 1
        assert player.state.progress == pytest.approx(0.5)

    def test_tick_backlog_collapses(self, player, clock, timers):
        player.dispatch(Start())
        clock.advance(1.5)
        for _ in range(5):
            timers.timer.fire()

        assert player.process_pending() == 1
        assert player.state.progress == pytest.approx(0.5)
        assert player.process_pending() == 0

    def test_posted_actions_run_in_order(self, player):
        player.post(NextSlide())
        player.post(TogglePauseResume())
        player.post(NextSlide())

        assert player.process_pending() == 3
        state = player.state
        assert state.current_index == 2
        assert state.is_paused is True

    def test_subscribe_and_unsubscribe(self, player):
        seen = []
        unsubscribe = player.subscribe(seen.append)

        player.dispatch(NextSlide())
        assert [s.current_index for s in seen] == [1]

        unsubscribe()
        player.dispatch(NextSlide())
        assert len(seen) == 1

    def test_failing_listener_does_not_break_dispatch(self, player):
        def broken(state):
            raise RuntimeError('boom')

        player.subscribe(broken)
        assert player.dispatch(NextSlide()).current_index == 1

    def test_snapshots_are_detached(self, player):
        snapshot = player.state
        snapshot.completed_segments[2] = True
        snapshot.current_index = 2
        assert player.state.completed_segments == [True, False, False]
        assert player.state.current_index == 0

    def test_close_cancels_timer_and_ignores_actions(self, player, timers):
        player.dispatch(Start())
        player.close()

        assert timers.timer.running is False
        assert player.closed is True
        assert player.dispatch(NextSlide()).current_index == 0

        player.post(NextSlide())
        assert player.process_pending() == 0

    def test_close_is_idempotent(self, player, timers):
        player.dispatch(Start())
        player.close()
        player.close()
        assert timers.timer.cancel_count == 1

    def test_context_manager_closes(self, make_player, timers):
        with make_player() as player:
            player.dispatch(Start())
        assert player.closed is True
        assert timers.timer.running is False


class TestReducer:
    """Tests for the pure transition function."""

    def test_start_requests_timer(self):
        state = PlayerState.create(['a', 'b'], 2.0)
        assert reduce(state, Start(), 5.0) == Effect(timer='start')
        assert state.last_tick_timestamp == 5.0

    def test_overflowing_tick_emits_next_slide(self):
        state = PlayerState.create(['a', 'b'], 2.0)
        reduce(state, Start(), 0.0)

        effect = reduce(state, Tick(), 2.5)
        assert effect == Effect(follow_up=NextSlide())
        assert state.current_index == 0
        assert state.progress == 1.0
        assert state.completed_segments == [True, False]

    def test_pause_requests_timer_stop(self):
        state = PlayerState.create(['a'], 2.0)
        assert reduce(state, TogglePauseResume(), 0.0) == Effect(timer='stop')
        assert reduce(state, TogglePauseResume(), 1.0) == Effect(timer='start')

    def test_recompute_segments(self):
        state = PlayerState.create(['a', 'b', 'c', 'd'], 2.0)
        state.current_index = 2
        state.progress = 0.3
        recompute_segments(state)
        assert state.completed_segments == [True, True, False, False]

        state.progress = 1.0
        recompute_segments(state)
        assert state.completed_segments == [True, True, True, False]

    def test_segment_fill(self):
        state = PlayerState.create(['a', 'b', 'c'], 2.0)
        state.current_index = 1
        state.progress = 0.25
        recompute_segments(state)
        assert [state.segment_fill(i) for i in range(3)] == [1.0, 0.25, 0.0]
