"""
Story Player - Timed slide progression with pause and drag navigation.

The transition logic lives in `reduce`, which only touches the state it is
given. `StoryPlayer` owns one viewing session: the state, the clock, the
tick timer and the queue of actions posted from other threads.
"""
import time
import queue
import logging
from typing import Callable, List, Optional

from ..models import (
    PlayerState, StoryAction, Effect, NO_EFFECT,
    Start, Tick, NextSlide, TogglePauseResume,
    DragChanged, DragEnded, SetProgress, SetTestState,
)
from ..config import TICK_INTERVAL, DRAG_THRESHOLD
from ..utils import clamp
from .timer import TickTimer

logger = logging.getLogger(__name__)

Listener = Callable[[PlayerState], None]


def recompute_segments(state: PlayerState):
    """Passed slides are full, future slides empty, current full when paused or done."""
    current = state.current_index
    current_done = state.is_paused or state.progress >= 1
    state.completed_segments = [
        i < current or (i == current and current_done)
        for i in range(state.slide_count)
    ]


def drag_direction(delta_x: float) -> int:
    """Slide step for a finished drag: -1 previous, +1 next, 0 stay."""
    if delta_x > DRAG_THRESHOLD:
        return -1
    if delta_x < -DRAG_THRESHOLD:
        return 1
    return 0


def reduce(state: PlayerState, action: StoryAction, now: float) -> Effect:
    """Apply one action to `state` in place and return what the session must do next."""
    if isinstance(action, Start):
        state.last_tick_timestamp = now
        return NO_EFFECT if state.is_empty else Effect(timer='start')

    # Every other action is a no-op without slides
    if state.is_empty:
        return NO_EFFECT

    if isinstance(action, Tick):
        return _tick(state, now)

    if isinstance(action, NextSlide):
        _move(state, 1, progress=0.0, now=now)
        return NO_EFFECT

    if isinstance(action, TogglePauseResume):
        state.is_paused = not state.is_paused
        if state.is_paused:
            recompute_segments(state)
            return Effect(timer='stop')
        # Resume restarts the current slide rather than continuing mid-slide
        state.last_tick_timestamp = now
        state.progress = 0.0
        recompute_segments(state)
        return Effect(timer='start')

    if isinstance(action, DragChanged):
        state.drag_offset = action.delta_x
        return NO_EFFECT

    if isinstance(action, DragEnded):
        state.drag_offset = 0.0
        _move(state, drag_direction(action.delta_x),
              progress=1.0 if state.is_paused else 0.0, now=now)
        return NO_EFFECT

    if isinstance(action, SetProgress):
        state.progress = clamp(action.progress, 0.0, 1.0)
        state.last_tick_timestamp = now
        recompute_segments(state)
        return NO_EFFECT

    if isinstance(action, SetTestState):
        was_paused = state.is_paused
        state.current_index = action.current_index % state.slide_count
        state.is_paused = action.is_paused
        if len(action.completed_segments) == state.slide_count:
            state.completed_segments = list(action.completed_segments)
        else:
            recompute_segments(state)
        if state.is_paused == was_paused:
            return NO_EFFECT
        if state.is_paused:
            return Effect(timer='stop')
        # Progress is kept, paused time is not counted
        state.last_tick_timestamp = now
        return Effect(timer='start')

    logger.warning(f'Unknown story action: {action!r}')
    return NO_EFFECT


def _tick(state: PlayerState, now: float) -> Effect:
    if state.is_paused:
        return NO_EFFECT

    if state.last_tick_timestamp is not None:
        delta = max(0.0, now - state.last_tick_timestamp)
        state.progress += delta / state.transition_duration
        if state.progress >= 1:
            # At most one slide per tick, however late the tick is
            state.progress = 1.0
            recompute_segments(state)
            return Effect(follow_up=NextSlide())

    state.last_tick_timestamp = now
    recompute_segments(state)
    return NO_EFFECT


def _move(state: PlayerState, step: int, progress: float, now: float):
    state.current_index = (state.current_index + step) % state.slide_count
    state.progress = progress
    state.last_tick_timestamp = now
    recompute_segments(state)


class StoryPlayer:
    """
    One story viewing session.

    `dispatch` must be called from a single thread. Other threads (the tick
    timer included) hand actions over with `post`; the owner drains them
    with `process_pending`.
    """

    def __init__(self,
                 slides,
                 transition_duration: float,
                 clock: Callable[[], float] = time.monotonic,
                 timer_factory: Optional[Callable] = TickTimer,
                 tick_interval: float = TICK_INTERVAL):
        """
        Args:
            slides: Ordered slide identifiers (image tokens)
            transition_duration: Seconds each slide stays before advancing
            clock: Monotonic time source in seconds
            timer_factory: Builds the tick source as factory(interval, callback);
                None when the host delivers Tick actions itself
            tick_interval: Nominal tick period in seconds
        """
        if transition_duration <= 0:
            raise ValueError(f'transition_duration must be positive, got {transition_duration}')

        self._state = PlayerState.create(slides, transition_duration)
        self._clock = clock
        self._timer_factory = timer_factory
        self._tick_interval = tick_interval
        self._timer = None
        self._ticking = False
        self._pending: queue.SimpleQueue = queue.SimpleQueue()
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def state(self) -> PlayerState:
        """Snapshot of the current state."""
        return self._state.snapshot()

    @property
    def ticking(self) -> bool:
        """True while the internal tick source is running."""
        return self._ticking

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with a snapshot after every dispatch. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: StoryAction) -> PlayerState:
        """Apply an action (and any follow-ups) and return the new state snapshot."""
        if self._closed:
            logger.debug(f'Ignoring {type(action).__name__}: session closed')
            return self._state.snapshot()

        was_index = self._state.current_index
        was_paused = self._state.is_paused

        next_action: Optional[StoryAction] = action
        while next_action is not None:
            effect = reduce(self._state, next_action, self._clock())
            self._apply_timer(effect.timer)
            next_action = effect.follow_up

        if self._state.is_paused != was_paused:
            logger.debug(f'Story {"paused" if self._state.is_paused else "resumed"} '
                         f'on slide {self._state.current_index}')
        if self._state.current_index != was_index:
            logger.debug(f'Story slide {was_index} -> {self._state.current_index}')

        snapshot = self._state.snapshot()
        self._notify(snapshot)
        return snapshot

    def post(self, action: StoryAction):
        """Queue an action from any thread for the next `process_pending`."""
        if not self._closed:
            self._pending.put(action)

    def process_pending(self) -> int:
        """Dispatch queued actions on the owner thread. Returns how many ran."""
        actions = []
        while True:
            try:
                actions.append(self._pending.get_nowait())
            except queue.Empty:
                break

        processed = 0
        previous = None
        for action in actions:
            # Ticks are delta based, so a backlog of them collapses into one
            if isinstance(action, Tick) and isinstance(previous, Tick):
                continue
            self.dispatch(action)
            previous = action
            processed += 1
        return processed

    def close(self):
        """Tear down the session: stop ticking and drop listeners."""
        if self._closed:
            return
        self._stop_ticking()
        self._listeners.clear()
        self._closed = True
        logger.debug('Story session closed')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _apply_timer(self, directive: Optional[str]):
        if directive == 'start':
            self._start_ticking()
        elif directive == 'stop':
            self._stop_ticking()

    def _start_ticking(self):
        if self._timer_factory is None:
            return
        if self._timer is None:
            self._timer = self._timer_factory(self._tick_interval, self._on_timer)
        self._timer.start()
        self._ticking = True

    def _stop_ticking(self):
        if self._timer is not None:
            self._timer.cancel()
        self._ticking = False

    def _on_timer(self):
        self.post(Tick())

    def _notify(self, snapshot: PlayerState):
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f'Story listener failed: {e}', exc_info=True)
