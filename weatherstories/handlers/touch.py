"""
Touch Handler - Drag and long press gestures for the story screen.
"""
import time
import logging
from typing import Tuple, Optional, Callable

from ..models import DragChanged, DragEnded, TogglePauseResume
from ..config import LONG_PRESS_TIME, SWIPE_MOVEMENT_THRESHOLD

logger = logging.getLogger(__name__)


class TouchHandler:
    """Translate pointer events into story player actions."""

    def __init__(self,
                 long_press_time: float = LONG_PRESS_TIME,
                 movement_threshold: float = SWIPE_MOVEMENT_THRESHOLD,
                 clock: Callable[[], float] = time.monotonic):
        self.long_press_time = long_press_time
        self.movement_threshold = movement_threshold
        self.clock = clock
        self.start_x = 0
        self.start_y = 0
        self.start_time = 0.0
        self.dragging = False
        self.drag_offset = 0  # Current drag offset in pixels
        self.long_press_fired = False
        self.is_swiping = False  # Moved beyond threshold, long press no longer possible

    def on_down(self, pos: Tuple[int, int]):
        """Called on touch/mouse down."""
        self.start_x = pos[0]
        self.start_y = pos[1]
        self.start_time = self.clock()
        self.dragging = True
        self.drag_offset = 0
        self.long_press_fired = False
        self.is_swiping = False
        logger.debug(f'Touch down at ({pos[0]}, {pos[1]})')

    def on_move(self, pos: Tuple[int, int]) -> Optional[DragChanged]:
        """Called on touch/mouse move. Returns the drag update to dispatch, if any."""
        if not self.dragging or self.long_press_fired:
            return None
        self.drag_offset = pos[0] - self.start_x

        if not self.is_swiping and abs(self.drag_offset) > self.movement_threshold:
            self.is_swiping = True
            logger.debug(f'Swipe started, offset={self.drag_offset}px')

        return DragChanged(self.drag_offset)

    def check_long_press(self) -> Optional[TogglePauseResume]:
        """Poll every frame. Returns a pause toggle once per press after the hold time."""
        if not self.dragging or self.long_press_fired or self.is_swiping:
            return None

        if self.clock() - self.start_time >= self.long_press_time:
            self.long_press_fired = True
            logger.debug(f'Long press triggered at ({self.start_x}, {self.start_y})')
            return TogglePauseResume()

        return None

    def on_up(self, pos: Tuple[int, int]) -> Optional[DragEnded]:
        """Called on touch/mouse up. Returns the drag end to dispatch, if any."""
        if not self.dragging:
            return None

        self.dragging = False
        self.drag_offset = 0

        # The long press already acted on this touch
        if self.long_press_fired:
            logger.debug('Touch up after long press')
            return None

        dx = pos[0] - self.start_x
        logger.debug(f'Touch up: dx={dx}px')
        return DragEnded(dx)

    def cancel(self):
        """Forget the current touch (screen closed mid-gesture)."""
        self.dragging = False
        self.drag_offset = 0
        self.long_press_fired = False
        self.is_swiping = False
