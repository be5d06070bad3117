"""
WeatherStories Application - Main application class.
"""
import signal
import logging
from typing import Optional

import pygame

from .config import (
    SCREEN_WIDTH, SCREEN_HEIGHT,
    CACHE_PATH, STORIES_DIR,
    MOCK_MODE, LOCATION_MODE,
    DRAG_THRESHOLD, TRANSITION_DURATION_STEP,
    get_api_key,
)
from .models import Start, TogglePauseResume, DragEnded
from .api import OpenWeatherAPI, NullWeatherAPI, WeatherCache
from .handlers import TouchHandler, NetworkMonitor, StaticLocationProvider, IPLocationProvider
from .managers import WeatherOrchestrator, StoryPlayer
from .ui import ImageCache, Renderer, RenderContext

logger = logging.getLogger(__name__)


def _hit(rect, pos) -> bool:
    if not rect:
        return False
    x, y, w, h = rect
    return x <= pos[0] <= x + w and y <= pos[1] <= y + h


class WeatherStories:
    """Main WeatherStories application."""

    STORY_FPS = 60
    IDLE_FPS = 20

    def __init__(self, fullscreen: bool = False):
        pygame.init()
        pygame.display.set_caption('WeatherStories')

        self._init_display(fullscreen)
        self._init_components()

    def _init_display(self, fullscreen: bool):
        flags = pygame.FULLSCREEN if fullscreen else 0
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), flags)
        self.clock = pygame.time.Clock()
        pygame.mouse.set_visible(not fullscreen)
        logger.info(f'Video driver: {pygame.display.get_driver()}')

    def _init_components(self):
        """Initialize all application components."""
        self.mock_mode = MOCK_MODE

        api_key = get_api_key()
        if self.mock_mode:
            api = NullWeatherAPI()
            has_api_key = lambda: True
            network = NetworkMonitor(probe=lambda: True)
        else:
            api = OpenWeatherAPI(api_key) if api_key else NullWeatherAPI()
            has_api_key = lambda: api_key is not None
            network = NetworkMonitor()

        if self.mock_mode or LOCATION_MODE == 'static':
            location = StaticLocationProvider()
        else:
            location = IPLocationProvider()

        self.weather = WeatherOrchestrator(
            api=api,
            cache=WeatherCache(CACHE_PATH),
            location_provider=location,
            network_monitor=network,
            has_api_key=has_api_key,
        )

        # UI Components
        self.image_cache = ImageCache(STORIES_DIR, pygame.font.Font(None, 32))
        self.renderer = Renderer(self.screen, self.image_cache)
        self.touch = TouchHandler()

        # State
        self.story: Optional[StoryPlayer] = None
        self.button_pressed = False
        self.running = True

    def _handle_signal(self, signum, frame):
        """Leave the main loop on SIGTERM/SIGINT."""
        logger.info(f'{signal.Signals(signum).name}: stopping main loop')
        self.running = False

    def start(self):
        """Run the main loop until quit, then tear everything down."""
        logger.info('Starting WeatherStories...')
        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)

        self.weather.on_appear()

        while self.running:
            self._handle_events()
            self._update()
            self._draw()
            pygame.display.flip()
            self.clock.tick(self.STORY_FPS if self.story else self.IDLE_FPS)

        self._close_story()
        self.weather.stop()
        pygame.quit()
        logger.info('WeatherStories stopped')

    # ============================================
    # STORY SESSION
    # ============================================

    def _open_story(self):
        if self.story:
            return
        self.story = self.weather.create_story_player()
        self.story.dispatch(Start())

    def _close_story(self):
        if not self.story:
            return
        self.story.close()
        self.story = None
        self.touch.cancel()
        logger.info('Stories closed')

    def _change_transition_duration(self, direction: int):
        current = self.weather.snapshot().transition_duration
        self.weather.update_transition_duration(current + direction * TRANSITION_DURATION_STEP)

    # ============================================
    # INPUT
    # ============================================

    def _handle_events(self):
        """Handle pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_touch_down(event.pos)

            elif event.type == pygame.MOUSEMOTION:
                if self.story and self.touch.dragging:
                    action = self.touch.on_move(event.pos)
                    if action:
                        self.story.dispatch(action)

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._handle_touch_up(event.pos)

    def _handle_key(self, key):
        """Handle keyboard input."""
        if self.story:
            if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._close_story()
            elif key == pygame.K_SPACE:
                self.story.dispatch(TogglePauseResume())
            elif key == pygame.K_LEFT:
                self.story.dispatch(DragEnded(DRAG_THRESHOLD + 1))
            elif key == pygame.K_RIGHT:
                self.story.dispatch(DragEnded(-(DRAG_THRESHOLD + 1)))
            return

        if key == pygame.K_ESCAPE:
            self.running = False
        elif key in (pygame.K_RETURN, pygame.K_SPACE):
            self._open_story()
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self._change_transition_duration(1)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self._change_transition_duration(-1)

    def _handle_touch_down(self, pos):
        if self.story:
            if _hit(self.renderer.back_button_rect, pos):
                self._close_story()
                return
            self.touch.on_down(pos)
            return

        if _hit(self.renderer.story_button_rect, pos):
            self.button_pressed = True

    def _handle_touch_up(self, pos):
        if self.story:
            action = self.touch.on_up(pos)
            if action:
                self.story.dispatch(action)
            return

        if self.button_pressed:
            self.button_pressed = False
            if _hit(self.renderer.story_button_rect, pos):
                self._open_story()

    # ============================================
    # FRAME
    # ============================================

    def _update(self):
        """Update application state."""
        if not self.story:
            return
        action = self.touch.check_long_press()
        if action:
            self.story.dispatch(action)
        self.story.process_pending()

    def _draw(self):
        """Draw the UI."""
        ctx = RenderContext(
            weather=self.weather.snapshot(),
            story=self.story.state if self.story else None,
            button_pressed=self.button_pressed,
        )
        self.renderer.draw(ctx)
