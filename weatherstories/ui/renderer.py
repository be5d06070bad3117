"""
Renderer - All drawing logic for the weather and story screens.
"""
import logging
from typing import Optional, Dict, Tuple

import pygame

from .context import RenderContext
from .helpers import draw_rounded_rect, segment_rects, draw_segment
from .image_cache import ImageCache
from ..models import PlayerState, WeatherState
from ..config import (
    SCREEN_WIDTH, SCREEN_HEIGHT, COLORS,
    SEGMENT_HEIGHT, SEGMENT_SPACING, SEGMENT_MARGIN, STORY_TOP,
    BUTTON_WIDTH, BUTTON_HEIGHT,
)

logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]


class Renderer:
    """Handles all drawing for the WeatherStories UI."""

    def __init__(self, screen: pygame.Surface, image_cache: ImageCache):
        self.screen = screen
        self.image_cache = image_cache

        self.font_huge = pygame.font.Font(None, 120)
        self.font_large = pygame.font.Font(None, 48)
        self.font_medium = pygame.font.Font(None, 34)
        self.font_small = pygame.font.Font(None, 24)
        self._text_cache: Dict[Tuple[str, int, tuple], pygame.Surface] = {}

        # Hit rectangles (updated during draw)
        self.story_button_rect: Optional[Rect] = None
        self.back_button_rect: Optional[Rect] = None

    def draw(self, ctx: RenderContext):
        """Draw one full frame."""
        self.screen.fill(COLORS['bg_primary'])
        if ctx.story is not None:
            self.story_button_rect = None
            self._draw_story(ctx.story)
        else:
            self.back_button_rect = None
            self._draw_weather(ctx.weather, ctx.button_pressed)

    # ============================================
    # WEATHER SCREEN
    # ============================================

    def _draw_weather(self, state: WeatherState, button_pressed: bool):
        center_x = SCREEN_WIDTH // 2
        self._blit_text('Current Weather', self.font_large, COLORS['text_primary'], (center_x, 70))

        card = (24, 120, SCREEN_WIDTH - 48, 260)
        draw_rounded_rect(self.screen, COLORS['bg_secondary'], card, 15)
        card_center_y = card[1] + card[3] // 2

        report = state.displayed_weather
        if state.is_offline and state.has_no_cached_data:
            self._blit_text('Offline: No cached data available', self.font_medium,
                            COLORS['text_secondary'], (center_x, card_center_y))
        elif state.is_api_key_missing and report is None:
            self._blit_text('Weather API key missing', self.font_medium,
                            COLORS['error'], (center_x, card_center_y))
        else:
            if report:
                self._blit_text(report.city_name, self.font_medium,
                                COLORS['text_primary'], (center_x, card[1] + 50))
                self._blit_text(f'{report.rounded_temperature}°C', self.font_huge,
                                COLORS['text_primary'], (center_x, card_center_y + 10))
            if state.is_busy:
                self._blit_text(state.status_message or 'Loading...', self.font_small,
                                COLORS['text_secondary'], (center_x, card[1] + card[3] - 50))
            if state.is_offline and not state.has_no_cached_data:
                self._blit_text('Offline: Showing cached data', self.font_small,
                                COLORS['text_muted'], (center_x, card[1] + card[3] - 24))

        # Open stories button
        button = (center_x - BUTTON_WIDTH // 2, 430, BUTTON_WIDTH, BUTTON_HEIGHT)
        color = COLORS['text_muted'] if button_pressed else COLORS['accent']
        draw_rounded_rect(self.screen, color, button, 10)
        self._blit_text('Open Story View', self.font_medium, COLORS['text_primary'],
                        (center_x, button[1] + BUTTON_HEIGHT // 2))
        self.story_button_rect = button

        # Transition duration
        self._blit_text('Story Transition Time', self.font_medium,
                        COLORS['text_primary'], (center_x, 570))
        self._blit_text(f'{state.transition_duration:.1f} sec', self.font_medium,
                        COLORS['text_secondary'], (center_x, 610))
        self._blit_text('Press - / + to change', self.font_small,
                        COLORS['text_muted'], (center_x, 645))

    # ============================================
    # STORY SCREEN
    # ============================================

    def _draw_story(self, state: PlayerState):
        back_text = self._text('< Back', self.font_medium, COLORS['accent'])
        back_rect = back_text.get_rect(topleft=(12, 8))
        self.screen.blit(back_text, back_rect)
        self.back_button_rect = (back_rect.x, back_rect.y, back_rect.width, back_rect.height)

        if state.is_empty:
            self._blit_text('No stories', self.font_medium, COLORS['text_secondary'],
                            (SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2))
            return

        self._draw_segments(state)

        image_top = STORY_TOP + SEGMENT_HEIGHT + 16
        size = (SCREEN_WIDTH, SCREEN_HEIGHT - image_top)
        slide = self.image_cache.get(state.current_slide, size)
        rect = slide.get_rect(center=(SCREEN_WIDTH // 2 + int(state.drag_offset),
                                      image_top + size[1] // 2))
        self.screen.blit(slide, rect)

    def _draw_segments(self, state: PlayerState):
        rects = segment_rects(
            state.slide_count,
            SEGMENT_MARGIN, STORY_TOP,
            SCREEN_WIDTH - 2 * SEGMENT_MARGIN, SEGMENT_HEIGHT,
            SEGMENT_SPACING,
        )
        for index, rect in enumerate(rects):
            draw_segment(self.screen, rect, state.segment_fill(index),
                         COLORS['segment_track'], COLORS['accent'])

    # ============================================
    # TEXT
    # ============================================

    def _text(self, text: str, font: pygame.font.Font, color: tuple) -> pygame.Surface:
        key = (text, id(font), color)
        surface = self._text_cache.get(key)
        if surface is None:
            if len(self._text_cache) > 200:
                self._text_cache.clear()
            surface = font.render(text, True, color)
            self._text_cache[key] = surface
        return surface

    def _blit_text(self, text: str, font: pygame.font.Font, color: tuple, center: Tuple[int, int]):
        surface = self._text(text, font, color)
        self.screen.blit(surface, surface.get_rect(center=center))
