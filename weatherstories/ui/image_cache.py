"""
Image Cache - Loads and caches story slide images.
"""
import time
import logging
from pathlib import Path
from typing import Optional, Dict, Tuple

import pygame
from PIL import Image, ImageOps

from .helpers import draw_rounded_rect
from ..config import COLORS, STORY_IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


class ImageCache:
    """Slide token -> scaled pygame surface, loaded from the stories directory."""

    MAX_SIZE = 32

    def __init__(self, stories_dir: Path, font: Optional[pygame.font.Font] = None):
        self.stories_dir = stories_dir
        self.font = font
        self.cache: Dict[str, pygame.Surface] = {}
        self._access_times: Dict[str, float] = {}  # For LRU eviction

    def find_file(self, token: str) -> Optional[Path]:
        """Image file for a slide token, trying the known extensions."""
        candidate = self.stories_dir / token
        if candidate.suffix.lower() in STORY_IMAGE_EXTENSIONS and candidate.exists():
            return candidate
        for ext in STORY_IMAGE_EXTENSIONS:
            path = self.stories_dir / f'{token}{ext}'
            if path.exists():
                return path
        return None

    def get(self, token: Optional[str], size: Size) -> pygame.Surface:
        """Surface for a slide scaled to fit `size`; a labelled placeholder if missing."""
        if not token:
            return self.get_placeholder('', size)

        cache_key = f'{token}_{size[0]}x{size[1]}'
        if cache_key in self.cache:
            self._access_times[cache_key] = time.time()
            return self.cache[cache_key]

        self._evict_if_needed()

        path = self.find_file(token)
        if path is None:
            logger.debug(f'No image for slide {token!r}')
            return self.get_placeholder(token, size)

        surface = self._load(path, size)
        if surface is None:
            return self.get_placeholder(token, size)

        self.cache[cache_key] = surface
        self._access_times[cache_key] = time.time()
        return surface

    def get_placeholder(self, label: str, size: Size) -> pygame.Surface:
        """Rounded card with the slide token written on it."""
        cache_key = f'_placeholder_{label}_{size[0]}x{size[1]}'
        if cache_key not in self.cache:
            surface = pygame.Surface(size, pygame.SRCALPHA)
            draw_rounded_rect(surface, COLORS['bg_elevated'], (0, 0, size[0], size[1]), 16)
            if label and self.font:
                text = self.font.render(label, True, COLORS['text_secondary'])
                surface.blit(text, text.get_rect(center=(size[0] // 2, size[1] // 2)))
            self.cache[cache_key] = surface
        return self.cache[cache_key]

    def clear(self):
        self.cache.clear()
        self._access_times.clear()

    def _load(self, path: Path, size: Size) -> Optional[pygame.Surface]:
        try:
            with Image.open(path) as img:
                img = ImageOps.contain(img.convert('RGBA'), size, Image.Resampling.LANCZOS)
                return pygame.image.fromstring(img.tobytes(), img.size, 'RGBA')
        except (OSError, ValueError) as e:
            logger.warning(f'Cannot load story image {path}: {e}')
            return None

    def _evict_if_needed(self):
        """Drop least recently used slides, keeping placeholders."""
        if len(self.cache) <= self.MAX_SIZE:
            return
        evictable = sorted(
            (key for key in self.cache if not key.startswith('_')),
            key=lambda key: self._access_times.get(key, 0),
        )
        for key in evictable[:len(evictable) // 2 or 1]:
            del self.cache[key]
            self._access_times.pop(key, None)
        logger.debug('Evicted least recently used story images')
