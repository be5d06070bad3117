"""
UI Helpers - Drawing utilities for pygame.
"""
from typing import List, Tuple

import pygame


def draw_rounded_rect(surface: pygame.Surface, color: tuple, rect: tuple, radius: int):
    """Draw a filled rectangle with rounded corners."""
    x, y, w, h = rect
    radius = max(0, min(radius, w // 2, h // 2))
    pygame.draw.rect(surface, color, pygame.Rect(x, y, w, h), border_radius=radius)


def segment_rects(count: int, x: int, y: int, width: int, height: int,
                  spacing: int) -> List[Tuple[int, int, int, int]]:
    """Split a horizontal strip into `count` equal segments separated by `spacing`."""
    if count <= 0:
        return []
    seg_width = (width - spacing * (count - 1)) / count
    return [
        (round(x + i * (seg_width + spacing)), y, max(1, round(seg_width)), height)
        for i in range(count)
    ]


def draw_segment(surface: pygame.Surface, rect: tuple, fill: float,
                 track_color: tuple, fill_color: tuple):
    """One progress bar segment, filled left to right by `fill` (0.0-1.0)."""
    x, y, w, h = rect
    radius = h // 2
    draw_rounded_rect(surface, track_color, rect, radius)
    fill = max(0.0, min(fill, 1.0))
    fill_width = int(w * fill)
    if fill_width > 0:
        draw_rounded_rect(surface, fill_color, (x, y, fill_width, h), radius)
