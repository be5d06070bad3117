"""
WeatherStories UI - Rendering and visual components.
"""
from .helpers import draw_rounded_rect, segment_rects, draw_segment
from .image_cache import ImageCache
from .renderer import Renderer
from .context import RenderContext

__all__ = [
    'draw_rounded_rect',
    'segment_rects',
    'draw_segment',
    'ImageCache',
    'Renderer',
    'RenderContext',
]
