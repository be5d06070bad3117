"""
Render Context - Bundles all state needed for rendering.
"""
from dataclasses import dataclass
from typing import Optional

from ..models import PlayerState, WeatherState


@dataclass
class RenderContext:
    """All state needed to render a frame."""
    weather: WeatherState
    story: Optional[PlayerState]  # None while the weather screen is shown
    button_pressed: bool = False
