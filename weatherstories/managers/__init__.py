"""
WeatherStories Managers - State and behavior management.
"""
from .timer import TickTimer
from .story import StoryPlayer, reduce, recompute_segments
from .weather import WeatherOrchestrator

__all__ = ['TickTimer', 'StoryPlayer', 'reduce', 'recompute_segments', 'WeatherOrchestrator']
