"""
WeatherStories API modules - Weather service and local cache.
"""
from .openweather import OpenWeatherAPI, NullWeatherAPI
from .cache import WeatherCache

__all__ = ['OpenWeatherAPI', 'NullWeatherAPI', 'WeatherCache']
