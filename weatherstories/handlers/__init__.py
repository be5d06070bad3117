"""
WeatherStories Handlers - Input, location and connectivity.
"""
from .touch import TouchHandler
from .network import NetworkMonitor
from .location import LocationProvider, StaticLocationProvider, IPLocationProvider

__all__ = [
    'TouchHandler',
    'NetworkMonitor',
    'LocationProvider',
    'StaticLocationProvider',
    'IPLocationProvider',
]
