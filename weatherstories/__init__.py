"""
WeatherStories - Weather display with a Stories-style image carousel.
"""
__version__ = '0.1.0'
