"""
WeatherStories Data Models - Core data structures.
"""
import time
from dataclasses import dataclass, field, replace
from typing import Optional, List, Tuple, Literal, Union


# ============================================
# STORY PLAYER
# ============================================

@dataclass
class PlayerState:
    """
    Carousel state for one story viewing session.

    `slides` and `transition_duration` are fixed at creation; everything
    else is rewritten by the story reducer.
    """
    slides: Tuple[str, ...]
    transition_duration: float
    current_index: int = 0
    progress: float = 0.0
    drag_offset: float = 0.0
    is_paused: bool = False
    completed_segments: List[bool] = field(default_factory=list)
    last_tick_timestamp: Optional[float] = None

    @classmethod
    def create(cls, slides, transition_duration: float) -> 'PlayerState':
        """New session state: first segment filled as a rendering seed."""
        slides = tuple(slides)
        segments = [False] * len(slides)
        if segments:
            segments[0] = True
        return cls(slides=slides, transition_duration=transition_duration,
                   completed_segments=segments)

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    @property
    def is_empty(self) -> bool:
        return not self.slides

    @property
    def current_slide(self) -> Optional[str]:
        if self.is_empty:
            return None
        return self.slides[self.current_index]

    def segment_fill(self, index: int) -> float:
        """How much of a progress bar segment to draw (0.0-1.0)."""
        if self.completed_segments[index]:
            return 1.0
        if index == self.current_index:
            return self.progress
        return 0.0

    def snapshot(self) -> 'PlayerState':
        """Detached copy safe to hand to renderers and listeners."""
        return replace(self, completed_segments=list(self.completed_segments))


@dataclass(frozen=True)
class Start:
    """Story screen appeared."""


@dataclass(frozen=True)
class Tick:
    """Periodic progress advancement."""


@dataclass(frozen=True)
class NextSlide:
    """Advance to the next slide, wrapping to the first."""


@dataclass(frozen=True)
class TogglePauseResume:
    """Long press: flip between paused and playing."""


@dataclass(frozen=True)
class DragChanged:
    """Finger moved during a horizontal drag."""
    delta_x: float


@dataclass(frozen=True)
class DragEnded:
    """Finger lifted after a horizontal drag."""
    delta_x: float


@dataclass(frozen=True)
class SetProgress:
    """Manual progress override (scrubbing, tests)."""
    progress: float


@dataclass(frozen=True)
class SetTestState:
    """Raw override of index, pause flag and segment flags."""
    current_index: int
    is_paused: bool
    completed_segments: Tuple[bool, ...] = ()


StoryAction = Union[
    Start, Tick, NextSlide, TogglePauseResume,
    DragChanged, DragEnded, SetProgress, SetTestState,
]


@dataclass(frozen=True)
class Effect:
    """What the player session has to do after a transition."""
    follow_up: Optional[StoryAction] = None
    timer: Optional[Literal['start', 'stop']] = None


NO_EFFECT = Effect()


# ============================================
# WEATHER
# ============================================

@dataclass(frozen=True)
class Location:
    """A point on the map in decimal degrees."""
    latitude: float
    longitude: float


@dataclass
class WeatherReport:
    """Current weather for a city, as fetched and cached."""
    city_name: str
    temperature: float
    timestamp: float = field(default_factory=time.time)

    @property
    def rounded_temperature(self) -> int:
        """Temperature as shown on screen (truncated, like the cached display)."""
        return int(self.temperature)

    def to_dict(self) -> dict:
        return {
            'city_name': self.city_name,
            'temperature': self.temperature,
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WeatherReport':
        return cls(
            city_name=str(data['city_name']),
            temperature=float(data['temperature']),
            timestamp=float(data.get('timestamp', time.time())),
        )


@dataclass
class WeatherState:
    """Everything the weather screen renders."""
    weather: Optional[WeatherReport] = None
    cached_weather: Optional[WeatherReport] = None
    show_weather: bool = False
    status_message: str = ''
    is_offline: bool = False
    has_no_cached_data: bool = True
    is_api_key_missing: bool = False
    is_fetching_location: bool = False
    is_fetching_weather: bool = False
    has_attempted_fetch: bool = False
    transition_duration: float = 3.0
    story_images: List[str] = field(default_factory=list)

    @property
    def displayed_weather(self) -> Optional[WeatherReport]:
        """Report to show: fresh weather first, cached weather when offline."""
        if self.show_weather and self.weather:
            return self.weather
        if self.is_offline and self.cached_weather:
            return self.cached_weather
        return None

    @property
    def is_busy(self) -> bool:
        return self.is_fetching_location or self.is_fetching_weather

    def snapshot(self) -> 'WeatherState':
        return replace(self, story_images=list(self.story_images))
