"""Runtime settings loaded from ``CHORDBOOK_*`` environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Pixels per second for each auto-scroll speed level.
DEFAULT_SPEED_LEVELS: dict[int, float] = {
    1: 10.0,
    2: 20.0,
    3: 30.0,
    4: 45.0,
    5: 60.0,
    6: 80.0,
    7: 100.0,
    8: 130.0,
    9: 160.0,
    10: 200.0,
}


class Settings(BaseSettings):
    """Tunables for the reader, diagram and capo advisor."""

    model_config = SettingsConfigDict(
        env_prefix="CHORDBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Auto-scroll
    scroll_speed_levels: dict[int, float] = Field(
        default_factory=lambda: dict(DEFAULT_SPEED_LEVELS)
    )
    default_speed_level: int = 3
    scroll_restart_epsilon: float = 5.0
    scroll_end_threshold: float = 1.0
    max_frame_delta: float = 0.5  # seconds; longer gaps mean the host starved us
    frame_interval: float = 1 / 60

    # Chord diagrams
    diagram_width: int = 100
    diagram_height: int = 120

    # Capo advisor
    capo_max: int = 9
    capo_min_improvement: float = 0.7
    capo_easy_floor: int = 5

    # Song sources
    http_timeout: float = 15.0

    def pixels_per_second(self, level: int) -> float:
        """Scroll speed for *level*, clamped to the configured range."""
        return self.scroll_speed_levels[self.clamp_speed_level(level)]

    def clamp_speed_level(self, level: int) -> int:
        levels = sorted(self.scroll_speed_levels)
        return min(max(level, levels[0]), levels[-1])


@lru_cache
def get_settings() -> Settings:
    return Settings()
