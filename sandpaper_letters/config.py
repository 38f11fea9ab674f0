from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

ENV_WINDOW_SIZE = "SANDPAPER_WINDOW_SIZE"
ENV_DEVICE_PIXEL_RATIO = "SANDPAPER_DEVICE_PIXEL_RATIO"
ENV_DISABLE_HAPTICS = "SANDPAPER_DISABLE_HAPTICS"
ENV_SEED = "SANDPAPER_SEED"
ENV_LOG_LEVEL = "SANDPAPER_LOG_LEVEL"


@dataclass(frozen=True, slots=True)
class TracingConfig:
    window_size: tuple[int, int] = WINDOW_SIZE
    target_fps: int = TARGET_FPS
    device_pixel_ratio: float = 1.0
    disable_haptics: bool = False
    seed: int | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        w, h = self.window_size
        if w <= 0 or h <= 0:
            raise ValueError("window_size must be > 0")
        if self.target_fps <= 0:
            raise ValueError("target_fps must be > 0")
        if self.device_pixel_ratio <= 0:
            raise ValueError("device_pixel_ratio must be > 0")

    @property
    def logging_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TracingConfig":
        """Read overrides from the environment; unparsable values keep defaults."""

        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            window_size=_parse_size(env.get(ENV_WINDOW_SIZE), defaults.window_size),
            target_fps=defaults.target_fps,
            device_pixel_ratio=_parse_positive_float(
                env.get(ENV_DEVICE_PIXEL_RATIO), defaults.device_pixel_ratio
            ),
            disable_haptics=env.get(ENV_DISABLE_HAPTICS, "0").strip() == "1",
            seed=_parse_int(env.get(ENV_SEED)),
            log_level=(env.get(ENV_LOG_LEVEL) or defaults.log_level).strip().upper(),
        )


def _parse_size(raw: str | None, fallback: tuple[int, int]) -> tuple[int, int]:
    if not raw:
        return fallback
    parts = raw.lower().replace(" ", "").split("x")
    if len(parts) != 2:
        return fallback
    try:
        w, h = int(parts[0]), int(parts[1])
    except ValueError:
        return fallback
    if w <= 0 or h <= 0:
        return fallback
    return (w, h)


def _parse_positive_float(raw: str | None, fallback: float) -> float:
    if not raw:
        return fallback
    try:
        value = float(raw)
    except ValueError:
        return fallback
    return value if math.isfinite(value) and value > 0 else fallback


def _parse_int(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None
