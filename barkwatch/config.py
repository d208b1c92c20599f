"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field

from .audio.detector import DEFAULT_AMPLITUDE_THRESHOLD, DEFAULT_SILENCE_TIMEOUT, DetectorConfig


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


def _device() -> Optional[int | str]:
    raw = os.getenv("BARKWATCH_INPUT_DEVICE", "").strip()
    if not raw:
        return None
    return int(raw) if raw.isdigit() else raw


class BarkSettings(BaseModel):
    barks_dir: str = Field(default=os.getenv("BARKWATCH_BARKS_DIR", "barks"))
    amplitude_threshold: float = Field(
        default=float(os.getenv("BARKWATCH_THRESHOLD", str(DEFAULT_AMPLITUDE_THRESHOLD))),
        ge=0.0,
        lt=1.0,
    )
    silence_timeout_sec: float = Field(
        default=float(os.getenv("BARKWATCH_SILENCE_TIMEOUT", str(DEFAULT_SILENCE_TIMEOUT))),
        gt=0.0,
    )
    input_device: Optional[int | str] = Field(default_factory=_device)
    channels: Optional[int] = Field(default_factory=lambda: _optional_int("BARKWATCH_CHANNELS"))
    block_ms: int = Field(default=int(os.getenv("BARKWATCH_BLOCK_MS", "100")), gt=0)
    run_seconds: Optional[float] = Field(default_factory=lambda: _optional_float("BARKWATCH_RUN_SECONDS"))
    lead_in_minutes: float = Field(default=float(os.getenv("BARKWATCH_LEAD_IN_MINUTES", "5")), ge=0.0)
    min_pixels_per_label: float = Field(default=float(os.getenv("BARKWATCH_MIN_LABEL_PX", "80")), gt=0.0)
    log_level: str = Field(default=os.getenv("BARKWATCH_LOG_LEVEL", "INFO"))
    log_history: int = Field(default=int(os.getenv("BARKWATCH_LOG_HISTORY", "200")), gt=0)

    def detector_config(self) -> DetectorConfig:
        return DetectorConfig(
            amplitude_threshold=self.amplitude_threshold,
            silence_timeout=self.silence_timeout_sec,
        )


@lru_cache()
def get_settings() -> BarkSettings:
    return BarkSettings()
