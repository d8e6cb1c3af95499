"""Pydantic model for user settings."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .values import DEFAULT_DEBOUNCE_MS, MESSAGES


class Settings(BaseModel):
    """Runtime knobs persisted as ``settings.json``.

    Parameters
    ----------
    debounce_ms: Quiet window before a search query is emitted.
    retain_data_on_error: Keep the last successful value visible when a
        later fetch of the same resource fails.
    mock_failure_rate: Probability that a mock user fetch or form
        submission fails (0 disables failures).
    time_scale: Multiplier applied to every real-time sleep; 0 makes the
        mock services answer immediately.
    overlay_message: Text shown while an action overlay is visible.
    event_queue_size: Per-subscriber queue capacity on the event bus.
    """

    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS)
    retain_data_on_error: bool = Field(default=True)
    mock_failure_rate: float = Field(default=0.5)
    time_scale: float = Field(default=1.0)
    overlay_message: str = Field(default=MESSAGES.get("overlay", "Processing..."))
    event_queue_size: int = Field(default=256)

    @field_validator("debounce_ms")
    @classmethod
    def _chk_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError("debounce_ms must be >= 0")
        return v

    @field_validator("mock_failure_rate")
    @classmethod
    def _chk_rate(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("mock_failure_rate must be within [0, 1]")
        return v

    @field_validator("time_scale")
    @classmethod
    def _chk_scale(cls, v: float) -> float:
        if v < 0:
            raise ValueError("time_scale must be >= 0")
        return v

    @field_validator("event_queue_size")
    @classmethod
    def _chk_queue(cls, v: int) -> int:
        if v < 1:
            raise ValueError("event_queue_size must be >= 1")
        return v

    @property
    def debounce_s(self) -> float:
        return self.debounce_ms / 1000.0
