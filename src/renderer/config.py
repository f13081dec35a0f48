# renderer/config.py
from dataclasses import dataclass
from typing import Optional

# Resolution presets offered by the application (1/2/3 keys).
QUALITY_LEVELS = {
    "interactive": {"width": 160, "height": 90},
    "balanced": {"width": 320, "height": 180},
    "high_quality": {"width": 640, "height": 360},
}

@dataclass
class RenderConfig:
    """
    Values the host passes to the renderer.

    run_time: seconds to render before reporting; None renders until the
    window closes and enables camera input.
    use_device: render with the CUDA kernel instead of CPU tiles.
    device_index: CUDA device to select.
    device_fallback: on a device build failure, continue on the CPU path
    instead of raising.
    executor: "thread" or "process" pool for CPU tiles.
    """
    width: int = 320
    height: int = 180
    run_time: Optional[float] = None
    use_device: bool = False
    device_index: int = 0
    device_fallback: bool = True
    seed: int = 42
    workers: Optional[int] = None
    executor: str = "thread"
    debug_mode: bool = False
    report_path: Optional[str] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Resolution must be positive, got {self.width}x{self.height}")
        if self.run_time is not None and self.run_time < 0:
            raise ValueError(f"run_time must be non-negative or None, got {self.run_time}")
        if self.executor not in ("thread", "process"):
            raise ValueError(f"Unknown executor '{self.executor}'. Available: thread, process")
        if self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")

    @classmethod
    def from_quality(cls, quality: str, **kwargs) -> "RenderConfig":
        if quality not in QUALITY_LEVELS:
            available = ', '.join(QUALITY_LEVELS.keys())
            raise ValueError(f"Unknown quality '{quality}'. Available: {available}")
        return cls(**{**QUALITY_LEVELS[quality], **kwargs})
