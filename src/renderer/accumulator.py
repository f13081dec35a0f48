# renderer/accumulator.py
import numpy as np
from core.vector import Vector3

class Accumulator:
    """
    Per-pixel running sums of radiance samples plus the global sample count.

    Pixel index is x + y * width. 'spp' counts completed frames (one sample
    per pixel each), so the displayed estimate of a pixel is sums[i] / spp.
    Sums only ever grow between two clear() calls because samples are
    non-negative radiance.
    """
    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Accumulator needs positive dimensions, got {width}x{height}")
        self.width = width
        self.height = height
        self.sums = np.zeros((width * height, 3), dtype=np.float32)
        self.spp = 0

    def clear(self):
        """Reset all sums and the sample count. Calling it twice equals calling it once."""
        self.sums.fill(0.0)
        self.spp = 0

    def integrate(self, pixel: int, sample: Vector3):
        self.sums[pixel, 0] += sample.x
        self.sums[pixel, 1] += sample.y
        self.sums[pixel, 2] += sample.z

    def integrate_tile(self, tile, block: np.ndarray):
        """Add one sample for every pixel of 'tile'; block is (tile.height, tile.width, 3)."""
        grid = self.sums.reshape(self.height, self.width, 3)
        grid[tile.y0:tile.y0 + tile.height, tile.x0:tile.x0 + tile.width] += block

    def advance(self) -> float:
        """Count one completed frame; returns the new display scale 1 / spp."""
        self.spp += 1
        return 1.0 / self.spp

    @property
    def scale(self) -> float:
        return 1.0 / self.spp if self.spp > 0 else 0.0

    def resolve(self, pixel: int) -> Vector3:
        """Current estimate for one pixel; zero before the first frame after a reset."""
        if self.spp == 0:
            return Vector3.zero()
        return Vector3.from_array(self.sums[pixel] * np.float32(self.scale))

    def resolve_all(self) -> np.ndarray:
        """(width * height, 3) array of current estimates."""
        return self.sums * np.float32(self.scale)

    def magnitude(self) -> np.ndarray:
        """Per-pixel sum of the three channels of the running sums."""
        return self.sums.sum(axis=1)
