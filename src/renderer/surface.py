# renderer/surface.py
import numpy as np
from PIL import Image

def pack_rgb(colors: np.ndarray) -> np.ndarray:
    """
    Packs linear colours (N, 3) into 0xRRGGBB integers, clamping each channel
    to [0, 255] with int(min(255, 256 * c)). cuda_kernels.pack_rgb matches it.
    """
    channels = np.minimum(255.0, np.maximum(colors, 0.0) * 256.0).astype(np.int32)
    return (channels[:, 0] << 16) | (channels[:, 1] << 8) | channels[:, 2]

class Surface:
    """Presentation buffer of packed RGB pixels. The renderer writes it, never reads it."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface needs positive dimensions, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = np.zeros(width * height, dtype=np.int32)

    def plot(self, colors: np.ndarray):
        """Write resolved linear colours (width * height, 3)."""
        self.pixels[:] = pack_rgb(colors)

    def to_rgb_array(self) -> np.ndarray:
        """(height, width, 3) uint8 array, top row first."""
        packed = self.pixels.reshape(self.height, self.width)
        rgb = np.empty((self.height, self.width, 3), dtype=np.uint8)
        rgb[:, :, 0] = (packed >> 16) & 0xFF
        rgb[:, :, 1] = (packed >> 8) & 0xFF
        rgb[:, :, 2] = packed & 0xFF
        return rgb

    def save(self, path: str):
        Image.fromarray(self.to_rgb_array()).save(path)
        print(f"Surface written to {path}")
