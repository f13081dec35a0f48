# renderer/env_map.py
import math
import numpy as np
from PIL import Image

def direction_to_pixel(x: float, y: float, z: float, width: int, height: int):
    """
    Maps a unit direction to the (column, row) of an equirectangular map.
    The device kernel uses the same mapping (cuda_kernels.sample_sky).
    """
    phi = math.atan2(-z, x)
    if phi < 0.0:
        phi += 2.0 * math.pi
    theta = math.acos(max(-1.0, min(1.0, y)))
    u = phi / (2.0 * math.pi)
    v = theta / math.pi
    ix = min(int(u * width), width - 1)
    iy = min(int(v * height), height - 1)
    return ix, iy

def generate_gradient_env_map(width=512, height=256):
    """
    Generate a gradient environment map.
    Interpolates vertically between a zenith color and a horizon color;
    everything below the horizon gets a dim ground color.

    Returns:
        np.ndarray: A (height x width x 3) array in float32.
    """
    env_map = np.zeros((height, width, 3), dtype=np.float32)
    zenith_color = np.array([0.2, 0.4, 0.8], dtype=np.float32)
    horizon_color = np.array([1.0, 0.8, 0.6], dtype=np.float32)
    ground_color = np.array([0.15, 0.13, 0.12], dtype=np.float32)

    for y in range(height):
        t = y / max(1, height - 1)  # 0 at the zenith, 1 at the nadir
        if t <= 0.5:
            row_color = (1.0 - 2.0 * t) * zenith_color + 2.0 * t * horizon_color
        else:
            row_color = ground_color
        env_map[y, :, :] = row_color

    return env_map

def constant_env_map(radiance=(1.0, 1.0, 1.0)):
    """A 1x1 map: the same radiance from every direction (black by passing zeros)."""
    return np.array(radiance, dtype=np.float32).reshape(1, 1, 3)

def load_env_map(path: str, intensity: float = 1.0):
    """
    Load an equirectangular image as a linear radiance map.
    8-bit images are assumed sRGB encoded and are linearised.
    """
    with Image.open(path) as img:
        data = np.asarray(img.convert("RGB"), dtype=np.float32) / 255.0
    linear = np.where(data <= 0.04045, data / 12.92, ((data + 0.055) / 1.055) ** 2.4)
    print(f"Loaded environment map {path} ({linear.shape[1]}x{linear.shape[0]})")
    return np.ascontiguousarray(linear * intensity, dtype=np.float32)
