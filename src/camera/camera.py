# camera/camera.py
import math
import numpy as np
from core.vector import Vector3
from core.ray import Ray

WORLD_UP = Vector3(0, 1, 0)
MAX_PITCH = math.radians(89)

class Camera:
    """
    Yaw/pitch camera with a rectangular screen plane and a square thin lens.

    The screen plane is stored as three corners (p1 top-left, p2 top-right,
    p3 bottom-left) at 'focus_dist' in front of the eye; pixel (0, 0) is the
    top-left corner of the frame.
    """
    def __init__(self, width: int, height: int, position: Vector3 = Vector3(0, 1, 6),
                 yaw: float = 0.0, pitch: float = 0.0, fov: float = math.radians(60),
                 lens_size: float = 0.0, focus_dist: float = 1.0, controls=None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Camera resolution must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.position = position
        self.yaw = yaw
        self.pitch = pitch
        self.fov = fov
        self.lens_size = lens_size
        self.focus_dist = focus_dist
        self.controls = controls
        self.update_camera()

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def update_camera(self):
        """Updates the camera's basis vectors and screen plane."""
        self.forward = Vector3(
            math.sin(self.yaw) * math.cos(self.pitch),
            math.sin(self.pitch),
            -math.cos(self.yaw) * math.cos(self.pitch)
        ).normalize()
        self.right = self.forward.cross(WORLD_UP).normalize()
        self.up = self.right.cross(self.forward).normalize()

        viewport_height = 2.0 * math.tan(self.fov / 2) * self.focus_dist
        viewport_width = self.aspect_ratio * viewport_height
        half_w = self.right * (viewport_width * 0.5)
        half_h = self.up * (viewport_height * 0.5)
        center = self.position + self.forward * self.focus_dist

        self.p1 = center - half_w + half_h
        self.p2 = center + half_w + half_h
        self.p3 = center - half_w - half_h

    def generate_ray(self, rng, x: int, y: int) -> Ray:
        """
        Primary ray through a jittered point of pixel (x, y).
        Always consumes four uniform draws: two for the pixel jitter and two
        for the lens offset.
        """
        r0 = rng.random()
        r1 = rng.random()
        r2 = rng.random() - 0.5
        r3 = rng.random() - 0.5
        u = (x + r0) / self.width
        v = (y + r1) / self.height
        target = self.p1 + (self.p2 - self.p1) * u + (self.p3 - self.p1) * v
        origin = self.position + (self.right * r2 + self.up * r3) * self.lens_size
        return Ray(origin, (target - origin).normalize())

    def move(self, delta: Vector3):
        self.position = self.position + delta
        self.update_camera()

    def rotate(self, dyaw: float, dpitch: float):
        self.yaw += dyaw
        # Clamp pitch to prevent camera flip
        self.pitch = max(min(self.pitch + dpitch, MAX_PITCH), -MAX_PITCH)
        self.update_camera()

    def handle_input(self) -> bool:
        """
        Polls the attached controls and applies the movement.
        Returns True iff the camera state changed during this call.
        """
        if self.controls is None:
            return False
        local_move, dyaw, dpitch = self.controls.poll()
        moved = False
        if dyaw != 0 or dpitch != 0:
            self.rotate(dyaw, dpitch)
            moved = True
        if not local_move.is_black():
            # x: right, y: world up, z: forward
            self.move(self.right * local_move.x + WORLD_UP * local_move.y + self.forward * local_move.z)
            moved = True
        return moved

    def __getstate__(self):
        # Controls hold window handles; worker processes only need the geometry.
        state = self.__dict__.copy()
        state["controls"] = None
        return state

    def device_params(self) -> np.ndarray:
        """(7, 3) float32 block: p1, p2, p3, up, right, position, (lens_size, 0, 0)."""
        params = np.zeros((7, 3), dtype=np.float32)
        params[0] = self.p1.to_numpy()
        params[1] = self.p2.to_numpy()
        params[2] = self.p3.to_numpy()
        params[3] = self.up.to_numpy()
        params[4] = self.right.to_numpy()
        params[5] = self.position.to_numpy()
        params[6, 0] = self.lens_size
        return params
