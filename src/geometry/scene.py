# geometry/scene.py
from typing import List, Optional, Tuple
import numpy as np
from core.ray import Ray
from core.vector import Vector3
from geometry.sphere import Sphere
from materials.material import Material
from renderer.env_map import constant_env_map, direction_to_pixel

class Scene:
    """
    A list of spheres and an environment map.

    The CPU integrator queries it through intersect / get_material /
    sample_environment; the device path uploads the flat arrays returned by
    device_arrays() once per session.
    """
    def __init__(self, env_map: Optional[np.ndarray] = None):
        self.objects: List[Sphere] = []
        if env_map is None:
            env_map = constant_env_map((0.0, 0.0, 0.0))
        self.set_environment(env_map)

    def add(self, obj: Sphere) -> int:
        self.objects.append(obj)
        return len(self.objects) - 1

    def set_environment(self, env_map: np.ndarray):
        if env_map.ndim != 3 or env_map.shape[2] != 3:
            raise ValueError(f"Environment map must be (H, W, 3), got {env_map.shape}")
        self.env_map = np.ascontiguousarray(env_map, dtype=np.float32)
        self.env_height, self.env_width = self.env_map.shape[:2]

    def intersect(self, ray: Ray) -> Tuple[float, int]:
        """
        Finds the nearest intersection and stores it in the ray's hit fields.
        Returns (t, prim_index); prim_index is -1 when nothing was hit.
        """
        for index, obj in enumerate(self.objects):
            obj.intersect(ray, index)
        if ray.prim_index != -1:
            ray.normal = self.objects[ray.prim_index].normal_at(ray.at(ray.t))
        return ray.t, ray.prim_index

    def get_material(self, prim_index: int, point: Vector3) -> Material:
        return self.objects[prim_index].material.snapshot(point)

    def sample_environment(self, direction: Vector3) -> Vector3:
        ix, iy = direction_to_pixel(direction.x, direction.y, direction.z,
                                    self.env_width, self.env_height)
        return Vector3.from_array(self.env_map[iy, ix])

    def device_arrays(self):
        """
        Read-only arrays for the device path:
        (centers (K,3), radii (K,), materials (K,7), env_map (H,W,3)), all float32.
        """
        count = len(self.objects)
        centers = np.zeros((count, 3), dtype=np.float32)
        radii = np.zeros(count, dtype=np.float32)
        materials = np.zeros((count, 7), dtype=np.float32)
        for i, obj in enumerate(self.objects):
            centers[i] = [obj.center.x, obj.center.y, obj.center.z]
            radii[i] = obj.radius
            materials[i] = obj.material.to_row()
        return centers, radii, materials, self.env_map
