# geometry/sphere.py
import math
from core.vector import Vector3
from core.ray import Ray
from materials.material import Material

class Sphere:
    """
    Represents a sphere defined by its center, radius, and material.
    """
    def __init__(self, center: Vector3, radius: float, material: Material):
        if radius <= 0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center = center
        self.radius = radius
        self.material = material

    def intersect(self, ray: Ray, index: int) -> bool:
        """
        Updates the ray's hit fields if this sphere is closer than the current
        hit. Assumes a unit-length ray direction.
        """
        oc = ray.origin - self.center
        half_b = oc.dot(ray.direction)
        c = oc.dot(oc) - self.radius * self.radius
        discriminant = half_b * half_b - c
        if discriminant < 0:
            return False

        sqrt_disc = math.sqrt(discriminant)
        # Nearest root in front of the origin; the far root when starting inside.
        t = -half_b - sqrt_disc
        if t <= 0:
            t = -half_b + sqrt_disc
        if t <= 0 or t >= ray.t:
            return False

        ray.t = t
        ray.prim_index = index
        return True

    def normal_at(self, point: Vector3) -> Vector3:
        """Outward unit normal at a point on the surface."""
        return (point - self.center) / self.radius
