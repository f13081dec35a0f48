# core/ray.py
from core.vector import Vector3

# Hit distance of a ray that has not intersected anything yet.
NO_HIT = 1e34

class Ray:
    """
    A ray with an origin and a unit direction, plus the hit fields that the
    scene intersection routine fills in (t, prim_index, normal).

    'inside' tracks whether the ray travels inside a dielectric medium; it
    selects the refraction index ratio when the ray hits the next surface.
    """
    def __init__(self, origin: Vector3, direction: Vector3, t: float = NO_HIT,
                 inside: bool = False):
        self.origin = origin
        self.direction = direction
        self.t = t
        self.inside = inside
        self.prim_index = -1
        self.normal = None

    @property
    def hit(self) -> bool:
        return self.prim_index != -1

    def at(self, t: float) -> Vector3:
        """
        Returns the point along the ray at parameter t.
        """
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction}, t={self.t}, prim={self.prim_index})"
