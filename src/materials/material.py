# materials/material.py
import math
from core.vector import Vector3

# Brightness of the odd cells of a checkered material.
CHECKER_DARK = 0.25

class Material:
    """
    Read-only material snapshot consumed by the integrator.

    'refr' and 'refl' are the probabilities of a dielectric and a mirror
    interaction; the remainder (1 - refr - refl) is the diffuse bounce
    probability. Emissive materials end the path and return 'diffuse' as
    their emitted radiance.
    """
    def __init__(self, diffuse: Vector3, refl: float = 0.0, refr: float = 0.0,
                 emissive: bool = False, checker: bool = False):
        if min(diffuse.x, diffuse.y, diffuse.z) < 0:
            raise ValueError(f"Material colour must be non-negative, got {diffuse}")
        if not (0.0 <= refl <= 1.0 and 0.0 <= refr <= 1.0):
            raise ValueError(f"refl and refr must lie in [0, 1], got refl={refl}, refr={refr}")
        if refl + refr > 1.0 + 1e-6:
            raise ValueError(f"refl + refr must not exceed 1, got {refl + refr}")
        self.diffuse = diffuse
        self.refl = refl
        self.refr = refr
        self.emissive = emissive
        self.checker = checker

    def color_at(self, point: Vector3) -> Vector3:
        """Diffuse colour at a world-space point (checkered materials vary with x/z)."""
        if not self.checker:
            return self.diffuse
        if (math.floor(point.x) + math.floor(point.z)) % 2 == 0:
            return self.diffuse
        return self.diffuse * CHECKER_DARK

    def snapshot(self, point: Vector3) -> "Material":
        if not self.checker:
            return self
        return Material(self.color_at(point), self.refl, self.refr, self.emissive)

    def to_row(self):
        """Flat (r, g, b, refl, refr, emissive, checker) row for device upload."""
        return [self.diffuse.x, self.diffuse.y, self.diffuse.z,
                self.refl, self.refr,
                1.0 if self.emissive else 0.0,
                1.0 if self.checker else 0.0]

    def __repr__(self) -> str:
        return (f"Material(diffuse={self.diffuse}, refl={self.refl}, refr={self.refr}, "
                f"emissive={self.emissive}, checker={self.checker})")
