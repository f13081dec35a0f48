# materials/presets.py
from core.vector import Vector3
from materials.material import Material

class ColorPresets:
    """Common colors."""
    WHITE = Vector3(1.0, 1.0, 1.0)
    BLACK = Vector3(0.0, 0.0, 0.0)
    RED = Vector3(0.9, 0.2, 0.2)
    GREEN = Vector3(0.2, 0.9, 0.2)
    BLUE = Vector3(0.2, 0.2, 0.9)
    GREY = Vector3(0.5, 0.5, 0.5)
    WARM = Vector3(1.0, 0.9, 0.7)
    COOL = Vector3(0.7, 0.8, 1.0)

class MaterialPresets:
    """Predefined materials covering the three interaction types and lights."""

    @staticmethod
    def matte(color: Vector3) -> Material:
        return Material(color)

    @staticmethod
    def checkerboard(color: Vector3 = ColorPresets.WHITE * 0.8) -> Material:
        return Material(color, checker=True)

    @staticmethod
    def mirror(tint: Vector3 = Vector3(0.95, 0.95, 0.95)) -> Material:
        return Material(tint, refl=1.0)

    @staticmethod
    def glossy(color: Vector3, refl: float = 0.4) -> Material:
        # Mix of mirror and diffuse interactions, chosen per bounce.
        return Material(color, refl=refl)

    @staticmethod
    def glass(tint: Vector3 = Vector3(0.98, 0.98, 0.98)) -> Material:
        return Material(tint, refr=1.0)

class LightPresets:
    """Emissive materials with different colors and intensities."""

    @staticmethod
    def white_light(intensity: float = 5.0) -> Material:
        return Material(ColorPresets.WHITE * intensity, emissive=True)

    @staticmethod
    def warm_light(intensity: float = 5.0) -> Material:
        return Material(ColorPresets.WARM * intensity, emissive=True)

    @staticmethod
    def cool_light(intensity: float = 5.0) -> Material:
        return Material(ColorPresets.COOL * intensity, emissive=True)
