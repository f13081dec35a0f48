# scenes.py
import math
from camera.camera import Camera
from core.vector import Vector3
from geometry.scene import Scene
from geometry.sphere import Sphere
from materials.material import Material
from materials.presets import ColorPresets, LightPresets, MaterialPresets
from renderer.env_map import constant_env_map, generate_gradient_env_map, load_env_map

def default_scene(env_path: str = None) -> Scene:
    """Checker floor, a diffuse, a mirror and a glass sphere, one light and a sky."""
    env_map = load_env_map(env_path) if env_path else generate_gradient_env_map()
    scene = Scene(env_map)

    print("\n=== Creating Scene ===")
    # Ground plane approximated by a very large sphere
    scene.add(Sphere(Vector3(0, -1000, 0), 1000, MaterialPresets.checkerboard()))
    scene.add(Sphere(Vector3(-2.2, 1, 0), 1.0, MaterialPresets.matte(ColorPresets.RED)))
    scene.add(Sphere(Vector3(0, 1, -1.5), 1.0, MaterialPresets.mirror()))
    scene.add(Sphere(Vector3(2.2, 1, 0), 1.0, MaterialPresets.glass()))
    scene.add(Sphere(Vector3(0.8, 0.4, 1.6), 0.4, MaterialPresets.glossy(ColorPresets.BLUE)))
    scene.add(Sphere(Vector3(0, 6, 2), 0.5, LightPresets.warm_light(10.0)))
    print(f"Added {len(scene.objects)} spheres, sky {scene.env_width}x{scene.env_height}")
    return scene

def default_camera(width: int, height: int, controls=None) -> Camera:
    return Camera(width, height, position=Vector3(0, 1.5, 6), pitch=-0.1,
                  fov=math.radians(60), controls=controls)

# Test scenes with closed-form pixel values. A sphere of radius 8 at distance
# 12 covers a 40 degree square view completely.

def fill_camera(width: int, height: int) -> Camera:
    """Camera at the origin looking down -z with a 40 degree field of view."""
    return Camera(width, height, position=Vector3(0, 0, 0), fov=math.radians(40))

def emissive_fill_scene(radiance: Vector3 = Vector3(0.8, 0.6, 0.4)) -> Scene:
    """Every primary ray hits an emitter: each pixel equals 'radiance' exactly."""
    scene = Scene()
    scene.add(Sphere(Vector3(0, 0, -12), 8.0, Material(radiance, emissive=True)))
    return scene

def diffuse_sky_scene(albedo: Vector3 = Vector3(0.5, 0.5, 0.5),
                      sky=(1.0, 1.0, 1.0)) -> Scene:
    """
    A convex diffuse sphere under a constant sky: every bounce escapes, so
    each pixel equals albedo * sky for any sample count.
    """
    scene = Scene(constant_env_map(sky))
    scene.add(Sphere(Vector3(0, 0, -12), 8.0, Material(albedo)))
    return scene

def mixed_scene() -> Scene:
    """Glass, mirror and diffuse spheres inside a light; exercises every branch."""
    scene = Scene(constant_env_map((0.3, 0.3, 0.3)))
    scene.add(Sphere(Vector3(0, -101, -6), 100.0, MaterialPresets.checkerboard()))
    scene.add(Sphere(Vector3(-1.2, 0, -6), 1.0, MaterialPresets.glass()))
    scene.add(Sphere(Vector3(1.2, 0, -6), 1.0, MaterialPresets.mirror()))
    scene.add(Sphere(Vector3(0, 0, -8), 1.0, MaterialPresets.glossy(ColorPresets.GREEN, refl=0.5)))
    scene.add(Sphere(Vector3(0, 4, -6), 1.0, LightPresets.white_light(4.0)))
    return scene
