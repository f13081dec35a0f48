import math
import pickle
import numpy as np
import pytest
from PIL import Image

from camera.camera import Camera
from core.vector import Vector3
from geometry.scene import Scene
from geometry.sphere import Sphere
from materials.material import CHECKER_DARK, Material
from materials.presets import LightPresets, MaterialPresets
from renderer.config import QUALITY_LEVELS, RenderConfig
from renderer.env_map import constant_env_map, direction_to_pixel, generate_gradient_env_map, load_env_map
from renderer.surface import Surface, pack_rgb

# --- Materials ---

@pytest.mark.parametrize("kwargs", [
    dict(diffuse=Vector3(-0.1, 0.5, 0.5)),
    dict(diffuse=Vector3(1, 1, 1), refl=1.5),
    dict(diffuse=Vector3(1, 1, 1), refr=-0.2),
    dict(diffuse=Vector3(1, 1, 1), refl=0.6, refr=0.6),
])
def test_malformed_materials_are_rejected(kwargs):
    with pytest.raises(ValueError):
        Material(**kwargs)

def test_checker_modulates_by_position():
    material = MaterialPresets.checkerboard(Vector3(1.0, 1.0, 1.0))
    assert material.color_at(Vector3(0.5, 0.0, 0.5)) == Vector3(1.0, 1.0, 1.0)
    assert material.color_at(Vector3(1.5, 0.0, 0.5)) == Vector3(CHECKER_DARK, CHECKER_DARK, CHECKER_DARK)
    assert material.snapshot(Vector3(-0.5, 0.0, 0.5)).diffuse == Vector3(CHECKER_DARK, CHECKER_DARK, CHECKER_DARK)

def test_material_row_layout():
    assert LightPresets.white_light(2.0).to_row() == [2.0, 2.0, 2.0, 0.0, 0.0, 1.0, 0.0]
    assert MaterialPresets.glass().to_row()[4] == 1.0

def test_sphere_rejects_non_positive_radius():
    with pytest.raises(ValueError):
        Sphere(Vector3(0, 0, 0), 0.0, Material(Vector3(1, 1, 1)))

def test_scene_device_arrays():
    scene = Scene(constant_env_map((0.1, 0.2, 0.3)))
    scene.add(Sphere(Vector3(1, 2, 3), 0.5, MaterialPresets.mirror()))
    centers, radii, materials, sky = scene.device_arrays()
    np.testing.assert_allclose(centers, [[1, 2, 3]])
    np.testing.assert_allclose(radii, [0.5])
    assert materials.shape == (1, 7)
    assert sky.shape == (1, 1, 3)
    assert all(a.dtype == np.float32 for a in (centers, radii, materials, sky))

# --- Environment map ---

def test_direction_to_pixel_poles():
    assert direction_to_pixel(0.0, 1.0, 0.0, 64, 32)[1] == 0
    assert direction_to_pixel(0.0, -1.0, 0.0, 64, 32)[1] == 31

def test_gradient_env_map_shape_and_ground():
    env = generate_gradient_env_map(16, 8)
    assert env.shape == (8, 16, 3)
    assert env.dtype == np.float32
    # Below the horizon every row is the same ground colour
    np.testing.assert_array_equal(env[-1], env[-2])

def test_load_env_map_linearises(tmp_path):
    path = tmp_path / "sky.png"
    Image.fromarray(np.full((4, 8, 3), 255, dtype=np.uint8)).save(path)
    env = load_env_map(str(path), intensity=2.0)
    assert env.shape == (4, 8, 3)
    np.testing.assert_allclose(env, 2.0, rtol=1e-5)

def test_environment_lookup_through_scene():
    scene = Scene(constant_env_map((0.25, 0.5, 1.0)))
    color = scene.sample_environment(Vector3(0, 0, -1))
    assert (color.x, color.y, color.z) == pytest.approx((0.25, 0.5, 1.0))

# --- Camera ---

def test_pinhole_rays_start_at_camera(rng):
    camera = Camera(8, 4, position=Vector3(1, 2, 3))
    ray = camera.generate_ray(rng, 3, 2)
    assert ray.origin == Vector3(1, 2, 3)
    assert ray.direction.length() == pytest.approx(1.0)

def test_centre_pixel_looks_forward():
    class Centre:
        def random(self):
            return 0.5

    camera = Camera(3, 3, position=Vector3(0, 0, 0))
    ray = camera.generate_ray(Centre(), 1, 1)
    assert (ray.direction.x, ray.direction.y, ray.direction.z) == pytest.approx((0.0, 0.0, -1.0))

def test_handle_input_reports_changes(scripted_controls):
    controls = scripted_controls([(Vector3(0, 0, 0), 0.0, 0.0), (Vector3(0, 0, 2), 0.0, 0.0),
                                  (Vector3(0, 0, 0), 0.1, 0.0)])
    camera = Camera(4, 2, position=Vector3(0, 0, 0), controls=controls)
    assert camera.handle_input() is False
    assert camera.handle_input() is True
    assert (camera.position.x, camera.position.y, camera.position.z) == pytest.approx((0.0, 0.0, -2.0))
    assert camera.handle_input() is True
    assert camera.yaw == pytest.approx(0.1)

def test_pitch_is_clamped():
    camera = Camera(4, 2)
    camera.rotate(0.0, math.radians(120))
    assert camera.pitch == pytest.approx(math.radians(89))

def test_camera_pickles_without_controls(scripted_controls):
    camera = Camera(4, 2, controls=scripted_controls())
    restored = pickle.loads(pickle.dumps(camera))
    assert restored.controls is None
    assert restored.p1 == camera.p1

# --- Surface ---

def test_pack_rgb_clamps_channels():
    colors = np.array([[1.0, 0.5, 0.0], [-1.0, 2.0, 0.25]], dtype=np.float32)
    packed = pack_rgb(colors)
    assert packed[0] == 0xFF8000
    assert packed[1] == 0x00FF40

def test_surface_rgb_and_save(tmp_path):
    surface = Surface(2, 1)
    surface.plot(np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]], dtype=np.float32))
    rgb = surface.to_rgb_array()
    assert rgb.shape == (1, 2, 3)
    assert tuple(rgb[0, 0]) == (255, 0, 0)
    assert tuple(rgb[0, 1]) == (0, 0, 255)

    path = tmp_path / "frame.png"
    surface.save(str(path))
    with Image.open(path) as img:
        assert img.size == (2, 1)

def test_surface_rejects_zero_size():
    with pytest.raises(ValueError):
        Surface(0, 4)

# --- Configuration ---

def test_config_defaults():
    config = RenderConfig()
    assert (config.width, config.height) == (320, 180)
    assert config.run_time is None
    assert config.use_device is False
    assert config.device_fallback is True

@pytest.mark.parametrize("kwargs", [dict(width=0), dict(run_time=-1.0), dict(executor="gpu"), dict(seed=-3)])
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        RenderConfig(**kwargs)

def test_config_from_quality():
    config = RenderConfig.from_quality("interactive", seed=7)
    assert (config.width, config.height) == (QUALITY_LEVELS["interactive"]["width"],
                                             QUALITY_LEVELS["interactive"]["height"])
    assert config.seed == 7
    with pytest.raises(ValueError):
        RenderConfig.from_quality("ultra")
