import math
import numpy as np
import pytest

from core.ray import NO_HIT, Ray
from core.utils import reflect, refraction
from core.vector import Vector3
from geometry.scene import Scene
from geometry.sphere import Sphere
from materials.material import Material
from renderer.env_map import constant_env_map
from renderer.integrator import MAX_DEPTH, sample, trace_pixel

def forward_ray():
    return Ray(Vector3(0, 0, 0), Vector3(0, 0, -1))

def single_sphere_scene(material, sky=(1.0, 1.0, 1.0)):
    scene = Scene(constant_env_map(sky))
    scene.add(Sphere(Vector3(0, 0, -5), 1.0, material))
    return scene

def test_no_hit_returns_environment(rng):
    scene = Scene(constant_env_map((0.2, 0.3, 0.4)))
    result = sample(scene, forward_ray(), rng)
    assert (result.x, result.y, result.z) == pytest.approx((0.2, 0.3, 0.4), rel=1e-6)

def test_emissive_hit_returns_emission(rng):
    scene = single_sphere_scene(Material(Vector3(4.0, 2.0, 1.0), emissive=True))
    result = sample(scene, forward_ray(), rng)
    assert (result.x, result.y, result.z) == pytest.approx((4.0, 2.0, 1.0))

def test_emission_is_returned_even_at_max_depth(rng):
    scene = single_sphere_scene(Material(Vector3(1.0, 1.0, 1.0), emissive=True))
    result = sample(scene, forward_ray(), rng, depth=MAX_DEPTH)
    assert result == Vector3(1.0, 1.0, 1.0)

@pytest.mark.parametrize("material", [
    Material(Vector3(0.9, 0.9, 0.9), refl=1.0),
    Material(Vector3(0.9, 0.9, 0.9), refr=1.0),
    Material(Vector3(0.9, 0.9, 0.9)),
])
def test_depth_limit_absorbs_path(rng, material):
    scene = single_sphere_scene(material)
    assert sample(scene, forward_ray(), rng, depth=MAX_DEPTH).is_black()

def test_diffuse_under_constant_sky_equals_albedo_times_sky(rng):
    scene = single_sphere_scene(Material(Vector3(0.5, 0.25, 0.8)), sky=(2.0, 2.0, 2.0))
    for _ in range(200):
        result = sample(scene, forward_ray(), rng)
        assert (result.x, result.y, result.z) == pytest.approx((1.0, 0.5, 1.6), rel=1e-9)

def test_mirror_reflects_environment_with_tint(rng):
    scene = single_sphere_scene(Material(Vector3(0.5, 0.5, 0.5), refl=1.0), sky=(1.0, 1.0, 1.0))
    result = sample(scene, forward_ray(), rng)
    assert (result.x, result.y, result.z) == pytest.approx((0.5, 0.5, 0.5))

def test_glass_transmits_tint_squared_under_constant_sky(rng):
    # Refraction and reflection both leave the sphere eventually; every
    # surface interaction multiplies by the tint.
    scene = single_sphere_scene(Material(Vector3(1.0, 1.0, 1.0), refr=1.0), sky=(0.7, 0.7, 0.7))
    for _ in range(50):
        result = sample(scene, forward_ray(), rng)
        assert (result.x, result.y, result.z) == pytest.approx((0.7, 0.7, 0.7))

def test_enclosed_diffuse_path_terminates_at_depth_limit(rng):
    # A camera inside a closed diffuse sphere never escapes: the path is
    # absorbed after MAX_DEPTH bounces.
    scene = Scene(constant_env_map((1.0, 1.0, 1.0)))
    scene.add(Sphere(Vector3(0, 0, 0), 10.0, Material(Vector3(0.9, 0.9, 0.9))))
    assert sample(scene, forward_ray(), rng).is_black()

def test_sample_is_finite_and_non_negative(rng, busy_scene):
    from scenes import fill_camera
    camera = fill_camera(8, 4)
    for y in range(4):
        for x in range(8):
            color = trace_pixel(busy_scene, camera, rng, x, y)
            assert all(math.isfinite(c) and c >= 0.0 for c in color)

def test_scene_intersect_fills_hit_fields():
    scene = single_sphere_scene(Material(Vector3(1, 1, 1)))
    ray = forward_ray()
    t, index = scene.intersect(ray)
    assert index == 0
    assert t == pytest.approx(4.0)
    assert (ray.normal.x, ray.normal.y, ray.normal.z) == pytest.approx((0.0, 0.0, 1.0))

def test_scene_miss_keeps_sentinel():
    scene = Scene()
    ray = forward_ray()
    t, index = scene.intersect(ray)
    assert index == -1
    assert t == NO_HIT
    assert not ray.hit

def test_reflect_about_normal():
    r = reflect(Vector3(1, -1, 0), Vector3(0, 1, 0))
    assert r == Vector3(1, 1, 0)

def test_refraction_total_internal_reflection():
    class NeverDraw:
        def random(self):
            raise AssertionError("TIR must not consume a draw")

    # Grazing ray inside glass against the outward normal (0, 1, 0)
    d = Vector3(math.sqrt(0.99), 0.1, 0.0)
    out = refraction(True, d, Vector3(0, 1, 0), NeverDraw())
    assert (out.x, out.y, out.z) == pytest.approx((d.x, -d.y, 0.0))

def test_refraction_head_on_enters_medium():
    class HighDraw:
        def random(self):
            return 0.99

    out = refraction(False, Vector3(0, 0, -1), Vector3(0, 0, 1), HighDraw())
    assert (out.x, out.y, out.z) == pytest.approx((0.0, 0.0, -1.0))
    assert np.isclose(out.length(), 1.0)

class FixedDraw:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

def test_leaving_glass_uses_transmitted_cosine_for_fresnel():
    # Inside glass at sin(theta_i) = 0.8: cos_i = 0.6 gives Schlick ~0.018,
    # the transmitted cos_t = 0.28 gives ~0.20. A draw of 0.1 must reflect.
    d = Vector3(0.8, 0.6, 0.0)
    out = refraction(True, d, Vector3(0, 1, 0), FixedDraw(0.1))
    assert (out.x, out.y, out.z) == pytest.approx((0.8, -0.6, 0.0))

def test_leaving_glass_refracts_above_fresnel():
    d = Vector3(0.8, 0.6, 0.0)
    out = refraction(True, d, Vector3(0, 1, 0), FixedDraw(0.5))
    assert out.y > 0.0
    # sin(theta_t) = 1.2 * 0.8
    assert out.x == pytest.approx(0.96)
