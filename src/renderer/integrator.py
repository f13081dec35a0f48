# renderer/integrator.py
from core.ray import Ray
from core.utils import INVPI, face_forward, reflect, refraction, sample_cosine_hemisphere
from core.vector import Vector3

# Paths that neither escape nor hit a light within this many bounces are absorbed.
MAX_DEPTH = 20
# Offset along the new direction that keeps extension rays off their own surface.
EPSILON = 1e-4

def sample(scene, ray: Ray, rng, depth: int = 0) -> Vector3:
    """
    Estimates the radiance arriving along 'ray' with one random light path.

    Each vertex terminates on one of three cases: the ray escapes (environment
    radiance), it hits an emitter (emitted radiance), or 'depth' reached
    MAX_DEPTH (zero, the path is absorbed). Otherwise one uniform draw picks
    the interaction over [refr, refl, diffuse] and the path continues with the
    material colour folded into the throughput.

    The diffuse bounce samples the cosine-weighted hemisphere (pdf = cos/pi).
    Its weight brdf * cos / pdf = (albedo/pi) * cos / (cos/pi) reduces to the
    albedo; the cos/pdf factor is kept explicit below so the estimator stays
    tied to the sampling distribution.

    The loop is the iterative form of the recursive definition
    L(depth) = diffuse * L(depth + 1); the device kernel runs the same loop.
    """
    throughput = Vector3(1.0, 1.0, 1.0)
    while True:
        scene.intersect(ray)
        if ray.prim_index == -1:
            return throughput * scene.sample_environment(ray.direction)

        point = ray.at(ray.t)
        material = scene.get_material(ray.prim_index, point)
        if material.emissive:
            return throughput * material.diffuse
        if depth >= MAX_DEPTH:
            return Vector3.zero()

        normal = ray.normal
        inside = ray.inside
        r0 = rng.random()
        if r0 < material.refr:
            direction = refraction(ray.inside, ray.direction, normal, rng)
            inside = normal.dot(direction) < 0
        elif r0 < material.refl + material.refr:
            direction = reflect(ray.direction, normal)
        else:
            n = face_forward(normal, ray.direction)
            direction, pdf = sample_cosine_hemisphere(rng, n)
            if pdf <= 0.0:
                return Vector3.zero()
            throughput = throughput * (direction.dot(n) * INVPI / pdf)

        throughput = throughput * material.diffuse
        ray = Ray(point + direction * EPSILON, direction, inside=inside)
        depth += 1

def trace_pixel(scene, camera, rng, x: int, y: int) -> Vector3:
    """One radiance sample for pixel (x, y)."""
    return sample(scene, camera.generate_ray(rng, x, y), rng)
