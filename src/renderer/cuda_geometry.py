# renderer/cuda_geometry.py

from numba import cuda
import math

NO_HIT = 1e34

@cuda.jit(device=True)
def ray_sphere_intersect(ray_origin, ray_dir, center, radius, t_max):
    """
    Ray-sphere intersection for a unit direction. Returns the nearest positive
    root below t_max (the far root when the origin is inside), or -1.0.
    """
    oc0 = ray_origin[0] - center[0]
    oc1 = ray_origin[1] - center[1]
    oc2 = ray_origin[2] - center[2]
    half_b = oc0 * ray_dir[0] + oc1 * ray_dir[1] + oc2 * ray_dir[2]
    c = oc0 * oc0 + oc1 * oc1 + oc2 * oc2 - radius * radius
    discriminant = half_b * half_b - c

    if discriminant < 0:
        return -1.0

    sqrtd = math.sqrt(discriminant)
    root = -half_b - sqrtd
    if root <= 0:
        root = -half_b + sqrtd
    if root <= 0 or root >= t_max:
        return -1.0
    return root

@cuda.jit(device=True)
def intersect_scene(ray_origin, ray_dir, centers, radii):
    """
    Nearest sphere along the ray. Returns (t, index); index is -1 on a miss.
    Same traversal order and tie-breaking as geometry.scene.Scene.intersect.
    """
    closest = NO_HIT
    hit_index = -1
    for k in range(radii.shape[0]):
        t = ray_sphere_intersect(ray_origin, ray_dir, centers[k], radii[k], closest)
        if t > 0.0:
            closest = t
            hit_index = k
    return closest, hit_index

@cuda.jit(device=True)
def sphere_normal(point, center, radius, out_normal):
    """Outward unit normal of a sphere at 'point'."""
    for i in range(3):
        out_normal[i] = (point[i] - center[i]) / radius
