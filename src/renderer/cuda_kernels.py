# renderer/cuda_kernels.py

from numba import cuda, float32
import math
from numba.cuda.random import xoroshiro128p_uniform_float32
from .cuda_utils import dot, normalize_inplace, reflect_inplace, sample_cosine_hemisphere, INVPI
from .cuda_geometry import intersect_scene, sphere_normal

# Must match renderer.integrator and materials.material.
MAX_DEPTH = 20
EPSILON = float32(1e-4)
GLASS_IOR = float32(1.2)
CHECKER_DARK = float32(0.25)

@cuda.jit(device=True)
def generate_primary_ray(camera, width, height, x, y, rng_states, lane, out_origin, out_dir):
    """
    Device copy of camera.Camera.generate_ray. camera rows:
    0 p1, 1 p2, 2 p3, 3 up, 4 right, 5 position, 6 (lens_size, 0, 0).
    """
    r0 = xoroshiro128p_uniform_float32(rng_states, lane)
    r1 = xoroshiro128p_uniform_float32(rng_states, lane)
    r2 = xoroshiro128p_uniform_float32(rng_states, lane) - 0.5
    r3 = xoroshiro128p_uniform_float32(rng_states, lane) - 0.5
    u = (x + r0) / width
    v = (y + r1) / height
    lens = camera[6, 0]
    for i in range(3):
        target = camera[0, i] + (camera[1, i] - camera[0, i]) * u + (camera[2, i] - camera[0, i]) * v
        out_origin[i] = camera[5, i] + (camera[4, i] * r2 + camera[3, i] * r3) * lens
        out_dir[i] = target - out_origin[i]
    normalize_inplace(out_dir)

@cuda.jit(device=True)
def sample_sky(direction, sky):
    """Equirectangular lookup; same mapping as renderer.env_map.direction_to_pixel."""
    height = sky.shape[0]
    width = sky.shape[1]
    phi = math.atan2(-direction[2], direction[0])
    if phi < 0.0:
        phi += 2.0 * math.pi
    theta = math.acos(max(-1.0, min(1.0, direction[1])))
    ix = min(int(phi / (2.0 * math.pi) * width), width - 1)
    iy = min(int(theta / math.pi * height), height - 1)
    return sky[iy, ix, 0], sky[iy, ix, 1], sky[iy, ix, 2]

@cuda.jit(device=True)
def refraction(inside, direction, normal, rng_states, lane, out_dir):
    """
    Device copy of core.utils.refraction: Schlick-weighted choice between
    refraction and reflection, reflection on total internal reflection.
    'normal' is the outward normal.
    """
    nc = float32(1.0)
    nt = GLASS_IOR
    if inside:
        nc = GLASS_IOR
        nt = float32(1.0)
    nnt = nc / nt
    sign = float32(1.0)
    if dot(direction, normal) >= 0.0:
        sign = float32(-1.0)
    n = cuda.local.array(3, dtype=float32)
    for i in range(3):
        n[i] = normal[i] * sign
    ddn = dot(direction, n)
    cos2t = 1.0 - nnt * nnt * (1.0 - ddn * ddn)
    reflect_inplace(out_dir, direction, n)
    if cos2t < 0.0:
        return

    a = nt - nc
    b = nt + nc
    r0 = (a * a) / (b * b)
    cos_t = math.sqrt(cos2t)
    c = 1.0 + ddn
    if inside:
        c = 1.0 - cos_t
    fresnel = r0 + (1.0 - r0) * c * c * c * c * c
    if xoroshiro128p_uniform_float32(rng_states, lane) < fresnel:
        return
    k = ddn * nnt + cos_t
    for i in range(3):
        out_dir[i] = direction[i] * nnt - n[i] * k
    normalize_inplace(out_dir)

@cuda.jit(device=True)
def pack_rgb(r, g, b):
    """Same clamp and packing as renderer.surface.pack_rgb."""
    ir = int(min(255.0, max(r, 0.0) * 256.0))
    ig = int(min(255.0, max(g, 0.0) * 256.0))
    ib = int(min(255.0, max(b, 0.0) * 256.0))
    return (ir << 16) | (ig << 8) | ib

@cuda.jit
def path_trace_kernel(camera, width, height, rng_states, accum, pixels,
                      centers, radii, materials, sky, scale):
    """
    One accumulation frame: one path per pixel, added to 'accum', and the
    resolved colour (accum * scale) packed into 'pixels'.

    materials rows: (r, g, b, refl, refr, emissive, checker).
    The path loop is the iterative form of renderer.integrator.sample.
    """
    lane = cuda.grid(1)
    if lane >= width * height:
        return
    x = lane % width
    y = lane // width

    origin = cuda.local.array(3, dtype=float32)
    direction = cuda.local.array(3, dtype=float32)
    new_dir = cuda.local.array(3, dtype=float32)
    point = cuda.local.array(3, dtype=float32)
    normal = cuda.local.array(3, dtype=float32)
    facing = cuda.local.array(3, dtype=float32)
    throughput = cuda.local.array(3, dtype=float32)

    generate_primary_ray(camera, width, height, x, y, rng_states, lane, origin, direction)
    for i in range(3):
        throughput[i] = 1.0

    res_r = float32(0.0)
    res_g = float32(0.0)
    res_b = float32(0.0)
    inside = False
    depth = 0
    while True:
        t, hit = intersect_scene(origin, direction, centers, radii)
        if hit == -1:
            sr, sg, sb = sample_sky(direction, sky)
            res_r = throughput[0] * sr
            res_g = throughput[1] * sg
            res_b = throughput[2] * sb
            break

        for i in range(3):
            point[i] = origin[i] + direction[i] * t
        sphere_normal(point, centers[hit], radii[hit], normal)

        cr = materials[hit, 0]
        cg = materials[hit, 1]
        cb = materials[hit, 2]
        refl = materials[hit, 3]
        refr = materials[hit, 4]
        if materials[hit, 6] > 0.5:
            if (int(math.floor(point[0])) + int(math.floor(point[2]))) % 2 != 0:
                cr *= CHECKER_DARK
                cg *= CHECKER_DARK
                cb *= CHECKER_DARK
        if materials[hit, 5] > 0.5:
            res_r = throughput[0] * cr
            res_g = throughput[1] * cg
            res_b = throughput[2] * cb
            break
        if depth >= MAX_DEPTH:
            break

        r0 = xoroshiro128p_uniform_float32(rng_states, lane)
        if r0 < refr:
            refraction(inside, direction, normal, rng_states, lane, new_dir)
            inside = dot(normal, new_dir) < 0.0
        elif r0 < refl + refr:
            reflect_inplace(new_dir, direction, normal)
        else:
            sign = float32(1.0)
            if dot(direction, normal) >= 0.0:
                sign = float32(-1.0)
            for i in range(3):
                facing[i] = normal[i] * sign
            pdf = sample_cosine_hemisphere(rng_states, lane, facing, new_dir)
            if pdf <= 0.0:
                break
            weight = dot(new_dir, facing) * INVPI / pdf
            for i in range(3):
                throughput[i] *= weight

        throughput[0] *= cr
        throughput[1] *= cg
        throughput[2] *= cb
        for i in range(3):
            origin[i] = point[i] + new_dir[i] * EPSILON
            direction[i] = new_dir[i]
        depth += 1

    accum[lane, 0] += res_r
    accum[lane, 1] += res_g
    accum[lane, 2] += res_b
    pixels[lane] = pack_rgb(accum[lane, 0] * scale, accum[lane, 1] * scale, accum[lane, 2] * scale)

@cuda.jit
def clear_accumulator_kernel(accum):
    lane = cuda.grid(1)
    if lane < accum.shape[0]:
        for c in range(accum.shape[1]):
            accum[lane, c] = 0.0
