# renderer/cuda_utils.py

from numba import cuda, float32
from numba.cuda.random import xoroshiro128p_uniform_float32
import math

INVPI = float32(1.0 / math.pi)

@cuda.jit(device=True)
def normalize_inplace(v):
    """Normalize a vector on the GPU in-place."""
    length_sq = v[0] * v[0] + v[1] * v[1] + v[2] * v[2]
    if length_sq > 0.0:
        length = math.sqrt(length_sq)
        v[0] /= length
        v[1] /= length
        v[2] /= length

@cuda.jit(device=True)
def dot(v1, v2):
    """Compute dot product on the GPU."""
    return v1[0]*v2[0] + v1[1]*v2[1] + v1[2]*v2[2]

@cuda.jit(device=True)
def cross_inplace(out, v1, v2):
    """Compute cross product on the GPU, storing result in out."""
    temp0 = v1[1] * v2[2] - v1[2] * v2[1]
    temp1 = v1[2] * v2[0] - v1[0] * v2[2]
    temp2 = v1[0] * v2[1] - v1[1] * v2[0]
    out[0] = temp0
    out[1] = temp1
    out[2] = temp2

@cuda.jit(device=True)
def reflect_inplace(out, d, n):
    """out = d - 2 (d.n) n"""
    k = 2.0 * dot(d, n)
    for i in range(3):
        out[i] = d[i] - k * n[i]

@cuda.jit(device=True)
def build_basis_inplace(normal, tangent, bitangent):
    """Device copy of core.utils.build_basis."""
    if abs(normal[0]) > 0.1:
        tangent[0] = normal[1]
        tangent[1] = -normal[0]
        tangent[2] = 0.0
    else:
        tangent[0] = 0.0
        tangent[1] = normal[2]
        tangent[2] = -normal[1]
    normalize_inplace(tangent)
    cross_inplace(bitangent, normal, tangent)

@cuda.jit(device=True)
def sample_cosine_hemisphere(rng_states, lane, normal, out_dir):
    """
    Writes a cosine-weighted direction about 'normal' to out_dir and returns
    its pdf, cos(theta)/pi. Consumes the same two draws, in the same order,
    as core.utils.sample_cosine_hemisphere.
    """
    u1 = xoroshiro128p_uniform_float32(rng_states, lane)
    u2 = xoroshiro128p_uniform_float32(rng_states, lane)
    radius = math.sqrt(u1)
    phi = 2.0 * math.pi * u2
    lx = radius * math.cos(phi)
    ly = radius * math.sin(phi)
    lz = math.sqrt(max(0.0, 1.0 - u1))

    tangent = cuda.local.array(3, dtype=float32)
    bitangent = cuda.local.array(3, dtype=float32)
    build_basis_inplace(normal, tangent, bitangent)
    for i in range(3):
        out_dir[i] = lx * tangent[i] + ly * bitangent[i] + lz * normal[i]
    normalize_inplace(out_dir)
    return max(0.0, dot(normal, out_dir)) * INVPI
