# core/utils.py
import math
from typing import Tuple
from core.vector import Vector3

INVPI = 1.0 / math.pi

# Index of refraction of the single dielectric the renderer models, against air.
GLASS_IOR = 1.2

def reflect(v: Vector3, n: Vector3) -> Vector3:
    """
    Reflects vector v about the normal n.
    """
    return v - n * 2 * v.dot(n)

def face_forward(normal: Vector3, direction: Vector3) -> Vector3:
    """Returns the normal flipped to point against 'direction'."""
    return normal if direction.dot(normal) < 0 else -normal

def refraction(inside: bool, direction: Vector3, normal: Vector3, rng) -> Vector3:
    """
    Picks the outgoing direction at a dielectric boundary.

    'normal' is the outward surface normal and 'inside' tells whether the ray
    is currently travelling through the medium. Total internal reflection
    always reflects; otherwise one uniform draw chooses between reflection
    and refraction with Schlick's Fresnel estimate, evaluated with the cosine
    on the air side: the incident angle when entering, the transmitted angle
    when leaving the medium.
    """
    nc, nt = (GLASS_IOR, 1.0) if inside else (1.0, GLASS_IOR)
    nnt = nc / nt
    n = face_forward(normal, direction)
    ddn = direction.dot(n)
    cos2t = 1.0 - nnt * nnt * (1.0 - ddn * ddn)
    reflected = reflect(direction, n)
    if cos2t < 0.0:
        return reflected

    a = nt - nc
    b = nt + nc
    r0 = (a * a) / (b * b)
    cos_t = math.sqrt(cos2t)
    c = 1.0 - cos_t if inside else 1.0 + ddn
    fresnel = r0 + (1.0 - r0) * c * c * c * c * c
    if rng.random() < fresnel:
        return reflected
    return (direction * nnt - n * (ddn * nnt + cos_t)).normalize()

def build_basis(normal: Vector3) -> Tuple[Vector3, Vector3]:
    """Tangent and bitangent completing an orthonormal frame around 'normal'."""
    if abs(normal.x) > 0.1:
        tangent = Vector3(normal.y, -normal.x, 0.0)
    else:
        tangent = Vector3(0.0, normal.z, -normal.y)
    tangent = tangent.normalize()
    return tangent, normal.cross(tangent)

def sample_cosine_hemisphere(rng, normal: Vector3) -> Tuple[Vector3, float]:
    """
    Cosine-weighted direction in the hemisphere around 'normal'.
    Returns (direction, pdf) with pdf = cos(theta) / pi.
    """
    u1 = rng.random()
    u2 = rng.random()
    r = math.sqrt(u1)
    theta = 2.0 * math.pi * u2
    x = r * math.cos(theta)
    y = r * math.sin(theta)
    z = math.sqrt(max(0.0, 1.0 - u1))
    tangent, bitangent = build_basis(normal)
    direction = (tangent * x + bitangent * y + normal * z).normalize()
    pdf = max(0.0, normal.dot(direction)) * INVPI
    return direction, pdf
