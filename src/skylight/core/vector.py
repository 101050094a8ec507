"""Vector utilities and random sampling for GPU-accelerated path tracing.

Vectors are Taichi ``vec3`` values and serve as points, directions and linear
RGB colors alike. All operations return new values.

The random generators draw from ``ti.random()``, which keeps independent state
per worker thread, so concurrent pixels never contend for a shared generator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Double-precision 3-vector used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)

# Components below this magnitude are treated as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The result is non-finite for a zero vector; callers must rule that out
    (see near_zero) when the input comes from degenerate geometry.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if all components of a vector are within NEAR_ZERO_EPSILON of zero.

    Returns:
        1 if the vector is (nearly) zero, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a unit normal: v - 2(v.n)n."""
    return v - 2.0 * tm.dot(v, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, etai_over_etat: ti.f64) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The cosine of the incident angle is clamped to 1.0 and the parallel
    component uses the absolute value under the square root, so grazing
    angles never produce NaNs from floating-point overshoot.

    Args:
        uv: The incoming unit direction.
        normal: The unit normal, facing against uv.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, normal), 1.0)
    perp = etai_over_etat * (uv + cos_theta * normal)
    parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(perp, perp))) * normal
    return perp + parallel


@ti.func
def schlick_reflectance(cosine: ti.f64, ratio: ti.f64) -> ti.f64:
    """Approximate Fresnel reflectance with Schlick's polynomial.

    Args:
        cosine: Cosine of the incident angle.
        ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - ratio) / (1.0 + ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_cube() -> vec3:
    """Generate a vector with each component uniform in [0, 1)."""
    return vec3(ti.random(ti.f64), ti.random(ti.f64), ti.random(ti.f64))


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Rejection-samples a point in the [-1, 1)^3 cube that lies inside the unit
    ball (and away from the origin), then normalizes it.

    Returns:
        A random vector of length 1.
    """
    p = vec3(0.0, 0.0, 1.0)
    found = False
    # Rejection sampling loop, bounded to avoid infinite loops
    for _ in range(100):
        if not found:
            candidate = 2.0 * random_in_unit_cube() - 1.0
            lensq = tm.dot(candidate, candidate)
            if 1e-12 < lensq <= 1.0:
                p = candidate
                found = True
    return normalize(p)


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit ball.

    A unit direction scaled by a uniform radius; the mean length of the
    samples is 0.5 and their mean position is the origin.
    """
    return random_unit_vector() * ti.random(ti.f64)


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Generate a random unit vector in the hemisphere around a normal.

    Samples the full sphere and negates samples that fall on the side
    opposite the normal.
    """
    on_sphere = random_unit_vector()
    result = on_sphere
    if tm.dot(on_sphere, normal) <= 0.0:
        result = -on_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point in the unit disk of the xy-plane.

    Takes a random unit vector and drops its z component, so the result has
    z == 0 and length <= 1. Used to jitter ray origins across a lens.
    """
    v = random_unit_vector()
    return vec3(v.x, v.y, 0.0)
