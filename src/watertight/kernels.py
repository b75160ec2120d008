from numba import njit
import numpy as np

# fastmath would allow contraction into fma and reordering, after which the
# edge functions of a shared edge are no longer exact negations of each other


@njit(cache=True, fastmath=False)
def max_dim(x, y, z):
    x = abs(x)
    y = abs(y)
    z = abs(z)
    if x > y:
        if x > z:
            return 0
        return 2
    if y > z:
        return 1
    return 2


@njit(cache=True, fastmath=False, error_model='numpy')
def ray_precompute(direction):
    """ Per-ray shear: returns (kx, ky, kz, sx, sy, sz).
        No kx/ky swap for negative direction[kz], there is no backface culling.
    """
    kz = max_dim(direction[0], direction[1], direction[2])
    kx = (kz + 1) % 3
    ky = (kz + 2) % 3
    sx = direction[kx] / direction[kz]
    sy = direction[ky] / direction[kz]
    sz = 1.0 / direction[kz]
    return kx, ky, kz, sx, sy, sz


@njit(cache=True, fastmath=False, error_model='numpy')
def ray_intersects_tri(origin, kx, ky, kz, sx, sy, sz, triangle, out):
    """ Watertight test of one ray against one triangle.

        triangle holds the vertices A, B, C as rows. On a hit, t, u, v, w are
        written to out[0:4] and True is returned. On a miss out is left
        untouched.
    """
    # Manually translate vertices relative to the ray origin
    a_x = triangle[0, 0] - origin[0]
    a_y = triangle[0, 1] - origin[1]
    a_z = triangle[0, 2] - origin[2]
    b_x = triangle[1, 0] - origin[0]
    b_y = triangle[1, 1] - origin[1]
    b_z = triangle[1, 2] - origin[2]
    c_x = triangle[2, 0] - origin[0]
    c_y = triangle[2, 1] - origin[1]
    c_z = triangle[2, 2] - origin[2]

    a = (a_x, a_y, a_z)
    b = (b_x, b_y, b_z)
    c = (c_x, c_y, c_z)

    # Shear and project into ray space
    ax = a[kx] - sx * a[kz]
    ay = a[ky] - sy * a[kz]
    bx = b[kx] - sx * b[kz]
    by = b[ky] - sy * b[kz]
    cx = c[kx] - sx * c[kz]
    cy = c[ky] - sy * c[kz]

    u = cx * by - cy * bx
    v = ax * cy - ay * cx
    w = bx * ay - by * ax

    if u == 0 or v == 0 or w == 0:
        cxby = cx * by
        cybx = cy * bx
        u = cxby - cybx
        axcy = ax * cy
        aycx = ay * cx
        v = axcy - aycx
        bxay = bx * ay
        byax = by * ax
        w = bxay - byax

    if (u < 0 or v < 0 or w < 0) and (u > 0 or v > 0 or w > 0):
        return False

    det = u + v + w
    if det == 0:
        return False

    az = sz * a[kz]
    bz = sz * b[kz]
    cz = sz * c[kz]
    t = u * az + v * bz + w * cz

    rcp_det = 1.0 / det
    out[0] = t * rcp_det
    out[1] = u * rcp_det
    out[2] = v * rcp_det
    out[3] = w * rcp_det
    return True


def empty_hit(dtype=np.float64):
    """ Output buffer for ray_intersects_tri. """
    return np.full(4, np.nan, dtype=dtype)
