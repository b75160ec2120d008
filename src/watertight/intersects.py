"""
Watertight ray/triangle intersection.

Implements the algorithm of:

    Sven Woop, Carsten Benthin, and Ingo Wald. "Watertight ray/triangle
    intersection." Journal of Computer Graphics Techniques (JCGT) 2.1 (2013):
    65-82.

Triangles are transformed into a sheared ray space where the ray starts at
the origin and runs along +z, so the hit test reduces to the signs of three
2D edge functions. Edges shared by adjacent triangles produce exactly negated
edge functions, so a ray can never slip through the gap between them.

Backface culling is not performed.
"""
from collections import namedtuple

import numpy as np


# u, v, w are barycentric weights of the vertices A, B, C passed to intersect()
Intersection = namedtuple('Intersection', ['t', 'u', 'v', 'w'])
Intersection.__doc__ = """ Geometric information about a ray/triangle hit.

    t is the parametric distance from the ray origin to the hit point, in
    units of the ray direction. u, v, w are barycentric coordinates.
"""


def max_dim(v):
    """ Index of the component of v with the largest magnitude.
        Ties resolve towards z, except when x strictly beats y but not z.
    """
    x, y, z = abs(v[0]), abs(v[1]), abs(v[2])
    if x > y:
        # y isn't the maximum, so it's either x or z
        if x > z:
            return 0
        return 2
    if y > z:
        # x isn't the maximum, so it's either y or z
        return 1
    return 2


def _frame_dtype(origin, direction):
    dtype = np.result_type(origin, direction)
    if not np.issubdtype(dtype, np.floating):
        dtype = np.dtype(np.float64)
    return dtype


def _frozen_copy(v, dtype):
    v = np.array(v, dtype=dtype)
    v.setflags(write=False)
    return v


class RayData:
    """ Precomputed data depending only on the ray.

        Build once per ray, then call intersect() for every candidate
        triangle. Instances are read-only and can be shared between threads.

        Scalars keep the floating dtype of the inputs (integer input is
        promoted to float64), so the same code serves float32 and float64
        callers.
    """
    __slots__ = ('kx', 'ky', 'kz', 'sx', 'sy', 'sz', 'origin', 'direction')

    def __init__(self, origin, direction):
        origin = np.asarray(origin)
        direction = np.asarray(direction)
        dtype = _frame_dtype(origin, direction)
        origin = _frozen_copy(origin, dtype)
        direction = _frozen_copy(direction, dtype)

        # The paper swaps kx and ky if direction[kz] is negative, to preserve
        # winding order. Winding order only matters for backface culling,
        # which is not performed here.
        kz = max_dim(direction)
        kx = (kz + 1) % 3
        ky = (kz + 2) % 3

        # zero direction gives inf/nan coefficients, left unchecked
        with np.errstate(divide='ignore', invalid='ignore'):
            sx = direction[kx] / direction[kz]
            sy = direction[ky] / direction[kz]
            sz = dtype.type(1) / direction[kz]

        for name, value in (('kx', kx), ('ky', ky), ('kz', kz),
                            ('sx', sx), ('sy', sy), ('sz', sz),
                            ('origin', origin), ('direction', direction)):
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"RayData is read-only, cannot set '{name}'")

    def __repr__(self):
        return (f"RayData(origin={self.origin.tolist()}, "
                f"direction={self.direction.tolist()}, "
                f"k=({self.kx}, {self.ky}, {self.kz}))")

    @property
    def dtype(self):
        return self.origin.dtype

    def point_at(self, t):
        """ World-space point at parametric distance t along the ray. """
        return self.origin + t * self.direction

    def intersect(self, a, b, c):
        """ Test the triangle (a, b, c) against the ray.

            Returns an Intersection, or None on a miss. Hits on edges and
            vertices count as hits. Hits behind the origin (t < 0) are
            returned as well; range checks on t are up to the caller.
        """
        kx, ky, kz = self.kx, self.ky, self.kz
        sx, sy, sz = self.sx, self.sy, self.sz
        dtype = self.dtype

        # vertices relative to the ray origin
        a = np.asarray(a, dtype=dtype) - self.origin
        b = np.asarray(b, dtype=dtype) - self.origin
        c = np.asarray(c, dtype=dtype) - self.origin

        # shear and project into ray space
        ax = a[kx] - sx * a[kz]
        ay = a[ky] - sy * a[kz]
        bx = b[kx] - sx * b[kz]
        by = b[ky] - sy * b[kz]
        cx = c[kx] - sx * c[kz]
        cy = c[ky] - sy * c[kz]

        # scaled barycentric coordinates (edge functions U, V, W)
        u = cx * by - cy * bx
        v = ax * cy - ay * cx
        w = bx * ay - by * ax

        # an edge function of exactly zero may be a rounding artefact;
        # re-evaluate with every product rounded on its own
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
            return None

        det = u + v + w
        if det == 0:
            # ray parallel to the triangle plane, or degenerate triangle
            return None

        az = sz * a[kz]
        bz = sz * b[kz]
        cz = sz * c[kz]
        t = u * az + v * bz + w * cz

        rcp_det = dtype.type(1) / det
        return Intersection(t * rcp_det, u * rcp_det, v * rcp_det, w * rcp_det)
